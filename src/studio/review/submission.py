"""SubmitJobReview: the customer rates a delivered job, once."""

from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from studio.domain import studio
from studio.errors import Conflict, Forbidden
from studio.job.job import Job
from studio.review.review import JobReview


@studio.command(part_of="JobReview")
class SubmitJobReview:
    job_id = Identifier(required=True)
    rating = Integer(required=True)
    review = Text()
    actor_id = Identifier(required=True)
    actor_email = String(max_length=254)


@studio.command_handler(part_of=JobReview)
class SubmitJobReviewHandler:
    @handle(SubmitJobReview)
    def submit_job_review(self, command):
        job = current_domain.repository_for(Job).get(command.job_id)
        if not job.customer_id or str(job.customer_id) != str(command.actor_id):
            raise Forbidden("Only the job's customer can review it", job_id=str(job.id))
        if not job.is_delivered:
            raise Conflict("Jobs can only be reviewed after delivery", job_id=str(job.id))

        repo = current_domain.repository_for(JobReview)
        try:
            repo.get(str(job.id))
        except ObjectNotFoundError:
            pass
        else:
            raise ValidationError({"review": ["This job has already been reviewed"]})

        job_review = JobReview.submit(
            job_id=str(job.id),
            tenant_id=job.tenant_id,
            rating=command.rating,
            review=command.review,
            submitted_by=command.actor_id,
            submitted_by_email=command.actor_email,
        )
        repo.add(job_review)
        return str(job.id)
