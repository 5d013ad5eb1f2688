"""JobReview aggregate: the customer's one-time rating of a delivered job.

Keyed by the job id, so a job can carry at most one review. Reviews are
created once and never edited.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, Integer, String, Text

from studio.domain import studio
from studio.review.events import JobReviewSubmitted


@studio.aggregate
class JobReview:
    job_id = Identifier(identifier=True, required=True)
    tenant_id = Identifier(required=True)
    rating = Integer(required=True)
    review = Text()
    submitted_by = Identifier(required=True)
    submitted_by_email = String(max_length=254)
    created_at = DateTime()

    @invariant.post
    def rating_must_be_in_range(self):
        if self.rating is not None and (self.rating < 1 or self.rating > 5):
            raise ValidationError({"rating": ["Rating must be between 1 and 5"]})

    @classmethod
    def submit(
        cls,
        job_id: str,
        tenant_id: str,
        rating: int,
        submitted_by: str,
        review: str | None = None,
        submitted_by_email: str | None = None,
    ):
        now = datetime.now(UTC)
        job_review = cls(
            job_id=job_id,
            tenant_id=tenant_id,
            rating=rating,
            review=review.strip() if review else None,
            submitted_by=submitted_by,
            submitted_by_email=submitted_by_email,
            created_at=now,
        )
        job_review.raise_(
            JobReviewSubmitted(
                job_id=str(job_id),
                tenant_id=str(tenant_id),
                rating=rating,
                submitted_by=str(submitted_by),
                submitted_at=now,
            )
        )
        return job_review
