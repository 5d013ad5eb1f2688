"""Audit trail for customer reviews."""

import structlog
from protean import handle
from protean.utils.globals import current_domain

from studio.access import Role
from studio.activity.activity import ActivityAction
from studio.domain import studio
from studio.job.job import Job
from studio.review.events import JobReviewSubmitted
from studio.review.review import JobReview
from studio.side_effects import record_activity

logger = structlog.get_logger(__name__)


@studio.event_handler(part_of=JobReview)
class ReviewEventsDispatcher:
    @handle(JobReviewSubmitted)
    def on_review_submitted(self, event: JobReviewSubmitted) -> None:
        try:
            reference = current_domain.repository_for(Job).get(event.job_id).reference
        except Exception:
            logger.error("Failed to load job for review activity", job_id=str(event.job_id))
            return

        record_activity(
            tenant_id=event.tenant_id,
            action=ActivityAction.REVIEW_SUBMITTED,
            title=f"Customer rated job {reference} {event.rating}/5",
            job_id=event.job_id,
            actor_id=event.submitted_by,
            actor_role=Role.CUSTOMER.value,
        )
