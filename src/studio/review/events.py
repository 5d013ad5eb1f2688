"""Domain events for job reviews."""

from protean.fields import DateTime, Identifier, Integer

from studio.domain import studio


@studio.event(part_of="JobReview")
class JobReviewSubmitted:
    __version__ = 1

    job_id = Identifier(required=True)
    tenant_id = Identifier(required=True)
    rating = Integer(required=True)
    submitted_by = Identifier()
    submitted_at = DateTime(required=True)
