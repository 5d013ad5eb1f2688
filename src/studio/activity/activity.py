"""Activity aggregate: the append-only audit trail of workflow transitions.

One record per transition: who acted, in what role, on which job/order, and
what changed. Records are written once and never updated.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean.fields import DateTime, Identifier, String, Text

from studio.domain import studio


class ActivityCategory(Enum):
    JOB = "job"
    APPOINTMENT = "appointment"
    ORDER = "order"
    DELIVERABLE = "deliverable"
    REVIEW = "review"


class ActivityAction(Enum):
    JOB_CREATED = "job_created"
    JOB_DELIVERED = "job_delivered"
    JOB_CANCELLED = "job_cancelled"
    JOB_COVER_UPDATED = "job_cover_updated"
    APPOINTMENT_SCHEDULED = "appointment_scheduled"
    APPOINTMENT_RESCHEDULED = "appointment_rescheduled"
    APPOINTMENT_CANCELLED = "appointment_cancelled"
    APPOINTMENT_REMOVED = "appointment_removed"
    ORDER_CREATED = "order_created"
    ORDER_ASSIGNED = "order_assigned"
    ORDER_ACCEPTED = "order_accepted"
    ORDER_DECLINED = "order_declined"
    ORDER_CANCELLED = "order_cancelled"
    ORDER_SUBMITTED = "order_submitted"
    ORDER_QC_APPROVED = "order_qc_approved"
    ORDER_QC_REJECTED = "order_qc_rejected"
    ORDER_REVISION_REQUESTED = "order_revision_requested"
    ORDER_DELIVERED = "order_delivered"
    ORDER_SERVICE_EDITED = "order_service_edited"
    FOLDER_CREATED = "folder_created"
    FOLDER_DELETED = "folder_deleted"
    FILE_UPLOADED = "file_uploaded"
    FILE_REPLACED = "file_replaced"
    REVIEW_SUBMITTED = "review_submitted"


_CATEGORY_BY_PREFIX = {
    "job": ActivityCategory.JOB,
    "appointment": ActivityCategory.APPOINTMENT,
    "order": ActivityCategory.ORDER,
    "folder": ActivityCategory.DELIVERABLE,
    "file": ActivityCategory.DELIVERABLE,
    "review": ActivityCategory.REVIEW,
}


@studio.aggregate
class Activity:
    tenant_id = Identifier(required=True)
    job_id = Identifier()
    order_id = Identifier()
    actor_id = Identifier()
    actor_role = String(max_length=50)
    action = String(required=True, max_length=50, choices=ActivityAction)
    category = String(required=True, max_length=50, choices=ActivityCategory)
    title = String(required=True, max_length=255)
    description = Text()
    details = Text()  # JSON object
    created_at = DateTime()

    @classmethod
    def record(
        cls,
        tenant_id: str,
        action: ActivityAction,
        title: str,
        job_id: str | None = None,
        order_id: str | None = None,
        actor_id: str | None = None,
        actor_role: str | None = None,
        description: str | None = None,
        details: dict | None = None,
    ):
        category = _CATEGORY_BY_PREFIX[action.value.split("_", 1)[0]]
        return cls(
            tenant_id=tenant_id,
            job_id=job_id,
            order_id=order_id,
            actor_id=actor_id,
            actor_role=actor_role,
            action=action.value,
            category=category.value,
            title=title,
            description=description,
            details=json.dumps(details or {}, default=str),
            created_at=datetime.now(UTC),
        )

    def details_dict(self) -> dict:
        return json.loads(self.details) if self.details else {}
