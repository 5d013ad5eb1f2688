"""Job side effects: customer delivery notice, delivery email, audit trail.

Also records the removals that are filed under the job (appointments and
folders), since the deleted rows have no events of their own.
"""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from studio.activity.activity import ActivityAction
from studio.customer.customer import Customer
from studio.domain import studio
from studio.job.delivery import delivery_link
from studio.job.events import (
    AppointmentRemoved,
    FolderDeleted,
    JobCancelled,
    JobCoverImageUpdated,
    JobCreated,
    JobDelivered,
)
from studio.job.job import Job
from studio.notification.port import NotificationType
from studio.notification.templates import get_template
from studio.side_effects import notify, record_activity, send_email

logger = structlog.get_logger(__name__)


def _customer_email(customer_id: str | None) -> str | None:
    if not customer_id:
        return None
    try:
        return current_domain.repository_for(Customer).get(customer_id).email
    except ObjectNotFoundError:
        return None


@studio.event_handler(part_of=Job)
class JobEventsDispatcher:
    @handle(JobCreated)
    def on_job_created(self, event: JobCreated) -> None:
        record_activity(
            tenant_id=event.tenant_id,
            action=ActivityAction.JOB_CREATED,
            title=f"Job {event.reference} booked",
            job_id=event.job_id,
            actor_id=event.created_by,
            actor_role=event.actor_role,
            details={"address": event.address},
        )

    @handle(JobDelivered)
    def on_job_delivered(self, event: JobDelivered) -> None:
        """Send the customer their delivery link by notification and email."""
        try:
            job = current_domain.repository_for(Job).get(event.job_id)
        except Exception:
            logger.error("Failed to load job for delivery notice", job_id=str(event.job_id))
            return

        if job.delivery_token:
            context = {"address": job.address, "delivery_link": delivery_link(job.delivery_token)}
            notify(event.customer_id, NotificationType.JOB_DELIVERED.value, context)
            rendered = get_template(NotificationType.JOB_DELIVERED.value).render(context)
            send_email(_customer_email(event.customer_id), rendered["subject"], rendered["body"])

        record_activity(
            tenant_id=event.tenant_id,
            action=ActivityAction.JOB_DELIVERED,
            title=f"Job {event.reference} delivered",
            job_id=event.job_id,
            actor_id=event.delivered_by,
            actor_role=event.actor_role,
            details={"redelivery": event.redelivery},
        )

    @handle(JobCancelled)
    def on_job_cancelled(self, event: JobCancelled) -> None:
        record_activity(
            tenant_id=event.tenant_id,
            action=ActivityAction.JOB_CANCELLED,
            title=f"Job {event.reference} cancelled",
            job_id=event.job_id,
            actor_id=event.cancelled_by,
            actor_role=event.actor_role,
            description=event.reason,
        )

    @handle(JobCoverImageUpdated)
    def on_cover_image_updated(self, event: JobCoverImageUpdated) -> None:
        record_activity(
            tenant_id=event.tenant_id,
            action=ActivityAction.JOB_COVER_UPDATED,
            title=f"Cover image updated for job {event.reference}",
            job_id=event.job_id,
            actor_id=event.updated_by,
            actor_role=event.actor_role,
        )

    @handle(AppointmentRemoved)
    def on_appointment_removed(self, event: AppointmentRemoved) -> None:
        record_activity(
            tenant_id=event.tenant_id,
            action=ActivityAction.APPOINTMENT_REMOVED,
            title="Shoot removed",
            job_id=event.job_id,
            actor_id=event.removed_by,
            actor_role=event.actor_role,
            details={"appointment_id": str(event.appointment_id)},
        )

    @handle(FolderDeleted)
    def on_folder_deleted(self, event: FolderDeleted) -> None:
        record_activity(
            tenant_id=event.tenant_id,
            action=ActivityAction.FOLDER_DELETED,
            title=f"Folder '{event.display_name}' deleted",
            job_id=event.job_id,
            actor_id=event.deleted_by,
            actor_role=event.actor_role,
            details={"folder_path": event.folder_path, "files": event.files, "folders": event.folders},
        )
