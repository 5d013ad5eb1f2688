"""Folder and upload side effects: storage placeholders and the audit trail."""

import structlog
from protean import handle

from studio.activity.activity import ActivityAction
from studio.deliverable.deliverable import Deliverable
from studio.deliverable.events import DeliverableUploaded, FolderCreated
from studio.deliverable.folder import Folder
from studio.deliverable.paths import placeholder_path
from studio.domain import studio
from studio.side_effects import record_activity
from studio.storage import get_storage

logger = structlog.get_logger(__name__)


@studio.event_handler(part_of=Folder)
class FolderEventsDispatcher:
    @handle(FolderCreated)
    def on_folder_created(self, event: FolderCreated) -> None:
        # A missing placeholder only means an empty prefix; uploads resolve by token
        keep_path = placeholder_path(event.job_id, event.folder_path)
        try:
            result = get_storage().write(keep_path, b"", "application/x-empty")
        except Exception as exc:
            logger.warning("Folder placeholder not written", folder_path=event.folder_path, error=str(exc))
        else:
            if not result.success:
                logger.warning(
                    "Folder placeholder not written",
                    job_id=str(event.job_id),
                    folder_path=event.folder_path,
                    error=result.failure_reason,
                )

        if event.tenant_id:
            record_activity(
                tenant_id=event.tenant_id,
                action=ActivityAction.FOLDER_CREATED,
                title=f"Folder '{event.display_name}' created",
                job_id=event.job_id,
                order_id=event.order_id,
                actor_id=event.created_by,
                actor_role=event.actor_role,
                details={"folder_path": event.folder_path},
            )


@studio.event_handler(part_of=Deliverable)
class DeliverableEventsDispatcher:
    @handle(DeliverableUploaded)
    def on_deliverable_uploaded(self, event: DeliverableUploaded) -> None:
        if not event.tenant_id:
            return
        replaced = list(event.replaced or [])
        record_activity(
            tenant_id=event.tenant_id,
            action=ActivityAction.FILE_REPLACED if replaced else ActivityAction.FILE_UPLOADED,
            title=f"{'Replaced' if replaced else 'Uploaded'} {event.original_name}",
            job_id=event.job_id,
            order_id=event.order_id,
            actor_id=event.uploaded_by,
            actor_role=event.actor_role,
            details={"folder_path": event.folder_path, "size": event.size, "replaced": replaced},
        )
