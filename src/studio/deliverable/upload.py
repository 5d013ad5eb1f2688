"""UploadDeliverable: put a file into a job's folder tree.

Completed files replace any completed file with the same original name in
the same folder: the old blob and row are removed before the new file is
written, so each (folder, original name) converges to exactly one
deliverable. Loose files outside any folder are matched per order, so one
order's upload never removes another order's file. Client inputs
(``for_editing``) are stored under the job's inputs prefix and are never
de-duplicated.
"""

import base64
import binascii
from datetime import UTC, datetime

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from studio.access import Role, ensure_assigned_editor
from studio.deliverable.deliverable import Deliverable, DeliverableStatus
from studio.deliverable.folder import Folder
from studio.deliverable.paths import (
    completed_object_path,
    input_object_path,
    safe_file_name,
    stored_file_name,
)
from studio.deliverable.permissions import ensure_participant
from studio.domain import studio
from studio.errors import Conflict, Forbidden, UpstreamFailure
from studio.job.job import Job
from studio.order.order import EDITABLE_STATUSES, Order, OrderStatus
from studio.storage import get_storage, signed_url_ttl_hours

logger = structlog.get_logger(__name__)


@studio.command(part_of="Deliverable")
class UploadDeliverable:
    job_id = Identifier(required=True)
    file_name = String(required=True, max_length=255)
    content = Text(required=True)  # base64-encoded file bytes
    mime_type = String(max_length=100)
    status = String(max_length=20, choices=DeliverableStatus, default=DeliverableStatus.COMPLETED.value)
    folder_path = String(max_length=500)
    order_id = Identifier()
    actor_id = Identifier(required=True)
    actor_role = String(required=True, max_length=20)
    tenant_id = Identifier()


def _decode(content: str) -> bytes:
    try:
        return base64.b64decode(content, validate=True)
    except (binascii.Error, ValueError):
        raise ValidationError({"content": ["File content must be base64 encoded"]}) from None


def _resolve_order(command, job: Job, folder: Folder | None) -> Order | None:
    """The order a completed upload binds to, checked for editability."""
    order_id = command.order_id or (folder.order_id if folder is not None else None)
    if not order_id:
        return None

    if folder is not None and folder.order_id and str(folder.order_id) != str(order_id):
        raise ValidationError({"order_id": ["Folder belongs to a different order"]})

    order = current_domain.repository_for(Order).get(order_id)
    if str(order.job_id) != str(job.id):
        raise ValidationError({"order_id": ["Order belongs to a different job"]})
    ensure_assigned_editor(order.assigned_editor_id, command.actor_id, "upload work for this order")
    if OrderStatus(order.status) not in EDITABLE_STATUSES:
        raise Conflict(
            "Completed files can only be added while the order is processing or in revision",
            order_id=str(order.id),
            status=order.status,
        )
    return order


def _replace_existing(
    job_id: str,
    folder_path: str | None,
    original_name: str,
    order_id: str | None,
) -> list[str]:
    """Remove completed files with the same name from the folder. Returns removed ids."""
    repo = current_domain.repository_for(Deliverable)
    storage = get_storage()
    removed = []
    for existing in repo.completed_named(job_id, folder_path, original_name, order_id):
        result = storage.delete(existing.storage_path)
        if not result.success:
            raise UpstreamFailure(
                "Could not remove the previous version of this file",
                path=existing.storage_path,
                reason=result.failure_reason,
            )
        repo._dao.delete(existing)
        removed.append(str(existing.id))
    return removed


@studio.command_handler(part_of=Deliverable)
class UploadHandler:
    @handle(UploadDeliverable)
    def upload_deliverable(self, command):
        job = current_domain.repository_for(Job).get(command.job_id)
        ensure_participant(job, command.actor_id, command.actor_role, command.tenant_id)

        if not safe_file_name(command.file_name):
            raise ValidationError({"file_name": ["File name cannot be empty"]})
        data = _decode(command.content)

        folder_repo = current_domain.repository_for(Folder)
        folder = folder_repo.get_by_path(command.job_id, command.folder_path) if command.folder_path else None
        folder_path = folder.folder_path if folder is not None else None

        status = command.status or DeliverableStatus.COMPLETED.value
        order = None
        removed = []
        now = datetime.now(UTC)
        stored_name = stored_file_name(command.file_name, now)

        if status == DeliverableStatus.COMPLETED.value:
            if command.actor_role == Role.CUSTOMER.value:
                raise Forbidden("Customers can only upload files for editing", job_id=str(job.id))
            order = _resolve_order(command, job, folder)
            removed = _replace_existing(
                command.job_id,
                folder_path,
                command.file_name,
                str(order.id) if order is not None else None,
            )
            storage_path = completed_object_path(command.job_id, folder_path, stored_name)
        else:
            order_id = command.order_id or (folder.order_id if folder is not None else None)
            order = current_domain.repository_for(Order).get(order_id) if order_id else None
            storage_path = input_object_path(command.job_id, folder_path, stored_name)

        storage = get_storage()
        result = storage.write(storage_path, data, command.mime_type)
        if not result.success:
            raise UpstreamFailure("File upload failed", path=storage_path, reason=result.failure_reason)

        deliverable = Deliverable.upload(
            job_id=command.job_id,
            original_name=command.file_name,
            file_name=stored_name,
            storage_path=storage_path,
            size=len(data),
            status=status,
            uploaded_by=command.actor_id,
            uploaded_at=now,
            mime_type=command.mime_type,
            order_id=str(order.id) if order is not None else None,
            folder_path=folder_path,
            folder_token=folder.folder_token if folder is not None else None,
            tenant_id=job.tenant_id,
            actor_role=command.actor_role,
            replaced=removed,
        )
        signed = storage.signed_url(storage_path, signed_url_ttl_hours())
        deliverable.set_download_url(signed.url, signed.expires_at)
        current_domain.repository_for(Deliverable).add(deliverable)

        if folder is not None and order is not None and not folder.order_id:
            folder.bind_to_order(order.id)
            folder_repo.add(folder)

        logger.info(
            "Deliverable uploaded",
            job_id=str(command.job_id),
            deliverable_id=str(deliverable.id),
            storage_path=storage_path,
            replaced=removed,
        )
        return str(deliverable.id)
