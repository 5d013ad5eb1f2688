"""Folder commands: create, rename, reorder, toggle visibility, delete.

Folder rows are keyed by ``(job_id, folder_path)``. Creating a folder
persists the row; once it commits, a zero-byte placeholder is written so
the storage prefix exists before any file lands there. Deleting a folder is
refused while anything inside it belongs to an order.
"""

import json

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, Identifier, String, Text
from protean.utils.globals import current_domain

from studio.deliverable.deliverable import Deliverable
from studio.deliverable.folder import Folder
from studio.deliverable.paths import placeholder_path
from studio.deliverable.permissions import ensure_can_organize
from studio.domain import studio
from studio.errors import Conflict
from studio.job.job import Job
from studio.order.order import Order
from studio.storage import get_storage

logger = structlog.get_logger(__name__)


@studio.command(part_of="Folder")
class CreateFolder:
    job_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    parent_folder_path = String(max_length=500)
    order_id = Identifier()
    actor_id = Identifier(required=True)
    actor_role = String(required=True, max_length=20)
    tenant_id = Identifier()


@studio.command(part_of="Folder")
class RenameFolder:
    job_id = Identifier(required=True)
    folder_path = String(required=True, max_length=500)
    name = String(required=True, max_length=255)
    actor_id = Identifier(required=True)
    actor_role = String(required=True, max_length=20)
    tenant_id = Identifier()


@studio.command(part_of="Folder")
class SetFolderVisibility:
    """Show or hide a folder in the customer's delivery view."""

    job_id = Identifier(required=True)
    folder_path = String(required=True, max_length=500)
    is_visible = Boolean(required=True)
    actor_id = Identifier(required=True)
    actor_role = String(required=True, max_length=20)
    tenant_id = Identifier()


@studio.command(part_of="Folder")
class ReorderFolders:
    job_id = Identifier(required=True)
    folder_paths = Text(required=True)  # JSON list, in the desired display order
    actor_id = Identifier(required=True)
    actor_role = String(required=True, max_length=20)
    tenant_id = Identifier()


@studio.command(part_of="Folder")
class DeleteFolder:
    job_id = Identifier(required=True)
    folder_path = String(required=True, max_length=500)
    actor_id = Identifier(required=True)
    actor_role = String(required=True, max_length=20)
    tenant_id = Identifier()


@studio.command_handler(part_of=Folder)
class FolderHandler:
    @handle(CreateFolder)
    def create_folder(self, command):
        job = current_domain.repository_for(Job).get(command.job_id)
        by_tenant = ensure_can_organize(job, command.actor_id, command.actor_role, command.tenant_id)

        repo = current_domain.repository_for(Folder)
        parent_path = command.parent_folder_path or None
        if parent_path:
            repo.get_by_path(command.job_id, parent_path)

        if command.order_id:
            order = current_domain.repository_for(Order).get(command.order_id)
            if str(order.job_id) != str(job.id):
                raise ValidationError({"order_id": ["Order belongs to a different job"]})

        siblings = repo.siblings(command.job_id, parent_path)
        next_position = max((f.display_order or 0 for f in siblings), default=0) + 1

        folder = Folder.create(
            job_id=command.job_id,
            name=command.name,
            by_tenant=by_tenant,
            parent_path=parent_path,
            order_id=command.order_id,
            display_order=next_position,
            created_by=command.actor_id,
            tenant_id=job.tenant_id,
            actor_role=command.actor_role,
        )
        repo.add(folder)
        return folder.folder_path

    @handle(RenameFolder)
    def rename_folder(self, command):
        job = current_domain.repository_for(Job).get(command.job_id)
        by_tenant = ensure_can_organize(job, command.actor_id, command.actor_role, command.tenant_id)

        repo = current_domain.repository_for(Folder)
        folder = repo.get_by_path(command.job_id, command.folder_path)
        folder.rename(command.name, by_tenant=by_tenant)
        repo.add(folder)

    @handle(SetFolderVisibility)
    def set_folder_visibility(self, command):
        job = current_domain.repository_for(Job).get(command.job_id)
        ensure_can_organize(job, command.actor_id, command.actor_role, command.tenant_id)

        repo = current_domain.repository_for(Folder)
        folder = repo.get_by_path(command.job_id, command.folder_path)
        folder.set_visibility(command.is_visible)
        repo.add(folder)

    @handle(ReorderFolders)
    def reorder_folders(self, command):
        job = current_domain.repository_for(Job).get(command.job_id)
        ensure_can_organize(job, command.actor_id, command.actor_role, command.tenant_id)

        paths = json.loads(command.folder_paths)
        if not isinstance(paths, list):
            raise ValidationError({"folder_paths": ["Expected a list of folder paths"]})

        repo = current_domain.repository_for(Folder)
        for position, folder_path in enumerate(paths, start=1):
            folder = repo.get_by_path(command.job_id, folder_path)
            folder.display_order = position
            repo.add(folder)

    @handle(DeleteFolder)
    def delete_folder(self, command):
        job = current_domain.repository_for(Job).get(command.job_id)
        ensure_can_organize(job, command.actor_id, command.actor_role, command.tenant_id)

        folder_repo = current_domain.repository_for(Folder)
        deliverable_repo = current_domain.repository_for(Deliverable)

        root = folder_repo.get_by_path(command.job_id, command.folder_path)
        folders = folder_repo.subtree(command.job_id, root.folder_path)
        files = deliverable_repo.in_subtree(command.job_id, root.folder_path)

        bound = [d for d in files if d.order_id]
        if bound:
            raise Conflict(
                "Folder contains files that belong to an order and cannot be deleted",
                folder_path=root.folder_path,
                order_ids=sorted({str(d.order_id) for d in bound}),
            )

        storage = get_storage()
        blob_paths = [d.storage_path for d in files] + [
            placeholder_path(command.job_id, f.folder_path) for f in folders
        ]
        for path in blob_paths:
            _delete_blob_quietly(storage, path)

        for deliverable in files:
            deliverable_repo._dao.delete(deliverable)
        for folder in folders:
            folder_repo._dao.delete(folder)

        job.record_folder_deleted(
            root.folder_path,
            root.display_name,
            files=len(files),
            folders=len(folders),
            deleted_by=command.actor_id,
            actor_role=command.actor_role,
        )
        current_domain.repository_for(Job).add(job)
        return len(files)


def _delete_blob_quietly(storage, path: str) -> bool:
    """Best-effort delete: one failure must not stop the rest of the folder."""
    try:
        result = storage.delete(path)
    except Exception as exc:
        logger.warning("Blob delete failed during folder deletion", path=path, error=str(exc))
        return False
    if not result.success:
        logger.warning("Blob delete failed during folder deletion", path=path, error=result.failure_reason)
        return False
    return True
