"""Folder aggregate: a named, tokenized grouping of deliverables within a job.

The storage location is derived from the token, never from the name. Editors
and tenants name folders independently; the tenant's name wins for display.
A folder starts standalone and becomes bound to an order on the first
order-bound upload.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Identifier, Integer, String

from studio.deliverable.events import (
    FolderBoundToOrder,
    FolderCreated,
    FolderRenamed,
    FolderVisibilityChanged,
)
from studio.deliverable.paths import child_folder_path, new_folder_token
from studio.domain import studio


@studio.aggregate
class Folder:
    job_id = Identifier(required=True)
    order_id = Identifier()
    parent_path = String(max_length=500)
    folder_path = String(required=True, max_length=500)
    folder_token = String(required=True, max_length=32)
    editor_name = String(max_length=255)
    tenant_name = String(max_length=255)
    is_visible = Boolean(default=True)
    display_order = Integer(default=0)
    created_by = Identifier()
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def folder_must_have_a_name(self):
        if not (self.tenant_name or self.editor_name):
            raise ValidationError({"name": ["A folder needs a name"]})

    @property
    def display_name(self) -> str | None:
        return self.tenant_name or self.editor_name

    @classmethod
    def create(
        cls,
        job_id: str,
        name: str,
        by_tenant: bool,
        parent_path: str | None = None,
        order_id: str | None = None,
        display_order: int = 0,
        created_by: str | None = None,
        tenant_id: str | None = None,
        actor_role: str | None = None,
    ):
        name = _clean_name(name)
        token = new_folder_token()
        now = datetime.now(UTC)
        folder = cls(
            job_id=job_id,
            order_id=order_id,
            parent_path=parent_path,
            folder_path=child_folder_path(parent_path, token),
            folder_token=token,
            editor_name=name,
            tenant_name=name if by_tenant else None,
            is_visible=True,
            display_order=display_order,
            created_by=created_by,
            created_at=now,
            updated_at=now,
        )
        folder.raise_(
            FolderCreated(
                folder_id=str(folder.id),
                job_id=str(job_id),
                tenant_id=str(tenant_id) if tenant_id else None,
                order_id=str(order_id) if order_id else None,
                folder_path=folder.folder_path,
                display_name=name,
                created_by=str(created_by) if created_by else None,
                actor_role=actor_role,
                created_at=now,
            )
        )
        return folder

    def rename(self, name: str, by_tenant: bool) -> None:
        name = _clean_name(name)
        if by_tenant:
            self.tenant_name = name
        else:
            self.editor_name = name
        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(
            FolderRenamed(
                folder_id=str(self.id),
                display_name=self.display_name,
                renamed_by_tenant=by_tenant,
                renamed_at=now,
            )
        )

    def set_visibility(self, is_visible: bool) -> None:
        if bool(self.is_visible) == bool(is_visible):
            return
        now = datetime.now(UTC)
        self.is_visible = is_visible
        self.updated_at = now
        self.raise_(FolderVisibilityChanged(folder_id=str(self.id), is_visible=is_visible, changed_at=now))

    def bind_to_order(self, order_id: str) -> None:
        if self.order_id:
            if str(self.order_id) != str(order_id):
                raise ValidationError({"order_id": ["Folder already belongs to another order"]})
            return
        now = datetime.now(UTC)
        self.order_id = order_id
        self.updated_at = now
        self.raise_(FolderBoundToOrder(folder_id=str(self.id), order_id=str(order_id), bound_at=now))


def _clean_name(name: str | None) -> str:
    if name is None or not name.strip():
        raise ValidationError({"name": ["Folder name cannot be empty"]})
    return name.strip()
