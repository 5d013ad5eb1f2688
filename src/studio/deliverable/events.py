"""Domain events for folders, deliverables and file comments."""

from protean.fields import Boolean, DateTime, Identifier, Integer, List, String

from studio.domain import studio


@studio.event(part_of="Folder")
class FolderCreated:
    __version__ = 1

    folder_id = Identifier(required=True)
    job_id = Identifier(required=True)
    tenant_id = Identifier()
    order_id = Identifier()
    folder_path = String(required=True)
    display_name = String(required=True)
    created_by = Identifier()
    actor_role = String()
    created_at = DateTime(required=True)


@studio.event(part_of="Folder")
class FolderRenamed:
    """Either the editor's or the tenant's name for the folder changed."""

    __version__ = 1

    folder_id = Identifier(required=True)
    display_name = String(required=True)
    renamed_by_tenant = Boolean(default=False)
    renamed_at = DateTime(required=True)


@studio.event(part_of="Folder")
class FolderVisibilityChanged:
    __version__ = 1

    folder_id = Identifier(required=True)
    is_visible = Boolean(required=True)
    changed_at = DateTime(required=True)


@studio.event(part_of="Folder")
class FolderBoundToOrder:
    """A standalone folder received its first order-bound upload."""

    __version__ = 1

    folder_id = Identifier(required=True)
    order_id = Identifier(required=True)
    bound_at = DateTime(required=True)


@studio.event(part_of="Deliverable")
class DeliverableUploaded:
    __version__ = 1

    deliverable_id = Identifier(required=True)
    job_id = Identifier(required=True)
    tenant_id = Identifier()
    order_id = Identifier()
    folder_path = String()
    original_name = String(required=True)
    status = String(required=True)
    size = Integer()
    uploaded_by = Identifier()
    actor_role = String()
    replaced = List(content_type=str)  # ids of same-named files this upload replaced
    uploaded_at = DateTime(required=True)


@studio.event(part_of="Deliverable")
class DeliverableApproved:
    """The owning order passed QC with this file in it."""

    __version__ = 1

    deliverable_id = Identifier(required=True)
    order_id = Identifier(required=True)
    approved_at = DateTime(required=True)


@studio.event(part_of="FileComment")
class FileCommentAdded:
    __version__ = 1

    comment_id = Identifier(required=True)
    deliverable_id = Identifier(required=True)
    parent_comment_id = Identifier()
    author_id = Identifier(required=True)
    created_at = DateTime(required=True)


@studio.event(part_of="FileComment")
class FileCommentStatusChanged:
    __version__ = 1

    comment_id = Identifier(required=True)
    status = String(required=True)
    changed_at = DateTime(required=True)
