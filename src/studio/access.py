"""Principal roles and the tenant/assignment checks shared by command handlers.

The identity provider is trusted: handlers receive the acting user's id,
role and tenant on the command and only verify that they fit the record
being changed.
"""

from enum import Enum

from studio.errors import Forbidden


class Role(Enum):
    PARTNER = "partner"
    ADMIN = "admin"
    PHOTOGRAPHER = "photographer"
    EDITOR = "editor"
    CUSTOMER = "customer"


TENANT_STAFF = {Role.PARTNER.value, Role.ADMIN.value}


def is_tenant_staff(role: str | None) -> bool:
    return role in TENANT_STAFF


def ensure_same_tenant(record_tenant_id: str, actor_tenant_id: str | None, entity: str = "record") -> None:
    if actor_tenant_id is None or str(record_tenant_id) != str(actor_tenant_id):
        raise Forbidden(f"This {entity} belongs to another tenant", tenant_id=actor_tenant_id)


def ensure_tenant_staff(role: str | None, record_tenant_id: str, actor_tenant_id: str | None, action: str) -> None:
    """Partners and admins of the owning tenant only."""
    if not is_tenant_staff(role):
        raise Forbidden(f"Only tenant staff can {action}", role=role)
    ensure_same_tenant(record_tenant_id, actor_tenant_id)


def ensure_assigned_editor(assigned_editor_id: str | None, actor_id: str, action: str) -> None:
    if not assigned_editor_id or str(assigned_editor_id) != str(actor_id):
        raise Forbidden(f"Only the assigned editor can {action}", actor_id=actor_id)


def ensure_editor_or_tenant_staff(
    assigned_editor_id: str | None,
    record_tenant_id: str,
    actor_id: str,
    role: str | None,
    actor_tenant_id: str | None,
    action: str,
) -> None:
    """The assigned editor, or a partner/admin of the owning tenant."""
    if assigned_editor_id and str(assigned_editor_id) == str(actor_id):
        return
    if is_tenant_staff(role) and actor_tenant_id is not None and str(actor_tenant_id) == str(record_tenant_id):
        return
    raise Forbidden(f"Only the assigned editor or tenant staff can {action}", actor_id=actor_id)
