"""The acting principal, as supplied by the upstream identity provider.

Authentication happens before requests reach this service; the identity
proxy forwards the user id, role and tenant as headers and they are trusted.
"""

from dataclasses import dataclass

from fastapi import Header


@dataclass(frozen=True)
class Principal:
    user_id: str
    role: str
    tenant_id: str | None = None


def current_principal(
    x_user_id: str = Header(),
    x_user_role: str = Header(),
    x_tenant_id: str | None = Header(default=None),
) -> Principal:
    return Principal(user_id=x_user_id, role=x_user_role.lower(), tenant_id=x_tenant_id)
