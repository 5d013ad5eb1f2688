"""Tenant revision settings.

Tenants may cap how many post-delivery revision rounds their customers get.
Limiting is off by default; the default cap, once enabled, is two rounds.
"""

from datetime import UTC, datetime

from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, DateTime, Identifier, Integer
from protean.utils.globals import current_domain

from studio.domain import studio

DEFAULT_REVISION_ROUND_LIMIT = 2


@studio.aggregate
class TenantSettings:
    tenant_id = Identifier(identifier=True, required=True)
    enable_client_revision_limit = Boolean(default=False)
    client_revision_round_limit = Integer(min_value=0, default=DEFAULT_REVISION_ROUND_LIMIT)
    updated_at = DateTime()

    def update_revision_limits(self, enabled: bool | None = None, round_limit: int | None = None) -> None:
        if enabled is not None:
            self.enable_client_revision_limit = enabled
        if round_limit is not None:
            self.client_revision_round_limit = round_limit
        self.updated_at = datetime.now(UTC)


def settings_for(tenant_id: str) -> TenantSettings:
    """Stored settings for the tenant, or unsaved defaults."""
    try:
        return current_domain.repository_for(TenantSettings).get(str(tenant_id))
    except ObjectNotFoundError:
        return TenantSettings(
            tenant_id=str(tenant_id),
            enable_client_revision_limit=False,
            client_revision_round_limit=DEFAULT_REVISION_ROUND_LIMIT,
        )
