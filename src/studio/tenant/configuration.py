"""UpdateRevisionSettings: tenant staff toggle and size the revision cap."""

from protean import handle
from protean.fields import Boolean, Identifier, Integer, String
from protean.utils.globals import current_domain

from studio.access import ensure_tenant_staff
from studio.domain import studio
from studio.tenant.settings import TenantSettings, settings_for


@studio.command(part_of="TenantSettings")
class UpdateRevisionSettings:
    tenant_id = Identifier(required=True)
    enable_client_revision_limit = Boolean()
    client_revision_round_limit = Integer(min_value=0)
    actor_id = Identifier(required=True)
    actor_role = String(required=True, max_length=20)


@studio.command_handler(part_of=TenantSettings)
class TenantSettingsHandler:
    @handle(UpdateRevisionSettings)
    def update_revision_settings(self, command):
        ensure_tenant_staff(command.actor_role, command.tenant_id, command.tenant_id, "change revision settings")
        settings = settings_for(command.tenant_id)
        settings.update_revision_limits(
            enabled=command.enable_client_revision_limit,
            round_limit=command.client_revision_round_limit,
        )
        current_domain.repository_for(TenantSettings).add(settings)
