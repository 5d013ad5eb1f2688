"""Editor partnership commands: invite, accept, end."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from studio.access import ensure_tenant_staff
from studio.domain import studio
from studio.tenant.partnership import EditorPartnership


@studio.command(part_of="EditorPartnership")
class InviteEditor:
    tenant_id = Identifier(required=True)
    editor_email = String(required=True, max_length=254)
    actor_id = Identifier(required=True)
    actor_role = String(required=True, max_length=20)


@studio.command(part_of="EditorPartnership")
class AcceptPartnership:
    partnership_id = Identifier(required=True)
    editor_id = Identifier(required=True)
    invite_token = String(required=True, max_length=64)


@studio.command(part_of="EditorPartnership")
class EndPartnership:
    partnership_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    actor_role = String(required=True, max_length=20)
    tenant_id = Identifier()


@studio.command_handler(part_of=EditorPartnership)
class PartnershipHandler:
    @handle(InviteEditor)
    def invite_editor(self, command):
        ensure_tenant_staff(command.actor_role, command.tenant_id, command.tenant_id, "invite editors")
        partnership = EditorPartnership.invite(command.tenant_id, command.editor_email)
        current_domain.repository_for(EditorPartnership).add(partnership)
        return str(partnership.id)

    @handle(AcceptPartnership)
    def accept_partnership(self, command):
        repo = current_domain.repository_for(EditorPartnership)
        partnership = repo.get(command.partnership_id)
        partnership.accept(command.editor_id, command.invite_token)
        repo.add(partnership)

    @handle(EndPartnership)
    def end_partnership(self, command):
        repo = current_domain.repository_for(EditorPartnership)
        partnership = repo.get(command.partnership_id)
        # Either side may end the partnership
        if str(command.actor_id) != str(partnership.editor_id):
            ensure_tenant_staff(command.actor_role, partnership.tenant_id, command.tenant_id, "end partnerships")
        partnership.end()
        repo.add(partnership)
