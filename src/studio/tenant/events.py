"""Domain events for editor partnerships."""

from protean.fields import DateTime, Identifier, String

from studio.domain import studio


@studio.event(part_of="EditorPartnership")
class EditorInvited:
    __version__ = 1

    partnership_id = Identifier(required=True)
    tenant_id = Identifier(required=True)
    editor_email = String(required=True)
    invited_at = DateTime(required=True)


@studio.event(part_of="EditorPartnership")
class PartnershipActivated:
    """The editor accepted the invitation and can now be assigned orders."""

    __version__ = 1

    partnership_id = Identifier(required=True)
    tenant_id = Identifier(required=True)
    editor_id = Identifier(required=True)
    activated_at = DateTime(required=True)


@studio.event(part_of="EditorPartnership")
class PartnershipEnded:
    __version__ = 1

    partnership_id = Identifier(required=True)
    tenant_id = Identifier(required=True)
    editor_id = Identifier()
    ended_at = DateTime(required=True)
