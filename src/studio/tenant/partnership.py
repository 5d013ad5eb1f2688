"""EditorPartnership aggregate: a tenant's working relationship with an editor.

Only editors with an active partnership can be assigned the tenant's orders.

State Machine:
    PENDING → ACTIVE → ENDED
    PENDING → ENDED (invitation withdrawn)
"""

import secrets
from datetime import UTC, datetime
from enum import Enum

from protean.fields import DateTime, Identifier, String
from protean.utils.globals import current_domain

from studio.domain import studio
from studio.errors import Forbidden, InvalidStateTransition
from studio.tenant.events import EditorInvited, PartnershipActivated, PartnershipEnded


class PartnershipStatus(Enum):
    PENDING = "pending"
    ACTIVE = "active"
    ENDED = "ended"


_VALID_TRANSITIONS = {
    PartnershipStatus.PENDING: {PartnershipStatus.ACTIVE, PartnershipStatus.ENDED},
    PartnershipStatus.ACTIVE: {PartnershipStatus.ENDED},
    PartnershipStatus.ENDED: set(),  # terminal
}


@studio.aggregate
class EditorPartnership:
    tenant_id = Identifier(required=True)
    editor_id = Identifier()
    editor_email = String(required=True, max_length=254)
    status = String(max_length=20, choices=PartnershipStatus, default=PartnershipStatus.PENDING.value)
    invite_token = String(max_length=64)
    invited_at = DateTime()
    activated_at = DateTime()
    ended_at = DateTime()

    @classmethod
    def invite(cls, tenant_id: str, editor_email: str):
        now = datetime.now(UTC)
        partnership = cls(
            tenant_id=tenant_id,
            editor_email=editor_email.strip().lower(),
            status=PartnershipStatus.PENDING.value,
            invite_token=secrets.token_urlsafe(16),
            invited_at=now,
        )
        partnership.raise_(
            EditorInvited(
                partnership_id=str(partnership.id),
                tenant_id=str(tenant_id),
                editor_email=partnership.editor_email,
                invited_at=now,
            )
        )
        return partnership

    def _assert_can_transition(self, target_status: PartnershipStatus) -> None:
        current = PartnershipStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise InvalidStateTransition(
                "partnership", current.value, target_status.value, partnership_id=str(self.id)
            )

    def accept(self, editor_id: str, invite_token: str) -> None:
        if not invite_token or invite_token != self.invite_token:
            raise Forbidden("Invitation token does not match", partnership_id=str(self.id))
        self._assert_can_transition(PartnershipStatus.ACTIVE)
        now = datetime.now(UTC)
        self.editor_id = editor_id
        self.status = PartnershipStatus.ACTIVE.value
        self.activated_at = now
        self.raise_(
            PartnershipActivated(
                partnership_id=str(self.id),
                tenant_id=str(self.tenant_id),
                editor_id=str(editor_id),
                activated_at=now,
            )
        )

    def end(self) -> None:
        self._assert_can_transition(PartnershipStatus.ENDED)
        now = datetime.now(UTC)
        self.status = PartnershipStatus.ENDED.value
        self.ended_at = now
        self.raise_(
            PartnershipEnded(
                partnership_id=str(self.id),
                tenant_id=str(self.tenant_id),
                editor_id=str(self.editor_id) if self.editor_id else None,
                ended_at=now,
            )
        )


def has_active_partnership(tenant_id: str, editor_id: str) -> bool:
    repo = current_domain.repository_for(EditorPartnership)
    matches = repo._dao.query.filter(
        tenant_id=str(tenant_id),
        editor_id=str(editor_id),
        status=PartnershipStatus.ACTIVE.value,
    ).all()
    return bool(matches.items)
