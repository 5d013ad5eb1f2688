"""Customer aggregate: the tenant's client who receives delivered work.

Only the fields the workflow needs live here. ``revision_limit_override``
takes precedence over the tenant's revision settings once a job is delivered:
``None`` (no override), ``"unlimited"``, or a non-negative integer string.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, String

from studio.domain import studio

UNLIMITED = "unlimited"


def normalize_revision_override(value) -> str | None:
    """Accept None/""/"unlimited"/int/"3" and return the stored form."""
    if value is None:
        return None
    text = str(value).strip().lower()
    if text == "":
        return None
    if text == UNLIMITED:
        return UNLIMITED
    if not text.isdigit():
        raise ValidationError(
            {"revision_limit_override": ['Must be empty, "unlimited", or a whole number of rounds']}
        )
    return str(int(text))


@studio.aggregate
class Customer:
    tenant_id = Identifier(required=True)
    name = String(required=True, max_length=200)
    email = String(max_length=254)
    revision_limit_override = String(max_length=20)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def override_must_be_well_formed(self):
        value = self.revision_limit_override
        if value is not None and value != UNLIMITED and not value.isdigit():
            raise ValidationError({"revision_limit_override": ["Invalid revision limit override"]})

    @classmethod
    def register(cls, tenant_id: str, name: str, email: str | None = None, revision_limit_override=None):
        now = datetime.now(UTC)
        return cls(
            tenant_id=tenant_id,
            name=name,
            email=email,
            revision_limit_override=normalize_revision_override(revision_limit_override),
            created_at=now,
            updated_at=now,
        )

    def set_revision_limit_override(self, value) -> None:
        self.revision_limit_override = normalize_revision_override(value)
        self.updated_at = datetime.now(UTC)
