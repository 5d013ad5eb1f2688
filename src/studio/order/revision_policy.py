"""Revision policy: may another customer revision round start on this order?

Rules, evaluated in strict priority order:

1. The job has not been delivered yet: unlimited. Pre-delivery iteration is
   never capped.
2. The customer carries an ``"unlimited"`` override: allowed.
3. The customer carries a numeric override: allowed while used < override.
4. The tenant has revision limiting enabled: allowed while used < limit.
5. Otherwise: unlimited.

Customer overrides beat the tenant default, which beats no limit. The
evaluation is a pure function of its inputs and never mutates anything.
"""

from dataclasses import dataclass

from studio.customer.customer import UNLIMITED

PRE_DELIVERY = "pre_delivery"
CUSTOMER_UNLIMITED = "customer_unlimited"
CUSTOMER_OVERRIDE = "customer_override"
TENANT_LIMIT = "tenant_limit"
NO_LIMIT = "no_limit"


@dataclass(frozen=True)
class RevisionAllowance:
    """Outcome of a revision policy check.

    ``max_rounds`` and ``remaining_rounds`` are ``None`` when unlimited.
    """

    allowed: bool
    max_rounds: int | None
    used_rounds: int
    remaining_rounds: int | None
    basis: str

    @property
    def unlimited(self) -> bool:
        return self.max_rounds is None

    def to_dict(self) -> dict:
        return {
            "allowed": self.allowed,
            "max_rounds": "unlimited" if self.unlimited else self.max_rounds,
            "used_rounds": self.used_rounds,
            "remaining_rounds": self.remaining_rounds,
            "basis": self.basis,
        }


def _unlimited(used: int, basis: str) -> RevisionAllowance:
    return RevisionAllowance(allowed=True, max_rounds=None, used_rounds=used, remaining_rounds=None, basis=basis)


def _limited(used: int, limit: int, basis: str) -> RevisionAllowance:
    return RevisionAllowance(
        allowed=used < limit,
        max_rounds=limit,
        used_rounds=used,
        remaining_rounds=max(limit - used, 0),
        basis=basis,
    )


def evaluate(
    used_rounds: int,
    job_delivered: bool,
    customer_override: str | None = None,
    tenant_limit_enabled: bool = False,
    tenant_limit: int | None = None,
) -> RevisionAllowance:
    used = used_rounds or 0

    if not job_delivered:
        return _unlimited(used, PRE_DELIVERY)

    if customer_override is not None:
        override = str(customer_override).strip().lower()
        if override == UNLIMITED:
            return _unlimited(used, CUSTOMER_UNLIMITED)
        if override.isdigit():
            return _limited(used, int(override), CUSTOMER_OVERRIDE)

    if tenant_limit_enabled and tenant_limit is not None:
        return _limited(used, tenant_limit, TENANT_LIMIT)

    return _unlimited(used, NO_LIMIT)


def evaluate_revision_request(order, job, customer=None, settings=None) -> RevisionAllowance:
    """Evaluate the policy for loaded aggregates. ``customer``/``settings`` may be None."""
    return evaluate(
        used_rounds=order.used_revision_rounds,
        job_delivered=job.is_delivered,
        customer_override=customer.revision_limit_override if customer is not None else None,
        tenant_limit_enabled=bool(settings.enable_client_revision_limit) if settings is not None else False,
        tenant_limit=settings.client_revision_round_limit if settings is not None else None,
    )
