"""Per-tenant order number sequence.

Order numbers are human-facing lookup keys: the next integer in the tenant's
sequence, zero-padded to five digits. The internal identifier of an order
remains its ``id``.
"""

from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from studio.domain import studio

ORDER_NUMBER_WIDTH = 5


@studio.aggregate
class OrderSequence:
    tenant_id = Identifier(identifier=True, required=True)
    last_value = Integer(min_value=0, default=0)

    def next_number(self) -> str:
        self.last_value = (self.last_value or 0) + 1
        return format_order_number(self.last_value)


def format_order_number(value: int) -> str:
    return str(value).zfill(ORDER_NUMBER_WIDTH)


def allocate_order_number(tenant_id: str) -> str:
    """Take the next free order number for a tenant and persist the sequence."""
    from studio.order.order import Order

    repo = current_domain.repository_for(OrderSequence)
    try:
        sequence = repo.get(str(tenant_id))
    except ObjectNotFoundError:
        sequence = OrderSequence(tenant_id=str(tenant_id), last_value=0)

    order_repo = current_domain.repository_for(Order)
    number = sequence.next_number()
    # Skip numbers already taken, e.g. by orders imported before the sequence existed
    while order_repo.find_by_number(tenant_id, number) is not None:
        number = sequence.next_number()

    repo.add(sequence)
    return number
