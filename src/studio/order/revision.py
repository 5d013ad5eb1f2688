"""Customer revision requests: policy query and the RequestRevision command.

A revision request reopens a completed or delivered order for another round
of edits, provided the revision policy allows it. A refused request changes
nothing and reports the computed allowance back to the caller.
"""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from studio.access import Role, ensure_tenant_staff
from studio.customer.customer import Customer
from studio.domain import studio
from studio.errors import Forbidden, RevisionLimitReached
from studio.job.job import Job
from studio.order.order import Order
from studio.order.revision_policy import RevisionAllowance, evaluate_revision_request
from studio.tenant.settings import settings_for


@studio.command(part_of="Order")
class RequestRevision:
    order_id = Identifier(required=True)
    notes = Text()
    actor_id = Identifier(required=True)
    actor_role = String(required=True, max_length=20)
    tenant_id = Identifier()


def _customer_for(order: Order) -> Customer | None:
    if not order.customer_id:
        return None
    try:
        return current_domain.repository_for(Customer).get(order.customer_id)
    except ObjectNotFoundError:
        return None


def allowance_for(order: Order, job: Job | None = None) -> RevisionAllowance:
    if job is None:
        job = current_domain.repository_for(Job).get(order.job_id)
    return evaluate_revision_request(
        order,
        job,
        customer=_customer_for(order),
        settings=settings_for(order.tenant_id),
    )


def can_request_revision(order_id: str) -> RevisionAllowance:
    """Evaluate the revision policy for an order without changing it."""
    order = current_domain.repository_for(Order).get(order_id)
    return allowance_for(order)


def _ensure_may_request(order: Order, actor_id: str, actor_role: str, tenant_id: str | None) -> None:
    if actor_role == Role.CUSTOMER.value:
        if not order.customer_id or str(order.customer_id) != str(actor_id):
            raise Forbidden("Customers can only request revisions on their own orders", order_id=str(order.id))
        return
    ensure_tenant_staff(actor_role, order.tenant_id, tenant_id, "request revisions")


@studio.command_handler(part_of=Order)
class RevisionHandler:
    @handle(RequestRevision)
    def request_revision(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        _ensure_may_request(order, command.actor_id, command.actor_role, command.tenant_id)

        job_repo = current_domain.repository_for(Job)
        job = job_repo.get(order.job_id)

        allowance = allowance_for(order, job)
        if not allowance.allowed:
            raise RevisionLimitReached(allowance)

        order.request_revision(
            command.actor_id,
            command.notes,
            requester_role=command.actor_role,
            basis=allowance.basis,
        )
        repo.add(order)

        if not job.is_delivered:
            job.start_work()
            job_repo.add(job)

        return str(order.id)
