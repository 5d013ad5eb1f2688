"""Editor decisions on an assigned order, and tenant cancellation.

Accepting moves a pending order into processing and starts work on the job.
Declining cancels the order and clears its editor; the tenant creates a new
order to get the work done elsewhere.
"""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from studio.access import ensure_tenant_staff
from studio.domain import studio
from studio.job.job import Job
from studio.order.order import Order


@studio.command(part_of="Order")
class AcceptOrder:
    order_id = Identifier(required=True)
    editor_id = Identifier(required=True)


@studio.command(part_of="Order")
class DeclineOrder:
    order_id = Identifier(required=True)
    editor_id = Identifier(required=True)
    reason = String(max_length=500)


@studio.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    reason = String(max_length=500)
    actor_id = Identifier(required=True)
    actor_role = String(required=True, max_length=20)
    tenant_id = Identifier(required=True)


@studio.command_handler(part_of=Order)
class AcceptanceHandler:
    @handle(AcceptOrder)
    def accept_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.accept(command.editor_id)
        repo.add(order)

        job_repo = current_domain.repository_for(Job)
        job = job_repo.get(order.job_id)
        job.start_work()
        job_repo.add(job)

    @handle(DeclineOrder)
    def decline_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.decline(command.editor_id, command.reason)
        repo.add(order)

    @handle(CancelOrder)
    def cancel_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        ensure_tenant_staff(command.actor_role, order.tenant_id, command.tenant_id, "cancel orders")
        order.cancel(command.reason, cancelled_by=command.actor_id, actor_role=command.actor_role)
        repo.add(order)
