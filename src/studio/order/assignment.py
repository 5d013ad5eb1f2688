"""AssignOrder: bind an editor to an order, exactly once.

Two operators may race to assign the same order. Both read the order at the
same ``_version``; the first commit wins and the second fails the version
check. The command is then retried on fresh state, where the order is no
longer pending and unassigned, so the loser gets ``AssignmentConflict``
(never a silent overwrite) and should re-fetch the order before trying
again. Notifications go out from ``OrderEventsDispatcher`` after commit, so
only the winner's editor hears about it.
"""

from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from studio.access import ensure_tenant_staff
from studio.domain import studio
from studio.errors import AssignmentConflict, Forbidden
from studio.job.job import Job
from studio.order.order import Order, OrderStatus
from studio.tenant.partnership import has_active_partnership


@studio.command(part_of="Order")
class AssignOrder:
    order_id = Identifier(required=True)
    editor_id = Identifier(required=True)
    tenant_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    actor_role = String(required=True, max_length=20)
    expected_version = Integer(min_value=0)  # ``_version`` the caller last saw
    target_status = String(max_length=20)


@studio.command_handler(part_of=Order)
class AssignmentHandler:
    @handle(AssignOrder)
    def assign_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        ensure_tenant_staff(command.actor_role, order.tenant_id, command.tenant_id, "assign orders")

        if not has_active_partnership(order.tenant_id, command.editor_id):
            raise Forbidden(
                "Editor is not an active partner of this tenant",
                editor_id=str(command.editor_id),
            )

        if command.expected_version is not None and command.expected_version != order._version:
            raise AssignmentConflict(
                "Order changed since it was last read",
                order_id=str(order.id),
                expected_version=command.expected_version,
                current_version=order._version,
            )

        order.assign_editor(
            command.editor_id,
            command.target_status,
            assigned_by=command.actor_id,
            actor_role=command.actor_role,
        )
        repo.add(order)

        if order.status == OrderStatus.PROCESSING.value:
            job_repo = current_domain.repository_for(Job)
            job = job_repo.get(order.job_id)
            job.start_work()
            job_repo.add(job)

        return str(order.id)
