"""QC gate: accept or reject an order waiting in human_check.

The approver is either the assigned editor or a partner/admin of the order's
tenant. Accepting completes the order, stamps its completed files as
QC-approved, and completes the job once every active order is done.
Rejecting sends the order back for revision and always consumes one round,
independently of the customer revision policy.
"""

from datetime import UTC, datetime

from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from studio.access import ensure_editor_or_tenant_staff
from studio.deliverable.deliverable import Deliverable
from studio.domain import studio
from studio.job.job import Job, JobStatus
from studio.order.order import Order, OrderStatus


@studio.command(part_of="Order")
class QCAccept:
    order_id = Identifier(required=True)
    approver_id = Identifier(required=True)
    approver_role = String(required=True, max_length=20)
    tenant_id = Identifier()


@studio.command(part_of="Order")
class QCReject:
    order_id = Identifier(required=True)
    approver_id = Identifier(required=True)
    approver_role = String(required=True, max_length=20)
    notes = Text()
    tenant_id = Identifier()


def _complete_job_if_done(order: Order) -> None:
    """Move the job to completed once no active order is still in flight."""
    job_repo = current_domain.repository_for(Job)
    job = job_repo.get(order.job_id)
    if job.status != JobStatus.IN_PROGRESS.value:
        return

    siblings = current_domain.repository_for(Order).for_job(order.job_id)
    statuses = {
        str(o.id): o.status for o in siblings if o.status != OrderStatus.CANCELLED.value
    }
    statuses[str(order.id)] = order.status
    if all(s in (OrderStatus.COMPLETED.value, OrderStatus.DELIVERED.value) for s in statuses.values()):
        job.mark_completed()
        job_repo.add(job)


@studio.command_handler(part_of=Order)
class QualityCheckHandler:
    @handle(QCAccept)
    def qc_accept(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        ensure_editor_or_tenant_staff(
            order.assigned_editor_id,
            order.tenant_id,
            command.approver_id,
            command.approver_role,
            command.tenant_id,
            "review this order",
        )
        order.approve(command.approver_id, approver_role=command.approver_role)
        repo.add(order)

        approved_at = order.approved_at or datetime.now(UTC)
        deliverable_repo = current_domain.repository_for(Deliverable)
        for deliverable in deliverable_repo.completed_for_order(order.id):
            if deliverable.qc_approved_at is None:
                deliverable.mark_qc_approved(approved_at)
                deliverable_repo.add(deliverable)

        _complete_job_if_done(order)

    @handle(QCReject)
    def qc_reject(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        ensure_editor_or_tenant_staff(
            order.assigned_editor_id,
            order.tenant_id,
            command.approver_id,
            command.approver_role,
            command.tenant_id,
            "review this order",
        )
        order.reject(command.approver_id, command.notes, approver_role=command.approver_role)
        repo.add(order)
