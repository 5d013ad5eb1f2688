"""Order side effects: notifications and the audit trail.

Runs after the order's transition has committed, so a writer that loses a
version race never notifies anyone, and a failing notification or audit
write can no longer roll the transition back.
"""

import json

from protean import handle

from studio.access import Role
from studio.activity.activity import ActivityAction
from studio.domain import studio
from studio.notification.port import NotificationType
from studio.order.events import (
    OrderAccepted,
    OrderApproved,
    OrderAssigned,
    OrderCancelled,
    OrderCreated,
    OrderDeclined,
    OrderDelivered,
    OrderRejected,
    OrderServiceEdited,
    OrderSubmittedForReview,
    RevisionRequested,
)
from studio.order.order import Order
from studio.side_effects import notify, record_activity


@studio.event_handler(part_of=Order)
class OrderEventsDispatcher:
    """Notifies the people involved in an order and records each transition."""

    @handle(OrderCreated)
    def on_order_created(self, event: OrderCreated) -> None:
        notify(event.tenant_id, NotificationType.ORDER_CREATED.value, {"order_number": event.order_number})
        record_activity(
            tenant_id=event.tenant_id,
            action=ActivityAction.ORDER_CREATED,
            title=f"Order #{event.order_number} created",
            job_id=event.job_id,
            order_id=event.order_id,
            actor_id=event.created_by,
            actor_role=event.actor_role,
            details={"services": len(json.loads(event.services)) if event.services else 0},
        )

    @handle(OrderAssigned)
    def on_order_assigned(self, event: OrderAssigned) -> None:
        notify(
            event.editor_id,
            NotificationType.ORDER_ASSIGNED.value,
            {"order_number": event.order_number, "order_id": str(event.order_id)},
        )
        record_activity(
            tenant_id=event.tenant_id,
            action=ActivityAction.ORDER_ASSIGNED,
            title=f"Order #{event.order_number} assigned",
            job_id=event.job_id,
            order_id=event.order_id,
            actor_id=event.assigned_by,
            actor_role=event.actor_role,
            details={"editor_id": str(event.editor_id), "status": event.status},
        )

    @handle(OrderAccepted)
    def on_order_accepted(self, event: OrderAccepted) -> None:
        notify(event.tenant_id, NotificationType.ORDER_ACCEPTED.value, {"order_number": event.order_number})
        record_activity(
            tenant_id=event.tenant_id,
            action=ActivityAction.ORDER_ACCEPTED,
            title=f"Order #{event.order_number} accepted",
            job_id=event.job_id,
            order_id=event.order_id,
            actor_id=event.editor_id,
            actor_role=Role.EDITOR.value,
        )

    @handle(OrderDeclined)
    def on_order_declined(self, event: OrderDeclined) -> None:
        notify(
            event.tenant_id,
            NotificationType.ORDER_DECLINED.value,
            {"order_number": event.order_number, "reason": event.reason},
        )
        record_activity(
            tenant_id=event.tenant_id,
            action=ActivityAction.ORDER_DECLINED,
            title=f"Order #{event.order_number} declined",
            job_id=event.job_id,
            order_id=event.order_id,
            actor_id=event.editor_id,
            actor_role=Role.EDITOR.value,
            description=event.reason,
        )

    @handle(OrderCancelled)
    def on_order_cancelled(self, event: OrderCancelled) -> None:
        notify(event.editor_id, NotificationType.ORDER_CANCELLED.value, {"order_number": event.order_number})
        record_activity(
            tenant_id=event.tenant_id,
            action=ActivityAction.ORDER_CANCELLED,
            title=f"Order #{event.order_number} cancelled",
            job_id=event.job_id,
            order_id=event.order_id,
            actor_id=event.cancelled_by,
            actor_role=event.actor_role,
            description=event.reason,
        )

    @handle(OrderSubmittedForReview)
    def on_order_submitted(self, event: OrderSubmittedForReview) -> None:
        notify(event.tenant_id, NotificationType.ORDER_SUBMITTED.value, {"order_number": event.order_number})
        record_activity(
            tenant_id=event.tenant_id,
            action=ActivityAction.ORDER_SUBMITTED,
            title=f"Order #{event.order_number} submitted for review",
            job_id=event.job_id,
            order_id=event.order_id,
            actor_id=event.editor_id,
            actor_role=Role.EDITOR.value,
            details={"files": event.files, "revision_round": event.revision_round},
        )

    @handle(OrderApproved)
    def on_order_approved(self, event: OrderApproved) -> None:
        context = {"order_number": event.order_number}
        notify(event.tenant_id, NotificationType.ORDER_COMPLETED.value, context)
        notify(event.editor_id, NotificationType.ORDER_COMPLETED.value, context)
        record_activity(
            tenant_id=event.tenant_id,
            action=ActivityAction.ORDER_QC_APPROVED,
            title=f"Order #{event.order_number} passed QC",
            job_id=event.job_id,
            order_id=event.order_id,
            actor_id=event.approved_by,
            actor_role=event.approver_role,
        )

    @handle(OrderRejected)
    def on_order_rejected(self, event: OrderRejected) -> None:
        notify(
            event.editor_id,
            NotificationType.ORDER_REVISION_REQUESTED.value,
            {"order_number": event.order_number, "notes": event.notes},
        )
        record_activity(
            tenant_id=event.tenant_id,
            action=ActivityAction.ORDER_QC_REJECTED,
            title=f"Order #{event.order_number} sent back for revision",
            job_id=event.job_id,
            order_id=event.order_id,
            actor_id=event.rejected_by,
            actor_role=event.approver_role,
            description=event.notes,
            details={"used_revision_rounds": event.used_revision_rounds},
        )

    @handle(RevisionRequested)
    def on_revision_requested(self, event: RevisionRequested) -> None:
        notify(
            event.editor_id,
            NotificationType.ORDER_REVISION_REQUESTED.value,
            {"order_number": event.order_number, "notes": event.notes},
        )
        record_activity(
            tenant_id=event.tenant_id,
            action=ActivityAction.ORDER_REVISION_REQUESTED,
            title=f"Revision requested for order #{event.order_number}",
            job_id=event.job_id,
            order_id=event.order_id,
            actor_id=event.requested_by,
            actor_role=event.requester_role,
            description=event.notes,
            details={"used_revision_rounds": event.used_revision_rounds, "basis": event.basis},
        )

    @handle(OrderDelivered)
    def on_order_delivered(self, event: OrderDelivered) -> None:
        record_activity(
            tenant_id=event.tenant_id,
            action=ActivityAction.ORDER_DELIVERED,
            title="Order delivered with its job",
            job_id=event.job_id,
            order_id=event.order_id,
            actor_id=event.delivered_by,
            actor_role=event.actor_role,
            details={"previous_status": event.previous_status, "redelivery": event.redelivery},
        )

    @handle(OrderServiceEdited)
    def on_order_service_edited(self, event: OrderServiceEdited) -> None:
        record_activity(
            tenant_id=event.tenant_id,
            action=ActivityAction.ORDER_SERVICE_EDITED,
            title=f"Services updated on order #{event.order_number}",
            job_id=event.job_id,
            order_id=event.order_id,
            actor_id=event.edited_by,
            actor_role=event.actor_role,
            details={"line_id": str(event.line_id)},
        )
