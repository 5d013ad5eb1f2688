"""Order aggregate: the unit of editing work against a Job.

An order is assigned to an editor, worked, handed to the QC gate, and either
approved or sent back for another revision round. Orders are never deleted.
``used_revision_rounds`` only ever grows. Concurrent writers are serialised by
the aggregate's ``_version``: a save based on a stale read fails with
``ExpectedVersionError`` at commit.

State Machine:
    PENDING → PROCESSING → HUMAN_CHECK → {COMPLETED, IN_REVISION}
    IN_REVISION → HUMAN_CHECK
    COMPLETED → DELIVERED
    PENDING → CANCELLED
    {COMPLETED, DELIVERED} → IN_REVISION (customer revision request only)
    any non-cancelled → DELIVERED (job delivery cascade only)
"""

import json
from datetime import UTC, datetime, timedelta
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer, String, Text

from studio.access import ensure_assigned_editor
from studio.domain import studio
from studio.errors import AssignmentConflict, Conflict, InvalidStateTransition
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

FILE_RETENTION_DAYS = 30

# Sentinel for distinguishing "not provided" from None in partial updates
_UNSET = object()


class OrderStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    HUMAN_CHECK = "human_check"
    IN_REVISION = "in_revision"
    COMPLETED = "completed"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.HUMAN_CHECK},
    OrderStatus.HUMAN_CHECK: {OrderStatus.COMPLETED, OrderStatus.IN_REVISION},
    OrderStatus.IN_REVISION: {OrderStatus.HUMAN_CHECK},
    OrderStatus.COMPLETED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),  # terminal
    OrderStatus.CANCELLED: set(),  # terminal
}

# Customer revision requests reopen finished work, including delivered orders
REVISABLE_STATUSES = {OrderStatus.COMPLETED, OrderStatus.DELIVERED}

# Statuses in which an editor may bind completed deliverables to the order
EDITABLE_STATUSES = {OrderStatus.PROCESSING, OrderStatus.IN_REVISION}

_ACTIVE_WORK_STATUSES = {
    OrderStatus.PROCESSING.value,
    OrderStatus.HUMAN_CHECK.value,
    OrderStatus.IN_REVISION.value,
}

_SERVICE_EDITABLE_STATUSES = {OrderStatus.PENDING, OrderStatus.PROCESSING}


@studio.entity(part_of="Order")
class OrderService:
    """One requested service line on an order."""

    service_id = Identifier(required=True)
    quantity = Integer(min_value=1, default=1)
    instructions = Text()  # JSON object
    export_types = Text()  # JSON list of export presets

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "service_id": str(self.service_id),
            "quantity": self.quantity,
            "instructions": json.loads(self.instructions) if self.instructions else None,
            "export_types": json.loads(self.export_types) if self.export_types else [],
        }


@studio.aggregate
class Order:
    order_number = String(required=True, max_length=20)
    tenant_id = Identifier(required=True)
    job_id = Identifier(required=True)
    customer_id = Identifier()
    created_by = Identifier()
    assigned_editor_id = Identifier()
    status = String(max_length=20, choices=OrderStatus, default=OrderStatus.PENDING.value)
    used_revision_rounds = Integer(min_value=0, default=0)
    revision_notes = Text()
    decline_reason = String(max_length=500)
    services = HasMany(OrderService)
    accepted_at = DateTime()
    submitted_at = DateTime()
    completed_at = DateTime()
    approved_at = DateTime()
    approved_by = Identifier()
    delivered_at = DateTime()
    cancelled_at = DateTime()
    files_expire_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Invariants
    # -------------------------------------------------------------------
    @invariant.post
    def active_work_requires_an_editor(self):
        if self.status in _ACTIVE_WORK_STATUSES and not self.assigned_editor_id:
            raise ValidationError({"assigned_editor_id": ["An order in progress must have an assigned editor"]})

    @invariant.post
    def completed_order_must_be_approved(self):
        if self.status == OrderStatus.COMPLETED.value and self.approved_at is None:
            raise ValidationError({"status": ["An order can only be completed through QC approval"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        tenant_id: str,
        job_id: str,
        order_number: str,
        customer_id: str | None = None,
        created_by: str | None = None,
        services: list[dict] | None = None,
        actor_role: str | None = None,
    ):
        now = datetime.now(UTC)
        order = cls(
            order_number=order_number,
            tenant_id=tenant_id,
            job_id=job_id,
            customer_id=customer_id,
            created_by=created_by,
            status=OrderStatus.PENDING.value,
            used_revision_rounds=0,
            files_expire_at=now + timedelta(days=FILE_RETENTION_DAYS),
            created_at=now,
            updated_at=now,
        )
        for service in services or []:
            order.add_services(
                OrderService(
                    service_id=service["service_id"],
                    quantity=service.get("quantity", 1),
                    instructions=_dump(service.get("instructions")),
                    export_types=_dump(service.get("export_types")),
                )
            )
        order.raise_(
            OrderCreated(
                order_id=str(order.id),
                order_number=order_number,
                tenant_id=str(tenant_id),
                job_id=str(job_id),
                customer_id=str(customer_id) if customer_id else None,
                services=json.dumps([s.to_dict() for s in order.services]),
                created_by=str(created_by) if created_by else None,
                actor_role=actor_role,
                created_at=now,
            )
        )
        return order

    def _event_context(self) -> dict:
        return {
            "order_id": str(self.id),
            "order_number": self.order_number,
            "tenant_id": str(self.tenant_id),
            "job_id": str(self.job_id),
        }

    # -------------------------------------------------------------------
    # State transition helper
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status: OrderStatus) -> None:
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise InvalidStateTransition("order", current.value, target_status.value, order_id=str(self.id))

    # -------------------------------------------------------------------
    # Assignment
    # -------------------------------------------------------------------
    def assign_editor(
        self,
        editor_id: str,
        target_status: str | None = None,
        assigned_by: str | None = None,
        actor_role: str | None = None,
    ) -> None:
        """Bind an editor to a pending, unassigned order.

        ``target_status`` may be ``processing`` to assign and accept in one step.
        """
        if self.status != OrderStatus.PENDING.value or self.assigned_editor_id:
            raise AssignmentConflict(
                "Order is no longer available for assignment",
                order_id=str(self.id),
                status=self.status,
            )
        if target_status not in (None, OrderStatus.PENDING.value, OrderStatus.PROCESSING.value):
            raise ValidationError({"target_status": [f"Cannot assign directly into {target_status}"]})

        now = datetime.now(UTC)
        with atomic_change(self):
            self.assigned_editor_id = editor_id
            if target_status == OrderStatus.PROCESSING.value:
                self.status = OrderStatus.PROCESSING.value
                self.accepted_at = now
            self.updated_at = now

        self.raise_(
            OrderAssigned(
                **self._event_context(),
                editor_id=str(editor_id),
                status=self.status,
                assigned_by=str(assigned_by) if assigned_by else None,
                actor_role=actor_role,
                assigned_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Editor decisions
    # -------------------------------------------------------------------
    def accept(self, editor_id: str) -> None:
        ensure_assigned_editor(self.assigned_editor_id, editor_id, "accept this order")
        self._assert_can_transition(OrderStatus.PROCESSING)

        now = datetime.now(UTC)
        self.status = OrderStatus.PROCESSING.value
        self.accepted_at = now
        self.updated_at = now
        self.raise_(OrderAccepted(**self._event_context(), editor_id=str(editor_id), accepted_at=now))

    def decline(self, editor_id: str, reason: str | None = None) -> None:
        """Decline a pending order. It is cancelled and its editor cleared."""
        ensure_assigned_editor(self.assigned_editor_id, editor_id, "decline this order")
        self._assert_can_transition(OrderStatus.CANCELLED)

        now = datetime.now(UTC)
        with atomic_change(self):
            self.status = OrderStatus.CANCELLED.value
            self.assigned_editor_id = None
            self.decline_reason = reason
            self.cancelled_at = now
            self.updated_at = now
        self.raise_(
            OrderDeclined(
                **self._event_context(),
                editor_id=str(editor_id),
                reason=reason,
                declined_at=now,
            )
        )

    def cancel(
        self,
        reason: str | None = None,
        cancelled_by: str | None = None,
        actor_role: str | None = None,
    ) -> None:
        self._assert_can_transition(OrderStatus.CANCELLED)

        previous_editor_id = self.assigned_editor_id
        now = datetime.now(UTC)
        with atomic_change(self):
            self.status = OrderStatus.CANCELLED.value
            self.assigned_editor_id = None
            self.cancelled_at = now
            self.updated_at = now
        self.raise_(
            OrderCancelled(
                **self._event_context(),
                editor_id=str(previous_editor_id) if previous_editor_id else None,
                reason=reason,
                cancelled_by=str(cancelled_by) if cancelled_by else None,
                actor_role=actor_role,
                cancelled_at=now,
            )
        )

    def submit_for_review(self, editor_id: str, files: int = 0) -> None:
        ensure_assigned_editor(self.assigned_editor_id, editor_id, "submit this order for review")
        self._assert_can_transition(OrderStatus.HUMAN_CHECK)

        now = datetime.now(UTC)
        self.status = OrderStatus.HUMAN_CHECK.value
        self.submitted_at = now
        self.updated_at = now
        self.raise_(
            OrderSubmittedForReview(
                **self._event_context(),
                editor_id=str(editor_id),
                revision_round=self.used_revision_rounds or 0,
                files=files,
                submitted_at=now,
            )
        )

    # -------------------------------------------------------------------
    # QC gate
    # -------------------------------------------------------------------
    def approve(self, approver_id: str, approver_role: str | None = None) -> None:
        """QC accept. Revision rounds are left untouched."""
        self._assert_can_transition(OrderStatus.COMPLETED)

        now = datetime.now(UTC)
        with atomic_change(self):
            self.status = OrderStatus.COMPLETED.value
            self.approved_by = approver_id
            self.approved_at = now
            self.completed_at = now
            self.updated_at = now
        self.raise_(
            OrderApproved(
                **self._event_context(),
                editor_id=str(self.assigned_editor_id) if self.assigned_editor_id else None,
                approved_by=str(approver_id),
                approver_role=approver_role,
                approved_at=now,
            )
        )

    def reject(self, approver_id: str, notes: str | None, approver_role: str | None = None) -> None:
        """QC reject. Always consumes exactly one revision round."""
        self._assert_can_transition(OrderStatus.IN_REVISION)
        notes = _require_notes(notes)

        now = datetime.now(UTC)
        with atomic_change(self):
            self.status = OrderStatus.IN_REVISION.value
            self.revision_notes = notes
            self.used_revision_rounds = (self.used_revision_rounds or 0) + 1
            self.updated_at = now
        self.raise_(
            OrderRejected(
                **self._event_context(),
                editor_id=str(self.assigned_editor_id) if self.assigned_editor_id else None,
                rejected_by=str(approver_id),
                approver_role=approver_role,
                notes=notes,
                used_revision_rounds=self.used_revision_rounds,
                rejected_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Customer revisions
    # -------------------------------------------------------------------
    def request_revision(
        self,
        requested_by: str,
        notes: str | None,
        requester_role: str | None = None,
        basis: str | None = None,
    ) -> None:
        """Reopen finished work for another round.

        The caller is expected to have consulted the revision policy first.
        """
        if OrderStatus(self.status) not in REVISABLE_STATUSES:
            raise InvalidStateTransition(
                "order", self.status, OrderStatus.IN_REVISION.value, order_id=str(self.id)
            )
        notes = _require_notes(notes)

        now = datetime.now(UTC)
        with atomic_change(self):
            self.status = OrderStatus.IN_REVISION.value
            self.revision_notes = notes
            self.used_revision_rounds = (self.used_revision_rounds or 0) + 1
            self.updated_at = now
        self.raise_(
            RevisionRequested(
                **self._event_context(),
                editor_id=str(self.assigned_editor_id) if self.assigned_editor_id else None,
                requested_by=str(requested_by),
                requester_role=requester_role,
                basis=basis,
                notes=notes,
                used_revision_rounds=self.used_revision_rounds,
                requested_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Delivery
    # -------------------------------------------------------------------
    def force_deliver(self, delivered_by: str | None = None, actor_role: str | None = None) -> None:
        """Close the order as part of its job's delivery, whatever its state.

        Skips the normal guards: once a job is delivered its orders are closed
        even if their own QC cycle never finished. An order that is already
        delivered keeps its original ``delivered_at``.
        """
        if self.status == OrderStatus.CANCELLED.value:
            raise InvalidStateTransition(
                "order", self.status, OrderStatus.DELIVERED.value, order_id=str(self.id)
            )
        previous_status = self.status
        redelivery = previous_status == OrderStatus.DELIVERED.value
        now = datetime.now(UTC)
        self.status = OrderStatus.DELIVERED.value
        if self.delivered_at is None:
            self.delivered_at = now
        self.updated_at = now
        self.raise_(
            OrderDelivered(
                **self._event_context(),
                previous_status=previous_status,
                forced=previous_status not in (OrderStatus.COMPLETED.value, OrderStatus.DELIVERED.value),
                redelivery=redelivery,
                delivered_by=str(delivered_by) if delivered_by else None,
                actor_role=actor_role,
                delivered_at=self.delivered_at,
            )
        )

    # -------------------------------------------------------------------
    # Service lines
    # -------------------------------------------------------------------
    def edit_service(
        self,
        line_id: str,
        quantity=_UNSET,
        instructions=_UNSET,
        export_types=_UNSET,
        edited_by: str | None = None,
        actor_role: str | None = None,
    ) -> None:
        if OrderStatus(self.status) not in _SERVICE_EDITABLE_STATUSES:
            raise Conflict(
                "Services can only be edited while the order is pending or processing",
                order_id=str(self.id),
                status=self.status,
            )
        line = next((s for s in (self.services or []) if str(s.id) == str(line_id)), None)
        if line is None:
            raise ValidationError({"line_id": ["Service line not found on this order"]})

        if quantity is not _UNSET:
            line.quantity = quantity
        if instructions is not _UNSET:
            line.instructions = _dump(instructions)
        if export_types is not _UNSET:
            line.export_types = _dump(export_types)

        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(
            OrderServiceEdited(
                **self._event_context(),
                line_id=str(line.id),
                service_id=str(line.service_id),
                quantity=line.quantity,
                edited_by=str(edited_by) if edited_by else None,
                actor_role=actor_role,
                updated_at=now,
            )
        )


def _require_notes(notes: str | None) -> str:
    if notes is None or not notes.strip():
        raise ValidationError({"notes": ["Revision notes are required"]})
    return notes.strip()


def _dump(value) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    return json.dumps(value)
