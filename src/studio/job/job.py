"""Job aggregate: one physical photography engagement at a property.

A Job is booked, moves to in-progress when an editor accepts an order, to
completed once every active order has passed QC, and to delivered only by an
explicit partner action. Jobs are never deleted; cancellation is a status.

State Machine:
    BOOKED → IN_PROGRESS → COMPLETED → DELIVERED
    COMPLETED → IN_PROGRESS (new or reopened work)
    {BOOKED, IN_PROGRESS, COMPLETED} → DELIVERED (partner action)
    {BOOKED, IN_PROGRESS, COMPLETED} → CANCELLED
    DELIVERED → DELIVERED (re-delivery keeps the first delivered_at)
"""

import secrets
from datetime import UTC, datetime
from enum import Enum
from uuid import uuid4

from protean.fields import DateTime, Identifier, String, Text

from studio.domain import studio
from studio.errors import InvalidStateTransition
from studio.job.events import (
    AppointmentRemoved,
    DeliveryLinkIssued,
    FolderDeleted,
    JobCancelled,
    JobCompleted,
    JobCoverImageUpdated,
    JobCreated,
    JobDelivered,
    JobStarted,
)


class JobStatus(Enum):
    BOOKED = "booked"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


_VALID_TRANSITIONS = {
    JobStatus.BOOKED: {JobStatus.IN_PROGRESS, JobStatus.DELIVERED, JobStatus.CANCELLED},
    JobStatus.IN_PROGRESS: {JobStatus.COMPLETED, JobStatus.DELIVERED, JobStatus.CANCELLED},
    JobStatus.COMPLETED: {JobStatus.IN_PROGRESS, JobStatus.DELIVERED, JobStatus.CANCELLED},
    JobStatus.DELIVERED: {JobStatus.DELIVERED},
    JobStatus.CANCELLED: set(),  # terminal
}


def _new_reference() -> str:
    return uuid4().hex[:8].upper()


@studio.aggregate
class Job:
    reference = String(max_length=8, required=True)
    tenant_id = Identifier(required=True)
    address = String(required=True, max_length=500)
    customer_id = Identifier()
    assigned_to = Identifier()
    status = String(max_length=20, choices=JobStatus, default=JobStatus.BOOKED.value)
    notes = Text()
    cover_image = String(max_length=500)
    delivery_token = String(max_length=64)
    delivered_at = DateTime()
    cancellation_reason = String(max_length=500)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(
        cls,
        tenant_id: str,
        address: str,
        customer_id: str | None = None,
        notes: str | None = None,
        created_by: str | None = None,
        actor_role: str | None = None,
    ):
        now = datetime.now(UTC)
        job = cls(
            reference=_new_reference(),
            tenant_id=tenant_id,
            address=address,
            customer_id=customer_id,
            notes=notes,
            status=JobStatus.BOOKED.value,
            created_at=now,
            updated_at=now,
        )
        job.raise_(
            JobCreated(
                job_id=str(job.id),
                tenant_id=str(tenant_id),
                reference=job.reference,
                address=address,
                customer_id=str(customer_id) if customer_id else None,
                created_by=str(created_by) if created_by else None,
                actor_role=actor_role,
                created_at=now,
            )
        )
        return job

    @property
    def is_delivered(self) -> bool:
        return self.status == JobStatus.DELIVERED.value

    def _assert_can_transition(self, target_status: JobStatus) -> None:
        current = JobStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise InvalidStateTransition("job", current.value, target_status.value, job_id=str(self.id))

    def start_work(self) -> None:
        """Move a booked (or reopened) job into progress. No-op if already in progress."""
        if self.status == JobStatus.IN_PROGRESS.value:
            return
        if self.status not in (JobStatus.BOOKED.value, JobStatus.COMPLETED.value):
            # Delivered and cancelled jobs keep their status
            return
        now = datetime.now(UTC)
        self.status = JobStatus.IN_PROGRESS.value
        self.updated_at = now
        self.raise_(JobStarted(job_id=str(self.id), started_at=now))

    def mark_completed(self) -> None:
        self._assert_can_transition(JobStatus.COMPLETED)
        now = datetime.now(UTC)
        self.status = JobStatus.COMPLETED.value
        self.updated_at = now
        self.raise_(JobCompleted(job_id=str(self.id), completed_at=now))

    def deliver(self, delivered_by: str | None = None, actor_role: str | None = None) -> None:
        """Mark the job delivered. Re-delivering keeps the original delivered_at."""
        self._assert_can_transition(JobStatus.DELIVERED)
        redelivery = self.status == JobStatus.DELIVERED.value
        now = datetime.now(UTC)
        self.status = JobStatus.DELIVERED.value
        if self.delivered_at is None:
            self.delivered_at = now
        self.updated_at = now
        self.raise_(
            JobDelivered(
                job_id=str(self.id),
                tenant_id=str(self.tenant_id),
                reference=self.reference,
                customer_id=str(self.customer_id) if self.customer_id else None,
                redelivery=redelivery,
                delivered_by=str(delivered_by) if delivered_by else None,
                actor_role=actor_role,
                delivered_at=self.delivered_at,
            )
        )

    def cancel(
        self,
        reason: str | None = None,
        cancelled_by: str | None = None,
        actor_role: str | None = None,
    ) -> None:
        self._assert_can_transition(JobStatus.CANCELLED)
        now = datetime.now(UTC)
        self.status = JobStatus.CANCELLED.value
        self.cancellation_reason = reason
        self.updated_at = now
        self.raise_(
            JobCancelled(
                job_id=str(self.id),
                tenant_id=str(self.tenant_id),
                reference=self.reference,
                reason=reason,
                cancelled_by=str(cancelled_by) if cancelled_by else None,
                actor_role=actor_role,
                cancelled_at=now,
            )
        )

    def assign(self, user_id: str | None) -> None:
        """Record the single user of record for the job (legacy field)."""
        self.assigned_to = user_id
        self.updated_at = datetime.now(UTC)

    def update_cover_image(
        self,
        cover_image: str | None,
        updated_by: str | None = None,
        actor_role: str | None = None,
    ) -> None:
        now = datetime.now(UTC)
        self.cover_image = cover_image
        self.updated_at = now
        self.raise_(
            JobCoverImageUpdated(
                job_id=str(self.id),
                tenant_id=str(self.tenant_id),
                reference=self.reference,
                cover_image=cover_image,
                updated_by=str(updated_by) if updated_by else None,
                actor_role=actor_role,
                updated_at=now,
            )
        )

    def issue_delivery_token(self) -> str:
        """Return the customer delivery token, generating it on first use."""
        if self.delivery_token:
            return self.delivery_token
        now = datetime.now(UTC)
        self.delivery_token = secrets.token_urlsafe(24)
        self.updated_at = now
        self.raise_(DeliveryLinkIssued(job_id=str(self.id), issued_at=now))
        return self.delivery_token

    # -------------------------------------------------------------------
    # Records removed from under the job
    # -------------------------------------------------------------------
    def record_appointment_removed(
        self,
        appointment_id: str,
        removed_by: str | None = None,
        actor_role: str | None = None,
    ) -> None:
        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(
            AppointmentRemoved(
                job_id=str(self.id),
                tenant_id=str(self.tenant_id),
                appointment_id=str(appointment_id),
                removed_by=str(removed_by) if removed_by else None,
                actor_role=actor_role,
                removed_at=now,
            )
        )

    def record_folder_deleted(
        self,
        folder_path: str,
        display_name: str | None,
        files: int,
        folders: int,
        deleted_by: str | None = None,
        actor_role: str | None = None,
    ) -> None:
        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(
            FolderDeleted(
                job_id=str(self.id),
                tenant_id=str(self.tenant_id),
                folder_path=folder_path,
                display_name=display_name,
                files=files,
                folders=folders,
                deleted_by=str(deleted_by) if deleted_by else None,
                actor_role=actor_role,
                deleted_at=now,
            )
        )
