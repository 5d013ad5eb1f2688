"""Appointment aggregate: a scheduled visit for a Job.

A job may have several appointments (rescheduling by booking a new one is
allowed). Appointments mirrored to an external calendar keep that reference
and are only ever cancelled, never physically removed.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import DateTime, Identifier, Integer, String, Text

from studio.appointment.events import (
    AppointmentCancelled,
    AppointmentRescheduled,
    AppointmentScheduled,
)
from studio.domain import studio
from studio.errors import InvalidStateTransition

DEFAULT_DURATION_MINUTES = 60


class AppointmentStatus(Enum):
    SCHEDULED = "scheduled"
    CANCELLED = "cancelled"


@studio.aggregate
class Appointment:
    job_id = Identifier(required=True)
    tenant_id = Identifier(required=True)
    start_time = DateTime(required=True)
    duration_minutes = Integer(min_value=1, default=DEFAULT_DURATION_MINUTES)
    assigned_to = Identifier()
    status = String(max_length=20, choices=AppointmentStatus, default=AppointmentStatus.SCHEDULED.value)
    calendar_event_id = String(max_length=255)
    notes = Text()
    cancelled_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def schedule(
        cls,
        job_id: str,
        tenant_id: str,
        start_time: datetime,
        duration_minutes: int | None = None,
        assigned_to: str | None = None,
        notes: str | None = None,
        scheduled_by: str | None = None,
        actor_role: str | None = None,
    ):
        now = datetime.now(UTC)
        appointment = cls(
            job_id=job_id,
            tenant_id=tenant_id,
            start_time=start_time,
            duration_minutes=duration_minutes or DEFAULT_DURATION_MINUTES,
            assigned_to=assigned_to,
            notes=notes,
            status=AppointmentStatus.SCHEDULED.value,
            created_at=now,
            updated_at=now,
        )
        appointment.raise_(
            AppointmentScheduled(
                appointment_id=str(appointment.id),
                job_id=str(job_id),
                tenant_id=str(tenant_id),
                start_time=start_time,
                duration_minutes=appointment.duration_minutes,
                assigned_to=str(assigned_to) if assigned_to else None,
                scheduled_by=str(scheduled_by) if scheduled_by else None,
                actor_role=actor_role,
            )
        )
        return appointment

    @property
    def has_external_reference(self) -> bool:
        return bool(self.calendar_event_id)

    def _assert_scheduled(self, target: str) -> None:
        if self.status != AppointmentStatus.SCHEDULED.value:
            raise InvalidStateTransition("appointment", self.status, target, appointment_id=str(self.id))

    def link_calendar_event(self, event_id: str | None) -> None:
        self.calendar_event_id = event_id

    def reschedule(
        self,
        start_time: datetime,
        duration_minutes: int | None = None,
        rescheduled_by: str | None = None,
        actor_role: str | None = None,
    ) -> None:
        self._assert_scheduled("rescheduled")
        previous = self.start_time
        self.start_time = start_time
        if duration_minutes:
            self.duration_minutes = duration_minutes
        self.updated_at = datetime.now(UTC)
        self.raise_(
            AppointmentRescheduled(
                appointment_id=str(self.id),
                job_id=str(self.job_id),
                tenant_id=str(self.tenant_id),
                calendar_event_id=self.calendar_event_id,
                previous_start_time=previous,
                start_time=start_time,
                duration_minutes=self.duration_minutes,
                rescheduled_by=str(rescheduled_by) if rescheduled_by else None,
                actor_role=actor_role,
            )
        )

    def reassign(self, user_id: str | None) -> None:
        self._assert_scheduled("reassigned")
        self.assigned_to = user_id
        self.updated_at = datetime.now(UTC)

    def cancel(self, cancelled_by: str | None = None, actor_role: str | None = None) -> None:
        self._assert_scheduled(AppointmentStatus.CANCELLED.value)
        now = datetime.now(UTC)
        self.status = AppointmentStatus.CANCELLED.value
        self.cancelled_at = now
        self.updated_at = now
        self.raise_(
            AppointmentCancelled(
                appointment_id=str(self.id),
                job_id=str(self.job_id),
                tenant_id=str(self.tenant_id),
                assigned_to=str(self.assigned_to) if self.assigned_to else None,
                calendar_event_id=self.calendar_event_id,
                start_time=self.start_time,
                cancelled_by=str(cancelled_by) if cancelled_by else None,
                actor_role=actor_role,
                cancelled_at=now,
            )
        )
