"""Appointment side effects: calendar mirroring, notices, audit trail.

The calendar event is created only once the appointment is committed, so a
booking that fails never leaves an orphaned event behind.
"""

import structlog
from protean import handle
from protean.utils.globals import current_domain

from studio.activity.activity import ActivityAction
from studio.appointment.appointment import Appointment
from studio.appointment.events import (
    AppointmentCancelled,
    AppointmentRescheduled,
    AppointmentScheduled,
)
from studio.domain import studio
from studio.job.job import Job
from studio.notification.port import NotificationType
from studio.side_effects import (
    create_calendar_event,
    delete_calendar_event,
    notify,
    record_activity,
    update_calendar_event,
)

logger = structlog.get_logger(__name__)


@studio.event_handler(part_of=Appointment)
class AppointmentEventsDispatcher:
    @handle(AppointmentScheduled)
    def on_appointment_scheduled(self, event: AppointmentScheduled) -> None:
        """Mirror the visit to the calendar, then tell the photographer and the customer."""
        repo = current_domain.repository_for(Appointment)
        try:
            appointment = repo.get(event.appointment_id)
            job = current_domain.repository_for(Job).get(event.job_id)
        except Exception:
            logger.error(
                "Failed to load appointment for dispatch",
                appointment_id=str(event.appointment_id),
            )
            return

        if not appointment.has_external_reference:
            event_id = create_calendar_event(
                summary=f"Shoot: {job.address}",
                start_time=event.start_time,
                duration_minutes=event.duration_minutes,
                location=job.address,
                attendee_id=event.assigned_to,
            )
            if event_id:
                appointment.link_calendar_event(event_id)
                repo.add(appointment)

        context = {"address": job.address, "start_time": event.start_time.isoformat()}
        notify(event.assigned_to, NotificationType.APPOINTMENT_SCHEDULED.value, context)
        notify(job.customer_id, NotificationType.APPOINTMENT_SCHEDULED.value, context)
        record_activity(
            tenant_id=event.tenant_id,
            action=ActivityAction.APPOINTMENT_SCHEDULED,
            title=f"Shoot scheduled for job {job.reference}",
            job_id=event.job_id,
            actor_id=event.scheduled_by,
            actor_role=event.actor_role,
            details={"start_time": event.start_time, "calendar_synced": appointment.has_external_reference},
        )

    @handle(AppointmentRescheduled)
    def on_appointment_rescheduled(self, event: AppointmentRescheduled) -> None:
        update_calendar_event(event.calendar_event_id, event.start_time, event.duration_minutes)
        record_activity(
            tenant_id=event.tenant_id,
            action=ActivityAction.APPOINTMENT_RESCHEDULED,
            title="Shoot rescheduled",
            job_id=event.job_id,
            actor_id=event.rescheduled_by,
            actor_role=event.actor_role,
            details={"start_time": event.start_time, "previous_start_time": event.previous_start_time},
        )

    @handle(AppointmentCancelled)
    def on_appointment_cancelled(self, event: AppointmentCancelled) -> None:
        delete_calendar_event(event.calendar_event_id)
        notify(
            event.assigned_to,
            NotificationType.APPOINTMENT_CANCELLED.value,
            {"start_time": event.start_time.isoformat()},
        )
        record_activity(
            tenant_id=event.tenant_id,
            action=ActivityAction.APPOINTMENT_CANCELLED,
            title="Shoot cancelled",
            job_id=event.job_id,
            actor_id=event.cancelled_by,
            actor_role=event.actor_role,
        )
