"""Domain events for the Appointment aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from studio.domain import studio


@studio.event(part_of="Appointment")
class AppointmentScheduled:
    __version__ = 1

    appointment_id = Identifier(required=True)
    job_id = Identifier(required=True)
    tenant_id = Identifier(required=True)
    start_time = DateTime(required=True)
    duration_minutes = Integer(required=True)
    assigned_to = Identifier()
    scheduled_by = Identifier()
    actor_role = String()


@studio.event(part_of="Appointment")
class AppointmentRescheduled:
    __version__ = 1

    appointment_id = Identifier(required=True)
    job_id = Identifier(required=True)
    tenant_id = Identifier(required=True)
    calendar_event_id = String()
    previous_start_time = DateTime(required=True)
    start_time = DateTime(required=True)
    duration_minutes = Integer(required=True)
    rescheduled_by = Identifier()
    actor_role = String()


@studio.event(part_of="Appointment")
class AppointmentCancelled:
    __version__ = 1

    appointment_id = Identifier(required=True)
    job_id = Identifier(required=True)
    tenant_id = Identifier(required=True)
    assigned_to = Identifier()
    calendar_event_id = String()
    start_time = DateTime(required=True)
    cancelled_by = Identifier()
    actor_role = String()
    cancelled_at = DateTime(required=True)
