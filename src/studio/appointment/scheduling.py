"""Appointment commands: schedule, reschedule, cancel, remove.

Calendar sync happens after commit, in ``AppointmentEventsDispatcher``. A
calendar outage leaves the appointment without an event reference but never
blocks the booking.
"""

from protean import handle
from protean.fields import DateTime, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from studio.access import ensure_tenant_staff
from studio.appointment.appointment import Appointment
from studio.domain import studio
from studio.errors import Conflict
from studio.job.job import Job, JobStatus


@studio.command(part_of="Appointment")
class ScheduleAppointment:
    job_id = Identifier(required=True)
    start_time = DateTime(required=True)
    duration_minutes = Integer(min_value=1)
    assigned_to = Identifier()
    notes = Text()
    actor_id = Identifier(required=True)
    actor_role = String(required=True, max_length=20)
    tenant_id = Identifier(required=True)


@studio.command(part_of="Appointment")
class RescheduleAppointment:
    appointment_id = Identifier(required=True)
    start_time = DateTime(required=True)
    duration_minutes = Integer(min_value=1)
    actor_id = Identifier(required=True)
    actor_role = String(required=True, max_length=20)
    tenant_id = Identifier(required=True)


@studio.command(part_of="Appointment")
class CancelAppointment:
    appointment_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    actor_role = String(required=True, max_length=20)
    tenant_id = Identifier(required=True)


@studio.command(part_of="Appointment")
class RemoveAppointment:
    """Delete an appointment; falls back to cancelling when it is on a calendar."""

    appointment_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    actor_role = String(required=True, max_length=20)
    tenant_id = Identifier(required=True)


@studio.command_handler(part_of=Appointment)
class SchedulingHandler:
    @handle(ScheduleAppointment)
    def schedule_appointment(self, command):
        job_repo = current_domain.repository_for(Job)
        job = job_repo.get(command.job_id)
        ensure_tenant_staff(command.actor_role, job.tenant_id, command.tenant_id, "schedule appointments")
        if job.status in (JobStatus.CANCELLED.value, JobStatus.DELIVERED.value):
            raise Conflict(f"Cannot schedule a visit for a {job.status} job", job_id=str(job.id))

        appointment = Appointment.schedule(
            job_id=job.id,
            tenant_id=job.tenant_id,
            start_time=command.start_time,
            duration_minutes=command.duration_minutes,
            assigned_to=command.assigned_to,
            notes=command.notes,
            scheduled_by=command.actor_id,
            actor_role=command.actor_role,
        )
        current_domain.repository_for(Appointment).add(appointment)

        if command.assigned_to and not job.assigned_to:
            job.assign(command.assigned_to)
            job_repo.add(job)

        return str(appointment.id)

    @handle(RescheduleAppointment)
    def reschedule_appointment(self, command):
        repo = current_domain.repository_for(Appointment)
        appointment = repo.get(command.appointment_id)
        ensure_tenant_staff(command.actor_role, appointment.tenant_id, command.tenant_id, "reschedule appointments")

        appointment.reschedule(
            command.start_time,
            command.duration_minutes,
            rescheduled_by=command.actor_id,
            actor_role=command.actor_role,
        )
        repo.add(appointment)

    @handle(CancelAppointment)
    def cancel_appointment(self, command):
        repo = current_domain.repository_for(Appointment)
        appointment = repo.get(command.appointment_id)
        ensure_tenant_staff(command.actor_role, appointment.tenant_id, command.tenant_id, "cancel appointments")
        appointment.cancel(cancelled_by=command.actor_id, actor_role=command.actor_role)
        repo.add(appointment)

    @handle(RemoveAppointment)
    def remove_appointment(self, command):
        repo = current_domain.repository_for(Appointment)
        appointment = repo.get(command.appointment_id)
        ensure_tenant_staff(command.actor_role, appointment.tenant_id, command.tenant_id, "remove appointments")

        if appointment.has_external_reference:
            appointment.cancel(cancelled_by=command.actor_id, actor_role=command.actor_role)
            repo.add(appointment)
            return "cancelled"

        repo._dao.delete(appointment)

        job_repo = current_domain.repository_for(Job)
        job = job_repo.get(appointment.job_id)
        job.record_appointment_removed(appointment.id, removed_by=command.actor_id, actor_role=command.actor_role)
        job_repo.add(job)
        return "removed"
