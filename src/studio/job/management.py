"""Job housekeeping: cover image and cancellation."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from studio.access import ensure_tenant_staff
from studio.appointment.appointment import Appointment, AppointmentStatus
from studio.domain import studio
from studio.errors import Conflict
from studio.job.job import Job
from studio.order.order import Order, OrderStatus


@studio.command(part_of="Job")
class UpdateJobCover:
    job_id = Identifier(required=True)
    cover_image = String(max_length=500)  # empty clears the cover
    actor_id = Identifier(required=True)
    actor_role = String(required=True, max_length=20)
    tenant_id = Identifier(required=True)


@studio.command(part_of="Job")
class CancelJob:
    """Cancel a job that has no work in flight.

    Pending orders are cancelled with it and scheduled appointments are
    cancelled and removed from the calendar.
    """

    job_id = Identifier(required=True)
    reason = String(max_length=500)
    actor_id = Identifier(required=True)
    actor_role = String(required=True, max_length=20)
    tenant_id = Identifier(required=True)


@studio.command_handler(part_of=Job)
class JobManagementHandler:
    @handle(UpdateJobCover)
    def update_job_cover(self, command):
        repo = current_domain.repository_for(Job)
        job = repo.get(command.job_id)
        ensure_tenant_staff(command.actor_role, job.tenant_id, command.tenant_id, "change the cover image")
        job.update_cover_image(
            command.cover_image or None,
            updated_by=command.actor_id,
            actor_role=command.actor_role,
        )
        repo.add(job)

    @handle(CancelJob)
    def cancel_job(self, command):
        repo = current_domain.repository_for(Job)
        job = repo.get(command.job_id)
        ensure_tenant_staff(command.actor_role, job.tenant_id, command.tenant_id, "cancel jobs")

        order_repo = current_domain.repository_for(Order)
        orders = [o for o in order_repo.for_job(job.id) if o.status != OrderStatus.CANCELLED.value]
        in_flight = [o for o in orders if o.status != OrderStatus.PENDING.value]
        if in_flight:
            raise Conflict(
                "Job has orders in progress and cannot be cancelled",
                job_id=str(job.id),
                order_ids=[str(o.id) for o in in_flight],
            )

        job.cancel(command.reason, cancelled_by=command.actor_id, actor_role=command.actor_role)
        repo.add(job)

        for order in orders:
            order.cancel(command.reason, cancelled_by=command.actor_id, actor_role=command.actor_role)
            order_repo.add(order)

        # Calendar events go with the cancellation, from the appointment dispatcher
        appointment_repo = current_domain.repository_for(Appointment)
        for appointment in appointment_repo._dao.query.filter(job_id=str(job.id)).all().items:
            if appointment.status == AppointmentStatus.SCHEDULED.value:
                appointment.cancel(cancelled_by=command.actor_id, actor_role=command.actor_role)
                appointment_repo.add(appointment)
