"""CreateJob: book a new engagement for a property."""

from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from studio.domain import studio
from studio.job.job import Job


@studio.command(part_of="Job")
class CreateJob:
    tenant_id = Identifier(required=True)
    address = String(required=True, max_length=500)
    customer_id = Identifier()
    notes = Text()
    actor_id = Identifier()
    actor_role = String(max_length=20)


@studio.command_handler(part_of=Job)
class CreateJobHandler:
    @handle(CreateJob)
    def create_job(self, command):
        job = Job.create(
            tenant_id=command.tenant_id,
            address=command.address,
            customer_id=command.customer_id,
            notes=command.notes,
            created_by=command.actor_id,
            actor_role=command.actor_role,
        )
        current_domain.repository_for(Job).add(job)
        return str(job.id)
