"""CreateOrder: open a new unit of editing work against a job."""

import json

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from studio.access import ensure_same_tenant
from studio.domain import studio
from studio.errors import Conflict
from studio.job.job import Job, JobStatus
from studio.order.order import Order
from studio.order.sequence import allocate_order_number


@studio.command(part_of="Order")
class CreateOrder:
    job_id = Identifier(required=True)
    customer_id = Identifier()
    services = Text()  # JSON list of {service_id, quantity, instructions, export_types}
    actor_id = Identifier()
    actor_role = String(max_length=20)
    tenant_id = Identifier(required=True)


def _parse_services(raw: str | None) -> list[dict]:
    if not raw:
        return []
    services = json.loads(raw)
    if not isinstance(services, list) or any(not isinstance(s, dict) or not s.get("service_id") for s in services):
        raise ValidationError({"services": ["Each service needs a service_id"]})
    return services


@studio.command_handler(part_of=Order)
class CreateOrderHandler:
    @handle(CreateOrder)
    def create_order(self, command):
        job = current_domain.repository_for(Job).get(command.job_id)
        ensure_same_tenant(job.tenant_id, command.tenant_id, "job")
        if job.status == JobStatus.CANCELLED.value:
            raise Conflict("Cannot order edits for a cancelled job", job_id=str(job.id))

        order = Order.create(
            tenant_id=job.tenant_id,
            job_id=job.id,
            order_number=allocate_order_number(job.tenant_id),
            customer_id=command.customer_id or job.customer_id,
            created_by=command.actor_id,
            services=_parse_services(command.services),
            actor_role=command.actor_role,
        )
        current_domain.repository_for(Order).add(order)
        return str(order.id)
