"""DeliverJob: the partner hands the finished job to the customer.

Delivery cascades explicitly: every order of the job that is not cancelled
is closed as delivered, whatever state it was in. An order whose QC cycle
never finished is closed anyway; that is a business rule of delivery, not an
accident of the state machine. Delivering again re-runs the cascade and keeps
the original delivery timestamps.
"""

import os

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from studio.access import ensure_tenant_staff
from studio.domain import studio
from studio.job.job import Job
from studio.order.order import Order, OrderStatus

logger = structlog.get_logger(__name__)


def delivery_link(token: str) -> str:
    base_url = os.environ.get("DELIVERY_BASE_URL", "https://studio.example.com/delivery")
    return f"{base_url.rstrip('/')}/{token}"


@studio.command(part_of="Job")
class DeliverJob:
    job_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    actor_role = String(required=True, max_length=20)
    tenant_id = Identifier(required=True)


@studio.command(part_of="Job")
class IssueDeliveryLink:
    """Return the job's customer delivery link, creating the token once."""

    job_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    actor_role = String(required=True, max_length=20)
    tenant_id = Identifier(required=True)


@studio.command_handler(part_of=Job)
class DeliveryHandler:
    @handle(DeliverJob)
    def deliver_job(self, command):
        job_repo = current_domain.repository_for(Job)
        job = job_repo.get(command.job_id)
        ensure_tenant_staff(command.actor_role, job.tenant_id, command.tenant_id, "deliver jobs")

        job.deliver(delivered_by=command.actor_id, actor_role=command.actor_role)
        token = job.issue_delivery_token()
        job_repo.add(job)

        order_repo = current_domain.repository_for(Order)
        delivered = 0
        for order in order_repo.for_job(job.id):
            if order.status == OrderStatus.CANCELLED.value:
                continue
            order.force_deliver(delivered_by=command.actor_id, actor_role=command.actor_role)
            order_repo.add(order)
            delivered += 1

        logger.info("Job delivered", job_id=str(job.id), orders=delivered)
        return delivery_link(token)

    @handle(IssueDeliveryLink)
    def issue_delivery_link(self, command):
        job_repo = current_domain.repository_for(Job)
        job = job_repo.get(command.job_id)
        ensure_tenant_staff(command.actor_role, job.tenant_id, command.tenant_id, "share delivery links")
        token = job.issue_delivery_token()
        job_repo.add(job)
        return delivery_link(token)
