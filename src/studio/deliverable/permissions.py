"""Who may organize or comment on a job's deliverables."""

from studio.access import Role, is_tenant_staff
from studio.errors import Forbidden
from studio.tenant.partnership import has_active_partnership


def acts_for_tenant(job, role: str | None, tenant_id: str | None) -> bool:
    return is_tenant_staff(role) and tenant_id is not None and str(tenant_id) == str(job.tenant_id)


def ensure_can_organize(job, actor_id: str, role: str | None, tenant_id: str | None) -> bool:
    """Tenant staff, or an editor partnered with the job's tenant.

    Returns True when the actor acts for the tenant.
    """
    if acts_for_tenant(job, role, tenant_id):
        return True
    if role == Role.EDITOR.value and has_active_partnership(job.tenant_id, actor_id):
        return False
    raise Forbidden("Not allowed to organize deliverables for this job", job_id=str(job.id))


def ensure_participant(job, actor_id: str, role: str | None, tenant_id: str | None) -> None:
    """Anyone who can organize the job, plus the job's own customer."""
    if role == Role.CUSTOMER.value:
        if job.customer_id and str(job.customer_id) == str(actor_id):
            return
        raise Forbidden("Not a customer of this job", job_id=str(job.id))
    ensure_can_organize(job, actor_id, role, tenant_id)
