"""Customer commands: registration and revision-limit overrides."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from studio.access import ensure_tenant_staff
from studio.customer.customer import Customer
from studio.domain import studio


@studio.command(part_of="Customer")
class RegisterCustomer:
    tenant_id = Identifier(required=True)
    name = String(required=True, max_length=200)
    email = String(max_length=254)
    revision_limit_override = String(max_length=20)


@studio.command(part_of="Customer")
class SetRevisionLimitOverride:
    """Give one customer a revision allowance that beats the tenant default."""

    customer_id = Identifier(required=True)
    revision_limit_override = String(max_length=20)  # empty clears the override
    actor_id = Identifier(required=True)
    actor_role = String(required=True, max_length=20)
    tenant_id = Identifier(required=True)


@studio.command_handler(part_of=Customer)
class CustomerHandler:
    @handle(RegisterCustomer)
    def register_customer(self, command):
        customer = Customer.register(
            tenant_id=command.tenant_id,
            name=command.name,
            email=command.email,
            revision_limit_override=command.revision_limit_override,
        )
        current_domain.repository_for(Customer).add(customer)
        return str(customer.id)

    @handle(SetRevisionLimitOverride)
    def set_revision_limit_override(self, command):
        repo = current_domain.repository_for(Customer)
        customer = repo.get(command.customer_id)
        ensure_tenant_staff(command.actor_role, customer.tenant_id, command.tenant_id, "change revision limits")
        customer.set_revision_limit_override(command.revision_limit_override)
        repo.add(customer)
