"""EditOrderService: change one service line while the order is still early."""

import json

from protean import handle
from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from studio.access import ensure_tenant_staff
from studio.domain import studio
from studio.order.order import Order


@studio.command(part_of="Order")
class EditOrderService:
    order_id = Identifier(required=True)
    line_id = Identifier(required=True)
    quantity = Integer(min_value=1)
    instructions = Text()  # JSON object
    export_types = Text()  # JSON list
    actor_id = Identifier(required=True)
    actor_role = String(required=True, max_length=20)
    tenant_id = Identifier(required=True)


@studio.command_handler(part_of=Order)
class OrderServiceHandler:
    @handle(EditOrderService)
    def edit_order_service(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        ensure_tenant_staff(command.actor_role, order.tenant_id, command.tenant_id, "edit order services")

        changes = {}
        if command.quantity is not None:
            changes["quantity"] = command.quantity
        if command.instructions is not None:
            changes["instructions"] = json.loads(command.instructions)
        if command.export_types is not None:
            changes["export_types"] = json.loads(command.export_types)
        order.edit_service(
            command.line_id,
            edited_by=command.actor_id,
            actor_role=command.actor_role,
            **changes,
        )
        repo.add(order)
