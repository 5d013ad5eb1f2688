"""Domain events for the Order aggregate.

Every order event carries the tenant, job and order number so reactions
downstream of the commit never need to reload the order.
"""

from protean.fields import Boolean, DateTime, Identifier, Integer, String, Text

from studio.domain import studio


@studio.event(part_of="Order")
class OrderCreated:
    """An editing order was created for a job."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    tenant_id = Identifier(required=True)
    job_id = Identifier(required=True)
    customer_id = Identifier()
    services = Text()  # JSON list of service line items
    created_by = Identifier()
    actor_role = String()
    created_at = DateTime(required=True)


@studio.event(part_of="Order")
class OrderAssigned:
    """An editor was bound to the order."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    tenant_id = Identifier(required=True)
    job_id = Identifier(required=True)
    editor_id = Identifier(required=True)
    status = String(required=True)
    assigned_by = Identifier()
    actor_role = String()
    assigned_at = DateTime(required=True)


@studio.event(part_of="Order")
class OrderAccepted:
    """The assigned editor accepted the order and began processing."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    tenant_id = Identifier(required=True)
    job_id = Identifier(required=True)
    editor_id = Identifier(required=True)
    accepted_at = DateTime(required=True)


@studio.event(part_of="Order")
class OrderDeclined:
    """The assigned editor declined; the order is cancelled and unassigned."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    tenant_id = Identifier(required=True)
    job_id = Identifier(required=True)
    editor_id = Identifier(required=True)
    reason = String()
    declined_at = DateTime(required=True)


@studio.event(part_of="Order")
class OrderCancelled:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    tenant_id = Identifier(required=True)
    job_id = Identifier(required=True)
    editor_id = Identifier()  # editor assigned before cancellation
    reason = String()
    cancelled_by = Identifier()
    actor_role = String()
    cancelled_at = DateTime(required=True)


@studio.event(part_of="Order")
class OrderSubmittedForReview:
    """The editor handed the order to the QC gate."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    tenant_id = Identifier(required=True)
    job_id = Identifier(required=True)
    editor_id = Identifier(required=True)
    revision_round = Integer(required=True)
    files = Integer(default=0)
    submitted_at = DateTime(required=True)


@studio.event(part_of="Order")
class OrderApproved:
    """QC accepted the order."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    tenant_id = Identifier(required=True)
    job_id = Identifier(required=True)
    editor_id = Identifier()
    approved_by = Identifier(required=True)
    approver_role = String()
    approved_at = DateTime(required=True)


@studio.event(part_of="Order")
class OrderRejected:
    """QC rejected the order and consumed a revision round."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    tenant_id = Identifier(required=True)
    job_id = Identifier(required=True)
    editor_id = Identifier()
    rejected_by = Identifier(required=True)
    approver_role = String()
    notes = Text(required=True)
    used_revision_rounds = Integer(required=True)
    rejected_at = DateTime(required=True)


@studio.event(part_of="Order")
class RevisionRequested:
    """A customer or tenant reopened a finished order for another round."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    tenant_id = Identifier(required=True)
    job_id = Identifier(required=True)
    editor_id = Identifier()
    requested_by = Identifier(required=True)
    requester_role = String()
    basis = String()  # which revision limit allowed the request
    notes = Text(required=True)
    used_revision_rounds = Integer(required=True)
    requested_at = DateTime(required=True)


@studio.event(part_of="Order")
class OrderDelivered:
    """The order was closed by its job's delivery."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    tenant_id = Identifier(required=True)
    job_id = Identifier(required=True)
    previous_status = String(required=True)
    forced = Boolean(default=False)
    redelivery = Boolean(default=False)
    delivered_by = Identifier()
    actor_role = String()
    delivered_at = DateTime(required=True)


@studio.event(part_of="Order")
class OrderServiceEdited:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    tenant_id = Identifier(required=True)
    job_id = Identifier(required=True)
    line_id = Identifier(required=True)
    service_id = Identifier(required=True)
    quantity = Integer()
    edited_by = Identifier()
    actor_role = String()
    updated_at = DateTime(required=True)
