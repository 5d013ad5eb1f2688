"""Domain events for the Job aggregate.

Removals of records that live under a job (appointments without a calendar
reference, folders) are recorded here too: the deleted row is gone and has no
stream of its own left to carry the fact.
"""

from protean.fields import Boolean, DateTime, Identifier, Integer, String

from studio.domain import studio


@studio.event(part_of="Job")
class JobCreated:
    """A job was booked for a property."""

    __version__ = 1

    job_id = Identifier(required=True)
    tenant_id = Identifier(required=True)
    reference = String(required=True)
    address = String(required=True)
    customer_id = Identifier()
    created_by = Identifier()
    actor_role = String()
    created_at = DateTime(required=True)


@studio.event(part_of="Job")
class JobStarted:
    """An editor accepted work on the job."""

    __version__ = 1

    job_id = Identifier(required=True)
    started_at = DateTime(required=True)


@studio.event(part_of="Job")
class JobCompleted:
    """Every active order of the job passed QC."""

    __version__ = 1

    job_id = Identifier(required=True)
    completed_at = DateTime(required=True)


@studio.event(part_of="Job")
class JobDelivered:
    """The partner delivered the job to the customer."""

    __version__ = 1

    job_id = Identifier(required=True)
    tenant_id = Identifier(required=True)
    reference = String(required=True)
    customer_id = Identifier()
    redelivery = Boolean(default=False)
    delivered_by = Identifier()
    actor_role = String()
    delivered_at = DateTime(required=True)


@studio.event(part_of="Job")
class JobCancelled:
    __version__ = 1

    job_id = Identifier(required=True)
    tenant_id = Identifier(required=True)
    reference = String(required=True)
    reason = String()
    cancelled_by = Identifier()
    actor_role = String()
    cancelled_at = DateTime(required=True)


@studio.event(part_of="Job")
class JobCoverImageUpdated:
    __version__ = 1

    job_id = Identifier(required=True)
    tenant_id = Identifier(required=True)
    reference = String(required=True)
    cover_image = String()
    updated_by = Identifier()
    actor_role = String()
    updated_at = DateTime(required=True)


@studio.event(part_of="Job")
class DeliveryLinkIssued:
    """A customer delivery token was generated for the job."""

    __version__ = 1

    job_id = Identifier(required=True)
    issued_at = DateTime(required=True)


@studio.event(part_of="Job")
class AppointmentRemoved:
    """An appointment that was never mirrored to a calendar was deleted."""

    __version__ = 1

    job_id = Identifier(required=True)
    tenant_id = Identifier(required=True)
    appointment_id = Identifier(required=True)
    removed_by = Identifier()
    actor_role = String()
    removed_at = DateTime(required=True)


@studio.event(part_of="Job")
class FolderDeleted:
    """A folder subtree and its loose files were deleted."""

    __version__ = 1

    job_id = Identifier(required=True)
    tenant_id = Identifier(required=True)
    folder_path = String(required=True)
    display_name = String()
    files = Integer(default=0)
    folders = Integer(default=0)
    deleted_by = Identifier()
    actor_role = String()
    deleted_at = DateTime(required=True)
