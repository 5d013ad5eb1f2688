"""Studio bounded context: photography job fulfillment.

Coordinates a job from booking to delivery: appointments, editing orders,
editor assignment, deliverable folders, the QC gate and customer revision
rounds. Uses CQRS (not event sourcing); every aggregate persists its latest
state and raises events for audit and downstream consumers.
"""

from protean.domain import Domain

from studio.utils.logging import configure_logging

configure_logging()

studio = Domain(name="studio")
