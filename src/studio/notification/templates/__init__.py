"""Template registry: maps NotificationType to template classes.

Each template renders ``{"subject", "body"}`` from the context supplied by
the transition that triggered it.
"""

from studio.notification.port import NotificationType
from studio.notification.templates.appointment import (
    AppointmentCancelledTemplate,
    AppointmentScheduledTemplate,
)
from studio.notification.templates.job import JobDeliveredTemplate
from studio.notification.templates.order import (
    OrderAcceptedTemplate,
    OrderAssignedTemplate,
    OrderCancelledTemplate,
    OrderCompletedTemplate,
    OrderCreatedTemplate,
    OrderDeclinedTemplate,
    OrderRevisionRequestedTemplate,
    OrderSubmittedTemplate,
)

TEMPLATE_REGISTRY: dict[str, type] = {
    NotificationType.ORDER_CREATED.value: OrderCreatedTemplate,
    NotificationType.ORDER_ASSIGNED.value: OrderAssignedTemplate,
    NotificationType.ORDER_ACCEPTED.value: OrderAcceptedTemplate,
    NotificationType.ORDER_DECLINED.value: OrderDeclinedTemplate,
    NotificationType.ORDER_CANCELLED.value: OrderCancelledTemplate,
    NotificationType.ORDER_SUBMITTED.value: OrderSubmittedTemplate,
    NotificationType.ORDER_COMPLETED.value: OrderCompletedTemplate,
    NotificationType.ORDER_REVISION_REQUESTED.value: OrderRevisionRequestedTemplate,
    NotificationType.JOB_DELIVERED.value: JobDeliveredTemplate,
    NotificationType.APPOINTMENT_SCHEDULED.value: AppointmentScheduledTemplate,
    NotificationType.APPOINTMENT_CANCELLED.value: AppointmentCancelledTemplate,
}


def get_template(notification_type: str):
    """Look up a template class by notification type string."""
    template_cls = TEMPLATE_REGISTRY.get(notification_type)
    if template_cls is None:
        raise ValueError(f"No template registered for notification type: {notification_type}")
    return template_cls
