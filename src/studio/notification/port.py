"""Notification sink port: fire-and-forget publish to a user's inbox."""

from abc import ABC, abstractmethod
from enum import Enum


class NotificationType(Enum):
    ORDER_CREATED = "order_created"
    ORDER_ASSIGNED = "order_assigned"
    ORDER_ACCEPTED = "order_accepted"
    ORDER_DECLINED = "order_declined"
    ORDER_CANCELLED = "order_cancelled"
    ORDER_SUBMITTED = "order_submitted"
    ORDER_COMPLETED = "order_completed"
    ORDER_REVISION_REQUESTED = "order_revision_requested"
    JOB_DELIVERED = "job_delivered"
    APPOINTMENT_SCHEDULED = "appointment_scheduled"
    APPOINTMENT_CANCELLED = "appointment_cancelled"


class NotificationSink(ABC):
    @abstractmethod
    def publish(
        self,
        recipient_id: str,
        notification_type: str,
        subject: str,
        body: str,
        context: dict | None = None,
    ) -> dict:
        """Publish a notification.

        Returns:
            dict with keys: message_id, status ("sent" or "failed"), error (optional)
        """
        ...
