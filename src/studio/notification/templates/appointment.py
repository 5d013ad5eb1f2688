"""Appointment notification templates."""

from studio.notification.port import NotificationType


class AppointmentScheduledTemplate:
    notification_type = NotificationType.APPOINTMENT_SCHEDULED.value

    @staticmethod
    def render(context: dict) -> dict:
        start_time = context.get("start_time", "TBD")
        address = context.get("address", "")
        return {
            "subject": "Shoot scheduled",
            "body": f"A shoot at {address} is scheduled for {start_time}.",
        }


class AppointmentCancelledTemplate:
    notification_type = NotificationType.APPOINTMENT_CANCELLED.value

    @staticmethod
    def render(context: dict) -> dict:
        start_time = context.get("start_time", "TBD")
        return {
            "subject": "Shoot cancelled",
            "body": f"The shoot scheduled for {start_time} was cancelled.",
        }
