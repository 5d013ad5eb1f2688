"""Job notification templates."""

from studio.notification.port import NotificationType


class JobDeliveredTemplate:
    notification_type = NotificationType.JOB_DELIVERED.value

    @staticmethod
    def render(context: dict) -> dict:
        address = context.get("address", "your property")
        link = context.get("delivery_link")
        body = f"The photos for {address} are ready."
        if link:
            body += f"\n\nView and download them here: {link}"
        return {"subject": f"Your photos for {address} are ready", "body": body}
