"""Fake notification sink: records published notifications for assertions."""

from uuid import uuid4

from studio.notification.port import NotificationSink


class FakeNotificationSink(NotificationSink):
    def __init__(self):
        self.published: list[dict] = []
        self.should_succeed = True
        self.failure_reason = "Notification service unavailable"

    def configure(self, should_succeed: bool = True, failure_reason: str = "Notification service unavailable"):
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def publish(
        self,
        recipient_id: str,
        notification_type: str,
        subject: str,
        body: str,
        context: dict | None = None,
    ) -> dict:
        if not self.should_succeed:
            return {"message_id": None, "status": "failed", "error": self.failure_reason}

        message_id = f"ntf-{uuid4().hex[:12]}"
        self.published.append(
            {
                "message_id": message_id,
                "recipient_id": recipient_id,
                "notification_type": notification_type,
                "subject": subject,
                "body": body,
                "context": context or {},
            }
        )
        return {"message_id": message_id, "status": "sent"}

    def sent_to(self, recipient_id: str, notification_type: str | None = None) -> list[dict]:
        return [
            n
            for n in self.published
            if n["recipient_id"] == recipient_id
            and (notification_type is None or n["notification_type"] == notification_type)
        ]

    def reset(self):
        self.published.clear()
        self.should_succeed = True
        self.failure_reason = "Notification service unavailable"
