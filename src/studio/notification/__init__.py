"""Notification sink registry.

Workflow transitions publish in-app notifications to the counterpart role.
FakeNotificationSink is the default; NOTIFICATION_ADAPTER selects others.
"""

import os

from studio.notification.port import NotificationSink

_sink_instance: NotificationSink | None = None


def get_notification_sink() -> NotificationSink:
    global _sink_instance
    if _sink_instance is None:
        adapter = os.environ.get("NOTIFICATION_ADAPTER", "fake")
        if adapter == "fake":
            from studio.notification.fake_sink import FakeNotificationSink

            _sink_instance = FakeNotificationSink()
        else:
            raise ValueError(f"Unknown notification adapter: {adapter}")
    return _sink_instance


def set_notification_sink(sink: NotificationSink) -> None:
    global _sink_instance
    _sink_instance = sink


def reset_notification_sink() -> None:
    global _sink_instance
    _sink_instance = None
