"""Calendar sink port.

Appointments are mirrored to an external calendar on a best-effort basis.
Adapters report failure through the returned dict; they should not raise.
"""

from abc import ABC, abstractmethod
from datetime import datetime


class CalendarSink(ABC):
    @abstractmethod
    def create_event(
        self,
        summary: str,
        start_time: datetime,
        duration_minutes: int,
        location: str | None = None,
        attendee_id: str | None = None,
    ) -> dict:
        """Create an event.

        Returns:
            dict with keys: event_id (None on failure), error (optional)
        """
        ...

    @abstractmethod
    def update_event(self, event_id: str, start_time: datetime, duration_minutes: int) -> dict:
        """Returns: dict with keys: updated (bool), error (optional)"""
        ...

    @abstractmethod
    def delete_event(self, event_id: str) -> dict:
        """Returns: dict with keys: deleted (bool), error (optional)"""
        ...
