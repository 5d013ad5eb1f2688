"""Fake calendar: keeps events in memory."""

from datetime import datetime
from uuid import uuid4

from studio.calendar_sync.port import CalendarSink


class FakeCalendar(CalendarSink):
    def __init__(self):
        self.events: dict[str, dict] = {}
        self.should_succeed = True
        self.failure_reason = "Calendar API unavailable"

    def configure(self, should_succeed: bool = True, failure_reason: str = "Calendar API unavailable"):
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def create_event(
        self,
        summary: str,
        start_time: datetime,
        duration_minutes: int,
        location: str | None = None,
        attendee_id: str | None = None,
    ) -> dict:
        if not self.should_succeed:
            return {"event_id": None, "error": self.failure_reason}

        event_id = f"evt-{uuid4().hex[:10]}"
        self.events[event_id] = {
            "summary": summary,
            "start_time": start_time,
            "duration_minutes": duration_minutes,
            "location": location,
            "attendee_id": attendee_id,
        }
        return {"event_id": event_id}

    def update_event(self, event_id: str, start_time: datetime, duration_minutes: int) -> dict:
        if not self.should_succeed:
            return {"updated": False, "error": self.failure_reason}
        if event_id not in self.events:
            return {"updated": False, "error": f"Unknown event {event_id}"}
        self.events[event_id].update(start_time=start_time, duration_minutes=duration_minutes)
        return {"updated": True}

    def delete_event(self, event_id: str) -> dict:
        if not self.should_succeed:
            return {"deleted": False, "error": self.failure_reason}
        self.events.pop(event_id, None)
        return {"deleted": True}

    def reset(self):
        self.events.clear()
        self.should_succeed = True
        self.failure_reason = "Calendar API unavailable"
