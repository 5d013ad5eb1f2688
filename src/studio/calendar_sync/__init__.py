"""Calendar sink registry. FakeCalendar unless CALENDAR_ADAPTER says otherwise."""

import os

from studio.calendar_sync.port import CalendarSink

_calendar_instance: CalendarSink | None = None


def get_calendar() -> CalendarSink:
    global _calendar_instance
    if _calendar_instance is None:
        adapter = os.environ.get("CALENDAR_ADAPTER", "fake")
        if adapter == "fake":
            from studio.calendar_sync.fake_adapter import FakeCalendar

            _calendar_instance = FakeCalendar()
        else:
            raise ValueError(f"Unknown calendar adapter: {adapter}")
    return _calendar_instance


def set_calendar(calendar: CalendarSink) -> None:
    global _calendar_instance
    _calendar_instance = calendar


def reset_calendar() -> None:
    global _calendar_instance
    _calendar_instance = None
