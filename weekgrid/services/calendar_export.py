"""
Calendar hand-off adapters.

Converts between the scheduler's records and the event shapes used by
Google Calendar style APIs. No network calls are made here.
"""

from datetime import datetime, timedelta
from typing import Any

from pydantic import ValidationError

from weekgrid.core.logger import setup_logger
from weekgrid.models.enums import EventType
from weekgrid.models.schedule import DaySchedule, ExternalBooking, ScheduledEvent

logger = setup_logger(__name__)

# Calendar color ids per event category (blue / green / yellow)
EVENT_COLORS = {
    EventType.ROUTINE: "1",
    EventType.FOCUS: "2",
    EventType.BUFFER: "5",
}


def _local_datetime(day, clock: str) -> str:
    """ISO local datetime; "24:00" rolls over to midnight of the next day."""
    if clock == "24:00":
        return datetime.combine(day + timedelta(days=1), datetime.min.time()).isoformat()
    hours, minutes = (int(part) for part in clock.split(":"))
    return datetime(day.year, day.month, day.day, hours, minutes).isoformat()


def to_calendar_event(day, event: ScheduledEvent, timezone: str) -> dict[str, Any]:
    """Build the insert payload for one scheduled event."""
    description = f"Source: {event.source}"
    if event.task_id:
        description += f" | Task #{event.task_id}"
    return {
        "summary": event.title,
        "description": description,
        "start": {"dateTime": _local_datetime(day, event.start), "timeZone": timezone},
        "end": {"dateTime": _local_datetime(day, event.end), "timeZone": timezone},
        "colorId": EVENT_COLORS[event.type],
    }


def build_calendar_events(schedule: list[DaySchedule], timezone: str) -> list[dict[str, Any]]:
    """Flatten a schedule into calendar insert payloads, in schedule order."""
    payloads = [
        to_calendar_event(day.date, event, timezone)
        for day in schedule
        for event in day.events
    ]
    logger.info(f"Prepared {len(payloads)} calendar events from {len(schedule)} days")
    return payloads


def bookings_from_calendar_events(events: list[dict[str, Any]]) -> list[ExternalBooking]:
    """
    Turn listed calendar events into bookings for capacity subtraction.

    Accepts both flat `{start, end}` strings and API-style
    `{start: {dateTime|date}, end: {...}}` objects. Events without a usable
    start or end, or whose bounds do not form a valid booking, are skipped.
    """
    bookings = []
    for item in events:
        start = _moment(item.get("start"))
        end = _moment(item.get("end"))
        if not start or not end:
            logger.debug(f"Skipping calendar event without start/end: {item.get('id')}")
            continue
        try:
            booking = ExternalBooking(
                start=start, end=end, title=item.get("title") or item.get("summary")
            )
        except ValidationError as e:
            logger.warning(f"Skipping calendar event {item.get('id')}: {e.errors()[0]['msg']}")
            continue
        bookings.append(booking)
    return bookings


def _moment(value: Any) -> str:
    if isinstance(value, dict):
        return value.get("dateTime") or value.get("date") or ""
    return value or ""
