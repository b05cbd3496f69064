"""
Time grid construction.

Expands weekly availability into concrete dated slots and subtracts
pre-existing calendar bookings from them before any placement happens.
"""

from datetime import date, timedelta

from weekgrid.core.logger import setup_logger
from weekgrid.models.enums import Weekday
from weekgrid.models.schedule import ExternalBooking, TimeSlot
from weekgrid.models.schedule_config import ScheduleConfig
from weekgrid.utils.time_utils import (
    MINUTES_PER_DAY,
    is_hhmm,
    overlap_minutes,
    parse_calendar_moment,
    time_to_minutes,
)

logger = setup_logger(__name__)


def date_range(start_date: date, weeks: int) -> list[date]:
    """All dates in [start_date, start_date + 7 * weeks)."""
    return [start_date + timedelta(days=offset) for offset in range(max(0, weeks) * 7)]


def build_time_slots(config: ScheduleConfig, start_date: date, weeks: int) -> list[TimeSlot]:
    """
    Build the ordered slot list for a horizon.

    Slots are ordered by date, then by the declaration order of the weekday's
    windows. Windows are not re-sorted.

    Args:
        config: Schedule configuration holding per-weekday windows
        start_date: First date of the horizon (inclusive)
        weeks: Horizon length in whole weeks; 0 yields no slots

    Returns:
        Fresh TimeSlot objects with nothing consumed
    """
    slots: list[TimeSlot] = []
    for day in date_range(start_date, weeks):
        for window in config.windows_for(Weekday.from_date(day)):
            slots.append(
                TimeSlot(date=day, start=window.start, end=window.end, type=window.type)
            )
    return slots


def booking_intervals(booking: ExternalBooking) -> list[tuple[date, int, int]]:
    """
    Resolve a booking to per-date (date, start minute, end minute) intervals.

    "HH:MM" bookings need `booking.date`; without it they resolve to nothing.
    Date-only (all-day) bookings cover every date up to their exclusive end
    date. Datetime bookings running past midnight are split per date.
    """
    if is_hhmm(booking.start) and is_hhmm(booking.end):
        if booking.date is None:
            return []
        return [(booking.date, time_to_minutes(booking.start), time_to_minutes(booking.end))]

    start_day, start_minutes = parse_calendar_moment(booking.start)
    end_day, end_minutes = parse_calendar_moment(booking.end)

    if start_minutes is None:
        last_day = max(start_day, end_day - timedelta(days=1))
        return [
            (start_day + timedelta(days=offset), 0, MINUTES_PER_DAY)
            for offset in range((last_day - start_day).days + 1)
        ]

    intervals = []
    day, begin = start_day, start_minutes
    while day < end_day:
        intervals.append((day, begin, MINUTES_PER_DAY))
        day, begin = day + timedelta(days=1), 0
    if end_minutes > begin:
        intervals.append((day, begin, end_minutes))
    return intervals


def subtract_bookings(slots: list[TimeSlot], bookings: list[ExternalBooking]) -> int:
    """
    Reduce slot capacity by the overlap with external bookings.

    Each overlapping slot's `used` grows by exactly the overlap clipped to the
    slot bounds, never past the slot's duration. Bookings on dates without
    slots have no effect.

    Returns:
        Total minutes subtracted
    """
    slots_by_date: dict[date, list[TimeSlot]] = {}
    for slot in slots:
        slots_by_date.setdefault(slot.date, []).append(slot)

    subtracted = 0
    for booking in bookings:
        for day, start, end in booking_intervals(booking):
            for slot in slots_by_date.get(day, []):
                overlap = overlap_minutes(slot.start_minutes, slot.end_minutes, start, end)
                if overlap <= 0:
                    continue
                taken = min(overlap, slot.remaining)
                slot.used += taken
                subtracted += taken

    if bookings:
        logger.debug(
            f"Subtracted {subtracted} min of external bookings "
            f"({len(bookings)} bookings, {len(slots)} slots)"
        )
    return subtracted
