"""
Schedule models for slot allocation inputs and outputs.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from weekgrid.models.enums import AlternativeReason, EventType, SlotType, Weekday
from weekgrid.utils.time_utils import (
    is_hhmm,
    minutes_to_time,
    normalize_hhmm,
    parse_calendar_moment,
    time_to_minutes,
)


class CamelModel(BaseModel):
    """Base for models exchanged with the client (camelCase on the wire)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


@dataclass
class TimeSlot:
    """
    One availability window on one concrete date.

    Mutable during a single scheduling run: `used` grows with every placement
    and with every subtracted external booking, never beyond `duration`.
    """

    date: dt.date
    start: str
    end: str
    type: SlotType = SlotType.ANY
    used: int = 0

    @property
    def start_minutes(self) -> int:
        return time_to_minutes(self.start)

    @property
    def end_minutes(self) -> int:
        return time_to_minutes(self.end)

    @property
    def duration(self) -> int:
        return self.end_minutes - self.start_minutes

    @property
    def remaining(self) -> int:
        return self.duration - self.used

    def can_fit(self, minutes: int) -> bool:
        return self.remaining >= minutes

    def consume(self, minutes: int) -> tuple[str, str]:
        """
        Carve `minutes` off the free end of the slot.

        Returns:
            (start, end) clock times of the carved interval

        Raises:
            ValueError: If the slot does not have enough remaining capacity
        """
        if not self.can_fit(minutes):
            raise ValueError(
                f"Slot {self.date} {self.start}-{self.end} has {self.remaining} min left, "
                f"{minutes} requested"
            )
        begin = self.start_minutes + self.used
        self.used += minutes
        return minutes_to_time(begin), minutes_to_time(begin + minutes)


class ExternalBooking(CamelModel):
    """
    A pre-existing calendar entry that blocks time.

    `start`/`end` are either both "HH:MM" (then `date` is required for the
    booking to block anything) or both ISO datetimes or both ISO dates, as
    returned by a calendar API. The end may not come before the start.
    """

    start: str
    end: str
    date: Optional[dt.date] = None
    title: Optional[str] = None

    @field_validator("start", "end")
    @classmethod
    def _pad_clock(cls, value: str) -> str:
        value = value.strip()
        return normalize_hhmm(value) if is_hhmm(value) else value

    @model_validator(mode="after")
    def _check_bounds(self) -> ExternalBooking:
        span = f"{self.start} -> {self.end}"
        clock_start, clock_end = is_hhmm(self.start), is_hhmm(self.end)
        if clock_start != clock_end:
            raise ValueError(f"Booking mixes a clock time with a timestamp: {span}")
        if clock_start:
            if time_to_minutes(self.end) <= time_to_minutes(self.start):
                raise ValueError(f"Booking must end after it starts: {span}")
            return self

        start_day, start_minutes = parse_calendar_moment(self.start)
        end_day, end_minutes = parse_calendar_moment(self.end)
        if (start_minutes is None) != (end_minutes is None):
            raise ValueError(f"Booking mixes an all-day date with a datetime: {span}")
        if (end_day, end_minutes or 0) < (start_day, start_minutes or 0):
            raise ValueError(f"Booking ends before it starts: {span}")
        return self


class ScheduledEvent(CamelModel):
    """A placed routine occurrence or project task (part)."""

    start: str
    end: str
    title: str
    type: EventType
    source: str = Field(..., description="Owning project/routine filename")
    task_id: Optional[str] = None

    @property
    def duration(self) -> int:
        return time_to_minutes(self.end) - time_to_minutes(self.start)


class DaySchedule(CamelModel):
    """Time-ordered events of one date."""

    date: dt.date
    events: list[ScheduledEvent] = Field(default_factory=list)


class RoutineAlternative(CamelModel):
    """A routine occurrence placed away from its preferred day/time."""

    routine_name: str
    original_day: Weekday
    original_date: dt.date
    original_time: str = Field(..., description="Resolved preferred time or 'any'")
    scheduled_day: Weekday
    scheduled_date: dt.date
    scheduled_time: str
    reason: AlternativeReason


class UnscheduledTask(CamelModel):
    """Project task left out of the schedule, with reason."""

    source: str
    task_id: str
    reason: str = Field(..., description="queued | dependency_unscheduled | no_slot")


class ScheduleSummary(CamelModel):
    """Aggregate counts of a scheduling run (project tasks only)."""

    total_tasks: int = 0
    scheduled_tasks: int = 0
    unscheduled_tasks: int = 0
    total_hours: float = 0.0


class ScheduleResult(CamelModel):
    """Full scheduling result."""

    schedule: list[DaySchedule] = Field(default_factory=list)
    summary: ScheduleSummary = Field(default_factory=ScheduleSummary)
    routine_alternatives: list[RoutineAlternative] = Field(default_factory=list)
    unscheduled: list[UnscheduledTask] = Field(default_factory=list)


class ScheduleEstimate(CamelModel):
    """Minimal horizon needed to place every project task."""

    required_weeks: int
    total_tasks: int
    total_hours: float
