"""
Routine models.

Routines are recurring tasks with a weekday pattern and an optional preferred time.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from weekgrid.models.enums import WEEKDAYS, WEEKEND, WORKDAYS, Priority, Weekday
from weekgrid.utils.time_utils import is_hhmm, normalize_hhmm

PREFERRED_TIME_KEYWORDS = {
    "morning": "09:00",
    "afternoon": "13:00",
    "evening": "19:00",
}

REPEAT_KEYWORDS: dict[str, tuple[Weekday, ...]] = {
    "daily": WEEKDAYS,
    "weekdays": WORKDAYS,
    "weekends": WEEKEND,
}


def expand_repeat(values: list[str]) -> list[Weekday]:
    """
    Normalize a recurrence pattern into explicit weekdays.

    Accepts day names in any case ("mon", "Mon") and the shorthand
    keywords daily/weekdays/weekends. Order follows Mon..Sun.

    Raises:
        ValueError: If a value is not a day name or keyword
    """
    days: set[Weekday] = set()
    for raw in values:
        if isinstance(raw, Weekday):
            days.add(raw)
            continue
        token = str(raw).strip()
        if not token:
            continue
        keyword = REPEAT_KEYWORDS.get(token.lower())
        if keyword:
            days.update(keyword)
            continue
        days.add(Weekday(token[:1].upper() + token[1:].lower()))
    return [day for day in WEEKDAYS if day in days]


class RoutineTask(BaseModel):
    """A recurring routine task."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str = Field(..., min_length=1)
    duration: int = Field(..., gt=0, description="Duration in minutes")
    repeat: list[Weekday] = Field(default_factory=list, description="Weekdays it recurs on")
    preferred_time: Optional[str] = Field(
        None,
        alias="preferredTime",
        description="HH:MM or morning/afternoon/evening",
    )

    @field_validator("repeat", mode="before")
    @classmethod
    def _expand_repeat(cls, value):
        if isinstance(value, str):
            value = value.split(",")
        return expand_repeat(list(value))

    @field_validator("preferred_time")
    @classmethod
    def _check_preferred_time(cls, value: Optional[str]) -> Optional[str]:
        if value is None or value == "":
            return None
        if value in PREFERRED_TIME_KEYWORDS:
            return value
        if is_hhmm(value):
            return normalize_hhmm(value)
        raise ValueError(f"Invalid preferred time: {value!r}")

    @property
    def resolved_time(self) -> Optional[str]:
        """Preferred time as HH:MM, with symbolic keywords resolved."""
        if self.preferred_time is None:
            return None
        return PREFERRED_TIME_KEYWORDS.get(self.preferred_time, self.preferred_time)


class Routine(BaseModel):
    """A routine document."""

    filename: str = Field(..., min_length=1)
    name: str
    priority: Priority = Priority.MEDIUM
    tasks: list[RoutineTask] = Field(default_factory=list)
