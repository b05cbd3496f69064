"""
Enum definitions for the application.

These enums are used across models and provide type-safe values for
priorities, slot eligibility and event categories.
"""

from enum import Enum


class Priority(str, Enum):
    """Project/routine priority. Sort order is HIGH, MEDIUM, LOW."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {Priority.HIGH: 0, Priority.MEDIUM: 1, Priority.LOW: 2}


class BlockType(str, Enum):
    """
    Slot size a task is suited for.

    LONG = needs a slot with at least 3 hours of free time
    SHORT / ANY = fits anywhere with enough capacity
    """

    SHORT = "short"
    LONG = "long"
    ANY = "any"


class SlotType(str, Enum):
    """Which placement category may consume an availability window."""

    ROUTINE = "routine"
    PROJECT = "project"
    ANY = "any"

    def allows_routines(self) -> bool:
        return self in (SlotType.ROUTINE, SlotType.ANY)

    def allows_projects(self) -> bool:
        return self in (SlotType.PROJECT, SlotType.ANY)


class ProjectRole(str, Enum):
    """Placement pass a project takes part in."""

    FOCUS = "focus"
    BUFFER = "buffer"


class EventType(str, Enum):
    """Category tag of a scheduled event."""

    ROUTINE = "routine"
    FOCUS = "focus"
    BUFFER = "buffer"


class AlternativeReason(str, Enum):
    """Why a routine occurrence left its preferred day/time."""

    SLOT_FULL = "slot_full"  # same day, different time
    NO_SLOT = "no_slot"  # different day


class Weekday(str, Enum):
    """Weekday keys used by availability windows and routine recurrence."""

    MON = "Mon"
    TUE = "Tue"
    WED = "Wed"
    THU = "Thu"
    FRI = "Fri"
    SAT = "Sat"
    SUN = "Sun"

    @classmethod
    def from_date(cls, day) -> "Weekday":
        """Weekday of a `datetime.date` (Monday == 0 in Python)."""
        return _WEEKDAYS_BY_INDEX[day.weekday()]


_WEEKDAYS_BY_INDEX = list(Weekday)

WEEKDAYS: tuple[Weekday, ...] = tuple(Weekday)
WORKDAYS: tuple[Weekday, ...] = WEEKDAYS[:5]
WEEKEND: tuple[Weekday, ...] = WEEKDAYS[5:]
