"""Pydantic models (schemas) for the application."""

from weekgrid.models.enums import (
    AlternativeReason,
    BlockType,
    EventType,
    Priority,
    ProjectRole,
    SlotType,
    Weekday,
)
from weekgrid.models.project import Project, Task
from weekgrid.models.routine import Routine, RoutineTask
from weekgrid.models.schedule import (
    DaySchedule,
    ExternalBooking,
    RoutineAlternative,
    ScheduledEvent,
    ScheduleEstimate,
    ScheduleResult,
    ScheduleSummary,
    TimeSlot,
    UnscheduledTask,
)
from weekgrid.models.schedule_config import (
    AvailabilityWindow,
    ScheduleConfig,
    ScheduleConfigUpdate,
)

__all__ = [
    # Enums
    "AlternativeReason",
    "BlockType",
    "EventType",
    "Priority",
    "ProjectRole",
    "SlotType",
    "Weekday",
    # Documents
    "Project",
    "Task",
    "Routine",
    "RoutineTask",
    # Schedule
    "DaySchedule",
    "ExternalBooking",
    "RoutineAlternative",
    "ScheduledEvent",
    "ScheduleEstimate",
    "ScheduleResult",
    "ScheduleSummary",
    "TimeSlot",
    "UnscheduledTask",
    # Config
    "AvailabilityWindow",
    "ScheduleConfig",
    "ScheduleConfigUpdate",
]
