"""
Schedule configuration models.

Weekly availability windows and project role assignments. Legacy availability
entries written as bare "HH:MM-HH:MM" strings are normalized here so the
scheduler only ever sees AvailabilityWindow objects.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from weekgrid.models.enums import ProjectRole, SlotType, Weekday
from weekgrid.models.project import Project
from weekgrid.utils.time_utils import normalize_hhmm, parse_time_range, time_to_minutes


class AvailabilityWindow(BaseModel):
    """A recurring time-of-day window on one weekday."""

    start: str
    end: str
    type: SlotType = SlotType.ANY

    @model_validator(mode="before")
    @classmethod
    def _from_legacy(cls, data: Any) -> Any:
        if isinstance(data, str):
            start, end = parse_time_range(data)
            return {"start": start, "end": end, "type": SlotType.ANY}
        if isinstance(data, dict) and "time" in data and "start" not in data:
            start, end = parse_time_range(data["time"])
            return {"start": start, "end": end, "type": data.get("type", SlotType.ANY)}
        return data

    @field_validator("start", "end")
    @classmethod
    def _pad_clock(cls, value: str) -> str:
        return normalize_hhmm(value)

    @model_validator(mode="after")
    def _check_order(self) -> "AvailabilityWindow":
        if time_to_minutes(self.end) <= time_to_minutes(self.start):
            raise ValueError(f"Window ends before it starts: {self.start}-{self.end}")
        return self

    @property
    def duration(self) -> int:
        return time_to_minutes(self.end) - time_to_minutes(self.start)


class ScheduleConfig(BaseModel):
    """User schedule configuration."""

    available: dict[Weekday, list[AvailabilityWindow]] = Field(default_factory=dict)
    focus: list[str] = Field(default_factory=list, description="Focus project filenames")
    buffer: list[str] = Field(default_factory=list, description="Buffer project filenames")
    queue: list[str] = Field(default_factory=list, description="Projects waiting for a role")
    schedule_weeks: int = Field(2, ge=0)
    calendar_id: str = "primary"

    @field_validator("focus", "buffer", "queue", mode="before")
    @classmethod
    def _single_to_list(cls, value: Any) -> Any:
        if value is None or value == "":
            return []
        if isinstance(value, str):
            return [value]
        return value

    @field_validator("available", mode="before")
    @classmethod
    def _none_days_to_empty(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {day: windows or [] for day, windows in value.items()}
        return value

    def windows_for(self, weekday: Weekday) -> list[AvailabilityWindow]:
        return self.available.get(weekday, [])

    def role_for(self, filename: str) -> Optional[ProjectRole]:
        """Configured role of a project; focus wins when listed in both."""
        if filename in self.focus:
            return ProjectRole.FOCUS
        if filename in self.buffer:
            return ProjectRole.BUFFER
        return None

    def assign_roles(self, projects: list[Project]) -> list[Project]:
        """Fill in missing project roles from the focus/buffer lists."""
        assigned = []
        for project in projects:
            if project.role is None:
                role = self.role_for(project.filename)
                if role is not None:
                    project = project.model_copy(update={"role": role})
            assigned.append(project)
        return assigned


class ScheduleConfigUpdate(BaseModel):
    """Partial update of the schedule configuration."""

    available: Optional[dict[Weekday, list[AvailabilityWindow]]] = None
    focus: Optional[list[str]] = None
    buffer: Optional[list[str]] = None
    queue: Optional[list[str]] = None
    schedule_weeks: Optional[int] = Field(None, ge=0)
    calendar_id: Optional[str] = None

    @field_validator("focus", "buffer", "queue", mode="before")
    @classmethod
    def _single_to_list(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [value] if value else []
        return value


def default_schedule_config(schedule_weeks: int = 2, calendar_id: str = "primary") -> ScheduleConfig:
    """Starter availability: short weekday mornings and lunches, evenings, late weekends."""
    weekday_windows = [
        {"time": "09:00-10:00", "type": SlotType.ANY},
        {"time": "13:00-14:00", "type": SlotType.ANY},
        {"time": "19:00-23:00", "type": SlotType.ANY},
    ]
    return ScheduleConfig(
        available={
            Weekday.MON: [{"time": "09:00-10:00", "type": SlotType.ANY}],
            Weekday.TUE: weekday_windows,
            Weekday.WED: weekday_windows,
            Weekday.THU: weekday_windows,
            Weekday.FRI: weekday_windows,
            Weekday.SAT: [{"time": "21:00-24:00", "type": SlotType.ANY}],
            Weekday.SUN: [{"time": "21:00-24:00", "type": SlotType.ANY}],
        },
        schedule_weeks=schedule_weeks,
        calendar_id=calendar_id,
    )
