"""
Calendar hand-off API endpoints.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, status
from pydantic import Field

from weekgrid.api.deps import ConfigRepo
from weekgrid.core.config import get_settings
from weekgrid.core.exceptions import InfrastructureError
from weekgrid.models.schedule import CamelModel, DaySchedule, ExternalBooking
from weekgrid.services.calendar_export import bookings_from_calendar_events, build_calendar_events

router = APIRouter()


class CalendarExportRequest(CamelModel):
    schedule: list[DaySchedule] = Field(default_factory=list)


class CalendarImportRequest(CamelModel):
    events: list[dict[str, Any]] = Field(default_factory=list)


@router.post("/events")
async def export_events(payload: CalendarExportRequest, repo: ConfigRepo) -> dict:
    """Convert a schedule into calendar insert payloads."""
    try:
        config = await repo.get()
    except InfrastructureError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e),
        )
    return {
        "calendarId": config.calendar_id,
        "events": build_calendar_events(payload.schedule, get_settings().CALENDAR_TIMEZONE),
    }


@router.post("/bookings", response_model=list[ExternalBooking])
async def import_bookings(payload: CalendarImportRequest):
    """Convert listed calendar events into bookings for `existingEvents`."""
    return bookings_from_calendar_events(payload.events)
