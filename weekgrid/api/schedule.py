"""
Schedule API endpoints.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, HTTPException, status
from pydantic import Field

from weekgrid.api.deps import ConfigRepo, Scheduler
from weekgrid.core.exceptions import BusinessLogicError, InfrastructureError
from weekgrid.models.project import Project
from weekgrid.models.routine import Routine
from weekgrid.models.schedule import CamelModel, ExternalBooking, ScheduleEstimate, ScheduleResult
from weekgrid.models.schedule_config import ScheduleConfig

router = APIRouter()


class ScheduleRequest(CamelModel):
    projects: list[Project] = Field(default_factory=list)
    routines: list[Routine] = Field(default_factory=list)
    start_date: Optional[date] = None
    weeks: Optional[int] = Field(None, ge=0)
    existing_events: list[ExternalBooking] = Field(default_factory=list)


class EstimateRequest(CamelModel):
    projects: list[Project] = Field(default_factory=list)
    routines: list[Routine] = Field(default_factory=list)
    start_date: Optional[date] = None
    max_weeks: Optional[int] = Field(None, ge=1)
    existing_events: list[ExternalBooking] = Field(default_factory=list)


async def _load_config(repo) -> ScheduleConfig:
    try:
        return await repo.get()
    except InfrastructureError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e),
        )


@router.post("", response_model=ScheduleResult)
async def create_schedule(payload: ScheduleRequest, repo: ConfigRepo, scheduler: Scheduler):
    """
    Build a schedule from parsed projects and routines.

    Project roles come from each project's `role`, falling back to the stored
    focus/buffer lists. Weeks default to the stored `schedule_weeks`.
    """
    config = await _load_config(repo)
    weeks = payload.weeks if payload.weeks is not None else config.schedule_weeks
    try:
        return scheduler.create_schedule(
            config.assign_roles(payload.projects),
            payload.routines,
            config,
            payload.start_date or date.today(),
            weeks,
            existing_events=payload.existing_events,
        )
    except BusinessLogicError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )


@router.post("/estimate", response_model=ScheduleEstimate)
async def estimate_schedule(payload: EstimateRequest, repo: ConfigRepo, scheduler: Scheduler):
    """Find how many weeks are needed to place every project task."""
    config = await _load_config(repo)
    try:
        return scheduler.calculate_required_weeks(
            config.assign_roles(payload.projects),
            payload.routines,
            config,
            payload.start_date or date.today(),
            max_weeks=payload.max_weeks,
            existing_events=payload.existing_events,
        )
    except BusinessLogicError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )
