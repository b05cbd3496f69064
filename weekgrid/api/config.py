"""
Schedule config API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from weekgrid.api.deps import ConfigRepo
from weekgrid.core.exceptions import InfrastructureError
from weekgrid.models.schedule_config import ScheduleConfig, ScheduleConfigUpdate

router = APIRouter()


@router.get("", response_model=ScheduleConfig)
async def get_config(repo: ConfigRepo):
    try:
        return await repo.get()
    except InfrastructureError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e),
        )


@router.put("")
async def update_config(payload: ScheduleConfigUpdate, repo: ConfigRepo) -> dict:
    """Merge a partial config into the stored one."""
    try:
        await repo.update(payload)
    except InfrastructureError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e),
        )
    return {"success": True}
