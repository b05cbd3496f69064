"""
Dependency injection for API endpoints.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from weekgrid.core.config import get_settings
from weekgrid.interfaces.config_repository import IConfigRepository
from weekgrid.services.scheduler_service import SchedulerService


@lru_cache()
def get_config_repository() -> IConfigRepository:
    """Get schedule config repository instance."""
    from weekgrid.infrastructure.local.config_repository import LocalConfigRepository

    return LocalConfigRepository(get_settings().CONFIG_PATH)


@lru_cache()
def get_scheduler_service() -> SchedulerService:
    """Get scheduler service configured from settings."""
    settings = get_settings()
    return SchedulerService(
        max_estimate_weeks=settings.MAX_ESTIMATE_WEEKS,
        strict_dependencies=settings.STRICT_DEPENDENCIES,
    )


ConfigRepo = Annotated[IConfigRepository, Depends(get_config_repository)]
Scheduler = Annotated[SchedulerService, Depends(get_scheduler_service)]
