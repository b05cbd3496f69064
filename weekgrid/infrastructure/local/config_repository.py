"""
JSON file implementation of the schedule config repository.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from weekgrid.core.config import get_settings
from weekgrid.core.exceptions import InfrastructureError
from weekgrid.core.logger import setup_logger
from weekgrid.interfaces.config_repository import IConfigRepository
from weekgrid.models.schedule_config import (
    ScheduleConfig,
    ScheduleConfigUpdate,
    default_schedule_config,
)

logger = setup_logger(__name__)


class LocalConfigRepository(IConfigRepository):
    """
    Stores the schedule config as a single JSON document on disk.

    A missing file reads as the default config; the file is only created on
    the first update.
    """

    def __init__(self, path: Optional[str] = None):
        """
        Initialize the repository.

        Args:
            path: JSON file location (default: CONFIG_PATH setting)
        """
        self.path = Path(path or get_settings().CONFIG_PATH)

    async def get(self) -> ScheduleConfig:
        if not self.path.exists():
            settings = get_settings()
            return default_schedule_config(
                schedule_weeks=settings.DEFAULT_SCHEDULE_WEEKS,
                calendar_id=settings.CALENDAR_ID,
            )
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            return ScheduleConfig.model_validate(raw or {})
        except (OSError, json.JSONDecodeError, PydanticValidationError) as e:
            raise InfrastructureError(f"Failed to read config {self.path}: {e}") from e

    async def update(self, update: ScheduleConfigUpdate) -> ScheduleConfig:
        current = await self.get()
        data = current.model_dump()
        data.update(update.model_dump(exclude_unset=True, exclude_none=True))
        config = ScheduleConfig.model_validate(data)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                json.dumps(config.model_dump(mode="json"), indent=2, ensure_ascii=False),
                encoding="utf-8",
            )
        except OSError as e:
            raise InfrastructureError(f"Failed to write config {self.path}: {e}") from e
        logger.info(f"Saved schedule config to {self.path}")
        return config
