"""
Schedule config repository interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from weekgrid.models.schedule_config import ScheduleConfig, ScheduleConfigUpdate


class IConfigRepository(ABC):
    @abstractmethod
    async def get(self) -> ScheduleConfig:
        """Return the stored config, or the default when nothing is stored."""
        pass

    @abstractmethod
    async def update(self, update: ScheduleConfigUpdate) -> ScheduleConfig:
        """Merge the set fields of `update` into the stored config."""
        pass
