"""
Project model definitions.

Projects group dependency-ordered tasks parsed from a single document.
"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from weekgrid.models.enums import BlockType, Priority, ProjectRole


class Task(BaseModel):
    """A single project task."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(..., min_length=1, description="Task id, unique within the project")
    name: str
    duration: int = Field(..., gt=0, description="Duration in minutes")
    block_type: BlockType = Field(BlockType.ANY, alias="blockType")
    dependencies: list[str] = Field(
        default_factory=list,
        description="Ids of same-project tasks that must be placed first",
    )


class Project(BaseModel):
    """A project document with its tasks."""

    model_config = ConfigDict(populate_by_name=True)

    filename: str = Field(..., min_length=1, description="Document name without extension")
    project: str = Field(..., description="Display name")
    priority: Priority = Priority.MEDIUM
    deadline: Optional[date] = None
    tasks: list[Task] = Field(default_factory=list)
    role: Optional[ProjectRole] = Field(
        None,
        description="focus/buffer assignment; None means queued (not placed)",
    )

    @field_validator("tasks")
    @classmethod
    def _check_unique_ids(cls, tasks: list[Task]) -> list[Task]:
        seen: set[str] = set()
        for task in tasks:
            if task.id in seen:
                raise ValueError(f"Duplicate task id: #{task.id}")
            seen.add(task.id)
        return tasks

    @property
    def total_minutes(self) -> int:
        return sum(task.duration for task in self.tasks)
