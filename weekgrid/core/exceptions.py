"""
Custom exceptions for the application.
"""

from typing import Any, Optional


class WeekgridError(Exception):
    """Base exception for weekgrid."""

    def __init__(self, message: str, details: Optional[Any] = None):
        self.message = message
        self.details = details
        super().__init__(message)


class BusinessLogicError(WeekgridError):
    """Business logic constraint violation."""

    pass


class MalformedDependencyError(BusinessLogicError):
    """A task depends on an id that does not exist in its project."""

    def __init__(self, project: str, task_id: str, dependency_id: str):
        super().__init__(
            f"Task #{task_id} in '{project}' depends on unknown task #{dependency_id}",
            details={"project": project, "task_id": task_id, "dependency_id": dependency_id},
        )
        self.task_id = task_id
        self.dependency_id = dependency_id


class CyclicDependencyError(BusinessLogicError):
    """Task dependencies form a cycle."""

    def __init__(self, project: str, cycle: list[str]):
        path = " -> ".join(f"#{task_id}" for task_id in cycle)
        super().__init__(
            f"Circular dependency in '{project}': {path}",
            details={"project": project, "cycle": cycle},
        )
        self.cycle = cycle


class InfrastructureError(WeekgridError):
    """Infrastructure-related error (config file I/O, etc.)."""

    pass
