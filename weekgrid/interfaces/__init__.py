"""Abstract interfaces for infrastructure abstraction."""

from weekgrid.interfaces.config_repository import IConfigRepository

__all__ = [
    "IConfigRepository",
]
