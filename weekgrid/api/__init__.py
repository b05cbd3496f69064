"""API routers."""

from weekgrid.api import calendar, config, parse, schedule

__all__ = [
    "calendar",
    "config",
    "parse",
    "schedule",
]
