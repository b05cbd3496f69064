"""
Project document parser.

A project document is Markdown with optional frontmatter and task lines:

    ---
    project: Instagram Auto Content
    priority: high
    deadline: 2025-01-15
    ---
    - [ ] #1 API research | 1h | short
    - [ ] #2 OAuth integration | 2.5h | long | after:#1
"""

import re
from datetime import date
from typing import Optional

from weekgrid.core.logger import setup_logger
from weekgrid.models.enums import BlockType, Priority
from weekgrid.models.project import Project, Task
from weekgrid.utils.markdown_utils import parse_duration, split_frontmatter, strip_extension

logger = setup_logger(__name__)

TASK_RE = re.compile(
    r"^- \[ \] #(\d+)\s+(.+?)\s*\|\s*(\d+(?:\.\d+)?[hm])"
    r"\s*(?:\|\s*(short|long|any))?"
    r"\s*(?:\|\s*after:(#[\d,#\s]+))?$"
)


def _parse_dependencies(value: Optional[str]) -> list[str]:
    if not value:
        return []
    return [dep.strip().lstrip("#") for dep in value.split(",") if dep.strip().lstrip("#")]


def _parse_priority(value: Optional[str]) -> Priority:
    try:
        return Priority((value or "").strip().lower())
    except ValueError:
        return Priority.MEDIUM


def _parse_deadline(value: Optional[str], filename: str) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        logger.warning(f"Ignoring malformed deadline {value!r} in {filename}")
        return None


def parse_project(content: str, filename: str) -> Project:
    """
    Parse a project document.

    Lines that do not match the task format (checked boxes, missing id or
    duration, zero durations) are skipped, as are repeats of an earlier id.
    """
    frontmatter, body = split_frontmatter(content)
    doc_id = strip_extension(filename)

    tasks: list[Task] = []
    seen: set[str] = set()
    for line in body.splitlines():
        match = TASK_RE.match(line.strip())
        if not match:
            continue
        task_id, name, duration, block_type, dependencies = match.groups()
        minutes = parse_duration(duration)
        if not minutes:
            continue
        if task_id in seen:
            logger.warning(f"Skipping duplicate task #{task_id} in {filename}")
            continue
        seen.add(task_id)
        tasks.append(
            Task(
                id=task_id,
                name=name.strip(),
                duration=minutes,
                block_type=BlockType(block_type) if block_type else BlockType.ANY,
                dependencies=_parse_dependencies(dependencies),
            )
        )

    return Project(
        filename=doc_id,
        project=frontmatter.get("project") or doc_id,
        priority=_parse_priority(frontmatter.get("priority")),
        deadline=_parse_deadline(frontmatter.get("deadline"), filename),
        tasks=tasks,
    )
