"""
Routine document parser.

A routine document declares `type: routine` in its frontmatter:

    ---
    type: routine
    name: Daily Workout
    ---
    - [ ] Morning Exercise | 1h | weekdays | 09:00
    - [ ] Stretch | 30m | Mon,Thu | evening
"""

import re

from weekgrid.core.logger import setup_logger
from weekgrid.models.enums import Priority
from weekgrid.models.routine import Routine, RoutineTask, expand_repeat
from weekgrid.utils.markdown_utils import parse_duration, split_frontmatter, strip_extension

logger = setup_logger(__name__)

ROUTINE_RE = re.compile(
    r"^- \[ \] (.+?)\s*\|\s*(\d+(?:\.\d+)?[hm])\s*\|\s*([a-zA-Z][a-zA-Z,\s]*?)"
    r"\s*(?:\|\s*(\d{2}:\d{2}|morning|afternoon|evening))?$"
)


def is_routine_document(content: str) -> bool:
    """Check whether a document's frontmatter marks it as a routine."""
    frontmatter, _ = split_frontmatter(content)
    return frontmatter.get("type", "").strip().lower() == "routine"


def parse_routine(content: str, filename: str) -> Routine:
    """
    Parse a routine document.

    Lines with an unknown day name or malformed duration are skipped.
    """
    frontmatter, body = split_frontmatter(content)
    doc_id = strip_extension(filename)

    tasks: list[RoutineTask] = []
    for line in body.splitlines():
        match = ROUTINE_RE.match(line.strip())
        if not match:
            continue
        name, duration, repeat, preferred_time = match.groups()
        minutes = parse_duration(duration)
        if not minutes:
            continue
        try:
            days = expand_repeat(repeat.split(","))
        except ValueError:
            logger.warning(f"Skipping routine line with unknown days {repeat!r} in {filename}")
            continue
        tasks.append(
            RoutineTask(
                name=name.strip(),
                duration=minutes,
                repeat=days,
                preferred_time=preferred_time,
            )
        )

    try:
        priority = Priority((frontmatter.get("priority") or "").lower())
    except ValueError:
        priority = Priority.MEDIUM

    return Routine(
        filename=doc_id,
        name=frontmatter.get("name") or doc_id,
        priority=priority,
        tasks=tasks,
    )
