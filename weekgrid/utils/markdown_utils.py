"""
Helpers shared by the project and routine document parsers.
"""

import re
from typing import Optional

FRONTMATTER_RE = re.compile(r"^---\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|$)", re.DOTALL)
DURATION_RE = re.compile(r"^(\d+(?:\.\d+)?)([hm])$")


def split_frontmatter(content: str) -> tuple[dict[str, str], str]:
    """
    Split a document into its `key: value` frontmatter and body.

    Only flat string values are supported. Documents without frontmatter
    return an empty dict and the full content as body.
    """
    match = FRONTMATTER_RE.match(content)
    if not match:
        return {}, content

    fields: dict[str, str] = {}
    for line in match.group(1).splitlines():
        key, sep, value = line.partition(":")
        if not sep:
            continue
        fields[key.strip()] = value.strip()
    return fields, content[match.end():]


def parse_duration(value: str) -> Optional[int]:
    """
    Convert "1.5h" / "45m" to minutes.

    Returns:
        Minutes rounded to the nearest integer, or None if malformed
    """
    match = DURATION_RE.match(value.strip())
    if not match:
        return None
    amount = float(match.group(1))
    minutes = amount * 60 if match.group(2) == "h" else amount
    return int(minutes + 0.5)


def strip_extension(filename: str) -> str:
    """Document id from its filename ("my-project.md" -> "my-project")."""
    return re.sub(r"\.md$", "", filename)
