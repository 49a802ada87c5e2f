"""
Parse the declared-requirements metadata of a source distribution.
"""

from __future__ import annotations

import re
from typing import List

from .exceptions import RequirementParseError
from .models import Requirement


REQUIREMENT_RE = re.compile(
    r"(?P<name>[A-Za-z0-9._-]+)"
    r"(?:\[(?P<extra>[A-Za-z0-9._-]+)\])?"
    r"\s*(?:(?P<op>==|>=|>)\s*(?P<version>[0-9.]+))?"
)


def parse_requirement(line: str) -> Requirement:
    """Parse one requirement line such as ``requests[security] >= 2.0``.

    The whole line, surrounding whitespace aside, has to follow the grammar;
    anything left over is an error rather than being dropped.
    """
    text = line.strip()
    match = REQUIREMENT_RE.fullmatch(text)
    if match is None:
        raise RequirementParseError(line)
    return Requirement(
        name=match.group("name"),
        extra=match.group("extra"),
        op=match.group("op"),
        version=match.group("version"),
    )


def parse_requirements(text: str) -> List[Requirement]:
    """Parse every non-empty line of a requirements file, all or nothing."""
    return [parse_requirement(line) for line in text.splitlines() if line.strip()]
