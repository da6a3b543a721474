"""
Line classification for semi-structured text dumps (template definitions,
instructions). Classification is heuristic; anything unexpected is plain text.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum


class LineKind(str, Enum):
    BLANK = "blank"
    BANNER = "banner"
    SUBHEADER = "subheader"
    BULLET = "bullet"
    KEY_VALUE = "key_value"
    TEXT = "text"


BANNER_PATTERN = re.compile(r"^TEMPLATE\s+\d+\s*\((?:PAGE|Page)\s+\d+\s*:\s*[A-Z0-9][A-Z0-9 _&/'-]*\)$")
SUBHEADER_PATTERN = re.compile(r"^[a-z_]+:$")


@dataclass(frozen=True)
class ClassifiedLine:
    kind: LineKind
    text: str
    value: str = ""
    indent: int = 0


def classify_line(raw) -> ClassifiedLine:
    line = str(raw if raw is not None else "").rstrip()
    stripped = line.strip()
    if not stripped:
        return ClassifiedLine(LineKind.BLANK, "")
    if BANNER_PATTERN.match(stripped):
        return ClassifiedLine(LineKind.BANNER, stripped)
    if SUBHEADER_PATTERN.match(stripped):
        return ClassifiedLine(LineKind.SUBHEADER, stripped[:-1])
    if stripped.startswith("-"):
        indent = len(line.expandtabs(4)) - len(line.expandtabs(4).lstrip())
        return ClassifiedLine(LineKind.BULLET, stripped[1:].strip(), indent=indent)
    if ": " in stripped and not stripped.endswith(":"):
        key, value = stripped.split(": ", 1)
        if key.strip():
            return ClassifiedLine(LineKind.KEY_VALUE, key.strip(), value=value.strip())
    return ClassifiedLine(LineKind.TEXT, stripped)
