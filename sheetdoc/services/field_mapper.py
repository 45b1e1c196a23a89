from __future__ import annotations

import math
import re
from collections.abc import Mapping, Sequence
from typing import Any

"""Field resolution via prioritized synonym lookup.

``find_value`` is the single point that absorbs header naming variance between uploader
conventions (Thai only / bilingual / English only). It never raises.
"""

__all__ = [
    "find_value",
    "map_fields",
    "strip_unit_prefix",
    "split_code_description",
]

# "หน่วยที่ 3: ชื่อ" / "Unit 3: Name" (ASCII or full-width colon)
UNIT_PREFIX_RE = re.compile(r"^\s*(?:หน่วยที่|unit)\s*\d+\s*[:：]\s*(.+)$", re.IGNORECASE | re.DOTALL)


def _usable(value: Any) -> bool:
    if value is None or value == "":
        return False
    if isinstance(value, float) and math.isnan(value):
        return False
    return True


def find_value(row: Any, candidate_keys: Sequence[str]) -> Any:
    """Value of the first candidate key that is present and non-empty, else ``""``.

    Examples:
        >>> find_value({"a": "", "b": "x"}, ["a", "b"])
        'x'
        >>> find_value({"a": None}, ["a", "missing"])
        ''
    """
    if not isinstance(row, Mapping):
        return ""
    for key in candidate_keys:
        value = row.get(key)
        if _usable(value):
            return value
    return ""


def map_fields(row: Any, synonyms: Mapping[str, Sequence[str]]) -> dict[str, Any]:
    """Resolve every canonical field of a synonym table against one row."""
    return {field: find_value(row, candidates) for field, candidates in synonyms.items()}


def strip_unit_prefix(name: Any) -> str:
    """Drop a leading unit number prefix; other text is returned trimmed."""
    if not _usable(name):
        return ""
    text = str(name)
    match = UNIT_PREFIX_RE.match(text)
    if match:
        return match.group(1).strip()
    return text.strip()


def split_code_description(text: Any) -> tuple[str, str]:
    """Split a multi-line cell: first non-blank line = code, rest = description."""
    if not _usable(text):
        return "", ""
    lines = [line.strip() for line in str(text).split("\n") if line.strip()]
    if not lines:
        return "", ""
    return lines[0], " ".join(lines[1:]).strip()
