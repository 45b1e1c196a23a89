from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

"""SheetTable model: one normalized sheet as read from an uploaded file.

Rows are plain dicts (trimmed header -> scalar). All rows of one table share the header
set of the sheet, so ``columns`` is taken from the first row.
"""

__all__ = [
    "RawRow",
    "SheetTable",
]

RawRow = dict[str, Any]


@dataclass(frozen=True)
class SheetTable:
    """Ordered rows of a single sheet, identified by (origin_file_name, sheet_name)."""
    origin_file_name: str  # Upload's original file name
    sheet_name: str  # Worksheet name (CSV: the original file name)
    rows: list[RawRow] = field(default_factory=list)

    @property
    def columns(self) -> list[str]:
        if not self.rows:
            return []
        return list(self.rows[0].keys())

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def first_row(self) -> RawRow | None:
        return self.rows[0] if self.rows else None
