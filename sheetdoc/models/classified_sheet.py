from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .sheet_table import RawRow

"""ClassifiedSheet domain model and SheetRole enum.

A ClassifiedSheet is a SheetTable that went through the header heuristics and received
exactly one role. The role applies to every row of the sheet and never changes afterwards.

Catalog: positional index (file order, then sheet order) -> ClassifiedSheet. The index is
discovery order only; it carries no semantic pairing between sheets.
"""

__all__ = [
    "SheetRole",
    "ClassifiedSheet",
    "Catalog",
]


class SheetRole(Enum):
    """Closed role taxonomy for a sheet.

    - UNIT: learning unit rows (unit name + outcome/tpqi or objective)
    - CONTENT: knowledge content rows
    - TEST: exercise / exam rows
    - UNKNOWN: none of the above
    """
    UNIT = "unit"
    CONTENT = "content"
    TEST = "test"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ClassifiedSheet:
    """Sheet rows plus the role detected from the first row's headers."""
    file_name: str  # Upload's original file name
    sheet_name: str  # Worksheet name
    role: SheetRole  # Assigned once from the first row
    columns: tuple[str, ...]  # Header order of the first row
    row_count: int
    rows: list[RawRow] = field(default_factory=list, compare=False, repr=False)
    path: str | None = None  # Stored upload path (diagnostics only)

    def to_metadata(self) -> dict[str, Any]:
        """Per-entry analysis summary as reported back to the caller."""
        return {
            "fileName": self.file_name,
            "sheetName": self.sheet_name,
            "type": self.role.value,
            "rowCount": self.row_count,
            "columns": list(self.columns),
        }


Catalog = dict[int, ClassifiedSheet]
