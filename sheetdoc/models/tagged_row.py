from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from .classified_sheet import SheetRole

"""TaggedRow model: a raw row plus its provenance.

Provenance (file index, file name, sheet name, role, row position) is set once when the
catalog is merged. Downstream filtering/selection only keeps or drops whole TaggedRows.
"""

__all__ = [
    "TaggedRow",
]


@dataclass(frozen=True)
class TaggedRow:
    values: Mapping[str, Any]  # Read-only view of the RawRow
    file_index: int  # Catalog index of the source sheet
    file_name: str
    sheet_name: str
    role: SheetRole
    row_index: int  # 0-based position within the sheet

    @staticmethod
    def create(
        values: Mapping[str, Any],
        *,
        file_index: int,
        file_name: str,
        sheet_name: str,
        role: SheetRole,
        row_index: int,
    ) -> TaggedRow:
        return TaggedRow(
            values=MappingProxyType(dict(values)),
            file_index=file_index,
            file_name=file_name,
            sheet_name=sheet_name,
            role=role,
            row_index=row_index,
        )

    @property
    def is_unit(self) -> bool:
        return self.role is SheetRole.UNIT

    def to_record(self) -> dict[str, Any]:
        """Compressed persistence form: provenance keys + non-empty values only."""
        record: dict[str, Any] = {
            "_fileIndex": self.file_index,
            "_fileName": self.file_name,
            "_fileType": self.role.value,
            "_rowIndex": self.row_index,
        }
        for key, value in self.values.items():
            if key.startswith("_"):
                continue
            if value is None or value == "":
                continue
            record[key] = value
        return record
