from __future__ import annotations

from collections.abc import Sequence

from ..errors import SheetDocError
from ..models.classified_sheet import Catalog
from ..models.tagged_row import TaggedRow
from ..models.template_spec import RowPolicy
from .templates import get_template_spec

"""Row merging, row ceiling and the template row policies.

Two independent selections are made from the same merged row set:
- persistence: which rows are archived for audit (``select_rows_to_persist``)
- rendering: which rows feed the assembler (``filter_rows_for_rendering``)
"""

__all__ = [
    "MAX_ROWS",
    "RowLimitExceededError",
    "merge_rows",
    "enforce_row_limit",
    "apply_row_policy",
    "select_rows_to_persist",
    "filter_rows_for_rendering",
]

MAX_ROWS = 1000


class RowLimitExceededError(SheetDocError):
    def __init__(self, total: int, limit: int) -> None:
        super().__init__(f"combined data exceeds {limit} rows (got {total})")
        self.total = total
        self.limit = limit


def merge_rows(catalog: Catalog) -> list[TaggedRow]:
    """Flatten catalog entries (index order) into provenance-tagged rows."""
    merged: list[TaggedRow] = []
    for idx in sorted(catalog):
        entry = catalog[idx]
        for row_index, values in enumerate(entry.rows):
            merged.append(
                TaggedRow.create(
                    values,
                    file_index=idx,
                    file_name=entry.file_name,
                    sheet_name=entry.sheet_name,
                    role=entry.role,
                    row_index=row_index,
                )
            )
    return merged


def enforce_row_limit(rows: Sequence[TaggedRow], max_rows: int = MAX_ROWS) -> None:
    """Fail fast when the merged set is over the ceiling (``max_rows`` itself passes)."""
    if len(rows) > max_rows:
        raise RowLimitExceededError(len(rows), max_rows)


def apply_row_policy(rows: Sequence[TaggedRow], policy: RowPolicy) -> list[TaggedRow]:
    if not rows:
        return []
    if policy is RowPolicy.UNIT_ONLY:
        return [row for row in rows if row.is_unit]
    if policy is RowPolicy.FIRST_ROW:
        return list(rows[:1])
    return list(rows)


def select_rows_to_persist(rows: Sequence[TaggedRow], template_id: str) -> list[TaggedRow]:
    return apply_row_policy(rows, get_template_spec(template_id).persistence)


def filter_rows_for_rendering(rows: Sequence[TaggedRow], template_id: str) -> list[TaggedRow]:
    return apply_row_policy(rows, get_template_spec(template_id).render_filter)
