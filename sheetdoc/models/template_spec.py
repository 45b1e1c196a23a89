from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

"""TemplateSpec model: everything the pipeline needs to know about one template id.

The concrete table of specs lives in ``sheetdoc.services.templates``; this module only
defines the shape (sheet keywords, field synonym table, generation strategy and the
row policies applied for persistence and rendering).
"""

__all__ = [
    "GenerationStrategy",
    "RowPolicy",
    "TemplateSpec",
]


class GenerationStrategy(Enum):
    """How the assembler turns filtered rows into documents."""
    PER_ROW = "per_row"  # one document per row, synonym-mapped fields
    SINGLE_AGGREGATE = "single_aggregate"  # one document listing all units
    UNIT_CORRELATED = "unit_correlated"  # unit i + content i + test i
    UNIT_MULTI_OUTPUT = "unit_multi_output"  # one document per unit row, extended fields
    FIRST_ROW_TABLE = "first_row_table"  # header from first row, table from all rows
    PER_ROW_FLAT = "per_row_flat"  # one document per row, template labels only


class RowPolicy(Enum):
    """Row subset rule used for persistence and for rendering input."""
    UNIT_ONLY = "unit_only"
    FIRST_ROW = "first_row"
    ALL_ROWS = "all_rows"


@dataclass(frozen=True)
class TemplateSpec:
    template_id: str
    strategy: GenerationStrategy
    required_sheet_keywords: tuple[str, ...] = ()
    # canonical field -> ordered candidate headers (first non-empty wins)
    field_synonyms: dict[str, tuple[str, ...]] = field(default_factory=dict)
    persistence: RowPolicy = RowPolicy.ALL_ROWS
    render_filter: RowPolicy = RowPolicy.ALL_ROWS
    # canonical fields tried in order for the output file name
    filename_fields: tuple[str, ...] = ()
    file_prefix: str = ""
    display_name: str = ""
    description: str = ""
    registered: bool = True  # False for the fallback spec of unknown ids
