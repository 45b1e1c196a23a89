from __future__ import annotations

import logging

from ..errors import SheetDocError
from ..models.classified_sheet import Catalog
from .templates import get_template_spec

"""Template sheet filter.

Keeps catalog entries whose sheet name, case-folded, contains one of the template's
required keywords as a plain substring. Catalog indices are preserved.
"""

__all__ = [
    "NoMatchingSheetError",
    "required_sheet_keywords",
    "filter_sheets_by_template",
]

logger = logging.getLogger(__name__)


class NoMatchingSheetError(SheetDocError):
    """No sheet name matched the template's keywords."""

    def __init__(self, template_id: str, required: list[str], found: list[str]) -> None:
        message = (
            f"no matching sheet for template {template_id}\n"
            f"required sheets: {', '.join(required)}\n"
            f"found sheets: {', '.join(found)}"
        )
        super().__init__(message)
        self.template_id = template_id
        self.required = required
        self.found = found


def required_sheet_keywords(template_id: str) -> list[str]:
    return list(get_template_spec(template_id).required_sheet_keywords)


def filter_sheets_by_template(catalog: Catalog, template_id: str) -> Catalog:
    """Subset of ``catalog`` whose sheet names match the template.

    Raises:
        NoMatchingSheetError: when no entry matches (message lists required and found)
    """
    required = required_sheet_keywords(template_id)
    needles = [kw.casefold() for kw in required]
    filtered: Catalog = {}

    for idx, entry in catalog.items():
        name = (entry.sheet_name or "").casefold()
        if any(needle in name for needle in needles):
            filtered[idx] = entry
            logger.info("[%s] Found matching sheet: \"%s\"", template_id, entry.sheet_name)
        else:
            logger.info("[%s] Skipped sheet: \"%s\" (not matching)", template_id, entry.sheet_name)

    if not filtered:
        raise NoMatchingSheetError(
            template_id,
            required,
            [entry.sheet_name for entry in catalog.values()],
        )
    return filtered
