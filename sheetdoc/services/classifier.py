from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from ..models.classified_sheet import SheetRole

"""Sheet role classifier (header heuristics).

The role is decided from the first row's header names only; cell values are collected
into the signals but no rule reads them. Rules are an ordered table of
(predicate, role) pairs and the first match wins, so a sheet matching several rules is
bound by the earliest one.
"""

__all__ = [
    "HeaderSignals",
    "CLASSIFICATION_RULES",
    "classify",
]

# Substring vocabularies (Thai + English), matched against lower-cased header names
UNIT_NAME_MARKERS = ("unit_name", "ชื่อหน่วย", "หน่วยการเรียน")
OUTCOME_MARKERS = ("outcome", "ผลลัพธ์")
TPQI_MARKERS = ("tpqi", "ตัวบ่งชี้", "competency")
OBJECTIVE_MARKERS = ("objective", "วัตถุประสงค์", "purpose")
CONTENT_MARKERS = ("content", "เนื้อหา", "สาระ")
REFERENCE_MARKERS = ("reference", "referrence", "อ้างอิง", "การค้นคว้า")
TEST_MARKERS = ("test", "แบบทดสอบ", "แบบฝึกหัด", "exam", "exercise", "คำถาม")
ANSWER_MARKERS = ("answer", "เฉลย", "solutions", "คำตอบ")

SMALL_SHEET_COLUMNS = 5


def _any_contains(tokens: Iterable[str], markers: tuple[str, ...]) -> bool:
    return any(m in t for t in tokens for m in markers)


@dataclass(frozen=True)
class HeaderSignals:
    """Lower-cased header tokens / string values of one row, plus marker flags."""
    keys: tuple[str, ...]
    values: tuple[str, ...]

    @staticmethod
    def from_row(row: Mapping[str, Any]) -> HeaderSignals:
        keys = tuple(str(k).strip().lower() for k in row.keys())
        values = tuple(v.lower() for v in row.values() if isinstance(v, str))
        return HeaderSignals(keys=keys, values=values)

    @property
    def column_count(self) -> int:
        return len(self.keys)

    @property
    def unit_name(self) -> bool:
        return _any_contains(self.keys, UNIT_NAME_MARKERS)

    @property
    def outcome(self) -> bool:
        return _any_contains(self.keys, OUTCOME_MARKERS)

    @property
    def tpqi(self) -> bool:
        return _any_contains(self.keys, TPQI_MARKERS)

    @property
    def objective(self) -> bool:
        return _any_contains(self.keys, OBJECTIVE_MARKERS)

    @property
    def content(self) -> bool:
        return _any_contains(self.keys, CONTENT_MARKERS)

    @property
    def reference(self) -> bool:
        return _any_contains(self.keys, REFERENCE_MARKERS)

    @property
    def test(self) -> bool:
        return _any_contains(self.keys, TEST_MARKERS)

    @property
    def answer(self) -> bool:
        return _any_contains(self.keys, ANSWER_MARKERS)


Rule = tuple[Callable[[HeaderSignals], bool], SheetRole]

# Evaluation order matters: first match wins.
CLASSIFICATION_RULES: tuple[Rule, ...] = (
    (lambda s: s.unit_name and s.outcome and s.tpqi, SheetRole.UNIT),
    (lambda s: s.unit_name and s.objective, SheetRole.UNIT),
    (lambda s: s.content and (s.reference or s.column_count <= SMALL_SHEET_COLUMNS), SheetRole.CONTENT),
    (lambda s: s.content and s.unit_name and not s.outcome, SheetRole.CONTENT),
    (lambda s: s.test and s.answer, SheetRole.TEST),
    (lambda s: s.test and s.column_count <= SMALL_SHEET_COLUMNS, SheetRole.TEST),
)


def classify(first_row: Mapping[str, Any] | None) -> SheetRole:
    """Return the role of a sheet given its first row (UNKNOWN when nothing matches)."""
    if not first_row or not isinstance(first_row, Mapping):
        return SheetRole.UNKNOWN
    signals = HeaderSignals.from_row(first_row)
    for predicate, role in CLASSIFICATION_RULES:
        if predicate(signals):
            return role
    return SheetRole.UNKNOWN
