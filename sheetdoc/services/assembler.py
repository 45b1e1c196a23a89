from __future__ import annotations

import logging
import re
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from itertools import islice, zip_longest
from pathlib import Path
from typing import Any

from ..errors import SheetDocError
from ..models.classified_sheet import SheetRole
from ..models.document import DocumentDescriptor
from ..models.tagged_row import TaggedRow
from ..models.template_spec import GenerationStrategy, TemplateSpec
from .field_mapper import find_value, map_fields, split_code_description, strip_unit_prefix
from .progress import ProgressTracker
from .row_selector import filter_rows_for_rendering
from .templates import LEARNING_PLAN_FIELDS, UNIT_LIST_FIELDS, get_template_spec

"""Document assembler: tagged rows -> rendered .docx files.

Each strategy turns the rows into an ordered list of RenderUnits (field map + output
file name). Every unit then goes through render -> convert -> write, one at a time on the
calling thread. The first failing unit aborts the request with DocumentRenderError;
documents already written stay on disk.
"""

__all__ = [
    "TemplateNotFoundError",
    "NoApplicableDataError",
    "NoUnitDataError",
    "NoValidStandardsError",
    "DocumentRenderError",
    "RenderUnit",
    "ANALYSIS_COLUMNS",
    "sanitize_filename",
    "correlate_by_position",
    "DocumentAssembler",
]

logger = logging.getLogger(__name__)

FILENAME_MAX = 100
PLAN_FILENAME_MAX = 50
SESSION_SUFFIX_LEN = 8
DOCX_SUFFIX = ".docx"

_HOSTILE_CHARS_RE = re.compile(r'[\\/:*?"<>|]')

# Behavioral analysis columns are placeholders only (filled in by hand)
ANALYSIS_COLUMNS = (
    "theory", "practice", "knowledge", "understanding", "application", "analysis",
    "evaluation", "creation", "psychomotor", "affective", "practical", "total", "hours",
)
ANALYSIS_TOTAL_COLUMNS = ANALYSIS_COLUMNS[2:]

# Learning plan fields with no source column yet
PLAN_ASSESSMENT_PLACEHOLDERS = (
    "performanceCriteria", "assessmentMethod", "performanceEvidence", "knowledgeEvidence",
    "vocationalIntegration", "assessmentCriteria", "assessmentTools",
)

EMPTY_CONTENT = {"Unit_name": "", "content": "", "references": ""}
EMPTY_TEST = {"Unit_name": "", "test": "", "answers": ""}


class TemplateNotFoundError(SheetDocError):
    def __init__(self, template_id: str) -> None:
        super().__init__(f"template not found: {template_id}")
        self.template_id = template_id


class NoApplicableDataError(SheetDocError):
    """No rows left for the template after its render filter."""


class NoUnitDataError(NoApplicableDataError):
    """Unit-correlated generation found no unit rows."""


class NoValidStandardsError(NoApplicableDataError):
    """No row carries a unit code, element code or performance criteria."""


class DocumentRenderError(SheetDocError):
    """render / convert / write failed for one output unit."""

    def __init__(self, template_id: str, label: str, index: int, reason: str) -> None:
        super().__init__(f"cannot create {template_id} document for {label} {index}: {reason}")
        self.template_id = template_id
        self.label = label
        self.index = index


@dataclass(frozen=True)
class RenderUnit:
    index: int  # 1-based row / unit number
    label: str  # "row" / "unit" / "document"
    field_map: dict[str, Any]
    file_name: str


def sanitize_filename(text: Any, max_length: int = FILENAME_MAX) -> str:
    """Replace path-hostile characters with ``_`` and truncate."""
    return _HOSTILE_CHARS_RE.sub("_", str(text))[:max_length]


def correlate_by_position(
    units: Sequence[dict[str, Any]],
    contents: Sequence[dict[str, Any]],
    tests: Sequence[dict[str, Any]],
) -> list[tuple[dict[str, Any], dict[str, Any], dict[str, Any]]]:
    """Pair unit i with content i and test i; missing partners become empty entries.

    Correlation is by discovery order only, there is no semantic link between the rows.
    """
    paired = islice(zip_longest(units, contents, tests), len(units))
    return [
        (unit, content or dict(EMPTY_CONTENT), test or dict(EMPTY_TEST))
        for unit, content, test in paired
    ]


def _text(value: Any) -> str:
    return "" if value is None else str(value)


class DocumentAssembler:
    """Generation engine driven by the template registry.

    Collaborators: ``store`` (exists/load), ``renderer`` (render), ``converter``
    (convert), ``writer`` (write).
    """

    def __init__(
        self,
        store: Any,
        renderer: Any,
        converter: Any,
        writer: Any,
        output_dir: Path,
        url_prefix: str = "/output",
    ) -> None:
        self.store = store
        self.renderer = renderer
        self.converter = converter
        self.writer = writer
        self.output_dir = Path(output_dir)
        self.url_prefix = url_prefix.rstrip("/")
        self._builders: dict[GenerationStrategy, Callable[..., list[RenderUnit]]] = {
            GenerationStrategy.PER_ROW: self._build_per_row,
            GenerationStrategy.SINGLE_AGGREGATE: self._build_single_aggregate,
            GenerationStrategy.UNIT_CORRELATED: self._build_unit_correlated,
            GenerationStrategy.UNIT_MULTI_OUTPUT: self._build_unit_multi_output,
            GenerationStrategy.FIRST_ROW_TABLE: self._build_first_row_table,
            GenerationStrategy.PER_ROW_FLAT: self._build_per_row_flat,
        }

    def assemble(
        self,
        tagged_rows: Sequence[TaggedRow],
        template_id: str,
        session_id: str,
        file_metadata: Mapping[int, Mapping[str, Any]] | None = None,
    ) -> list[DocumentDescriptor]:
        """Generate every document of one request.

        Args:
            tagged_rows: merged rows of the sheets matching the template
            template_id: template identifier
            session_id: request id; its first 8 chars suffix every file name
            file_metadata: catalog summary (diagnostics only)

        Raises:
            TemplateNotFoundError, NoApplicableDataError (and subclasses),
            DocumentRenderError
        """
        if not self.store.exists(template_id):
            raise TemplateNotFoundError(template_id)
        resource = self.store.load(template_id)
        spec = get_template_spec(template_id)

        filtered = filter_rows_for_rendering(tagged_rows, template_id)
        if not filtered:
            raise NoApplicableDataError(f"no applicable data for template {template_id}")
        logger.info(
            "[%s] Filtered data: %d rows (from %d total, %d sheets)",
            session_id,
            len(filtered),
            len(tagged_rows),
            len(file_metadata or {}),
        )

        suffix = session_id[:SESSION_SUFFIX_LEN]
        units = self.build_units(spec, filtered, tagged_rows, suffix)
        logger.info("[%s] %s: %d document(s) to render (%s)", session_id, template_id, len(units), spec.strategy.value)

        documents: list[DocumentDescriptor] = []
        with ProgressTracker(len(units), description=f"Rendering {template_id}") as progress:
            for unit in units:
                progress.start_item(unit.file_name)
                documents.append(self._emit(template_id, resource, unit))
                progress.finish_item()
                logger.info("[%s] Generated: %s", session_id, unit.file_name)
        return documents

    def build_units(
        self,
        spec: TemplateSpec,
        filtered: Sequence[TaggedRow],
        all_rows: Sequence[TaggedRow],
        suffix: str,
    ) -> list[RenderUnit]:
        builder = self._builders[spec.strategy]
        return builder(spec, filtered, all_rows, suffix)

    def _emit(self, template_id: str, resource: str, unit: RenderUnit) -> DocumentDescriptor:
        try:
            markup = self.renderer.render(resource, unit.field_map)
            blob = self.converter.convert(markup)
            path = self.output_dir / unit.file_name
            self.writer.write(path, blob)
        except Exception as e:
            logger.error("Error generating %s for %s %d: %s", template_id, unit.label, unit.index, e)
            raise DocumentRenderError(template_id, unit.label, unit.index, str(e)) from e
        return DocumentDescriptor(
            name=unit.file_name,
            path=str(path),
            url=f"{self.url_prefix}/{unit.file_name}",
        )

    # --- strategies -------------------------------------------------------

    def _build_per_row(self, spec, filtered, all_rows, suffix) -> list[RenderUnit]:
        units = []
        for i, row in enumerate(filtered, start=1):
            if spec.registered:
                field_map = map_fields(row.values, spec.field_synonyms)
            else:
                field_map = dict(row.values)
            base = find_value(field_map, spec.filename_fields) or f"document_{i}"
            name = f"{sanitize_filename(base)}_{suffix}{DOCX_SUFFIX}"
            units.append(RenderUnit(index=i, label="row", field_map=field_map, file_name=name))
        return units

    def _build_single_aggregate(self, spec, filtered, all_rows, suffix) -> list[RenderUnit]:
        name_keys = UNIT_LIST_FIELDS["ชื่อหน่วยการเรียนรู้"]
        entries = []
        for row in filtered:
            entry: dict[str, Any] = {"name": strip_unit_prefix(find_value(row.values, name_keys))}
            entry.update({col: "" for col in ANALYSIS_COLUMNS})
            entries.append(entry)

        field_map = {
            "courseCode": "",
            "courseName": "",
            "credits": "",
            "theoryHours": "",
            "practiceHours": "",
            "units": entries,
            "totalTheory": "",
            "totalPractice": "",
            "grandTotal": "",
            "totals": {col: "" for col in ANALYSIS_TOTAL_COLUMNS},
        }
        prefix = spec.file_prefix or "Behavioral_Analysis"
        return [RenderUnit(index=1, label="document", field_map=field_map, file_name=f"{prefix}_{suffix}{DOCX_SUFFIX}")]

    def _build_unit_correlated(self, spec, filtered, all_rows, suffix) -> list[RenderUnit]:
        # buckets come from the whole merged row set, not the unit-only render input
        units: list[dict[str, Any]] = []
        contents: list[dict[str, Any]] = []
        tests: list[dict[str, Any]] = []
        for row in all_rows:
            mapped = map_fields(row.values, spec.field_synonyms)
            if row.role is SheetRole.UNIT:
                units.append({k: mapped[k] for k in ("Unit_name", "Outcom", "tpqi", "objective")})
            elif row.role is SheetRole.CONTENT:
                contents.append({
                    "Unit_name": mapped["Unit_name"] or f"หน่วยที่ {len(contents) + 1}",
                    "content": mapped["content"],
                    "references": mapped["references"],
                })
            elif row.role is SheetRole.TEST:
                tests.append({
                    "Unit_name": mapped["Unit_name"] or f"หน่วยที่ {len(tests) + 1}",
                    "test": mapped["test"],
                    "answers": mapped["answers"],
                })
        logger.info("Detected: %d units, %d content, %d tests", len(units), len(contents), len(tests))

        if not units:
            raise NoUnitDataError("no unit data found (expected columns such as Unit_name, Outcome, tpqi)")

        result = []
        for n, (unit, content, test) in enumerate(correlate_by_position(units, contents, tests), start=1):
            field_map = {
                "Unit_name": unit["Unit_name"],
                "Outcom": unit["Outcom"],
                "tpqi": unit["tpqi"],
                "objective": unit["objective"],
                "content": content["content"],
                "references": content["references"],
                "test": test["test"],
                "answers": test["answers"],
                "unitNumber": n,
                "totalUnits": len(units),
            }
            safe = sanitize_filename(unit["Unit_name"] or f"Unit_{n}")
            name = f"{spec.file_prefix}_{safe}_{suffix}{DOCX_SUFFIX}"
            result.append(RenderUnit(index=n, label="unit", field_map=field_map, file_name=name))
        return result

    def _build_unit_multi_output(self, spec, filtered, all_rows, suffix) -> list[RenderUnit]:
        result = []
        for n, row in enumerate(filtered, start=1):
            mapped = map_fields(row.values, LEARNING_PLAN_FIELDS)
            field_map: dict[str, Any] = {
                "unitName": mapped["Unit_name"],
                "outcom": mapped["Outcom"],
                "tpqi": mapped["tpqi"],
                "objective": mapped["objective"],
                "content": mapped["Learning_content"],
                "activities": mapped["Learning_activities"],
                "resources": mapped["learning_resources"],
                "evidence": mapped["Evidence_learning"],
                "evaluation": mapped["Evaluation"],
                "competency": mapped["tpqi"],
            }
            field_map.update({key: "" for key in PLAN_ASSESSMENT_PLACEHOLDERS})
            safe = sanitize_filename(field_map["unitName"] or f"Unit_{n}", PLAN_FILENAME_MAX)
            name = f"{spec.file_prefix}_{safe}_{suffix}{DOCX_SUFFIX}"
            result.append(RenderUnit(index=n, label="unit", field_map=field_map, file_name=name))
        return result

    def _build_first_row_table(self, spec, filtered, all_rows, suffix) -> list[RenderUnit]:
        header = map_fields(filtered[0].values, spec.field_synonyms)
        standard_name = _text(header["มาตรฐานอาชีพ"])
        lines = standard_name.split("\n")
        occupation_field = lines[0].strip() if standard_name else ""
        occupation = lines[2].strip() if len(lines) > 2 else ""

        standards = []
        for row_number, row in enumerate(filtered, start=1):
            mapped = map_fields(row.values, spec.field_synonyms)
            unit_cell = mapped["หน่วยสมรรถนะ"]
            element_cell = mapped["สมรรถนะย่อย"]
            criteria = mapped["เกณฑ์การปฏิบัติงาน"]
            if not (unit_cell or element_cell or criteria):
                continue
            unit_code, unit_desc = split_code_description(unit_cell)
            element_code, element_desc = split_code_description(element_cell)
            standards.append({
                "rowNumber": row_number,
                "unitCode": unit_code,
                "unitDescription": unit_desc,
                "elementCode": element_code,
                "elementDescription": element_desc,
                "performanceCriteria": _text(criteria),
                "assessment": _text(mapped["วิธีการประเมิน"]),
            })
        logger.info("Extracted %d valid standards from %d rows", len(standards), len(filtered))

        if not standards:
            raise NoValidStandardsError(
                "no valid standards found (expected columns: หน่วยสมรรถนะ, สมรรถนะย่อย, เกณฑ์การปฏิบัติงาน)"
            )
        field_map = {
            "มาตรฐานอาชีพ": standard_name,
            "field": occupation_field,
            "occupation": occupation,
            "standards": standards,
        }
        return [RenderUnit(index=1, label="document", field_map=field_map, file_name=f"{spec.file_prefix}_{suffix}{DOCX_SUFFIX}")]

    def _build_per_row_flat(self, spec, filtered, all_rows, suffix) -> list[RenderUnit]:
        result = []
        for i, row in enumerate(filtered, start=1):
            field_map = map_fields(row.values, spec.field_synonyms)
            base = find_value(field_map, spec.filename_fields) or f"{spec.template_id}_{i}"
            name = f"{spec.template_id}_{sanitize_filename(base)}_{suffix}{DOCX_SUFFIX}"
            result.append(RenderUnit(index=i, label="row", field_map=field_map, file_name=name))
        return result
