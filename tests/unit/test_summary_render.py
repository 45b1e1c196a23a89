from __future__ import annotations

import pytest

from sheetdoc.models.document import DocumentDescriptor, GenerationResult
from sheetdoc.services.summary import format_elapsed, render_summary_line


def _result(**kw) -> GenerationResult:
    base = dict(session_id="0123456789abcdef", template_id="course", documents=[])
    base.update(kw)
    return GenerationResult(**base)


def test_render_summary_line_fields():
    docs = [DocumentDescriptor("a.docx", "/tmp/a.docx", "/output/a.docx")]
    line = render_summary_line(_result(documents=docs, file_count=2, total_rows=7, saved_rows=3, elapsed_seconds=1.25))
    assert line == "SUMMARY session=01234567 template=course files=2 rows=7 saved=3 documents=1 elapsed_sec=1.25"


@pytest.mark.parametrize(
    "seconds,expected",
    [(0, "0"), (2.0, "2"), (0.004, "0.004"), (0.0000012, "0.000001"), (1.23456, "1.235")],
)
def test_format_elapsed(seconds, expected):
    assert format_elapsed(seconds) == expected
