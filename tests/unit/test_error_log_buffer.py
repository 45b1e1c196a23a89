from __future__ import annotations

import json
from pathlib import Path

from sheetdoc.logging.error_log import ErrorLogBuffer
from sheetdoc.models.error_record import ErrorRecord

EXPECTED_KEYS = {"timestamp", "session_id", "file", "sheet", "row", "error_type", "message"}


def test_error_record_create_and_json_line():
    rec = ErrorRecord.create("sid", "หน่วย.xlsx", "", -1, "FILE_READ_ERROR", "อ่านไม่ได้")
    assert rec.timestamp.endswith("Z")
    obj = json.loads(rec.to_json_line())
    assert set(obj) == EXPECTED_KEYS
    assert obj["row"] == -1
    # Thai text is kept readable
    assert "อ่านไม่ได้" in rec.to_json_line()


def test_flush_writes_json_lines(temp_workdir: Path):
    buf = ErrorLogBuffer()
    buf.append(ErrorRecord.create("s1", "a.csv", "", 2, "DOCUMENT_RENDER_ERROR", "boom"))
    buf.append(ErrorRecord.create("s2", "<REQUEST>", "", -1, "NO_UPLOADS_ERROR", "no files"))
    path = buf.flush()
    assert path is not None
    assert path.parent == Path("logs")
    assert path.name.startswith("errors-") and path.suffix == ".log"
    lines = path.read_text(encoding="utf-8").splitlines()
    assert [json.loads(line)["session_id"] for line in lines] == ["s1", "s2"]
    assert len(buf) == 0


def test_flush_without_records_creates_nothing(tmp_path: Path):
    buf = ErrorLogBuffer(tmp_path / "logs")
    assert buf.flush() is None
    assert not (tmp_path / "logs").exists()


def test_flush_appends_to_same_file(tmp_path: Path):
    buf = ErrorLogBuffer(tmp_path)
    buf.append(ErrorRecord.create("s1", "f", "", -1, "X", "one"))
    first = buf.flush()
    buf.append(ErrorRecord.create("s1", "f", "", -1, "X", "two"))
    second = buf.flush()
    assert first == second
    assert len(second.read_text(encoding="utf-8").splitlines()) == 2
