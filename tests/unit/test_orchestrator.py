from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from sheetdoc.excel.reader import FileReadError
from sheetdoc.logging.error_log import ErrorLogBuffer
from sheetdoc.models.document import DocumentDescriptor
from sheetdoc.services.orchestrator import (
    GenerationError,
    NoUploadsError,
    cleanup_uploads,
    generate_documents,
    new_session_id,
    stage_uploads,
)


def test_new_session_id_is_unique_hex():
    a, b = new_session_id(), new_session_id()
    assert a != b
    assert len(a) == 32 and int(a, 16) >= 0


def test_stage_uploads_copies_under_unique_names(write_csv, temp_workdir: Path):
    src = write_csv("course.csv", ["รหัสวิชา"], [["1"]])
    staged = stage_uploads([src, src], temp_workdir / "uploads", 1024)
    assert [u.original_name for u in staged] == ["course.csv", "course.csv"]
    assert staged[0].stored_path != staged[1].stored_path
    assert all(u.stored_path.name.endswith("-course.csv") for u in staged)
    assert src.exists()
    cleanup_uploads(staged)
    assert not any(u.stored_path.exists() for u in staged)


@pytest.mark.parametrize("name", ["notes.txt", "report.docx"])
def test_stage_uploads_rejects_other_extensions(temp_workdir: Path, name: str):
    path = temp_workdir / "data" / name
    path.write_text("x", encoding="utf-8")
    with pytest.raises(FileReadError, match="unsupported file type"):
        stage_uploads([path], temp_workdir / "uploads", 1024)


def test_stage_uploads_size_limit_removes_partial_copies(write_csv, temp_workdir: Path):
    small = write_csv("a.csv", ["x"], [["1"]])
    big = write_csv("b.csv", ["x"], [["y" * 2000]])
    with pytest.raises(FileReadError, match="too large"):
        stage_uploads([small, big], temp_workdir / "uploads", 1024)
    assert list((temp_workdir / "uploads").iterdir()) == []


def test_stage_uploads_missing_file(temp_workdir: Path):
    with pytest.raises(FileReadError, match="not found"):
        stage_uploads([temp_workdir / "data" / "nope.csv"], temp_workdir / "uploads", 1024)


def test_no_uploads_is_recorded(app_config, temp_workdir: Path):
    log = ErrorLogBuffer()
    with pytest.raises(NoUploadsError) as excinfo:
        generate_documents([], "course", app_config, session_id="s" * 32, error_log=log)
    assert excinfo.value.session_id == "s" * 32
    assert len(log) == 1
    path = log.flush()
    assert '"error_type": "NO_UPLOADS_ERROR"' in path.read_text(encoding="utf-8")


def test_unexpected_errors_are_wrapped_and_uploads_removed(write_csv, app_config, temp_workdir: Path):
    src = write_csv("course.csv", ["รหัสวิชา"], [["1"]])
    staged = stage_uploads([src], app_config.upload_dir, app_config.max_file_size)
    assembler = MagicMock()
    assembler.assemble.side_effect = KeyError("broken")
    with pytest.raises(GenerationError) as excinfo:
        generate_documents(staged, "course", app_config, assembler=assembler)
    assert isinstance(excinfo.value.__cause__, KeyError)
    assert excinfo.value.session_id
    assert not staged[0].stored_path.exists()


def test_assembler_receives_merged_rows(write_csv, app_config, temp_workdir: Path):
    src = write_csv("course.csv", ["รหัสวิชา"], [["1"], ["2"]])
    staged = stage_uploads([src], app_config.upload_dir, app_config.max_file_size)
    doc_path = temp_workdir / "output" / "x.docx"
    doc_path.parent.mkdir(parents=True)
    doc_path.write_bytes(b"doc")
    assembler = MagicMock()
    assembler.assemble.return_value = [DocumentDescriptor("x.docx", str(doc_path), "/output/x.docx")]
    result = generate_documents(staged, "course", app_config, session_id="f" * 32, assembler=assembler)
    rows, template_id, sid, metadata = assembler.assemble.call_args.args
    assert [dict(r.values) for r in rows] == [{"รหัสวิชา": "1"}, {"รหัสวิชา": "2"}]
    assert (template_id, sid) == ("course", "f" * 32)
    assert metadata[0]["sheetName"] == "course.csv"
    assert result.download_url == f"/output/documents_{'f' * 32}.zip"
    assert Path(result.archive_path).exists()
