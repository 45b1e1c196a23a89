# Shared pytest fixtures
from __future__ import annotations

import csv
import tempfile
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path
from typing import Any

import pandas as pd
import pytest

from sheetdoc.config.loader import DEFAULT_TEMPLATE_DIR, AppConfig
from sheetdoc.models.classified_sheet import SheetRole
from sheetdoc.models.tagged_row import TaggedRow


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def write_csv(temp_workdir: Path) -> Callable[..., Path]:
    def _write(name: str, header: Sequence[str], rows: Sequence[Sequence[Any]]) -> Path:
        path = temp_workdir / "data" / name
        with path.open("w", encoding="utf-8", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(header)
            writer.writerows(rows)
        return path
    return _write


@pytest.fixture()
def write_xlsx(temp_workdir: Path) -> Callable[..., Path]:
    """Workbook from ``{sheet name: list of row dicts}`` (sheet order preserved)."""
    def _write(name: str, sheets: Mapping[str, list[dict[str, Any]]]) -> Path:
        path = temp_workdir / "data" / name
        with pd.ExcelWriter(path, engine="openpyxl") as writer:
            for sheet_name, rows in sheets.items():
                pd.DataFrame(rows).to_excel(writer, sheet_name=sheet_name, index=False)
        return path
    return _write


@pytest.fixture()
def app_config(temp_workdir: Path) -> AppConfig:
    return AppConfig(
        template_dir=DEFAULT_TEMPLATE_DIR,
        output_dir=temp_workdir / "output",
        upload_dir=temp_workdir / "uploads",
    )


@pytest.fixture()
def sample_config_yaml() -> str:
    return """output_dir: ./output
upload_dir: ./uploads
public_url_prefix: /files
max_rows: 50
max_file_size: 1048576
file_max_age_hours: 24
database:
  host: localhost
  port: 5432
  user: appuser
  password: secret
  database: appdb
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "app.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


def _make_row(values: Mapping[str, Any], role: SheetRole = SheetRole.UNKNOWN, *,
             file_index: int = 0, row_index: int = 0, sheet_name: str = "Sheet1",
             file_name: str = "input.xlsx") -> TaggedRow:
    return TaggedRow.create(
        values,
        file_index=file_index,
        file_name=file_name,
        sheet_name=sheet_name,
        role=role,
        row_index=row_index,
    )


class FakeStore:
    def __init__(self, ids: Sequence[str] = ()) -> None:
        self.ids = set(ids)

    def exists(self, template_id: str) -> bool:
        return template_id in self.ids

    def load(self, template_id: str) -> str:
        return f"resource:{template_id}"


class RecordingRenderer:
    """Keeps every field map; fails on the ``fail_on``-th call (1-based) when set."""

    def __init__(self, fail_on: int | None = None) -> None:
        self.calls: list[dict[str, Any]] = []
        self.fail_on = fail_on

    def render(self, resource: str, field_map: Mapping[str, Any]) -> str:
        self.calls.append(dict(field_map))
        if self.fail_on is not None and len(self.calls) == self.fail_on:
            raise ValueError("boom")
        return "<p>ok</p>"


class BytesConverter:
    def convert(self, markup: str) -> bytes:
        return markup.encode("utf-8")


@pytest.fixture()
def fake_store() -> type[FakeStore]:
    return FakeStore


@pytest.fixture()
def make_row() -> Callable[..., TaggedRow]:
    return _make_row


@pytest.fixture()
def renderer_cls() -> type[RecordingRenderer]:
    return RecordingRenderer


@pytest.fixture()
def bytes_converter() -> BytesConverter:
    return BytesConverter()
