from __future__ import annotations

import logging
import random
import re
import shutil
import time
import uuid
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Any

from ..config.loader import AppConfig
from ..db.persistence import build_session_record, save_session
from ..errors import SheetDocError
from ..excel.reader import FileReadError
from ..logging.error_log import ErrorLogBuffer, ErrorRecord
from ..models.document import GenerationResult
from ..models.upload import SUPPORTED_EXTENSIONS, UploadedFile
from ..render.archive import create_zip
from ..render.converter import DocxConverter
from ..render.renderer import JinjaRenderer
from ..render.store import TemplateStore
from ..render.writer import OutputWriter
from .analysis import FileAnalysisError, analyze_uploaded_files, catalog_metadata
from .assembler import DocumentAssembler, DocumentRenderError
from .row_selector import enforce_row_limit, merge_rows, select_rows_to_persist
from .sheet_filter import filter_sheets_by_template

"""Generation request pipeline.

stage -> analyze -> sheet filter -> merge -> row ceiling -> persist -> assemble -> zip.

Every failure is fatal to the request: it is logged with the session id, recorded in
the error log buffer and re-raised (unexpected exceptions wrapped in GenerationError).
Staged upload copies are removed on both paths.
"""

__all__ = [
    "NoUploadsError",
    "GenerationError",
    "new_session_id",
    "stage_uploads",
    "cleanup_uploads",
    "build_assembler",
    "generate_documents",
]

logger = logging.getLogger(__name__)

REQUEST_SCOPE = "<REQUEST>"


class NoUploadsError(SheetDocError):
    def __init__(self) -> None:
        super().__init__("no files uploaded")


class GenerationError(SheetDocError):
    """Unexpected failure inside the pipeline (wraps the original exception)."""


def new_session_id() -> str:
    return uuid.uuid4().hex


def _staged_name(original: str) -> str:
    return f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}-{original}"


def stage_uploads(paths: Iterable[Path], upload_dir: Path, max_file_size: int) -> list[UploadedFile]:
    """Copy input files into ``upload_dir`` under unique names.

    Raises:
        FileReadError: missing file, unsupported extension or file over ``max_file_size``
            (copies staged so far are removed)
    """
    upload_dir = Path(upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    staged: list[UploadedFile] = []
    try:
        for path in paths:
            path = Path(path)
            if path.suffix.lower() not in SUPPORTED_EXTENSIONS:
                raise FileReadError(
                    f"unsupported file type: {path.name} (allowed: {', '.join(SUPPORTED_EXTENSIONS)})"
                )
            if not path.is_file():
                raise FileReadError(f"file not found: {path}")
            size = path.stat().st_size
            if size > max_file_size:
                raise FileReadError(f"file too large: {path.name} ({size} > {max_file_size} bytes)")
            target = upload_dir / _staged_name(path.name)
            shutil.copy2(path, target)
            staged.append(UploadedFile.from_path(target, original_name=path.name))
    except Exception:
        cleanup_uploads(staged)
        raise
    return staged


def cleanup_uploads(uploads: Iterable[UploadedFile]) -> None:
    for upload in uploads:
        try:
            Path(upload.stored_path).unlink(missing_ok=True)
            logger.debug("Cleaned up: %s", upload.stored_path)
        except OSError as e:
            logger.error("Error cleaning up %s: %s", upload.stored_path, e)


def build_assembler(config: AppConfig) -> DocumentAssembler:
    return DocumentAssembler(
        store=TemplateStore(config.template_dir),
        renderer=JinjaRenderer(),
        converter=DocxConverter(),
        writer=OutputWriter(),
        output_dir=config.output_dir,
        url_prefix=config.public_url_prefix,
    )


def _error_type(exc: BaseException) -> str:
    """CamelCase class name -> UPPER_SNAKE (FileAnalysisError -> FILE_ANALYSIS_ERROR)."""
    return re.sub(r"(?<!^)(?=[A-Z])", "_", type(exc).__name__).upper()


def _record_error(error_log: ErrorLogBuffer | None, session_id: str, exc: BaseException) -> None:
    if error_log is None:
        return
    file = REQUEST_SCOPE
    row = -1
    if isinstance(exc, FileAnalysisError):
        file = exc.file_name
    elif isinstance(exc, DocumentRenderError):
        row = exc.index
    message = exc.message if isinstance(exc, SheetDocError) else str(exc)
    error_log.append(ErrorRecord.create(session_id, file, "", row, _error_type(exc), message))


def generate_documents(
    uploads: Sequence[UploadedFile],
    template_id: str,
    config: AppConfig,
    cursor: Any = None,
    *,
    session_id: str | None = None,
    assembler: DocumentAssembler | None = None,
    error_log: ErrorLogBuffer | None = None,
) -> GenerationResult:
    """Run one generation request.

    Args:
        uploads: Staged upload descriptors (removed when the call returns)
        template_id: Template identifier
        config: Application configuration
        cursor: Database cursor for the session record (None = mock mode)
        session_id: Request id (a new uuid4 hex when omitted)
        assembler: Document assembler (built from ``config`` when omitted)
        error_log: Buffer receiving one record per failed request

    Returns:
        GenerationResult with document descriptors, counters and zip archive location

    Raises:
        SheetDocError: the original error kind with ``session_id`` attached
    """
    sid = session_id or new_session_id()
    started = time.perf_counter()
    try:
        if not uploads:
            raise NoUploadsError()
        logger.info("[%s] Processing %d file(s) for template %s", sid, len(uploads), template_id)

        catalog = analyze_uploaded_files(uploads)
        filtered = filter_sheets_by_template(catalog, template_id)
        metadata = catalog_metadata(filtered)

        merged = merge_rows(filtered)
        enforce_row_limit(merged, config.max_rows)
        logger.info("[%s] Combined data: %d rows from %d sheet(s)", sid, len(merged), len(filtered))

        selected = select_rows_to_persist(merged, template_id)
        record = build_session_record(sid, template_id, len(uploads), len(merged), selected)
        saved_rows = save_session(cursor, record)
        logger.info("[%s] Rows selected for persistence: %d of %d", sid, saved_rows, len(merged))

        assembler = assembler or build_assembler(config)
        documents = assembler.assemble(merged, template_id, sid, metadata)

        zip_name = f"documents_{sid}.zip"
        archive_path = create_zip(documents, Path(config.output_dir) / zip_name)
        elapsed = time.perf_counter() - started
        logger.info("[%s] Successfully generated %d document(s)", sid, len(documents))

        return GenerationResult(
            session_id=sid,
            template_id=template_id,
            documents=documents,
            file_analysis=metadata,
            file_count=len(uploads),
            total_rows=len(merged),
            saved_rows=saved_rows,
            archive_path=str(archive_path),
            download_url=f"{config.public_url_prefix.rstrip('/')}/{zip_name}",
            elapsed_seconds=elapsed,
        )
    except SheetDocError as e:
        e.session_id = sid
        logger.error("[%s] %s", sid, e.message)
        _record_error(error_log, sid, e)
        raise
    except Exception as e:
        logger.error("[%s] unexpected error: %s", sid, e)
        _record_error(error_log, sid, e)
        raise GenerationError(f"document generation failed: {e}", session_id=sid) from e
    finally:
        cleanup_uploads(uploads)
