from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Any

import psycopg2
from dotenv import load_dotenv

from ..config.loader import AppConfig, ConfigError, apply_env_overrides, default_config, load_config
from ..db.persistence import ensure_table
from ..errors import SheetDocError
from ..excel.reader import read_sheets
from ..logging.error_log import ErrorLogBuffer, ErrorRecord
from ..logging.init import log_summary, setup_logging
from ..models.upload import UploadedFile
from ..render.store import TemplateStore
from ..services.classifier import classify
from ..services.cleanup import cleanup_old_files
from ..services.orchestrator import (
    REQUEST_SCOPE,
    cleanup_uploads,
    generate_documents,
    new_session_id,
    stage_uploads,
)
from ..services.summary import render_summary_line
from ..services.templates import list_available_templates

"""CLI entrypoint.

Subcommands:
- generate: spreadsheets -> .docx documents (+ zip) for one template
- templates: list templates whose render resource is installed
- inspect: print sheet names, detected roles, headers and sample rows
- cleanup: delete stale files from the upload / output directories
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1

DEFAULT_CONFIG_PATH = Path("config/app.yml")
SAMPLE_ROWS = 3


def _resolve_dsn(cfg: AppConfig) -> str:
    """Connection string; environment first, config ``database`` section as fallback.

    DATABASE_URL / PGDSN is used as a whole, otherwise PGHOST / PGPORT / PGUSER /
    PGPASSWORD / PGDATABASE are combined with the config values.
    """
    db_cfg = cfg.database
    dsn = os.getenv("DATABASE_URL") or os.getenv("PGDSN") or db_cfg.dsn
    if dsn:
        return dsn
    host = os.getenv("PGHOST", db_cfg.host or "localhost")
    port = os.getenv("PGPORT", str(db_cfg.port) if db_cfg.port else "5432")
    user = os.getenv("PGUSER", db_cfg.user or "postgres")
    password = os.getenv("PGPASSWORD", db_cfg.password or "")
    database = os.getenv("PGDATABASE", db_cfg.database or "postgres")
    dsn = f"host={host} port={port} user={user} dbname={database}"
    if password:
        dsn += f" password={password}"
    return dsn


def _open_connection(cfg: AppConfig, logger: logging.Logger) -> Any:
    """psycopg2 connection, or None (mock mode) when disabled or unreachable."""
    if os.getenv("DISABLE_DB_CONNECT") == "1":
        logger.debug("DB connect disabled via DISABLE_DB_CONNECT=1 -> mock mode")
        return None
    try:
        conn = psycopg2.connect(_resolve_dsn(cfg))
    except psycopg2.Error as e:
        logger.info("DB connection failed -> fallback to mock mode: %s", e)
        return None
    conn.autocommit = False
    return conn


def _rollback(conn: Any, logger: logging.Logger) -> None:
    if conn is None:
        return
    try:
        conn.rollback()
    except psycopg2.Error as e:
        logger.warning("rollback failed: %s", e)


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env; its values win over variables already in the environment."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _load_app_config(config_path: Path | None) -> AppConfig:
    if config_path is None:
        cfg = load_config(DEFAULT_CONFIG_PATH) if DEFAULT_CONFIG_PATH.exists() else default_config()
    else:
        cfg = load_config(config_path)
    return apply_env_overrides(cfg)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="sheetdoc", description="Spreadsheet -> Word document generator")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--config", type=Path, default=None, help=f"Config file (default: {DEFAULT_CONFIG_PATH})")
    sub = p.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate", help="Generate documents for one template")
    gen.add_argument("-t", "--template", required=True, help="Template id (see 'sheetdoc templates')")
    gen.add_argument("files", nargs="+", type=Path, help=".csv / .xlsx / .xls files")

    sub.add_parser("templates", help="List available templates")

    insp = sub.add_parser("inspect", help="Print sheets, detected roles and sample rows")
    insp.add_argument("files", nargs="+", type=Path)

    sub.add_parser("cleanup", help="Delete stale uploads and generated documents")
    return p.parse_args(argv)


def _cmd_generate(args: argparse.Namespace, cfg: AppConfig, logger: logging.Logger) -> int:
    error_log = ErrorLogBuffer()
    try:
        try:
            uploads = stage_uploads(args.files, cfg.upload_dir, cfg.max_file_size)
        except SheetDocError as e:
            logger.error("upload: %s", e.message)
            return EXIT_FATAL

        sid = new_session_id()
        conn = _open_connection(cfg, logger)
        try:
            cursor = None
            if conn is not None:
                cursor = conn.cursor()
                ensure_table(cursor)
            result = generate_documents(
                uploads, args.template, cfg, cursor, session_id=sid, error_log=error_log
            )
            if conn is not None:
                conn.commit()
        except SheetDocError as e:
            _rollback(conn, logger)
            logger.error("session=%s %s", e.session_id, e.message)
            return EXIT_FATAL
        except psycopg2.Error as e:
            # cursor / DDL / COMMIT failures happen outside the pipeline
            _rollback(conn, logger)
            cleanup_uploads(uploads)
            logger.error("session=%s database error: %s", sid, e)
            error_log.append(ErrorRecord.create(sid, REQUEST_SCOPE, "", -1, "DATABASE_ERROR", str(e)))
            return EXIT_FATAL
        finally:
            if conn is not None:
                conn.close()
    finally:
        log_path = error_log.flush()
        if log_path is not None:
            logger.info("error log written: %s", log_path)

    logger.info("mode=%s documents=%d", "live" if conn is not None else "mock", result.count)
    for doc in result.documents:
        logger.info("document: %s", doc.path)
    if result.archive_path:
        logger.info("archive: %s (%s)", result.archive_path, result.download_url)
    # log_summary adds the "SUMMARY " prefix itself
    log_summary(render_summary_line(result)[len("SUMMARY "):])
    return EXIT_SUCCESS


def _cmd_templates(cfg: AppConfig) -> int:
    templates = list_available_templates(TemplateStore(cfg.template_dir))
    if not templates:
        print(f"templates: none installed in {cfg.template_dir}")
        return EXIT_SUCCESS
    for entry in templates:
        print(f"{entry['id']}\t{entry['name']}\t{entry['description']}")
    return EXIT_SUCCESS


def _cmd_inspect(args: argparse.Namespace) -> int:
    status = EXIT_SUCCESS
    for path in args.files:
        print(f"FILE: {path.name}")
        try:
            tables = read_sheets(UploadedFile.from_path(path))
        except SheetDocError as e:
            print(f"  read_error: {e.message}")
            status = EXIT_FATAL
            continue
        for sheet_name, table in tables.items():
            role = classify(table.first_row)
            print(f"  SHEET: {sheet_name} type={role.value} rows={table.row_count} cols={table.columns}")
            # datetimes are not JSON friendly; print isoformat instead
            sample = [
                {k: (v.isoformat() if hasattr(v, "isoformat") else v) for k, v in row.items()}
                for row in table.rows[:SAMPLE_ROWS]
            ]
            print("    sample_rows=", sample)
    return status


def _cmd_cleanup(cfg: AppConfig, logger: logging.Logger) -> int:
    deleted = cleanup_old_files([cfg.upload_dir, cfg.output_dir], cfg.file_max_age_hours)
    logger.info("cleanup: deleted %d file(s) older than %sh", deleted, cfg.file_max_age_hours)
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None only: an explicit [] must not fall back to sys.argv (pytest arguments)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)

    if args.debug:
        logger = setup_logging(logging.DEBUG)
        logger.debug("debug mode enabled")

    _load_env_file(Path(".env"), override=True)
    try:
        cfg = _load_app_config(args.config)
    except ConfigError as e:
        logger.error("config: %s", e)
        return EXIT_FATAL

    if args.command == "generate":
        return _cmd_generate(args, cfg, logger)
    if args.command == "templates":
        return _cmd_templates(cfg)
    if args.command == "inspect":
        return _cmd_inspect(args)
    return _cmd_cleanup(cfg, logger)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
