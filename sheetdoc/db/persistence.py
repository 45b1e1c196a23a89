from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from functools import partial
from typing import Any

from psycopg2.extras import Json

from ..errors import SheetDocError
from ..models.tagged_row import TaggedRow

"""Persistence of the rows selected for audit.

One INSERT per generation request into ``generation_sessions``; the selected rows are
stored as one JSONB document in their compressed form (provenance keys plus non-empty
values). Transaction boundaries belong to the caller's connection. ``cursor=None`` runs
in mock mode: nothing is written, the row count is still reported.
"""

__all__ = [
    "SESSIONS_TABLE",
    "CREATE_TABLE_SQL",
    "ensure_table",
    "PersistenceError",
    "SessionRecord",
    "build_session_record",
    "save_session",
]

logger = logging.getLogger(__name__)

SESSIONS_TABLE = "generation_sessions"

CREATE_TABLE_SQL = f"""
CREATE TABLE IF NOT EXISTS {SESSIONS_TABLE} (
    id BIGSERIAL PRIMARY KEY,
    session_id TEXT NOT NULL,
    template_id TEXT NOT NULL,
    file_count INTEGER NOT NULL,
    total_rows INTEGER NOT NULL,
    saved_rows INTEGER NOT NULL,
    data JSONB NOT NULL,
    created_at TIMESTAMPTZ NOT NULL DEFAULT now()
)
"""

_INSERT_SQL = (
    f"INSERT INTO {SESSIONS_TABLE} "
    "(session_id, template_id, file_count, total_rows, saved_rows, data) "
    "VALUES (%s, %s, %s, %s, %s, %s)"
)

# Excel cells may hold datetimes / numpy scalars
_dumps = partial(json.dumps, ensure_ascii=False, default=str)


class PersistenceError(SheetDocError):
    pass


def ensure_table(cursor: Any) -> None:
    """Create ``generation_sessions`` when missing (no-op in mock mode).

    psycopg2 errors propagate; the caller owns the transaction.
    """
    if cursor is None:
        return
    cursor.execute(CREATE_TABLE_SQL)
    logger.debug("ensured table %s", SESSIONS_TABLE)


@dataclass(frozen=True)
class SessionRecord:
    session_id: str
    template_id: str
    file_count: int
    total_rows: int  # Merged rows before selection
    saved_rows: int  # len(data)
    data: list[dict[str, Any]] = field(default_factory=list)


def build_session_record(
    session_id: str,
    template_id: str,
    file_count: int,
    total_rows: int,
    selected: Sequence[TaggedRow],
) -> SessionRecord:
    data = [row.to_record() for row in selected]
    return SessionRecord(
        session_id=session_id,
        template_id=template_id,
        file_count=file_count,
        total_rows=total_rows,
        saved_rows=len(data),
        data=data,
    )


def save_session(cursor: Any, record: SessionRecord) -> int:
    """Insert one session record.

    Args:
        cursor: psycopg2 cursor (None = mock mode)
        record: Rows selected for persistence plus request counters

    Returns:
        Number of rows archived (``record.saved_rows``)

    Raises:
        PersistenceError: the INSERT failed
    """
    if cursor is None:
        logger.debug("session=%s mock mode saved_rows=%d", record.session_id[:8], record.saved_rows)
        return record.saved_rows
    try:
        cursor.execute(
            _INSERT_SQL,
            (
                record.session_id,
                record.template_id,
                record.file_count,
                record.total_rows,
                record.saved_rows,
                Json(record.data, dumps=_dumps),
            ),
        )
    except Exception as e:
        raise PersistenceError(f"cannot save session {record.session_id}: {e}") from e
    logger.info("Saved %d rows to %s", record.saved_rows, SESSIONS_TABLE)
    return record.saved_rows
