from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for the JSON Lines error log.

Supports row=-1 as a sentinel for request/file-level errors where no specific row or
unit index applies.
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        session_id: Generation request the error belongs to
        file: Uploaded file name ("<REQUEST>" when not file specific)
        sheet: Sheet name ("" when not sheet specific)
        row: Row / unit number (1-based), -1 when unknown
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Human readable description
    """
    timestamp: str  # ISO8601 UTC
    session_id: str
    file: str
    sheet: str
    row: int  # -1 if not applicable
    error_type: str  # UPPER_SNAKE
    message: str

    @staticmethod
    def create(
        session_id: str, file: str, sheet: str, row: int, error_type: str, message: str
    ) -> ErrorRecord:
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            session_id=session_id,
            file=file,
            sheet=sheet,
            row=row,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        """Serialize to one JSON line (fixed key set, Thai text kept readable)."""
        return json.dumps(asdict(self), ensure_ascii=False)
