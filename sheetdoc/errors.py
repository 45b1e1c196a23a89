from __future__ import annotations

"""Root of the error taxonomy.

Every failure inside one generation request is fatal to that request. Concrete error
kinds live next to the code that raises them (reader, analysis, sheet filter, row
selector, assembler, persistence, orchestrator); they all derive from ``SheetDocError``
so the CLI can report them uniformly together with the session id.
"""

__all__ = [
    "SheetDocError",
]


class SheetDocError(Exception):
    """Base class for request-fatal errors.

    ``session_id`` is attached by the orchestrator once the error escapes the pipeline.
    """

    def __init__(self, message: str, *, session_id: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.session_id = session_id
