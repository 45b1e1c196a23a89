from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

"""Output models: document descriptors and the per-request generation result."""

__all__ = [
    "DocumentDescriptor",
    "GenerationResult",
]


@dataclass(frozen=True)
class DocumentDescriptor:
    """One written document, consumed by the archiving step."""
    name: str  # File name
    path: str  # Filesystem location
    url: str  # Public-facing reference

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "path": self.path, "url": self.url}


@dataclass(frozen=True)
class GenerationResult:
    """Aggregated outcome of one generation request."""
    session_id: str
    template_id: str
    documents: list[DocumentDescriptor]
    file_analysis: dict[int, dict[str, Any]] = field(default_factory=dict)
    file_count: int = 0  # Uploaded files
    total_rows: int = 0  # Merged TaggedRows after sheet filtering
    saved_rows: int = 0  # Rows handed to the persistence store
    archive_path: str | None = None
    download_url: str | None = None
    elapsed_seconds: float = 0.0

    @property
    def count(self) -> int:
        return len(self.documents)
