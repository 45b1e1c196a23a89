from __future__ import annotations

from pathlib import Path

"""Output writer: binary document -> filesystem."""

__all__ = [
    "OutputWriter",
]


class OutputWriter:
    def write(self, path: Path, data: bytes) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return path
