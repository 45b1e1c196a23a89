from __future__ import annotations

import logging
import zipfile
from collections.abc import Iterable
from pathlib import Path

from ..models.document import DocumentDescriptor

"""Zip packaging of generated documents."""

__all__ = [
    "create_zip",
]

logger = logging.getLogger(__name__)


def create_zip(documents: Iterable[DocumentDescriptor], zip_path: Path) -> Path:
    """Write every existing document into ``zip_path`` under its descriptor name.

    Missing files are skipped (logged at WARN). A name already written is skipped as
    well: rows sharing a file name overwrite one file on disk, so the archive keeps one
    entry for it.
    """
    zip_path = Path(zip_path)
    zip_path.parent.mkdir(parents=True, exist_ok=True)
    written: set[str] = set()
    with zipfile.ZipFile(zip_path, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=9) as zf:
        for doc in documents:
            src = Path(doc.path)
            if not src.exists():
                logger.warning("archive: missing document skipped: %s", src)
                continue
            if doc.name in written:
                logger.debug("archive: duplicate name skipped: %s", doc.name)
                continue
            zf.write(src, arcname=doc.name)
            written.add(doc.name)
    return zip_path
