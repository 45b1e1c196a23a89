from __future__ import annotations

import logging
import time
from collections.abc import Iterable
from pathlib import Path

"""Stale-file cleanup for the upload and output directories.

Files are removed by modification time. A failing directory is logged and skipped; the
remaining directories are still processed.
"""

__all__ = [
    "cleanup_old_files",
]

logger = logging.getLogger(__name__)


def cleanup_old_files(directories: Iterable[Path], max_age_hours: float, *, now: float | None = None) -> int:
    """Delete regular files older than ``max_age_hours``.

    Args:
        directories: Directories to sweep (non-recursive; missing ones are ignored)
        max_age_hours: Age limit based on mtime
        now: Reference timestamp (defaults to ``time.time()``)

    Returns:
        Number of deleted files
    """
    reference = time.time() if now is None else now
    max_age_seconds = max_age_hours * 3600
    deleted = 0

    for directory in directories:
        directory = Path(directory)
        if not directory.is_dir():
            continue
        try:
            for path in directory.iterdir():
                if not path.is_file():
                    continue
                if reference - path.stat().st_mtime > max_age_seconds:
                    path.unlink()
                    deleted += 1
                    logger.debug("cleanup: deleted %s", path)
        except OSError as e:
            logger.error("cleanup: failed in %s: %s", directory, e)

    if deleted:
        logger.info("Cleaned up %d old files", deleted)
    return deleted
