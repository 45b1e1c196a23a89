from __future__ import annotations

from ..models.document import GenerationResult

"""SUMMARY line rendering for one generation request.

Format:
SUMMARY session={sid8} template={id} files={n} rows={total} saved={saved}
documents={count} elapsed_sec={elapsed}
"""

__all__ = [
    "render_summary_line",
    "format_elapsed",
]


def format_elapsed(seconds: float) -> str:
    """Integers without a decimal point; tiny values without scientific notation."""
    if seconds == 0:
        return "0"
    if seconds == int(seconds):
        return str(int(seconds))
    if seconds < 0.01:
        return f"{seconds:.6f}".rstrip("0").rstrip(".")
    return f"{seconds:.3f}".rstrip("0").rstrip(".")


def render_summary_line(result: GenerationResult) -> str:
    """Render the SUMMARY line of a finished request.

    Examples:
        >>> result = GenerationResult(
        ...     session_id="0123456789abcdef", template_id="course", documents=[],
        ...     file_count=1, total_rows=3, saved_rows=3, elapsed_seconds=2.0,
        ... )
        >>> render_summary_line(result)
        'SUMMARY session=01234567 template=course files=1 rows=3 saved=3 documents=0 elapsed_sec=2'
    """
    return (
        f"SUMMARY session={result.session_id[:8]} "
        f"template={result.template_id} "
        f"files={result.file_count} "
        f"rows={result.total_rows} "
        f"saved={result.saved_rows} "
        f"documents={result.count} "
        f"elapsed_sec={format_elapsed(result.elapsed_seconds)}"
    )
