from __future__ import annotations

from ..models.processing_result import ProcessingResult

"""SUMMARY line rendering.

Format:
SUMMARY files={n}/{n} passed={a} failed={b} rows={r} row_errors={e}
rules_failed={f} skipped_sheets={s} elapsed_sec={t}
(one line, single spaces)
"""

__all__ = [
    "render_summary_line",
    "format_elapsed",
]


def format_elapsed(seconds: float) -> str:
    """Seconds without scientific notation or trailing zeros.

    >>> format_elapsed(2.0)
    '2'
    >>> format_elapsed(0.0004)
    '0.0004'
    """
    if seconds == 0:
        return "0"
    if seconds == int(seconds):
        return str(int(seconds))
    if seconds < 0.01:
        return f"{seconds:.6f}".rstrip("0").rstrip(".")
    return f"{seconds:.3f}".rstrip("0").rstrip(".")


def render_summary_line(result: ProcessingResult) -> str:
    """Render the SUMMARY line of a batch run.

    Examples:
        >>> from datetime import datetime, timezone
        >>> start = datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
        >>> end = datetime(2024, 1, 1, 10, 0, 2, tzinfo=timezone.utc)
        >>> result = ProcessingResult(
        ...     passed_files=1, failed_files=1, total_resolved_rows=236,
        ...     total_row_errors=0, total_rules_failed=2, skipped_sheets=1,
        ...     start_time=start, end_time=end, elapsed_seconds=2.0,
        ... )
        >>> render_summary_line(result)
        'SUMMARY files=2/2 passed=1 failed=1 rows=236 row_errors=0 rules_failed=2 skipped_sheets=1 elapsed_sec=2'
    """
    total = result.total_files
    return (
        f"SUMMARY files={total}/{total} "
        f"passed={result.passed_files} "
        f"failed={result.failed_files} "
        f"rows={result.total_resolved_rows} "
        f"row_errors={result.total_row_errors} "
        f"rules_failed={result.total_rules_failed} "
        f"skipped_sheets={result.skipped_sheets} "
        f"elapsed_sec={format_elapsed(result.elapsed_seconds)}"
    )
