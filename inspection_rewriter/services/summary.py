from __future__ import annotations

from ..models.run_result import RunResult

"""SUMMARY line rendering for batch rewrite runs."""


def _format_seconds(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # 指数表記を避ける
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.3f}".rstrip("0").rstrip(".")


def render_summary_line(result: RunResult) -> str:
    """Render the SUMMARY line of a run.

    Format:
    SUMMARY files={total}/{total} success={success} failed={failed} rows={rows}
    cells={cells} in_spec={in} out_of_spec={out} elapsed_sec={elapsed}

    Examples:
        >>> from datetime import datetime, timezone
        >>> from inspection_rewriter.models.processing_stats import ProcessingStats
        >>> start = datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
        >>> end = datetime(2024, 1, 1, 10, 0, 2, tzinfo=timezone.utc)
        >>> result = RunResult(
        ...     success_files=1, failed_files=0,
        ...     stats=ProcessingStats(total_rows=40, processed_cells=90, in_spec_count=85, out_of_spec_count=5),
        ...     start_time=start, end_time=end, elapsed_seconds=2.0,
        ... )
        >>> render_summary_line(result)
        'SUMMARY files=1/1 success=1 failed=0 rows=40 cells=90 in_spec=85 out_of_spec=5 elapsed_sec=2'
    """
    total = result.total_files
    stats = result.stats
    return (
        f"SUMMARY files={total}/{total} "
        f"success={result.success_files} "
        f"failed={result.failed_files} "
        f"rows={stats.total_rows} "
        f"cells={stats.processed_cells} "
        f"in_spec={stats.in_spec_count} "
        f"out_of_spec={stats.out_of_spec_count} "
        f"elapsed_sec={_format_seconds(result.elapsed_seconds)}"
    )
