from __future__ import annotations

import logging
import random
from collections.abc import Iterable, Sequence
from datetime import UTC, datetime
from pathlib import Path

from openpyxl.utils import get_column_letter

from ..domain.randomizer import RandomSource
from ..domain.rewriter import CellRewriter
from ..domain.tolerance import ToleranceWindowTracker, is_angular_description
from ..excel.grid import SheetGrid
from ..excel.reader import LoadedReport, WorkbookReadError, iter_sheet_grids, load_report, save_report
from ..logging.error_log import ErrorLogBuffer, ErrorRecord
from ..models.config_models import DEFAULT_TARGET_COLUMNS, ColumnLayout, RewriteConfig
from ..models.processing_stats import ProcessingStats
from ..models.report_file import FileStatus, ReportFile
from ..models.row_inspection import RowInspection
from ..models.run_result import FileStat, RunResult
from ..models.sheet_result import SheetResult
from .progress import ProgressTracker, SheetProgressIndicator

logger = logging.getLogger(__name__)

"""Service orchestration for the inspection report rewriter.

Two levels:

- workbook level: :func:`rewrite_report` takes report bytes, walks every
  populated row of every sheet (tolerance tracker, then cell rewriter) and
  returns the rewritten bytes plus the run's ProcessingStats,
- batch level: :func:`process_all` rewrites every report of the configured
  directory into the output directory, one file at a time; a failing file is
  logged and the run continues.
"""


class ProcessingError(Exception):
    """Base exception for processing errors."""
    pass


class NoDataError(ProcessingError):
    """Raised when no sheet of the workbook holds any populated row."""
    pass


def rewrite_sheet(
    grid: SheetGrid,
    stats: ProcessingStats,
    target_columns: Sequence[int] = DEFAULT_TARGET_COLUMNS,
    layout: ColumnLayout | None = None,
    rewriter: CellRewriter | None = None,
    tracker: ToleranceWindowTracker | None = None,
) -> None:
    """Rewrite the target columns of every populated row of one sheet.

    Tolerance bounds are latched per sheet (a passed-in tracker is reset
    first), a row before the first complete tolerance definition is counted
    but left untouched.
    """
    layout = layout or ColumnLayout()
    rewriter = rewriter or CellRewriter()
    tracker = tracker or ToleranceWindowTracker()
    tracker.reset()

    for row in grid.iter_rows():
        stats.total_rows += 1
        window = tracker.observe(
            row.value(layout.description),
            row.value(layout.upper),
            row.value(layout.lower),
        )
        if window is None:
            continue
        rewriter.rewrite_row(row.cells(target_columns), window, stats)


def rewrite_workbook(
    report: LoadedReport,
    target_columns: Sequence[int] = DEFAULT_TARGET_COLUMNS,
    *,
    layout: ColumnLayout | None = None,
    rng: RandomSource | None = None,
    sheet_results: list[SheetResult] | None = None,
    progress: SheetProgressIndicator | None = None,
) -> ProcessingStats:
    """Rewrite every sheet of a loaded report in place.

    Args:
        report: Workbook (and cached-values twin) to mutate
        target_columns: 0-based measured-value columns
        layout: Description / tolerance column positions
        rng: Randomness source (None = global ``random``)
        sheet_results: Optional list receiving one SheetResult per sheet

    Raises:
        NoDataError: If no sheet has a populated row
    """
    stats = ProcessingStats()
    rewriter = CellRewriter(rng)
    tracker = ToleranceWindowTracker()
    sheets_with_data = 0

    for grid in iter_sheet_grids(report):
        if progress is not None:
            progress.start_sheet(grid.title)
        if not grid.has_data():
            logger.debug("sheet=%s has no populated rows, skipped", grid.title)
            if sheet_results is not None:
                sheet_results.append(SheetResult(sheet_name=grid.title, skipped=True))
            if progress is not None:
                progress.finish_sheet(skipped=True)
            continue

        sheets_with_data += 1
        sheet_stats = ProcessingStats()
        rewrite_sheet(grid, sheet_stats, target_columns, layout, rewriter, tracker)
        logger.debug(
            "sheet=%s rows=%d cells=%d in_spec=%d out_of_spec=%d",
            grid.title,
            sheet_stats.total_rows,
            sheet_stats.processed_cells,
            sheet_stats.in_spec_count,
            sheet_stats.out_of_spec_count,
        )
        stats.add(sheet_stats)
        if sheet_results is not None:
            sheet_results.append(SheetResult(sheet_name=grid.title, stats=sheet_stats))
        if progress is not None:
            progress.finish_sheet(cells_processed=sheet_stats.processed_cells)

    if sheets_with_data == 0:
        raise NoDataError("no sheet with data found in workbook")
    return stats


def rewrite_report(
    data: bytes,
    target_columns: Sequence[int] = DEFAULT_TARGET_COLUMNS,
    *,
    layout: ColumnLayout | None = None,
    rng: RandomSource | None = None,
) -> tuple[bytes, ProcessingStats]:
    """Rewrite report bytes and return ``(rewritten_bytes, stats)``.

    Raises:
        WorkbookReadError: If ``data`` is not a readable .xlsx workbook
        NoDataError: If no sheet has data (nothing is serialized)
    """
    report = load_report(data)
    stats = rewrite_workbook(report, target_columns, layout=layout, rng=rng)
    return save_report(report.workbook), stats


def describe_sheet(
    grid: SheetGrid,
    target_columns: Sequence[int] = DEFAULT_TARGET_COLUMNS,
    layout: ColumnLayout | None = None,
) -> list[RowInspection]:
    """Read-only walk of a sheet reporting the tolerance window of each row."""
    layout = layout or ColumnLayout()
    tracker = ToleranceWindowTracker()
    rows: list[RowInspection] = []
    for row in grid.iter_rows():
        description = row.value(layout.description)
        tracker.observe(description, row.value(layout.upper), row.value(layout.lower))
        rows.append(
            RowInspection(
                row_number=row.number,
                kind="angular" if is_angular_description(description) else "linear",
                lower=tracker.lower,
                upper=tracker.upper,
                values={get_column_letter(c + 1): row.value(c) for c in target_columns},
            )
        )
    return rows


def scan_report_files(directory: Path, output_suffix: str = "") -> list[Path]:
    """Scan directory for .xlsx reports (non-recursive, sorted by name).

    Excel lock files (``~$*.xlsx``) and files already carrying
    ``output_suffix`` are ignored.

    Raises:
        ProcessingError: If directory doesn't exist or can't be read
    """
    if not directory.exists():
        raise ProcessingError(f"Directory not found: {directory}")

    if not directory.is_dir():
        raise ProcessingError(f"Path is not a directory: {directory}")

    try:
        candidates = [p for p in directory.iterdir() if p.is_file() and p.suffix == ".xlsx"]
    except OSError as e:
        raise ProcessingError(f"Error reading directory {directory}: {e}") from e

    files = []
    for p in sorted(candidates):
        if p.name.startswith("~$"):
            continue
        if output_suffix and p.stem.endswith(output_suffix):
            continue
        files.append(p)
    return files


def output_path_for(source: Path, output_directory: Path, output_suffix: str) -> Path:
    return output_directory / f"{source.stem}{output_suffix}{source.suffix}"


def _run_rng(config: RewriteConfig, rng: RandomSource | None) -> RandomSource | None:
    if rng is not None:
        return rng
    if config.seed is not None:
        return random.Random(config.seed)
    return None


def process_all(
    config: RewriteConfig,
    files: Iterable[Path] | None = None,
    rng: RandomSource | None = None,
    error_log: ErrorLogBuffer | None = None,
) -> RunResult:
    """Rewrite all reports of the configured directory (or ``files``).

    Args:
        config: Rewrite configuration
        files: Explicit report paths; None scans ``config.source_directory``
        rng: Randomness source; defaults to a seeded Random when
            ``config.seed`` is set, else the global ``random``
        error_log: Error buffer (a fresh one writing under ./logs by default)

    Returns:
        RunResult with summed ProcessingStats and per-file stats

    Raises:
        ProcessingError: If the source directory cannot be scanned
    """
    start_time = datetime.now(UTC)
    error_log = error_log if error_log is not None else ErrorLogBuffer()
    run_rng = _run_rng(config, rng)

    if files is None:
        file_paths = scan_report_files(Path(config.source_directory), config.output_suffix)
    else:
        file_paths = list(files)

    output_directory = Path(config.output_directory)
    totals = ProcessingStats()
    file_stats: list[FileStat] = []
    success_count = 0
    failed_count = 0

    with ProgressTracker(len(file_paths), description="Rewriting reports") as progress:
        for file_path in file_paths:
            progress.start_file(file_path)

            file_start = datetime.now(UTC)
            file_result = _process_single_file(file_path, config, output_directory, run_rng, error_log)
            file_elapsed = (datetime.now(UTC) - file_start).total_seconds()

            if file_result.status == FileStatus.SUCCESS:
                success_count += 1
                totals.add(file_result.stats)
                logger.info(
                    "%s -> %s sheets=%d cells=%d in_spec=%d out_of_spec=%d",
                    file_path.name,
                    file_result.output_path.name if file_result.output_path else "-",
                    file_result.rewritten_sheets,
                    file_result.stats.processed_cells,
                    file_result.stats.in_spec_count,
                    file_result.stats.out_of_spec_count,
                )
            else:
                failed_count += 1
                logger.warning("%s failed: %s", file_path.name, file_result.error)

            progress.set_postfix(
                cells=totals.processed_cells,
                in_spec=totals.in_spec_count,
                out_spec=totals.out_of_spec_count,
            )
            progress.finish_file()

            file_stats.append(
                FileStat(
                    file_name=file_path.name,
                    status=file_result.status.value,
                    processed_cells=file_result.stats.processed_cells,
                    elapsed_seconds=file_elapsed,
                    output_name=file_result.output_path.name if file_result.output_path else None,
                )
            )

    error_counts = error_log.counts_by_type()
    try:
        written = error_log.flush()
    except OSError as e:
        # エラーログ書き込み失敗で全体を失敗させない
        logger.warning("failed to write error log: %s", e)
    else:
        if written is not None:
            logger.info(
                "error log written to %s (%s)",
                written,
                " ".join(f"{k}={v}" for k, v in error_counts.items()),
            )

    end_time = datetime.now(UTC)
    return RunResult(
        success_files=success_count,
        failed_files=failed_count,
        stats=totals,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        file_stats=file_stats,
    )


def _failed(file_path: Path, error: str, sheets: list[SheetResult] | None = None) -> ReportFile:
    return ReportFile(
        path=file_path,
        name=file_path.name,
        status=FileStatus.FAILED,
        sheets=sheets or [],
        error=error,
    )


def _process_single_file(
    file_path: Path,
    config: RewriteConfig,
    output_directory: Path,
    rng: RandomSource | None,
    error_log: ErrorLogBuffer,
) -> ReportFile:
    """Rewrite one report file and write the result next to the others.

    Nothing is written for a file that fails; the failure is recorded in the
    error log with ``row=-1``.
    """
    sheets: list[SheetResult] = []

    def _record(error_type: str, message: str) -> ReportFile:
        error_log.append(
            ErrorRecord.create(
                file=file_path.name,
                sheet="<FILE_LEVEL>",
                row=-1,
                error_type=error_type,
                message=message,
            )
        )
        return _failed(file_path, message, sheets)

    try:
        data = file_path.read_bytes()
        report = load_report(data)
        sheet_progress = SheetProgressIndicator(file_path.name, len(report.workbook.worksheets))
        stats = rewrite_workbook(
            report,
            config.target_columns,
            layout=config.layout,
            rng=rng,
            sheet_results=sheets,
            progress=sheet_progress,
        )
        payload = save_report(report.workbook)
    except WorkbookReadError as e:
        return _record("WORKBOOK_READ_ERROR", str(e))
    except NoDataError as e:
        return _record("NO_DATA", str(e))
    except OSError as e:
        return _record("READ_ERROR", str(e))
    except Exception as e:
        logger.debug("unexpected failure on %s", file_path.name, exc_info=True)
        return _record("UNEXPECTED_ERROR", f"{type(e).__name__}: {e}")

    out_path = output_path_for(file_path, output_directory, config.output_suffix)
    try:
        output_directory.mkdir(parents=True, exist_ok=True)
        out_path.write_bytes(payload)
    except OSError as e:
        return _record("WRITE_ERROR", str(e))

    return ReportFile(
        path=file_path,
        name=file_path.name,
        status=FileStatus.SUCCESS,
        sheets=sheets,
        stats=stats,
        output_path=out_path,
        error=None,
    )
