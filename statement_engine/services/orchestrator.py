from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path

from ..config.loader import ReportConfig
from ..exceptions import ProcessingError, WorkbookError
from ..excel.reader import read_report_workbook
from ..logging.error_log import ErrorLogBuffer
from ..models.book import StatementBook
from ..models.error_record import WORKBOOK_LEVEL, ErrorRecord
from ..models.processing_result import ProcessingResult, WorkbookStat, WorkbookStatus
from ..models.resolution import Resolution
from ..models.validation import ValidationReport
from .progress import ProgressTracker
from .resolver import resolve_book
from .validator import build_report, run_validations

"""Batch run over a directory of report workbooks.

Each ``.xlsx`` in ``source_directory`` is one reporting period of one
institution. For every workbook: read raw values per pass, resolve every
pass present, run all cross-statement rules, record row errors and failed
rules in the JSON Lines error log. Workbooks are independent; one failing
never stops the run.
"""

__all__ = [
    "scan_report_files",
    "process_workbook",
    "process_all",
]

logger = logging.getLogger(__name__)


def scan_report_files(directory: Path) -> list[Path]:
    """``.xlsx`` files directly under ``directory``, sorted by name.

    Raises:
        ProcessingError: directory missing or unreadable
    """
    if not directory.exists():
        raise ProcessingError(f"directory not found: {directory}")
    if not directory.is_dir():
        raise ProcessingError(f"path is not a directory: {directory}")
    try:
        return sorted(p for p in directory.iterdir() if p.is_file() and p.suffix == ".xlsx")
    except OSError as e:
        raise ProcessingError(f"error reading directory {directory}: {e}") from e


def _record_row_errors(
    source: str, resolved: dict[str, Resolution], error_log: ErrorLogBuffer
) -> int:
    count = 0
    for pass_name, resolution in resolved.items():
        for row_id, err in resolution.errors.items():
            error_log.append(
                ErrorRecord.create(
                    source=source,
                    sheet=pass_name,
                    row=row_id,
                    error_type=err.error_type,
                    message=err.message,
                )
            )
            count += 1
    return count


def _record_failed_rules(
    source: str, book: StatementBook, report: ValidationReport, error_log: ErrorLogBuffer
) -> None:
    for rule, result in zip(book.rules, report.results, strict=True):
        if result.passed:
            continue
        error_type = "UNRESOLVED" if result.error.startswith("Unresolved") else "VALIDATION_MISMATCH"
        error_log.append(
            ErrorRecord.create(
                source=source,
                sheet=getattr(rule.actual, "sheet", WORKBOOK_LEVEL),
                row=rule.id,
                error_type=error_type,
                message=result.error,
            )
        )


def _unreadable(path: Path, message: str, started: datetime, error_log: ErrorLogBuffer) -> WorkbookStat:
    logger.error(f"{path.name}: {message}")
    error_log.append(
        ErrorRecord.create(
            source=path.name,
            sheet=WORKBOOK_LEVEL,
            row=WORKBOOK_LEVEL,
            error_type="WORKBOOK_ERROR",
            message=message,
        )
    )
    return WorkbookStat(
        file_name=path.name,
        status=WorkbookStatus.UNREADABLE,
        resolved_rows=0,
        row_errors=0,
        rules_passed=0,
        rules_failed=0,
        rules_skipped=0,
        skipped_sheets=0,
        elapsed_seconds=(datetime.now(UTC) - started).total_seconds(),
        error=message,
    )


def process_workbook(
    path: Path, book: StatementBook, error_log: ErrorLogBuffer, currency: str
) -> WorkbookStat:
    """Resolve and validate one report workbook.

    Never raises for a bad workbook: unreadable files come back with
    status UNREADABLE and one WORKBOOK_ERROR record in ``error_log``.
    """
    started = datetime.now(UTC)
    try:
        raw_by_pass = read_report_workbook(path, book.pass_names)
    except WorkbookError as e:
        return _unreadable(path, e.message, started, error_log)
    if not raw_by_pass:
        return _unreadable(path, "no statement sheets found", started, error_log)

    skipped = [name for name in book.pass_names if name not in raw_by_pass]
    if skipped:
        logger.debug(f"{path.name}: sheets not present: {skipped}")

    resolved = resolve_book(book, raw_by_pass)
    row_errors = _record_row_errors(path.name, resolved, error_log)
    report = build_report(run_validations(book.rules, resolved, currency))
    _record_failed_rules(path.name, book, report, error_log)

    passed = row_errors == 0 and report.all_passed
    stat = WorkbookStat(
        file_name=path.name,
        status=WorkbookStatus.PASSED if passed else WorkbookStatus.FAILED,
        resolved_rows=sum(len(r.values) for r in resolved.values()),
        row_errors=row_errors,
        rules_passed=report.passed,
        rules_failed=report.failed,
        rules_skipped=report.skipped,
        skipped_sheets=len(skipped),
        elapsed_seconds=(datetime.now(UTC) - started).total_seconds(),
        report=report,
    )
    logger.info(
        f"{path.name}: {stat.status.value} rules={report.passed}/{len(report.results)} "
        f"row_errors={row_errors} skipped_sheets={len(skipped)}"
    )
    return stat


def process_all(config: ReportConfig, book: StatementBook) -> ProcessingResult:
    """Validate every report workbook under ``config.source_directory``.

    Raises:
        ProcessingError: the source directory cannot be scanned
    """
    start_time = datetime.now(UTC)
    error_log = ErrorLogBuffer(config.error_log_dir)
    file_paths = scan_report_files(Path(config.source_directory))

    stats: list[WorkbookStat] = []
    with ProgressTracker(len(file_paths)) as progress:
        for file_path in file_paths:
            progress.start_file(file_path)
            stat = process_workbook(file_path, book, error_log, config.currency)
            stats.append(stat)
            progress.finish_file(passed=stat.status is WorkbookStatus.PASSED)

    try:
        log_path = error_log.flush()
    except OSError as e:
        logger.warning(f"could not write error log: {e}")
    else:
        if log_path is not None:
            logger.info(f"error log written: {log_path}")

    end_time = datetime.now(UTC)
    passed_files = sum(1 for s in stats if s.status is WorkbookStatus.PASSED)
    return ProcessingResult(
        passed_files=passed_files,
        failed_files=len(stats) - passed_files,
        total_resolved_rows=sum(s.resolved_rows for s in stats),
        total_row_errors=sum(s.row_errors for s in stats),
        total_rules_failed=sum(s.rules_failed for s in stats),
        skipped_sheets=sum(s.skipped_sheets for s in stats),
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        workbook_stats=stats,
    )
