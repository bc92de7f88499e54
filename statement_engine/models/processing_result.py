from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from .validation import ValidationReport

"""Batch run result models.

WorkbookStat holds per-workbook figures; ProcessingResult aggregates a
whole run and feeds the SUMMARY line.
"""

__all__ = [
    "WorkbookStatus",
    "WorkbookStat",
    "ProcessingResult",
]


class WorkbookStatus(Enum):
    """Outcome of one report workbook.

    - PASSED: every pass resolved without row errors and every rule passed
    - FAILED: at least one row error or failed rule
    - UNREADABLE: the workbook itself could not be read
    """
    PASSED = "passed"
    FAILED = "failed"
    UNREADABLE = "unreadable"


@dataclass(frozen=True)
class WorkbookStat:
    file_name: str
    status: WorkbookStatus
    resolved_rows: int
    row_errors: int
    rules_passed: int
    rules_failed: int
    rules_skipped: int
    skipped_sheets: int  # defined statements absent from the workbook
    elapsed_seconds: float
    error: str | None = None
    report: ValidationReport | None = None  # None when unreadable


@dataclass(frozen=True)
class ProcessingResult:
    passed_files: int
    failed_files: int
    total_resolved_rows: int
    total_row_errors: int
    total_rules_failed: int
    skipped_sheets: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    workbook_stats: list[WorkbookStat] | None = None

    @property
    def total_files(self) -> int:
        return self.passed_files + self.failed_files
