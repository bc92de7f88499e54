from __future__ import annotations

from typing import Any

"""Exception taxonomy for the statement engine.

- ConfigurationError: a sheet definition or config file is rejected at load.
- RowEvaluationError (and subclasses): a single row failed during a
  resolution pass. These are collected per row, never raised out of resolve().
- WorkbookError / ProcessingError: batch run failures (file level / fatal).

Validation mismatches are results, not exceptions.
"""

__all__ = [
    "StatementError",
    "ConfigurationError",
    "RowEvaluationError",
    "RowReferenceError",
    "CycleError",
    "DependencyError",
    "RowValueError",
    "WorkbookError",
    "ProcessingError",
]


class StatementError(Exception):
    """Base exception for all statement engine errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class ConfigurationError(StatementError):
    """Raised when a statement definition or config file cannot be accepted."""


class RowEvaluationError(StatementError):
    """A single row could not be resolved in this pass."""

    error_type = "ROW_ERROR"

    def __init__(self, row_id: str, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, {"row_id": row_id, **(details or {})})
        self.row_id = row_id


class RowReferenceError(RowEvaluationError):
    """A formula token does not name a row of the sheet."""

    error_type = "REFERENCE_ERROR"

    def __init__(self, row_id: str | None, token: str) -> None:
        where = f" in formula of row '{row_id}'" if row_id else ""
        super().__init__(
            row_id or "",
            f"unknown row reference '{token}'{where}",
            {"token": token},
        )
        self.token = token


class CycleError(RowEvaluationError):
    """Row depends on itself, directly or transitively."""

    error_type = "CYCLE_ERROR"

    def __init__(self, row_id: str, cycle: list[str]) -> None:
        path = " -> ".join(cycle)
        if row_id in cycle:
            message = f"circular reference: {path}"
        else:
            message = f"row '{row_id}' depends on circular reference: {path}"
        super().__init__(row_id, message, {"cycle": list(cycle)})
        self.cycle = list(cycle)


class DependencyError(RowEvaluationError):
    """Row depends on a row that failed to resolve."""

    error_type = "DEPENDENCY_ERROR"

    def __init__(self, row_id: str, failed_row: str, cause: RowEvaluationError) -> None:
        super().__init__(
            row_id,
            f"row '{row_id}' depends on failed row '{failed_row}': {cause.message}",
            {"failed_row": failed_row},
        )
        self.failed_row = failed_row
        self.cause = cause


class RowValueError(RowEvaluationError):
    """Raw value supplied for an Input/Fetched row is not a number."""

    error_type = "VALUE_ERROR"

    def __init__(self, row_id: str, value: Any) -> None:
        super().__init__(row_id, f"row '{row_id}' value {value!r} is not numeric", {"value": repr(value)})
        self.value = value


class WorkbookError(StatementError):
    """Report workbook cannot be read (missing header, missing columns...)."""


class ProcessingError(StatementError):
    """Fatal error that stops a batch run."""
