"""Domain models for the statement engine.

Statement definitions (Row, Sheet, StatementBook), resolution output,
validation rules/results, and batch run records.
"""

from .book import StatementBook
from .error_record import ErrorRecord
from .formula import Formula, Term
from .processing_result import ProcessingResult, WorkbookStat, WorkbookStatus
from .resolution import Resolution
from .row import Hierarchy, Rollup, RollupStat, Row, RowKind
from .sheet import Sheet
from .validation import (
    DEFAULT_TOLERANCE,
    CallableRef,
    ExprRef,
    RowRef,
    ValidationReport,
    ValidationResult,
    ValidationRule,
)

__all__ = [
    # Statement definitions
    "Formula",
    "Term",
    "Hierarchy",
    "Rollup",
    "RollupStat",
    "Row",
    "RowKind",
    "Sheet",
    "StatementBook",
    # Resolution / validation
    "Resolution",
    "DEFAULT_TOLERANCE",
    "CallableRef",
    "ExprRef",
    "RowRef",
    "ValidationReport",
    "ValidationResult",
    "ValidationRule",
    # Batch run
    "ErrorRecord",
    "ProcessingResult",
    "WorkbookStat",
    "WorkbookStatus",
]
