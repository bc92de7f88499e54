"""Regulatory statement engine.

Resolves MSP2 statement sheets (additive formulas, rate roll-ups) from raw
Input/Fetched values and cross-checks the resolved statements against
each other.
"""

from .config.loader import load_definitions, load_report_config
from .exceptions import (
    ConfigurationError,
    CycleError,
    DependencyError,
    ProcessingError,
    RowEvaluationError,
    RowReferenceError,
    RowValueError,
    StatementError,
    WorkbookError,
)
from .models import (
    CallableRef,
    ExprRef,
    Formula,
    Hierarchy,
    Resolution,
    Rollup,
    RollupStat,
    Row,
    RowKind,
    RowRef,
    Sheet,
    StatementBook,
    ValidationReport,
    ValidationResult,
    ValidationRule,
)
from .services.aggregator import RateSummary, aggregate
from .services.evaluator import evaluate
from .services.resolver import resolve, resolve_book
from .services.validator import build_report, run_validations

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # core operations
    "evaluate",
    "resolve",
    "resolve_book",
    "aggregate",
    "RateSummary",
    "run_validations",
    "build_report",
    "load_definitions",
    "load_report_config",
    # models
    "Formula",
    "Hierarchy",
    "Rollup",
    "RollupStat",
    "Row",
    "RowKind",
    "Sheet",
    "StatementBook",
    "Resolution",
    "RowRef",
    "ExprRef",
    "CallableRef",
    "ValidationRule",
    "ValidationResult",
    "ValidationReport",
    # errors
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
