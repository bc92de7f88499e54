from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from .formula import Formula

"""Cross-statement validation models.

A ValidationRule compares an ``actual`` value against an ``expected`` value,
each produced by a value reference evaluated against the resolved sheets:

- RowRef: one row of one resolved sheet (``balance_sheet.C33``)
- ExprRef: additive expression over one resolved sheet (``C17+C22``)
- CallableRef: any function of the resolved sheets mapping
"""

__all__ = [
    "DEFAULT_TOLERANCE",
    "RowRef",
    "ExprRef",
    "CallableRef",
    "ValueRef",
    "ValidationRule",
    "ValidationResult",
    "ValidationReport",
]

DEFAULT_TOLERANCE = 0.01


@dataclass(frozen=True)
class RowRef:
    sheet: str
    row_id: str
    label: str | None = None

    @property
    def display(self) -> str:
        return self.label or self.row_id


@dataclass(frozen=True)
class ExprRef:
    sheet: str
    formula: Formula
    label: str | None = None

    def __post_init__(self) -> None:
        if isinstance(self.formula, str):
            object.__setattr__(self, "formula", Formula.parse(self.formula))

    @property
    def display(self) -> str:
        return self.label or self.formula.text


@dataclass(frozen=True)
class CallableRef:
    """Closure over the resolved sheets: ``func(resolved_sheets) -> float``."""
    func: Callable[[Mapping[str, Any]], float]
    label: str

    @property
    def display(self) -> str:
        return self.label


ValueRef = RowRef | ExprRef | CallableRef


@dataclass(frozen=True)
class ValidationRule:
    id: str
    description: str
    actual: ValueRef  # left side of the mismatch message
    expected: ValueRef  # right side of the mismatch message
    tolerance: float = DEFAULT_TOLERANCE
    unit: str = "amount"  # amount | count | rate, picks the display format


@dataclass(frozen=True)
class ValidationResult:
    id: str
    description: str
    expected: float
    actual: float
    passed: bool  # |expected - actual| <= tolerance
    error: str = ""  # empty when passed
    skipped: bool = False  # a referenced sheet/row was not supplied; 0 used


@dataclass(frozen=True)
class ValidationReport:
    results: tuple[ValidationResult, ...]

    @property
    def passed(self) -> int:
        return sum(1 for r in self.results if r.passed)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.passed)

    @property
    def skipped(self) -> int:
        return sum(1 for r in self.results if r.skipped)

    @property
    def all_passed(self) -> bool:
        return self.failed == 0

    def failures(self) -> list[ValidationResult]:
        return [r for r in self.results if not r.passed]
