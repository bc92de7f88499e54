from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from ..exceptions import RowEvaluationError
from ..models.resolution import Resolution
from ..models.validation import (
    CallableRef,
    ExprRef,
    RowRef,
    ValidationReport,
    ValidationResult,
    ValidationRule,
)
from .evaluator import evaluate
from .formatting import DEFAULT_CURRENCY, format_amount, format_count, format_rate

"""Cross-statement validator.

run_validations() is a pure function of the rules and the resolved sheets.
Each rule is evaluated independently and the results come back in rule
order. Missing sheets or rows read as 0 and flag the result ``skipped``;
a reference that touches an errored row fails the rule with a diagnostic.
Mismatches are results; nothing here raises for them.
"""

__all__ = [
    "run_validations",
    "build_report",
]

logger = logging.getLogger(__name__)

ResolvedSheets = Mapping[str, "Resolution | Mapping[str, float]"]


@dataclass
class _Side:
    value: float = 0.0
    missing: list[str] = field(default_factory=list)
    failed: list[tuple[str, str]] = field(default_factory=list)  # (row ref, message)


def _split(resolved: Any) -> tuple[Mapping[str, float], Mapping[str, RowEvaluationError]]:
    if isinstance(resolved, Resolution):
        return resolved.values, resolved.errors
    return resolved, {}


def _row_reader(sheet_name: str, resolved: ResolvedSheets, side: _Side) -> Callable[[str], float]:
    sheet = resolved.get(sheet_name)
    if sheet is None:
        side.missing.append(sheet_name)
        return lambda row_id: 0.0
    values, errors = _split(sheet)

    def read(row_id: str) -> float:
        if row_id in errors:
            side.failed.append((f"{sheet_name}.{row_id}", errors[row_id].message))
            return 0.0
        if row_id not in values:
            side.missing.append(f"{sheet_name}.{row_id}")
            return 0.0
        return values[row_id]

    return read


def _read_side(ref: Any, resolved: ResolvedSheets) -> _Side:
    side = _Side()
    if isinstance(ref, RowRef):
        side.value = _row_reader(ref.sheet, resolved, side)(ref.row_id)
    elif isinstance(ref, ExprRef):
        side.value = evaluate(ref.formula, _row_reader(ref.sheet, resolved, side))
    elif isinstance(ref, CallableRef):
        try:
            side.value = float(ref.func(resolved))
        except Exception as e:  # closure errors fail this rule only
            side.failed.append((ref.label, f"{type(e).__name__}: {e}"))
    else:
        raise TypeError(f"unsupported value reference: {ref!r}")
    return side


def _formatter(unit: str, currency: str) -> Callable[[float], str]:
    if unit == "count":
        return format_count
    if unit == "rate":
        return format_rate
    return lambda v: format_amount(v, currency)


def _check(rule: ValidationRule, resolved: ResolvedSheets, currency: str) -> ValidationResult:
    actual = _read_side(rule.actual, resolved)
    expected = _read_side(rule.expected, resolved)
    skipped = bool(actual.missing or expected.missing)

    failed = actual.failed + expected.failed
    if failed:
        ref, message = failed[0]
        return ValidationResult(
            id=rule.id,
            description=rule.description,
            expected=expected.value,
            actual=actual.value,
            passed=False,
            error=f"Unresolved: {ref} could not be computed ({message})",
            skipped=skipped,
        )

    passed = abs(expected.value - actual.value) <= rule.tolerance
    error = ""
    if not passed:
        fmt = _formatter(rule.unit, currency)
        error = (
            f"Mismatch: {rule.actual.display} ({fmt(actual.value)}) "
            f"≠ {rule.expected.display} ({fmt(expected.value)})"
        )
    return ValidationResult(
        id=rule.id,
        description=rule.description,
        expected=expected.value,
        actual=actual.value,
        passed=passed,
        error=error,
        skipped=skipped,
    )


def run_validations(
    rules: Iterable[ValidationRule],
    resolved_sheets: ResolvedSheets,
    currency: str = DEFAULT_CURRENCY,
) -> list[ValidationResult]:
    """Evaluate every rule against ``resolved_sheets``.

    Args:
        rules: rules in declaration order
        resolved_sheets: pass name -> Resolution or plain {row_id: value} map
        currency: currency code used to format amounts in mismatch messages

    Returns:
        One ValidationResult per rule, in rule order
    """
    results = []
    for rule in rules:
        result = _check(rule, resolved_sheets, currency)
        if not result.passed:
            logger.warning(f"rule={result.id} {result.error}")
        elif result.skipped:
            logger.debug(f"rule={result.id} skipped: referenced values not supplied")
        results.append(result)
    return results


def build_report(results: Iterable[ValidationResult]) -> ValidationReport:
    return ValidationReport(results=tuple(results))
