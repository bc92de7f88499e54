from __future__ import annotations

import logging
import math
from collections.abc import Iterator, Mapping
from typing import Any

from ..exceptions import CycleError, DependencyError, RowEvaluationError, RowValueError
from ..models.book import StatementBook
from ..models.resolution import Resolution
from ..models.sheet import Sheet
from .aggregator import RateComponent, aggregate
from .evaluator import evaluate

"""Sheet resolver: raw Input/Fetched values -> full value map.

Each call to resolve() starts with a fresh memo (the ``values`` dict) so
nothing survives between passes. Computed rows are resolved depth-first
with an explicit stack; a row is evaluated once all of its dependencies
are settled, and its value is then reused by every other dependent in the
same pass.

Rows on a cycle get a CycleError naming the cycle path; rows depending on
a failed row get the failure propagated. Everything else still resolves.
"""

__all__ = [
    "resolve",
    "resolve_book",
]

logger = logging.getLogger(__name__)


def _to_number(value: Any) -> float:
    if isinstance(value, bool):
        raise TypeError("bool is not a statement value")
    if isinstance(value, str):
        stripped = value.strip().replace(",", "")
        if stripped == "":
            return 0.0
        number = float(stripped)
        if not math.isfinite(number):
            raise ValueError(f"not a finite number: {value!r}")
        return number
    number = float(value)
    if math.isnan(number):
        # pandas hands empty cells over as NaN
        return 0.0
    if math.isinf(number):
        raise ValueError(f"not a finite number: {value!r}")
    return number


def _propagated(row_id: str, failed_row: str, cause: RowEvaluationError) -> RowEvaluationError:
    if isinstance(cause, CycleError):
        return CycleError(row_id, cause.cycle)
    return DependencyError(row_id, failed_row, cause)


def _settle(
    sheet: Sheet,
    row_id: str,
    values: dict[str, float],
    errors: dict[str, RowEvaluationError],
) -> None:
    """Evaluate ``row_id`` once every dependency is in values or errors."""
    for dep in sheet.dependencies(row_id):
        if dep in errors:
            errors[row_id] = _propagated(row_id, dep, errors[dep])
            return

    row = sheet[row_id]
    try:
        if row.formula is not None:
            values[row_id] = evaluate(row.formula, values.__getitem__, row_id)
        else:
            children = [
                RateComponent(rate=values[rate_id], amount=values[weight_id])
                for _, rate_id, weight_id in sheet.rollup_members(row_id)
            ]
            values[row_id] = aggregate(children).stat(row.rollup.stat)
    except RowEvaluationError as e:
        errors[row_id] = e


def _resolve_from(
    sheet: Sheet,
    root: str,
    values: dict[str, float],
    errors: dict[str, RowEvaluationError],
) -> None:
    frames: list[tuple[str, Iterator[str]]] = [(root, iter(sheet.dependencies(root)))]
    on_path = {root}
    while frames:
        row_id, pending = frames[-1]
        if row_id in errors:
            # settled as a cycle member while still on the stack
            frames.pop()
            on_path.discard(row_id)
            continue

        descended = False
        for dep in pending:
            if dep in values or dep in errors:
                continue
            if dep in on_path:
                path = [f[0] for f in frames]
                cycle = path[path.index(dep):] + [dep]
                for member in cycle[:-1]:
                    errors[member] = CycleError(member, cycle)
            else:
                frames.append((dep, iter(sheet.dependencies(dep))))
                on_path.add(dep)
            descended = True
            break
        if descended:
            continue

        frames.pop()
        on_path.discard(row_id)
        _settle(sheet, row_id, values, errors)


def resolve(sheet: Sheet, raw_values: Mapping[str, Any] | None = None) -> Resolution:
    """Resolve every row of ``sheet``.

    Input/Fetched rows take ``raw_values[id]`` (0 when absent). Computed
    rows are derived; raw values supplied for them are ignored.

    Returns:
        Resolution with ``values`` for every resolved row and ``errors``
        for every row that failed (never raises for row-level failures)
    """
    raw = raw_values or {}
    values: dict[str, float] = {}
    errors: dict[str, RowEvaluationError] = {}

    for row in sheet.rows:
        if row.is_computed:
            continue
        value = raw.get(row.id)
        if value is None:
            values[row.id] = 0.0
            continue
        try:
            values[row.id] = _to_number(value)
        except (TypeError, ValueError):
            errors[row.id] = RowValueError(row.id, value)

    unknown = [k for k in raw if k not in sheet]
    if unknown:
        logger.debug(f"sheet={sheet.name} ignoring values for unknown rows: {sorted(unknown)}")
    overridden = [k for k in raw if k in sheet and sheet[k].is_computed]
    if overridden:
        logger.debug(f"sheet={sheet.name} ignoring raw values for computed rows: {overridden}")

    for row in sheet.computed_rows():
        if row.id not in values and row.id not in errors:
            _resolve_from(sheet, row.id, values, errors)

    for row_id, err in errors.items():
        logger.warning(f"sheet={sheet.name} row={row_id} {err.error_type}: {err.message}")
    logger.debug(
        f"resolved sheet={sheet.name} rows={len(sheet)} values={len(values)} errors={len(errors)}"
    )
    return Resolution(sheet_name=sheet.name, values=values, errors=errors)


def resolve_book(
    book: StatementBook, raw_by_pass: Mapping[str, Mapping[str, Any]]
) -> dict[str, Resolution]:
    """Resolve every pass (sheet name or alias) present in ``raw_by_pass``.

    Passes are independent; the result is keyed by pass name in book order.
    """
    resolved: dict[str, Resolution] = {}
    for name in book.pass_names:
        if name not in raw_by_pass:
            continue
        sheet = book.sheet_for(name)
        result = resolve(sheet, raw_by_pass[name])
        if name != sheet.name:
            result = Resolution(sheet_name=name, values=result.values, errors=result.errors)
        resolved[name] = result
    return resolved
