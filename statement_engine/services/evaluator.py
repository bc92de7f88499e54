from __future__ import annotations

from collections.abc import Callable

from ..exceptions import RowReferenceError
from ..models.formula import ROW_ID_PATTERN, Formula, tokenize

"""Expression evaluator for additive/subtractive row formulas.

Folds left to right: start with lookup(term0), then add or subtract
lookup(term_i) for each following operator/term pair. Sheets hand over
pre-parsed Formula objects; raw text is accepted for ad-hoc use and is
tokenized on the spot.
"""

__all__ = [
    "evaluate",
]

Lookup = Callable[[str], float]


def evaluate(formula: Formula | str, lookup: Lookup, row_id: str | None = None) -> float:
    """Evaluate ``formula`` using ``lookup`` for every referenced row.

    Args:
        formula: parsed Formula or formula text (e.g. "C18+C19-C22")
        lookup: returns the value of a row id; a KeyError means the id is unknown
        row_id: enclosing row, used in error messages

    Raises:
        RowReferenceError: a token is not a row id, or lookup does not know it
    """
    if isinstance(formula, Formula):
        pairs = [(t.op, t.row_id) for t in formula.terms]
    else:
        pairs = tokenize(formula)
        for _, token in pairs:
            if not ROW_ID_PATTERN.fullmatch(token):
                raise RowReferenceError(row_id, token)

    total = 0.0
    for i, (op, token) in enumerate(pairs):
        try:
            value = lookup(token)
        except KeyError:
            raise RowReferenceError(row_id, token) from None
        if i == 0:
            total = value
        elif op == "+":
            total += value
        else:
            total -= value
    return total
