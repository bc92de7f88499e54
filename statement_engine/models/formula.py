from __future__ import annotations

import re
from dataclasses import dataclass

from ..exceptions import ConfigurationError

"""Formula model: additive/subtractive expression over row ids.

Grammar (no parentheses, literals or other operators):

    expr  := term (('+' | '-') term)*
    term  := rowId
    rowId := [A-Za-z]+[0-9]+

Formulas are parsed once when a sheet is loaded into a tuple of Terms,
so evaluation never re-parses text.
"""

__all__ = [
    "ROW_ID_PATTERN",
    "Term",
    "Formula",
    "tokenize",
    "split_row_id",
]

ROW_ID_PATTERN = re.compile(r"[A-Za-z]+[0-9]+")
_OPERATOR_SPLIT = re.compile(r"([+-])")


def tokenize(text: str) -> list[tuple[str, str]]:
    """Split formula text into (operator, token) pairs.

    The first pair always carries '+' (the left-most operand has no sign).
    Tokens are returned unvalidated; empty tokens show up as ''.
    """
    parts = _OPERATOR_SPLIT.split(text)
    pairs = [("+", parts[0])]
    for i in range(1, len(parts), 2):
        pairs.append((parts[i], parts[i + 1]))
    return pairs


def split_row_id(row_id: str) -> tuple[str, str]:
    """'C17' -> ('C', '17')."""
    m = re.fullmatch(r"([A-Za-z]+)([0-9]+)", row_id)
    if not m:
        raise ConfigurationError(f"invalid row id '{row_id}'", {"row_id": row_id})
    return m.group(1), m.group(2)


@dataclass(frozen=True)
class Term:
    op: str  # '+' or '-'
    row_id: str


@dataclass(frozen=True)
class Formula:
    """Parsed formula; ``terms[0].op`` is always '+'."""
    text: str
    terms: tuple[Term, ...]

    @property
    def row_ids(self) -> tuple[str, ...]:
        """Referenced row ids in order of first appearance."""
        return tuple(dict.fromkeys(t.row_id for t in self.terms))

    @classmethod
    def parse(cls, text: str, row_id: str | None = None) -> Formula:
        """Parse formula text, raising ConfigurationError when malformed."""
        owner = f" of row '{row_id}'" if row_id else ""
        if not isinstance(text, str) or not text:
            raise ConfigurationError(f"empty formula{owner}", {"row_id": row_id})
        terms = []
        for op, token in tokenize(text):
            if not ROW_ID_PATTERN.fullmatch(token):
                raise ConfigurationError(
                    f"malformed formula{owner}: '{text}' (bad token '{token}')",
                    {"row_id": row_id, "formula": text, "token": token},
                )
            terms.append(Term(op=op, row_id=token))
        return cls(text=text, terms=tuple(terms))

    def __str__(self) -> str:
        return self.text
