from __future__ import annotations

from dataclasses import dataclass, field

from ..exceptions import RowEvaluationError

"""Resolution model: output of one resolution pass over a sheet."""

__all__ = [
    "Resolution",
]


@dataclass(frozen=True)
class Resolution:
    """Resolved values of one sheet for one set of raw values.

    ``values`` holds every row that resolved (Input/Fetched rows always do,
    unless their raw value is not numeric). ``errors`` holds the rows that
    did not; a row id never appears in both.
    """
    sheet_name: str
    values: dict[str, float]
    errors: dict[str, RowEvaluationError] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors

    def value(self, row_id: str, default: float = 0.0) -> float:
        return self.values.get(row_id, default)
