from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ..exceptions import ConfigurationError
from .formula import ROW_ID_PATTERN, Formula

"""Row model: one line item of a regulatory statement.

Rows carry no values. Input/Fetched values are supplied per resolution
call; Computed values exist only as the output of a resolution pass.
"""

__all__ = [
    "RowKind",
    "RollupStat",
    "Hierarchy",
    "Rollup",
    "Row",
]


class RowKind(Enum):
    """How a row gets its value.

    - INPUT: user-entered number
    - FETCHED: number obtained from the external ledger, read-only here
    - COMPUTED: derived from other rows of the same sheet
    """
    INPUT = "input"
    FETCHED = "fetched"
    COMPUTED = "computed"


class RollupStat(Enum):
    WEIGHTED_RATE = "weighted_rate"
    NOMINAL_LOW = "nominal_low"
    NOMINAL_HIGH = "nominal_high"


@dataclass(frozen=True)
class Hierarchy:
    parent_id: str


@dataclass(frozen=True)
class Rollup:
    """Rate roll-up of the rows whose hierarchy points at this row.

    For a child ``<L><n>`` the rate is read from ``<rate_column or L><n>``
    and the weight (outstanding amount) from ``<weight_column><n>``.
    """
    stat: RollupStat
    weight_column: str
    rate_column: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.stat, RollupStat):
            try:
                object.__setattr__(self, "stat", RollupStat(self.stat))
            except ValueError:
                raise ConfigurationError(f"unknown rollup stat '{self.stat}'") from None
        for col in (self.weight_column, self.rate_column):
            if col is not None and not (isinstance(col, str) and col.isalpha()):
                raise ConfigurationError(f"rollup column must be letters only: {col!r}")


@dataclass(frozen=True)
class Row:
    id: str
    label: str = ""
    kind: RowKind = RowKind.INPUT
    formula: Formula | None = None
    rollup: Rollup | None = None
    category: str | None = None  # informational
    hierarchy: Hierarchy | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not ROW_ID_PATTERN.fullmatch(self.id):
            raise ConfigurationError(f"invalid row id {self.id!r}", {"row_id": self.id})
        if not isinstance(self.kind, RowKind):
            try:
                object.__setattr__(self, "kind", RowKind(self.kind))
            except ValueError:
                raise ConfigurationError(
                    f"row '{self.id}' has unknown kind {self.kind!r}", {"row_id": self.id}
                ) from None
        if isinstance(self.formula, str):
            object.__setattr__(self, "formula", Formula.parse(self.formula, self.id))
        if isinstance(self.hierarchy, str):
            object.__setattr__(self, "hierarchy", Hierarchy(parent_id=self.hierarchy))

        if self.kind is RowKind.COMPUTED:
            if self.formula is None and self.rollup is None:
                raise ConfigurationError(
                    f"computed row '{self.id}' needs a formula or a rollup", {"row_id": self.id}
                )
            if self.formula is not None and self.rollup is not None:
                raise ConfigurationError(
                    f"row '{self.id}' cannot have both formula and rollup", {"row_id": self.id}
                )
        elif self.formula is not None or self.rollup is not None:
            raise ConfigurationError(
                f"{self.kind.value} row '{self.id}' cannot carry a formula or rollup",
                {"row_id": self.id},
            )

    @property
    def is_computed(self) -> bool:
        return self.kind is RowKind.COMPUTED

    @property
    def parent_id(self) -> str | None:
        return self.hierarchy.parent_id if self.hierarchy else None
