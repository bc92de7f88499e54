from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from ..exceptions import ConfigurationError
from .formula import split_row_id
from .row import Row

"""Sheet model: ordered rows of one statement plus an id -> Row index.

The index is built once at construction. Construction also enforces the
closed-world rule: every id named by a formula, rollup or hierarchy must
exist in the same sheet. Cycles are not rejected here; the resolver
reports them per row, and the YAML loader refuses cyclic definitions.
"""

__all__ = [
    "Sheet",
]


@dataclass(frozen=True)
class Sheet:
    name: str
    rows: tuple[Row, ...]
    title: str = ""
    _index: dict[str, Row] = field(init=False, repr=False, compare=False)
    _children: dict[str, tuple[str, ...]] = field(init=False, repr=False, compare=False)
    _deps: dict[str, tuple[str, ...]] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        rows = tuple(self.rows)
        object.__setattr__(self, "rows", rows)

        index: dict[str, Row] = {}
        for row in rows:
            if row.id in index:
                raise ConfigurationError(
                    f"sheet '{self.name}': duplicate row id '{row.id}'",
                    {"sheet": self.name, "row_id": row.id},
                )
            index[row.id] = row

        children: dict[str, list[str]] = {}
        for row in rows:
            parent = row.parent_id
            if parent is None:
                continue
            if parent not in index:
                raise ConfigurationError(
                    f"sheet '{self.name}': row '{row.id}' has unknown parent '{parent}'",
                    {"sheet": self.name, "row_id": row.id},
                )
            children.setdefault(parent, []).append(row.id)

        object.__setattr__(self, "_index", index)
        object.__setattr__(self, "_children", {k: tuple(v) for k, v in children.items()})

        deps: dict[str, tuple[str, ...]] = {}
        for row in rows:
            if row.is_computed:
                deps[row.id] = self._collect_dependencies(row)
        object.__setattr__(self, "_deps", deps)

    def _collect_dependencies(self, row: Row) -> tuple[str, ...]:
        if row.formula is not None:
            refs = list(row.formula.row_ids)
        else:
            refs = []
            for _, rate_id, weight_id in self.rollup_members(row.id):
                refs.extend((rate_id, weight_id))
        for ref in refs:
            if ref not in self._index:
                raise ConfigurationError(
                    f"sheet '{self.name}': row '{row.id}' references unknown row '{ref}'",
                    {"sheet": self.name, "row_id": row.id, "reference": ref},
                )
        return tuple(dict.fromkeys(refs))

    # --- lookups -----------------------------------------------------------
    def __contains__(self, row_id: object) -> bool:
        return row_id in self._index

    def __iter__(self) -> Iterator[Row]:
        return iter(self.rows)

    def __len__(self) -> int:
        return len(self.rows)

    def get(self, row_id: str) -> Row | None:
        return self._index.get(row_id)

    def __getitem__(self, row_id: str) -> Row:
        return self._index[row_id]

    @property
    def row_ids(self) -> tuple[str, ...]:
        return tuple(r.id for r in self.rows)

    def children_of(self, row_id: str) -> tuple[str, ...]:
        return self._children.get(row_id, ())

    def dependencies(self, row_id: str) -> tuple[str, ...]:
        """Rows a Computed row reads; empty for Input/Fetched rows."""
        return self._deps.get(row_id, ())

    def computed_rows(self) -> Iterable[Row]:
        return (r for r in self.rows if r.is_computed)

    def rollup_members(self, row_id: str) -> list[tuple[str, str, str]]:
        """(child_id, rate_row_id, weight_row_id) for each child of a rollup row."""
        row = self._index[row_id]
        if row.rollup is None:
            return []
        members = []
        for child_id in self.children_of(row_id):
            _, digits = split_row_id(child_id)
            rate_id = f"{row.rollup.rate_column}{digits}" if row.rollup.rate_column else child_id
            weight_id = f"{row.rollup.weight_column}{digits}"
            members.append((child_id, rate_id, weight_id))
        return members
