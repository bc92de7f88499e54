from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from ..models.row import RollupStat

"""Weighted aggregation of rate-bearing rows.

Used to roll sub-rows (e.g. government / private sector salaried loans)
into their parent category, and top-level categories into a total line:

    weighted_avg_rate = sum(rate_i * amount_i) / sum(amount_i)   (0 when sum is 0)
    nominal_low/high  = min/max of child rates strictly above zero (0 when none)
    borrowers, amount = plain sums

Sums use math.fsum, so the result does not depend on child order.
"""

__all__ = [
    "RateComponent",
    "RateSummary",
    "RateRollup",
    "aggregate",
    "rollup",
]


@dataclass(frozen=True)
class RateComponent:
    rate: float
    amount: float
    borrowers: float = 0


@dataclass(frozen=True)
class RateSummary:
    weighted_avg_rate: float
    nominal_low: float
    nominal_high: float

    def stat(self, stat: RollupStat) -> float:
        if stat is RollupStat.WEIGHTED_RATE:
            return self.weighted_avg_rate
        if stat is RollupStat.NOMINAL_LOW:
            return self.nominal_low
        return self.nominal_high


@dataclass(frozen=True)
class RateRollup:
    """Parent line built from its children."""
    borrowers: float
    amount: float
    rates: RateSummary


def _component(child: RateComponent | Mapping[str, Any]) -> RateComponent:
    if isinstance(child, RateComponent):
        return child
    return RateComponent(
        rate=float(child.get("rate", 0) or 0),
        amount=float(child.get("amount", 0) or 0),
        borrowers=float(child.get("borrowers", 0) or 0),
    )


def aggregate(children: Iterable[RateComponent | Mapping[str, Any]]) -> RateSummary:
    """Amount-weighted average rate and nominal range of ``children``.

    Children may be RateComponent instances or mappings with ``rate`` and
    ``amount`` keys.

    >>> aggregate([{"rate": 10, "amount": 100}, {"rate": 20, "amount": 300}]).weighted_avg_rate
    17.5
    """
    comps = [_component(c) for c in children]
    total_amount = math.fsum(c.amount for c in comps)
    if total_amount == 0:
        weighted = 0.0
    else:
        weighted = math.fsum(c.rate * c.amount for c in comps) / total_amount

    positive = [c.rate for c in comps if c.rate > 0]
    low = min(positive) if positive else 0.0
    high = max(positive) if positive else 0.0
    return RateSummary(weighted_avg_rate=weighted, nominal_low=low, nominal_high=high)


def rollup(children: Iterable[RateComponent | Mapping[str, Any]]) -> RateRollup:
    """Full parent line: summed borrowers and amounts plus the rate summary."""
    comps = [_component(c) for c in children]
    return RateRollup(
        borrowers=math.fsum(c.borrowers for c in comps),
        amount=math.fsum(c.amount for c in comps),
        rates=aggregate(comps),
    )
