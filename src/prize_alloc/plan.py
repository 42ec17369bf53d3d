"""
Activation plan and channel selection.

The plan says which prize tier is live in which period; the channel
selection says which channels may carry spend. Both are immutable
snapshots passed explicitly into each run.
"""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass
from typing import Iterable, Mapping

from loguru import logger

from prize_alloc.config import DEFAULT_TIERS
from prize_alloc.exceptions import InvalidBudgetError, PlanValidationError

ChannelSelection = frozenset


@dataclass(frozen=True)
class Plan:
    """
    Tier -> per-period liveness flags.

    Example:
        >>> plan = Plan.empty(["XXL", "S"], n_periods=12).toggled("XXL", 10)
        >>> plan.is_live("XXL", 10)
        True
    """

    live: Mapping[str, tuple[bool, ...]]
    n_periods: int

    def __post_init__(self) -> None:
        for tier, flags in self.live.items():
            if len(flags) != self.n_periods:
                raise ValueError(
                    f"Tier {tier} has {len(flags)} period flags, expected {self.n_periods}"
                )
        # Own a copy of the flags; callers keep theirs
        object.__setattr__(self, "live", {t: tuple(bool(f) for f in fl) for t, fl in self.live.items()})

    @classmethod
    def empty(cls, tiers: Iterable[str], n_periods: int = 12) -> Plan:
        return cls({tier: (False,) * n_periods for tier in tiers}, n_periods)

    @classmethod
    def from_live_periods(
        cls,
        live_periods: Mapping[str, Iterable[int]],
        n_periods: int = 12,
        tiers: Iterable[str] | None = None,
    ) -> Plan:
        """Build a plan from tier -> live period indices."""
        tiers = list(tiers) if tiers is not None else list(live_periods)
        live = {tier: [False] * n_periods for tier in tiers}

        for tier, periods in live_periods.items():
            if tier not in live:
                logger.warning(f"Ignoring unknown tier in plan: {tier}")
                continue
            for period in periods:
                if not 0 <= period < n_periods:
                    raise PlanValidationError(
                        f"Period {period} for tier {tier} is outside 0..{n_periods - 1}",
                        field="plan",
                    )
                live[tier][period] = True

        return cls({tier: tuple(flags) for tier, flags in live.items()}, n_periods)

    @property
    def tiers(self) -> list[str]:
        return list(self.live)

    def is_live(self, tier: str, period: int) -> bool:
        flags = self.live.get(tier)
        if flags is None or not 0 <= period < self.n_periods:
            return False
        return flags[period]

    def live_periods(self, tier: str) -> list[int]:
        return [i for i, on in enumerate(self.live.get(tier, ())) if on]

    def live_count(self) -> int:
        """Number of live (tier, period) cells."""
        return sum(sum(flags) for flags in self.live.values())

    def toggled(self, tier: str, period: int) -> Plan:
        flags = list(self.live[tier])
        flags[period] = not flags[period]
        return Plan({**self.live, tier: tuple(flags)}, self.n_periods)

    def cleared(self, tier: str) -> Plan:
        return Plan({**self.live, tier: (False,) * self.n_periods}, self.n_periods)

    def to_dict(self) -> dict[str, list[int]]:
        return {tier: self.live_periods(tier) for tier in self.live}


def default_plan(tiers: Iterable[str] | None = None, n_periods: int = 12) -> Plan:
    """
    Starting plan: each tier live for two consecutive months.

    XXL Nov-Dec, XL Jun-Jul, L Mar-Apr, M Jan-Feb, S Aug-Sep.
    """
    defaults = {"XXL": [10, 11], "XL": [5, 6], "L": [2, 3], "M": [0, 1], "S": [7, 8]}
    tiers = list(tiers) if tiers is not None else list(DEFAULT_TIERS)
    live = {
        tier: [p for p in defaults.get(tier, []) if p < n_periods]
        for tier in tiers
    }
    return Plan.from_live_periods(live, n_periods=n_periods, tiers=tiers)


def validate_budget(budget: float) -> None:
    if isinstance(budget, bool) or not isinstance(budget, numbers.Real):
        raise InvalidBudgetError(budget)
    if not math.isfinite(budget) or budget < 0:
        raise InvalidBudgetError(budget)


def validate_run_inputs(plan: Plan, channels: Iterable[str], budget: float) -> None:
    """
    Reject a run request before any allocation work.

    Raises:
        PlanValidationError: no live period, or no channel selected
        InvalidBudgetError: negative or non-finite budget
    """
    if plan.live_count() == 0:
        raise PlanValidationError(
            "Select at least one live period in the scenario plan", field="plan"
        )
    if not frozenset(channels):
        raise PlanValidationError("Select at least one marketing channel", field="channels")
    validate_budget(budget)
