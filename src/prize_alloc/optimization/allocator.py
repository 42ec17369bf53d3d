"""
Discrete greedy budget allocator.

Spend is handed out one grid step at a time. Each step goes to the
eligible curve whose next increment buys the most uplift, until the
budget runs out or no curve has a positive increment left.
"""

from __future__ import annotations

import json
import math
import numbers
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

import numpy as np
from loguru import logger

from prize_alloc.curves.model import CurveKey, ResponseCurve
from prize_alloc.exceptions import InvalidStepError
from prize_alloc.plan import validate_budget


@dataclass
class AllocationResult:
    """
    Results from one allocator run.

    ``allocations`` is the canonical form: an ordered list of
    (curve key, spend) pairs in eligible order, holding only curves that
    received spend. Every spend is a grid point of its curve.
    """

    allocations: list[tuple[CurveKey, float]] = field(default_factory=list)

    # Totals
    total_spend: float = 0.0
    total_uplift: float = 0.0
    total_budget: float = 0.0

    # Run details
    step: float = 0.0
    steps_requested: int = 0
    steps_taken: int = 0
    eligible_curves: int = 0
    winners: list[CurveKey] = field(default_factory=list)
    terminated_early: bool = False
    message: str = ""

    def as_dict(self) -> dict[CurveKey, float]:
        return dict(self.allocations)

    def spend_for(self, key: CurveKey) -> float:
        """Spend assigned to a curve (0 if it received none)."""
        return self.as_dict().get(key, 0.0)

    @property
    def unspent(self) -> float:
        return self.total_budget - self.total_spend

    def to_dict(self) -> dict:
        return {
            "allocations": [[key.label, spend] for key, spend in self.allocations],
            "total_spend": self.total_spend,
            "total_uplift": self.total_uplift,
            "total_budget": self.total_budget,
            "step": self.step,
            "steps_requested": self.steps_requested,
            "steps_taken": self.steps_taken,
            "eligible_curves": self.eligible_curves,
            "terminated_early": self.terminated_early,
            "message": self.message,
        }

    def save(self, path: Path | str) -> None:
        """Save results to JSON."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2, default=str)


def validate_step(step: float) -> None:
    if isinstance(step, bool) or not isinstance(step, numbers.Real):
        raise InvalidStepError(f"Spend step must be a number, got {step!r}", step=step)
    if not math.isfinite(step) or step <= 0:
        raise InvalidStepError(f"Spend step must be positive, got {step!r}", step=step)


class GreedyAllocator:
    """
    Allocate a budget across response curves in equal spend steps.

    Ranking is by raw uplift gain of the next step. Because every step
    costs the same, this ranks curves identically to gain per unit
    spend. When several curves tie exactly, the one that comes first in
    the eligible order wins.

    With equal-size steps and concave curves this greedy procedure is
    optimal for the discrete problem; with unequal step costs it would
    only be a heuristic.

    Example:
        >>> allocator = GreedyAllocator(step=10000)
        >>> result = allocator.allocate(eligible_curves, total_budget=300000)
        >>> result.total_spend <= 300000
        True
    """

    def __init__(self, step: float = 10000.0):
        validate_step(step)
        self.step = step

    def _check_grid(self, curve: ResponseCurve) -> None:
        if not np.allclose(np.diff(curve.spend_grid), self.step):
            raise InvalidStepError(
                f"Curve {curve.key.label} is not on a {self.step:g} spend grid",
                step=self.step,
            )

    def allocate(
        self,
        curves: Iterable[ResponseCurve],
        total_budget: float,
    ) -> AllocationResult:
        """
        Run the greedy allocation.

        Args:
            curves: Eligible curves, in the order used to break ties
            total_budget: Spend cap (finite, non-negative)

        Returns:
            AllocationResult; empty (zero spend, zero uplift) when the
            budget is below one step or no curve is eligible
        """
        validate_budget(total_budget)

        curves = list(curves)
        n_steps = math.floor(total_budget / self.step)

        if not curves or n_steps <= 0:
            reason = "No eligible curves" if not curves else "Budget is below one spend step"
            logger.info(f"{reason}; nothing to allocate")
            return AllocationResult(
                total_budget=total_budget,
                step=self.step,
                steps_requested=max(n_steps, 0) if curves else 0,
                eligible_curves=len(curves),
                message=reason,
            )

        for curve in curves:
            self._check_grid(curve)

        logger.info(
            f"Allocating {total_budget:,.0f} across {len(curves)} curves "
            f"in up to {n_steps} steps of {self.step:,.0f}"
        )

        increments = [curve.increments for curve in curves]
        max_index = np.array([curve.max_index for curve in curves])
        index = np.zeros(len(curves), dtype=int)

        # Gain of each curve's next step; -inf once a curve is at its max
        next_gain = np.array([inc[1] for inc in increments], dtype=float)

        winners: list[CurveKey] = []
        for _ in range(n_steps):
            # argmax returns the first maximum, which fixes the tie-break
            best = int(np.argmax(next_gain))
            if not next_gain[best] > 0:
                break

            index[best] += 1
            winners.append(curves[best].key)

            if index[best] < max_index[best]:
                next_gain[best] = increments[best][index[best] + 1]
            else:
                next_gain[best] = -np.inf

        allocations = []
        total_spend = 0.0
        total_uplift = 0.0
        for curve, i in zip(curves, index):
            if i == 0:
                continue
            spend = curve.spend_grid[i]
            allocations.append((curve.key, spend))
            total_spend += spend
            total_uplift += curve.uplift[i]

        steps_taken = len(winners)
        terminated_early = steps_taken < n_steps
        if terminated_early:
            logger.debug(
                f"Stopped after {steps_taken} of {n_steps} steps: "
                "no curve has a positive increment left"
            )

        result = AllocationResult(
            allocations=allocations,
            total_spend=total_spend,
            total_uplift=total_uplift,
            total_budget=total_budget,
            step=self.step,
            steps_requested=n_steps,
            steps_taken=steps_taken,
            eligible_curves=len(curves),
            winners=winners,
            terminated_early=terminated_early,
            message="Saturated before budget was spent" if terminated_early else "Budget fully allocated",
        )

        logger.info(
            f"Allocation complete. Spend: {total_spend:,.0f}, "
            f"Uplift: {total_uplift:,.2f}, Curves funded: {len(allocations)}"
        )

        return result


def allocate(
    curves: Iterable[ResponseCurve],
    total_budget: float,
    step: float = 10000.0,
) -> AllocationResult:
    """
    Convenience function for a single greedy allocation.

    Args:
        curves: Eligible response curves
        total_budget: Total budget to allocate
        step: Spend increment; must match the curves' grid spacing

    Returns:
        AllocationResult with the per-curve spend
    """
    return GreedyAllocator(step=step).allocate(curves, total_budget)
