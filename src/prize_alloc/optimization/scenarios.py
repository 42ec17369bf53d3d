"""
Scenario planning utilities.

Run a named scenario end to end, compare it against a previous-spend
baseline, and sweep budgets to see how uplift responds.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Mapping
from uuid import uuid4

import numpy as np
import pandas as pd
from loguru import logger

from prize_alloc.config import PrizeAllocConfig, get_config
from prize_alloc.curves.generator import build_response_curves, generate_curve_params, make_spend_grid
from prize_alloc.curves.model import KEY_SEPARATOR, CurveKey, ResponseCurve
from prize_alloc.curves.rng import Mulberry32
from prize_alloc.optimization.aggregation import by_channel_tier, cost_per_acquisition
from prize_alloc.optimization.allocator import AllocationResult, GreedyAllocator
from prize_alloc.optimization.eligibility import compute_eligible
from prize_alloc.plan import Plan, validate_run_inputs


def build_curve_index(config: PrizeAllocConfig | None = None) -> dict[CurveKey, ResponseCurve]:
    """Generate the full curve index described by a configuration."""
    config = config or get_config()

    params = generate_curve_params(settings=config.curves)
    grid = make_spend_grid(config.allocation.step, config.allocation.max_spend)

    return build_response_curves(params, config.curves.n_periods, grid)


def baseline_allocation(
    curves: Mapping[CurveKey, ResponseCurve],
    total_spend: float = 1_000_000.0,
    seed: int = 2026,
    min_weight: float = 0.2,
) -> list[tuple[CurveKey, float]]:
    """
    Previous-spend baseline: a random split of ``total_spend`` over every
    curve, regardless of plan or channel selection.

    Each curve gets weight ``min_weight + U(0, 1)`` from a seeded stream.
    Spends are not on the grid; aggregation values them with spend
    clamped to each curve's maximum.
    """
    if not curves:
        return []

    rng = Mulberry32(seed)
    weights = np.array([min_weight + rng.random() for _ in curves])
    shares = total_spend * weights / weights.sum()

    return [(key, float(spend)) for key, spend in zip(curves, shares)]


@dataclass
class Scenario:
    """
    A named, timestamped run: inputs plus the resulting allocation.
    """

    name: str
    budget: float
    plan: Plan
    channels: tuple[str, ...]
    result: AllocationResult
    matrix: dict[tuple[str, str], float] = field(default_factory=dict)
    id: str = field(default_factory=lambda: str(uuid4()))
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "created_at": self.created_at.isoformat(),
            "name": self.name,
            "budget": self.budget,
            "plan": self.plan.to_dict(),
            "channels": list(self.channels),
            "total_spend": self.result.total_spend,
            "total_uplift": self.result.total_uplift,
            "eligible_curves": self.result.eligible_curves,
            "steps_requested": self.result.steps_requested,
            "steps_taken": self.result.steps_taken,
            "step": self.result.step,
            "allocations": [[key.label, spend] for key, spend in self.result.allocations],
            "matrix": [
                [KEY_SEPARATOR.join(cell), spend] for cell, spend in self.matrix.items()
            ],
        }

    def save(self, path: Path | str) -> None:
        """Save the scenario to JSON."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2, default=str)


def run_scenario(
    name: str,
    budget: float,
    plan: Plan,
    channels: Iterable[str],
    config: PrizeAllocConfig | None = None,
    curves: Mapping[CurveKey, ResponseCurve] | None = None,
) -> Scenario:
    """
    Validate inputs, filter eligible curves, allocate, and aggregate.

    Args:
        name: Scenario name (blank names become "Untitled scenario")
        budget: Total budget
        plan: Tier x period activation plan
        channels: Selected channel ids
        config: Configuration (defaults to the global config)
        curves: Pre-built curve index; generated from config if omitted

    Raises:
        PlanValidationError: no live period or no channel selected
        InvalidBudgetError: negative or non-finite budget
    """
    config = config or get_config()
    channels = tuple(channels)

    validate_run_inputs(plan, channels, budget)

    if curves is None:
        curves = build_curve_index(config)

    eligible = compute_eligible(curves, plan, channels)
    logger.info(
        f"Scenario '{name or 'Untitled scenario'}': {plan.live_count()} live periods, "
        f"{len(channels)} channels, {len(eligible)} eligible curves"
    )
    if not eligible:
        logger.warning("No eligible curves; check live periods and selected channels")

    allocator = GreedyAllocator(step=config.allocation.step)
    result = allocator.allocate([curves[key] for key in eligible], budget)

    return Scenario(
        name=name.strip() or "Untitled scenario",
        budget=budget,
        plan=plan,
        channels=channels,
        result=result,
        matrix=by_channel_tier(result.allocations, curves),
    )


@dataclass
class BudgetScenario:
    """
    An allocation at one budget level, for comparison.
    """

    name: str
    description: str
    total_budget: float
    allocation: list[tuple[CurveKey, float]]
    total_spend: float
    expected_uplift: float

    @property
    def cost_per_acquisition(self) -> float:
        return cost_per_acquisition(self.total_spend, self.expected_uplift)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "total_budget": self.total_budget,
            "allocation": [[key.label, spend] for key, spend in self.allocation],
            "total_spend": self.total_spend,
            "expected_uplift": self.expected_uplift,
            "cost_per_acquisition": self.cost_per_acquisition,
        }


def create_budget_scenarios(
    curves: Iterable[ResponseCurve],
    base_budget: float,
    step: float = 10000.0,
    budget_multipliers: list[float] | None = None,
) -> list[BudgetScenario]:
    """
    Allocate the same eligible curves at several budget levels.

    Args:
        curves: Eligible response curves
        base_budget: Base budget level
        step: Spend increment
        budget_multipliers: List of multipliers (e.g., [0.8, 1.0, 1.2])

    Returns:
        List of BudgetScenario objects, one per multiplier
    """
    if budget_multipliers is None:
        budget_multipliers = [0.7, 0.85, 1.0, 1.15, 1.3]

    curves = list(curves)
    allocator = GreedyAllocator(step=step)

    scenarios = []
    for mult in budget_multipliers:
        budget = base_budget * mult
        result = allocator.allocate(curves, budget)

        scenarios.append(BudgetScenario(
            name=f"Optimised ({mult:.0%})",
            description=f"Greedy allocation at {mult:.0%} of base budget",
            total_budget=budget,
            allocation=result.allocations,
            total_spend=result.total_spend,
            expected_uplift=result.total_uplift,
        ))

    return scenarios


def compare_scenarios(
    scenarios: list[BudgetScenario],
) -> pd.DataFrame:
    """
    Create a comparison table of scenarios.

    Returns:
        DataFrame with one row per scenario and an ``uplift_vs_base``
        column relative to the first scenario (in %)
    """
    records = [
        {
            "scenario": s.name,
            "description": s.description,
            "total_budget": s.total_budget,
            "total_spend": s.total_spend,
            "expected_uplift": s.expected_uplift,
            "cost_per_acquisition": s.cost_per_acquisition,
        }
        for s in scenarios
    ]

    df = pd.DataFrame(records)

    if len(df) > 0:
        base_uplift = df["expected_uplift"].iloc[0]
        if base_uplift > 0:
            df["uplift_vs_base"] = (df["expected_uplift"] - base_uplift) / base_uplift * 100
        else:
            df["uplift_vs_base"] = 0.0

    return df


def compute_efficiency_frontier(
    curves: Iterable[ResponseCurve],
    budget_range: tuple[float, float],
    n_points: int = 20,
    step: float = 10000.0,
) -> pd.DataFrame:
    """
    Best greedy uplift at each budget level across a range.

    Returns:
        DataFrame with budget, total_spend, total_uplift,
        cost_per_acquisition and steps_taken
    """
    curves = list(curves)
    allocator = GreedyAllocator(step=step)

    records = []
    for budget in np.linspace(budget_range[0], budget_range[1], n_points):
        result = allocator.allocate(curves, float(budget))
        records.append({
            "budget": float(budget),
            "total_spend": result.total_spend,
            "total_uplift": result.total_uplift,
            "cost_per_acquisition": cost_per_acquisition(result.total_spend, result.total_uplift),
            "steps_taken": result.steps_taken,
        })

    return pd.DataFrame(records)
