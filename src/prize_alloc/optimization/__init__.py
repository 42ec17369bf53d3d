"""
Budget allocation layer for prize-alloc.

Eligibility filtering, the discrete greedy allocator, aggregation into
tier and channel views, and scenario planning on top of them.
"""

from prize_alloc.optimization.eligibility import compute_eligible
from prize_alloc.optimization.allocator import (
    AllocationResult,
    GreedyAllocator,
    allocate,
)
from prize_alloc.optimization.aggregation import (
    TierTotals,
    by_channel_tier,
    by_tier,
    compare_to_baseline,
    cost_per_acquisition,
    spend_matrix,
    tier_summary,
)
from prize_alloc.optimization.scenarios import (
    BudgetScenario,
    Scenario,
    baseline_allocation,
    build_curve_index,
    compare_scenarios,
    compute_efficiency_frontier,
    create_budget_scenarios,
    run_scenario,
)

__all__ = [
    "compute_eligible",
    "AllocationResult",
    "GreedyAllocator",
    "allocate",
    "TierTotals",
    "by_channel_tier",
    "by_tier",
    "compare_to_baseline",
    "cost_per_acquisition",
    "spend_matrix",
    "tier_summary",
    "BudgetScenario",
    "Scenario",
    "baseline_allocation",
    "build_curve_index",
    "compare_scenarios",
    "compute_efficiency_frontier",
    "create_budget_scenarios",
    "run_scenario",
]
