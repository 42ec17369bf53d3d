"""
Roll per-curve allocations up into tier and channel views.

All functions take the canonical allocation (an iterable of
(curve key, spend) pairs) plus the curve index, and never mutate either.
Uplift is read from each curve at the allocated spend, so off-grid
allocations such as the previous-spend baseline are valued too.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping

import pandas as pd

from prize_alloc.curves.model import CurveKey, ResponseCurve


@dataclass(frozen=True)
class TierTotals:
    spend: float = 0.0
    uplift: float = 0.0

    @property
    def cost_per_acquisition(self) -> float:
        return cost_per_acquisition(self.spend, self.uplift)


def cost_per_acquisition(spend: float, uplift: float) -> float:
    """Spend per unit of uplift; 0.0 when there is no uplift."""
    if uplift > 0:
        return spend / uplift
    return 0.0


def by_tier(
    allocation: Iterable[tuple[CurveKey, float]],
    curve_index: Mapping[CurveKey, ResponseCurve],
) -> dict[str, TierTotals]:
    """Sum spend and uplift over every curve of each tier."""
    spend: dict[str, float] = {}
    uplift: dict[str, float] = {}

    for key, amount in allocation:
        curve = curve_index.get(key)
        if curve is None:
            continue
        spend[key.tier] = spend.get(key.tier, 0.0) + amount
        uplift[key.tier] = uplift.get(key.tier, 0.0) + curve.uplift_at(amount)

    return {tier: TierTotals(spend[tier], uplift[tier]) for tier in spend}


def by_channel_tier(
    allocation: Iterable[tuple[CurveKey, float]],
    curve_index: Mapping[CurveKey, ResponseCurve],
) -> dict[tuple[str, str], float]:
    """Spend per (channel, tier) cell, summed over periods."""
    matrix: dict[tuple[str, str], float] = {}

    for key, amount in allocation:
        if key not in curve_index:
            continue
        cell = (key.channel, key.tier)
        matrix[cell] = matrix.get(cell, 0.0) + amount

    return matrix


def tier_summary(
    allocation: Iterable[tuple[CurveKey, float]],
    curve_index: Mapping[CurveKey, ResponseCurve],
    tiers: Iterable[str],
) -> pd.DataFrame:
    """
    One row per tier (zero rows included) plus a total row.

    Columns: tier, spend, uplift, cost_per_acquisition
    """
    totals = by_tier(allocation, curve_index)

    records = []
    for tier in tiers:
        t = totals.get(tier, TierTotals())
        records.append({
            "tier": tier,
            "spend": t.spend,
            "uplift": t.uplift,
            "cost_per_acquisition": t.cost_per_acquisition,
        })

    total_spend = sum(r["spend"] for r in records)
    total_uplift = sum(r["uplift"] for r in records)
    records.append({
        "tier": "Total",
        "spend": total_spend,
        "uplift": total_uplift,
        "cost_per_acquisition": cost_per_acquisition(total_spend, total_uplift),
    })

    return pd.DataFrame(records)


def spend_matrix(
    allocation: Iterable[tuple[CurveKey, float]],
    curve_index: Mapping[CurveKey, ResponseCurve],
    channels: Iterable[str],
    tiers: Iterable[str],
) -> pd.DataFrame:
    """Channel x tier spend table (channels as rows, tiers as columns)."""
    channels = list(channels)
    tiers = list(tiers)
    cells = by_channel_tier(allocation, curve_index)

    df = pd.DataFrame(0.0, index=pd.Index(channels, name="channel"), columns=tiers)
    for (channel, tier), amount in cells.items():
        if channel in df.index and tier in df.columns:
            df.loc[channel, tier] = amount

    return df


def compare_to_baseline(
    optimised: Iterable[tuple[CurveKey, float]],
    baseline: Iterable[tuple[CurveKey, float]],
    curve_index: Mapping[CurveKey, ResponseCurve],
    tiers: Iterable[str],
) -> pd.DataFrame:
    """
    Side-by-side tier summary of an optimised run and a baseline.

    Columns: tier, then spend / uplift / cost_per_acquisition for each
    side with ``_optimised`` and ``_baseline`` suffixes, and the deltas
    (optimised minus baseline).
    """
    tiers = list(tiers)
    opt = tier_summary(optimised, curve_index, tiers).set_index("tier")
    base = tier_summary(baseline, curve_index, tiers).set_index("tier")

    df = opt.join(base, lsuffix="_optimised", rsuffix="_baseline")
    for metric in ("spend", "uplift", "cost_per_acquisition"):
        df[f"{metric}_delta"] = df[f"{metric}_optimised"] - df[f"{metric}_baseline"]

    return df.reset_index()
