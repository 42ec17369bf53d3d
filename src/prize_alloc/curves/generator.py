"""
Synthetic response-curve generation.

Parameters are drawn once per (tier, channel) pair from a seeded stream:
a jittered uplift coefficient scaled by channel efficiency, a jittered
saturation scale, and a fixed tier weight. Every period reuses the same
parameters, so a curve's shape depends only on its tier and channel.
"""

from __future__ import annotations

import numpy as np
import pandas as pd
from loguru import logger

from prize_alloc.config import CurveConfig
from prize_alloc.curves.model import CurveKey, CurveParams, ResponseCurve
from prize_alloc.curves.rng import Mulberry32, RandomSource, standard_normal
from prize_alloc.curves.saturation import evaluate_uplift
from prize_alloc.exceptions import InvalidStepError


def _clamp(x: float, lo: float, hi: float) -> float:
    return min(hi, max(lo, x))


def make_spend_grid(step: float = 10000.0, max_spend: float = 100000.0) -> tuple[float, ...]:
    """
    Build the shared spend grid ``(0, step, 2*step, ..., max_spend)``.

    Args:
        step: Spend increment (must be positive)
        max_spend: Highest spend level; must be a whole multiple of step

    Returns:
        Ascending tuple of spend levels

    Example:
        >>> make_spend_grid(10000, 100000)
        # Returns: (0.0, 10000.0, ..., 100000.0)  - 11 points
    """
    if not np.isfinite(step) or step <= 0:
        raise InvalidStepError(f"Spend step must be positive, got {step!r}", step=step)

    n_steps = round(max_spend / step)
    if n_steps < 1 or not np.isclose(n_steps * step, max_spend):
        raise InvalidStepError(
            f"max_spend {max_spend} must be a positive whole multiple of step {step}",
            step=step,
        )

    return tuple(float(step * k) for k in range(n_steps + 1))


def generate_curve_params(
    seed: int | None = None,
    rng: RandomSource | None = None,
    settings: CurveConfig | None = None,
) -> dict[tuple[str, str], CurveParams]:
    """
    Generate curve parameters for every (tier, channel) pair.

    Pairs are drawn in tier-major order, two normals per pair
    (coefficient first, then saturation scale). Draws are clamped to the
    configured bounds so no curve is degenerate.

    Args:
        seed: Seed for a Mulberry32 stream (defaults to ``settings.seed``)
        rng: Explicit random source; takes precedence over ``seed``
        settings: Curve settings (defaults to ``CurveConfig()``)

    Returns:
        Dict of (tier, channel) -> CurveParams, in generation order
    """
    settings = settings or CurveConfig()
    if rng is None:
        rng = Mulberry32(settings.seed if seed is None else seed)

    coef_lo, coef_hi = settings.coefficient_bounds
    sat_lo, sat_hi = settings.saturation_bounds

    params: dict[tuple[str, str], CurveParams] = {}
    for tier in settings.tiers:
        for channel in settings.channels:
            coef = _clamp(
                settings.coefficient_mean + settings.coefficient_sd * standard_normal(rng),
                coef_lo,
                coef_hi,
            )
            scale = _clamp(
                settings.saturation_mean + settings.saturation_sd * standard_normal(rng),
                sat_lo,
                sat_hi,
            )
            params[(tier, channel)] = CurveParams(
                tier=tier,
                channel=channel,
                coefficient=coef * settings.channel_weights.get(channel, 1.0),
                saturation_scale=scale,
                tier_weight=settings.tier_weights.get(tier, 1.0),
            )

    logger.debug(f"Generated {len(params)} curve parameter sets ({rng!r})")
    return params


def build_curve(
    params: CurveParams,
    period: int,
    spend_grid: tuple[float, ...] | list[float],
) -> ResponseCurve:
    """Sample one curve on the spend grid for the given period."""
    grid = tuple(float(s) for s in spend_grid)
    uplift = evaluate_uplift(params, np.asarray(grid))

    return ResponseCurve(
        key=CurveKey(period, params.tier, params.channel),
        params=params,
        spend_grid=grid,
        uplift=tuple(float(u) for u in uplift),
    )


def build_response_curves(
    params: dict[tuple[str, str], CurveParams],
    n_periods: int,
    spend_grid: tuple[float, ...] | list[float],
) -> dict[CurveKey, ResponseCurve]:
    """
    Build the curve index for all periods.

    Iteration order is period, then tier, then channel (parameter order),
    which fixes the order eligible curves are offered to the allocator.
    """
    curves: dict[CurveKey, ResponseCurve] = {}

    for period in range(n_periods):
        for p in params.values():
            curve = build_curve(p, period, spend_grid)
            curves[curve.key] = curve

    logger.debug(f"Built {len(curves)} response curves over {n_periods} periods")
    return curves


def curve_params_frame(params: dict[tuple[str, str], CurveParams]) -> pd.DataFrame:
    """Tabulate curve parameters, one row per (tier, channel)."""
    records = [
        {
            "tier": p.tier,
            "channel": p.channel,
            "coefficient": p.coefficient,
            "saturation_scale": p.saturation_scale,
            "tier_weight": p.tier_weight,
            "ceiling": p.ceiling,
        }
        for p in params.values()
    ]
    return pd.DataFrame(
        records,
        columns=["tier", "channel", "coefficient", "saturation_scale", "tier_weight", "ceiling"],
    )
