"""
Eligibility filter: which curves may receive spend in a run.
"""

from typing import Iterable, Mapping

from prize_alloc.curves.model import CurveKey, ResponseCurve
from prize_alloc.plan import Plan


def compute_eligible(
    curves: Mapping[CurveKey, ResponseCurve],
    plan: Plan,
    channels: Iterable[str],
) -> list[CurveKey]:
    """
    Keys of curves whose tier is live in their period and whose channel
    is selected, in the curve index's iteration order.

    An empty result is valid; callers report it before allocating.
    """
    selected = frozenset(channels)
    return [
        key
        for key in curves
        if key.channel in selected and plan.is_live(key.tier, key.period)
    ]
