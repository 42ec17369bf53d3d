"""
Core response-curve types.

A curve is identified by ``CurveKey(period, tier, channel)``. Its shape
comes from the ``CurveParams`` of its (tier, channel) pair; the period
only says when the curve can be bought.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import NamedTuple

import numpy as np
from loguru import logger

from prize_alloc.curves.saturation import evaluate_uplift
from prize_alloc.exceptions import DegenerateCurveError

KEY_SEPARATOR = "__"


class CurveKey(NamedTuple):
    """Composite identifier of one response curve."""

    period: int
    tier: str
    channel: str

    @property
    def label(self) -> str:
        """Flat string form, e.g. ``"10__XXL__google_search"``."""
        return KEY_SEPARATOR.join((str(self.period), self.tier, self.channel))

    @classmethod
    def parse(cls, label: str) -> CurveKey:
        period, tier, channel = label.split(KEY_SEPARATOR, 2)
        return cls(int(period), tier, channel)


@dataclass(frozen=True)
class CurveParams:
    """
    Response-curve parameters for one (tier, channel) pair.

    All three numbers must be strictly positive and finite. Generated
    parameters are clamped so this always holds; a violation is a bug
    in the caller, not a runtime condition to recover from.
    """

    tier: str
    channel: str
    coefficient: float
    saturation_scale: float
    tier_weight: float

    def __post_init__(self) -> None:
        for name in ("coefficient", "saturation_scale", "tier_weight"):
            value = getattr(self, name)
            if not (math.isfinite(value) and value > 0):
                msg = f"{name} must be positive and finite for {self.tier}/{self.channel}, got {value!r}"
                logger.critical(msg)
                raise DegenerateCurveError(msg, curve=f"{self.tier}{KEY_SEPARATOR}{self.channel}")

    @property
    def ceiling(self) -> float:
        """Uplift the curve approaches as spend grows without bound."""
        return self.coefficient * self.tier_weight


@dataclass(frozen=True)
class ResponseCurve:
    """
    A curve sampled on the shared spend grid.

    ``spend_grid`` and ``uplift`` are aligned tuples; index 0 is always
    zero spend and zero uplift.
    """

    key: CurveKey
    params: CurveParams
    spend_grid: tuple[float, ...]
    uplift: tuple[float, ...]

    def __post_init__(self) -> None:
        if len(self.spend_grid) != len(self.uplift):
            raise ValueError(
                f"spend_grid and uplift differ in length for {self.key.label}: "
                f"{len(self.spend_grid)} != {len(self.uplift)}"
            )
        if len(self.spend_grid) < 2:
            raise ValueError(f"Curve {self.key.label} needs at least two grid points")
        if np.any(np.diff(self.uplift) < 0):
            raise ValueError(f"Uplift must be non-decreasing in spend for {self.key.label}")

    @property
    def max_spend(self) -> float:
        return self.spend_grid[-1]

    @property
    def max_index(self) -> int:
        return len(self.spend_grid) - 1

    @property
    def increments(self) -> np.ndarray:
        """inc[i] = uplift[i] - uplift[i-1]; inc[0] = 0 (the starting state)."""
        return np.diff(np.asarray(self.uplift, dtype=float), prepend=self.uplift[0])

    def index_of(self, spend: float) -> int:
        """Grid index of an on-grid spend level."""
        matches = np.flatnonzero(np.isclose(self.spend_grid, spend, rtol=0, atol=1e-9))
        if len(matches) == 0:
            raise ValueError(f"Spend {spend} is not on the grid of {self.key.label}")
        return int(matches[0])

    def uplift_at(self, spend: float) -> float:
        """Uplift at any spend, clamped to the curve's grid range."""
        spend = min(max(spend, 0.0), self.max_spend)
        return evaluate_uplift(self.params, spend)
