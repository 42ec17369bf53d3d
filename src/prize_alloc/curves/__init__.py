"""
Response-curve layer for prize-alloc.

Deterministic synthetic curve parameters per (tier, channel) pair and
diminishing-returns response curves sampled on a shared spend grid.
"""

from prize_alloc.curves.model import CurveKey, CurveParams, ResponseCurve
from prize_alloc.curves.rng import Mulberry32, RandomSource, standard_normal
from prize_alloc.curves.saturation import evaluate_uplift, exponential_saturation
from prize_alloc.curves.generator import (
    build_curve,
    build_response_curves,
    curve_params_frame,
    generate_curve_params,
    make_spend_grid,
)

__all__ = [
    "CurveKey",
    "CurveParams",
    "ResponseCurve",
    "Mulberry32",
    "RandomSource",
    "standard_normal",
    "evaluate_uplift",
    "exponential_saturation",
    "build_curve",
    "build_response_curves",
    "curve_params_frame",
    "generate_curve_params",
    "make_spend_grid",
]
