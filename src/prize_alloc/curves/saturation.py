"""
Saturation (diminishing returns) functions for response curves.

Each curve follows a saturating exponential: the first pound spent buys
the most uplift, and uplift flattens towards a ceiling as spend grows.
"""

import numpy as np


def exponential_saturation(
    x: np.ndarray | float,
    scale: float,
) -> np.ndarray:
    """
    Apply exponential saturation transformation.

    Formula: y = 1 - exp(-x / scale)

    Args:
        x: Input spend (negative values are treated as 0)
        scale: Saturation scale. Higher = slower saturation;
            doubling it halves the rate at which returns diminish.

    Returns:
        Saturated values in [0, 1)

    Example:
        >>> exponential_saturation(np.array([0, 50000, 100000]), scale=50000)
        # Returns: [0, 0.632, 0.865]
    """
    x = np.maximum(np.asarray(x, dtype=float), 0)

    # expm1 keeps precision for small x / scale
    y = -np.expm1(-x / scale)

    # Guard against a rounding artefact dipping below zero
    return np.maximum(y, 0.0)


def evaluate_uplift(params, spend: np.ndarray | float) -> np.ndarray | float:
    """
    Uplift of one curve at the given spend level(s).

    uplift = coefficient * tier_weight * (1 - exp(-spend / saturation_scale))

    Exactly 0 at zero spend, never negative, strictly increasing and
    concave, approaching ``coefficient * tier_weight`` as spend grows.

    Args:
        params: CurveParams (anything with coefficient, tier_weight and
            saturation_scale attributes)
        spend: Scalar spend or array of spends

    Returns:
        float for scalar input, ndarray otherwise
    """
    ceiling = params.coefficient * params.tier_weight
    uplift = ceiling * exponential_saturation(spend, params.saturation_scale)

    if np.ndim(uplift) == 0:
        return float(uplift)
    return uplift
