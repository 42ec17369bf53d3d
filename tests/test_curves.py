"""Tests for response-curve generation and evaluation."""

import itertools
import math

import numpy as np
import pytest

from prize_alloc.config import CurveConfig
from prize_alloc.curves import (
    CurveKey,
    CurveParams,
    Mulberry32,
    ResponseCurve,
    build_curve,
    build_response_curves,
    curve_params_frame,
    evaluate_uplift,
    exponential_saturation,
    generate_curve_params,
    make_spend_grid,
    standard_normal,
)
from prize_alloc.exceptions import DegenerateCurveError, InvalidStepError


class FixedSequence:
    """Random source that cycles through a fixed list of uniforms."""

    def __init__(self, values):
        self._values = itertools.cycle(values)

    def random(self) -> float:
        return next(self._values)


def _params(coefficient=100.0, saturation_scale=50000.0, tier_weight=1.0):
    return CurveParams(
        tier="L",
        channel="google_search",
        coefficient=coefficient,
        saturation_scale=saturation_scale,
        tier_weight=tier_weight,
    )


class TestSaturation:
    """Test the saturating uplift function."""

    def test_zero_at_zero_spend(self):
        """Uplift is exactly 0 with no spend."""
        assert evaluate_uplift(_params(), 0.0) == 0

    def test_known_value(self):
        """100 * (1 - e^-0.6) at 30k spend with a 50k scale."""
        uplift = evaluate_uplift(_params(), 30000)

        assert uplift == pytest.approx(100 * (1 - math.exp(-0.6)))
        assert uplift == pytest.approx(45.12, abs=0.01)

    def test_tier_weight_scales_uplift(self):
        """Tier weight multiplies the whole curve."""
        base = evaluate_uplift(_params(), 40000)
        weighted = evaluate_uplift(_params(tier_weight=1.25), 40000)

        assert weighted == pytest.approx(1.25 * base)

    def test_non_negative_and_non_decreasing(self):
        """For random spend pairs s1 < s2, 0 <= uplift(s1) <= uplift(s2)."""
        rng = np.random.default_rng(7)
        params = list(generate_curve_params(seed=99).values())

        for _ in range(500):
            p = params[rng.integers(len(params))]
            s1, s2 = np.sort(rng.uniform(0, 500000, size=2))
            u1 = evaluate_uplift(p, s1)
            u2 = evaluate_uplift(p, s2)

            assert u1 >= 0
            assert u1 <= u2

    def test_tiny_spend_is_never_negative(self):
        """Very small spends don't underflow below zero."""
        spends = np.array([0.0, 1e-300, 1e-12, 1e-6])
        result = evaluate_uplift(_params(saturation_scale=120000), spends)

        assert np.all(result >= 0)

    def test_negative_spend_treated_as_zero(self):
        """Negative spend clamps to zero uplift."""
        assert evaluate_uplift(_params(), -5000) == 0

    def test_scalar_and_array_inputs(self):
        """Scalars give floats, arrays give arrays."""
        assert isinstance(evaluate_uplift(_params(), 10000), float)

        result = evaluate_uplift(_params(), np.array([0, 10000, 20000]))
        assert isinstance(result, np.ndarray)
        assert result.shape == (3,)

    def test_larger_scale_saturates_slower(self):
        """Doubling the saturation scale lowers uplift at every positive spend."""
        x = np.linspace(1000, 200000, 50)

        fast = exponential_saturation(x, scale=50000)
        slow = exponential_saturation(x, scale=100000)

        assert np.all(slow < fast)

    def test_approaches_ceiling(self):
        """Uplift approaches coefficient * tier weight but stays below it."""
        p = _params(coefficient=80, tier_weight=1.1)
        uplift = evaluate_uplift(p, 2_000_000)

        assert uplift <= p.ceiling
        assert uplift == pytest.approx(p.ceiling, rel=1e-6)


class TestRandomSource:
    """Test the seeded generators."""

    def test_mulberry_is_deterministic(self):
        """Same seed, same stream."""
        a = Mulberry32(1337)
        b = Mulberry32(1337)

        assert [a.random() for _ in range(100)] == [b.random() for _ in range(100)]

    def test_mulberry_known_stream(self):
        """Seed 1337 reproduces the reference stream exactly."""
        rng = Mulberry32(1337)

        assert [rng.random() for _ in range(5)] == [
            0.1844118325971067,
            0.18998925131745636,
            0.8104719922412187,
            0.6437488221563399,
            0.430774615611881,
        ]

    def test_mulberry_seeds_differ(self):
        """Different seeds give different streams."""
        a = [Mulberry32(1).random() for _ in range(10)]
        b = [Mulberry32(2).random() for _ in range(10)]

        assert a != b

    def test_mulberry_range(self):
        """Uniforms lie in [0, 1)."""
        rng = Mulberry32(42)
        values = np.array([rng.random() for _ in range(5000)])

        assert np.all(values >= 0)
        assert np.all(values < 1)
        assert 0.45 < values.mean() < 0.55

    def test_box_muller_with_fixed_uniforms(self):
        """u = v = 0.5 gives -sqrt(2 ln 2)."""
        z = standard_normal(FixedSequence([0.5]))

        assert z == pytest.approx(-math.sqrt(2 * math.log(2)))

    def test_box_muller_skips_zeros(self):
        """Zero uniforms are redrawn."""
        z = standard_normal(FixedSequence([0.0, 0.5, 0.0, 0.5]))

        assert z == pytest.approx(-math.sqrt(2 * math.log(2)))


class TestGenerateCurveParams:
    """Test deterministic curve parameter generation."""

    def test_same_seed_identical_output(self):
        """Two calls with one seed give value-equal parameters."""
        first = generate_curve_params(seed=1337)
        second = generate_curve_params(seed=1337)

        assert list(first) == list(second)
        for key in first:
            assert first[key] == second[key]

    def test_different_seed_changes_output(self):
        """A different seed changes the parameters."""
        assert generate_curve_params(seed=1) != generate_curve_params(seed=2)

    def test_one_entry_per_pair(self):
        """5 tiers x 10 channels, tier-major order."""
        settings = CurveConfig()
        params = generate_curve_params(settings=settings)

        assert len(params) == 50
        assert list(params)[0] == ("XXL", "google_search")
        assert list(params)[-1] == ("S", "crm")

    def test_parameters_within_bounds(self):
        """Coefficients and scales are clamped and positive."""
        settings = CurveConfig()

        for seed in range(20):
            for p in generate_curve_params(seed=seed, settings=settings).values():
                weight = settings.channel_weights[p.channel]
                assert 25 * weight <= p.coefficient <= 260 * weight
                assert 20000 <= p.saturation_scale <= 120000
                assert p.tier_weight == settings.tier_weights[p.tier]

    def test_tier_weights_increase_with_prize_size(self):
        """Bigger prize tiers carry bigger weights."""
        settings = CurveConfig()
        weights = [settings.tier_weights[t] for t in settings.tiers]

        assert weights == sorted(weights, reverse=True)

    def test_fixed_sequence_gives_exact_values(self):
        """With constant uniforms every draw is the same normal."""
        settings = CurveConfig()
        z = -math.sqrt(2 * math.log(2))

        params = generate_curve_params(rng=FixedSequence([0.5]), settings=settings)
        p = params[("XL", "crm")]

        assert p.coefficient == pytest.approx((120 + 35 * z) * 1.15)
        assert p.saturation_scale == pytest.approx(60000 + 15000 * z)
        assert p.tier_weight == 1.10

    def test_extreme_draws_are_clamped(self):
        """Huge normals are clamped to the upper bounds."""
        params = generate_curve_params(rng=FixedSequence([1e-12, 1e-9]))
        p = params[("L", "meta_video")]

        assert p.coefficient == pytest.approx(260.0)
        assert p.saturation_scale == pytest.approx(120000.0)

    def test_rng_takes_precedence_over_seed(self):
        """An explicit random source overrides the seed."""
        a = generate_curve_params(seed=1, rng=Mulberry32(5))
        b = generate_curve_params(seed=2, rng=Mulberry32(5))

        assert a == b

    def test_degenerate_params_rejected(self):
        """Non-positive parameters are a programming error."""
        with pytest.raises(DegenerateCurveError):
            _params(coefficient=0.0)

        with pytest.raises(DegenerateCurveError):
            _params(saturation_scale=-1.0)

        with pytest.raises(DegenerateCurveError):
            _params(tier_weight=float("nan"))

    def test_zero_channel_weight_is_degenerate(self):
        """A zero channel weight would zero the coefficient."""
        settings = CurveConfig(
            tiers=["L"],
            channels=["dead"],
            channel_weights={"dead": 0.0},
        )

        with pytest.raises(DegenerateCurveError) as exc:
            generate_curve_params(settings=settings)

        assert exc.value.code == "DEGENERATE_CURVE"

    def test_params_frame(self):
        """Parameter table has one row per pair."""
        df = curve_params_frame(generate_curve_params())

        assert len(df) == 50
        assert set(df.columns) >= {"tier", "channel", "coefficient", "saturation_scale"}
        assert (df["ceiling"] == df["coefficient"] * df["tier_weight"]).all()


class TestSpendGrid:
    """Test spend grid construction."""

    def test_default_grid(self):
        """0..100k by 10k, 11 points."""
        grid = make_spend_grid()

        assert len(grid) == 11
        assert grid[0] == 0
        assert grid[-1] == 100000
        assert np.all(np.diff(grid) == 10000)

    @pytest.mark.parametrize("step", [0, -10000, float("nan")])
    def test_invalid_step(self, step):
        """Non-positive steps are rejected."""
        with pytest.raises(InvalidStepError):
            make_spend_grid(step=step)

    def test_max_not_multiple_of_step(self):
        """The maximum must sit on the grid."""
        with pytest.raises(InvalidStepError):
            make_spend_grid(step=30000, max_spend=100000)


class TestResponseCurve:
    """Test sampled response curves."""

    def test_build_curve(self):
        """Curve samples start at zero and never decrease."""
        curve = build_curve(_params(), period=3, spend_grid=make_spend_grid())

        assert curve.key == CurveKey(3, "L", "google_search")
        assert curve.uplift[0] == 0
        assert len(curve.uplift) == 11
        assert np.all(np.diff(curve.uplift) >= 0)
        assert curve.uplift[3] == pytest.approx(evaluate_uplift(_params(), 30000))

    def test_increments(self):
        """inc[0] = 0 and increments sum to the final uplift."""
        curve = build_curve(_params(), 0, make_spend_grid())
        inc = curve.increments

        assert inc[0] == 0
        assert inc[1] == pytest.approx(curve.uplift[1])
        assert inc.sum() == pytest.approx(curve.uplift[-1])
        # Concave: increments shrink
        assert np.all(np.diff(inc[1:]) < 0)

    def test_uplift_at_clamps_to_max_spend(self):
        """Spend above the grid is valued at the maximum."""
        curve = build_curve(_params(), 0, make_spend_grid())

        assert curve.uplift_at(250000) == pytest.approx(curve.uplift[-1])
        assert curve.uplift_at(15000) == pytest.approx(evaluate_uplift(_params(), 15000))

    def test_index_of(self):
        """Grid spends map back to their index."""
        curve = build_curve(_params(), 0, make_spend_grid())

        assert curve.index_of(70000) == 7
        with pytest.raises(ValueError):
            curve.index_of(12345)

    def test_rejects_decreasing_uplift(self):
        """Samples must be non-decreasing."""
        with pytest.raises(ValueError):
            ResponseCurve(
                key=CurveKey(0, "L", "x"),
                params=_params(),
                spend_grid=(0.0, 10000.0, 20000.0),
                uplift=(0.0, 5.0, 4.0),
            )

    def test_key_label_round_trip(self):
        """Keys flatten to period__tier__channel strings."""
        key = CurveKey(10, "XXL", "google_search")

        assert key.label == "10__XXL__google_search"
        assert CurveKey.parse(key.label) == key

    def test_build_response_curves_order(self):
        """Index iterates period, then tier, then channel."""
        params = generate_curve_params()
        curves = build_response_curves(params, n_periods=12, spend_grid=make_spend_grid())
        keys = list(curves)

        assert len(curves) == 12 * 50
        assert keys[0] == CurveKey(0, "XXL", "google_search")
        assert keys[1] == CurveKey(0, "XXL", "tiktok_video")
        assert keys[50] == CurveKey(1, "XXL", "google_search")
        assert keys == sorted(keys, key=lambda k: k.period)

    def test_periods_share_shape(self):
        """Curves for one (tier, channel) are identical across periods."""
        params = generate_curve_params()
        curves = build_response_curves(params, n_periods=3, spend_grid=make_spend_grid())

        assert curves[CurveKey(0, "M", "crm")].uplift == curves[CurveKey(2, "M", "crm")].uplift
