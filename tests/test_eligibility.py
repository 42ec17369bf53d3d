"""Tests for the activation plan and eligibility filter."""

import pytest

from prize_alloc.config import CurveConfig
from prize_alloc.curves import CurveKey, build_response_curves, generate_curve_params, make_spend_grid
from prize_alloc.exceptions import InvalidBudgetError, PlanValidationError
from prize_alloc.optimization import compute_eligible
from prize_alloc.plan import Plan, default_plan, validate_run_inputs


@pytest.fixture
def small_curves():
    """Two periods x two tiers x two channels."""
    settings = CurveConfig(tiers=["XXL", "S"], channels=["a", "b"], n_periods=2)
    params = generate_curve_params(settings=settings)
    return build_response_curves(params, settings.n_periods, make_spend_grid())


class TestPlan:
    """Test plan snapshots."""

    def test_default_plan(self):
        """Each default tier is live for two months."""
        plan = default_plan()

        assert plan.live_count() == 10
        assert plan.live_periods("XXL") == [10, 11]
        assert plan.live_periods("M") == [0, 1]
        assert plan.is_live("S", 8)
        assert not plan.is_live("S", 9)

    def test_toggled_returns_new_plan(self):
        """Toggling never mutates the original."""
        plan = Plan.empty(["XXL", "S"], n_periods=12)
        toggled = plan.toggled("XXL", 3)

        assert toggled.is_live("XXL", 3)
        assert not plan.is_live("XXL", 3)
        assert not toggled.toggled("XXL", 3).is_live("XXL", 3)

    def test_cleared(self):
        """Clearing a tier switches all its periods off."""
        plan = default_plan().cleared("XXL")

        assert plan.live_periods("XXL") == []
        assert plan.live_count() == 8

    def test_unknown_tier_or_period_is_not_live(self):
        """Lookups outside the plan are simply not live."""
        plan = default_plan()

        assert not plan.is_live("XXXL", 0)
        assert not plan.is_live("XXL", 12)
        assert not plan.is_live("XXL", -1)

    def test_from_live_periods_rejects_out_of_range(self):
        """Live periods must exist."""
        with pytest.raises(PlanValidationError):
            Plan.from_live_periods({"XXL": [12]}, n_periods=12)

    def test_from_live_periods_ignores_unknown_tiers(self):
        """Tiers outside the configured list are dropped."""
        plan = Plan.from_live_periods({"XXL": [1], "Mega": [2]}, n_periods=12, tiers=["XXL"])

        assert plan.tiers == ["XXL"]
        assert plan.live_count() == 1

    def test_flag_length_must_match(self):
        """Every tier needs one flag per period."""
        with pytest.raises(ValueError):
            Plan({"XXL": (True, False)}, n_periods=3)

    def test_to_dict(self):
        """Plans serialise as tier -> live periods."""
        assert default_plan().to_dict()["XL"] == [5, 6]


class TestValidateRunInputs:
    """Test caller-side validation."""

    def test_valid_inputs(self):
        validate_run_inputs(default_plan(), ["crm"], 100000)

    def test_no_live_period(self):
        """An empty plan is rejected."""
        with pytest.raises(PlanValidationError) as exc:
            validate_run_inputs(Plan.empty(["XXL"]), ["crm"], 100000)

        assert exc.value.field == "plan"

    def test_no_channels(self):
        """An empty channel selection is rejected."""
        with pytest.raises(PlanValidationError) as exc:
            validate_run_inputs(default_plan(), [], 100000)

        assert exc.value.field == "channels"

    @pytest.mark.parametrize("budget", [-1, float("nan"), float("inf"), "100"])
    def test_bad_budget(self, budget):
        with pytest.raises(InvalidBudgetError):
            validate_run_inputs(default_plan(), ["crm"], budget)


class TestComputeEligible:
    """Test the eligibility filter."""

    def test_live_and_selected_only(self, small_curves):
        """Only live tier-periods on selected channels are eligible."""
        plan = Plan.from_live_periods({"XXL": [1]}, n_periods=2, tiers=["XXL", "S"])

        eligible = compute_eligible(small_curves, plan, {"a"})

        assert eligible == [CurveKey(1, "XXL", "a")]

    def test_order_follows_curve_index(self, small_curves):
        """Everything live and selected keeps the index order."""
        plan = Plan.from_live_periods({"XXL": [0, 1], "S": [0, 1]}, n_periods=2)

        eligible = compute_eligible(small_curves, plan, ["b", "a"])

        assert eligible == list(small_curves)

    def test_empty_plan(self, small_curves):
        """Nothing live, nothing eligible."""
        plan = Plan.empty(["XXL", "S"], n_periods=2)

        assert compute_eligible(small_curves, plan, {"a", "b"}) == []

    def test_no_channels(self, small_curves):
        """No channels, nothing eligible."""
        plan = Plan.from_live_periods({"XXL": [0]}, n_periods=2)

        assert compute_eligible(small_curves, plan, []) == []

    def test_unknown_channel(self, small_curves):
        """Selecting a channel with no curves yields nothing."""
        plan = Plan.from_live_periods({"XXL": [0]}, n_periods=2)

        assert compute_eligible(small_curves, plan, {"radio"}) == []
