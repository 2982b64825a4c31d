"""Tests for the goal-weighted value function.

These tests verify:
1. Goal weight tuples
2. Normalization by catalog maxima
3. Per-action goal multipliers
4. Zero-denominator fallback
"""

import numpy as np
import pytest

from keel.optimizer.models import ActionRecord, Goal, GoalWeights
from keel.optimizer.values import action_value, normalizers, value_vector


class TestGoalWeights:
    """Each goal carries a fixed (cash, risk) blend."""

    def test_weights_table(self):
        assert Goal.STABILIZE_CASHFLOW.weights == GoalWeights(cash=0.4, risk=0.6)
        assert Goal.PAY_DOWN_DEBT.weights == GoalWeights(cash=0.7, risk=0.3)
        assert Goal.BUILD_EMERGENCY_FUND.weights == GoalWeights(cash=0.5, risk=0.5)

    def test_exactly_three_goals(self):
        assert len(list(Goal)) == 3

    @pytest.mark.parametrize(
        "alias,expected",
        [
            ("stability", Goal.STABILIZE_CASHFLOW),
            ("debt", Goal.PAY_DOWN_DEBT),
            ("emergency", Goal.BUILD_EMERGENCY_FUND),
            ("pay_down_debt", Goal.PAY_DOWN_DEBT),
            ("auto", Goal.STABILIZE_CASHFLOW),
            ("something-else", Goal.STABILIZE_CASHFLOW),
            (None, Goal.STABILIZE_CASHFLOW),
        ],
    )
    def test_from_alias(self, alias, expected):
        assert Goal.from_alias(alias) is expected


class TestValueVector:
    """Tests for value normalization."""

    def test_scenario_values(self, conflicting_pair):
        """maxCash=50, maxRisk=2: A = 0.4*0.6 + 0.6*1.0, B = 0.4*1.0 + 0.6*0.5."""
        values = value_vector(conflicting_pair, Goal.STABILIZE_CASHFLOW)
        assert values[0] == pytest.approx(0.84)
        assert values[1] == pytest.approx(0.70)

    def test_goal_changes_ranking(self, conflicting_pair):
        values = value_vector(conflicting_pair, Goal.PAY_DOWN_DEBT)
        assert values[0] == pytest.approx(0.72)
        assert values[1] == pytest.approx(0.85)

    def test_zero_cashflow_falls_back_to_one(self):
        catalog = [
            ActionRecord(id="x", effort_minutes=5, monthly_cashflow_delta=0, risk_reduction_score=0.5),
        ]
        assert normalizers(catalog) == (1.0, 1.0)
        values = value_vector(catalog, Goal.BUILD_EMERGENCY_FUND)
        assert values[0] == pytest.approx(0.25)

    def test_negative_cashflow_normalized_by_magnitude(self):
        catalog = [
            ActionRecord(id="pay", effort_minutes=10, monthly_cashflow_delta=-100, risk_reduction_score=0),
            ActionRecord(id="save", effort_minutes=10, monthly_cashflow_delta=50, risk_reduction_score=0),
        ]
        values = value_vector(catalog, Goal.PAY_DOWN_DEBT)
        assert values[0] == pytest.approx(-0.7)
        assert values[1] == pytest.approx(0.35)

    def test_goal_multiplier_scales_blend(self):
        action = ActionRecord(
            id="x",
            effort_minutes=5,
            monthly_cashflow_delta=10,
            risk_reduction_score=10,
            goal_weights={Goal.STABILIZE_CASHFLOW: 0.5},
        )
        # Blend is 0.4 + 0.6 = 1.0, scaled by 1.5 for the matching goal only
        assert action_value(action, Goal.STABILIZE_CASHFLOW, 10, 10) == pytest.approx(1.5)
        assert action_value(action, Goal.PAY_DOWN_DEBT, 10, 10) == pytest.approx(1.0)

    def test_empty_catalog(self):
        values = value_vector([], Goal.STABILIZE_CASHFLOW)
        assert isinstance(values, np.ndarray)
        assert len(values) == 0

    def test_deterministic(self, random_catalog):
        catalog = random_catalog(3, 12)
        first = value_vector(catalog, Goal.STABILIZE_CASHFLOW)
        second = value_vector(catalog, Goal.STABILIZE_CASHFLOW)
        assert np.array_equal(first, second)
