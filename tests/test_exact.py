"""Tests for exact enumeration.

These tests verify:
1. Global optimality against a brute-force reference
2. Lowest-mask tie-break and repeat determinism
3. Required and eligibility hard filters
4. Budget respect when penalties dominate benefit
"""

import itertools

import numpy as np
import pytest

from keel.optimizer.exact import solve_exact
from keel.optimizer.models import ActionRecord, Constraints, Goal, SolverKind
from keel.settings import SolverSettings


class TestExactOptimality:
    """Exact enumeration finds the global optimum."""

    @pytest.mark.parametrize("seed", range(8))
    def test_matches_brute_force(self, seed, random_catalog, scenario_constraints, build_evaluator, brute_force):
        catalog = random_catalog(seed, 9, conflict_rate=0.15, synergy_rate=0.15, ineligible_rate=0.1)
        evaluator = build_evaluator(catalog, scenario_constraints)
        result = solve_exact(evaluator)
        best_score, _ = brute_force(evaluator)

        assert result.solver == SolverKind.EXACT
        assert result.score == pytest.approx(best_score)
        assert not np.any(~evaluator.problem.eligible & (result.bits == 1))

    @pytest.mark.parametrize("seed", range(4))
    def test_no_admissible_assignment_scores_higher(self, seed, random_catalog, scenario_constraints, build_evaluator):
        catalog = random_catalog(seed, 7, conflict_rate=0.2)
        required = [catalog[2].id]
        evaluator = build_evaluator(catalog, scenario_constraints, required_ids=required)
        result = solve_exact(evaluator)
        problem = evaluator.problem

        for bits in itertools.product([0, 1], repeat=problem.n):
            bits = np.array(bits, dtype=np.int8)
            if bits[2] == 0 or np.any(~problem.eligible & (bits == 1)):
                continue
            assert evaluator.evaluate(bits) <= result.score + 1e-9

    def test_conflict_exclusivity(self, random_catalog, scenario_constraints, build_evaluator):
        for seed in range(10):
            catalog = random_catalog(seed, 10, conflict_rate=0.3)
            evaluator = build_evaluator(catalog, scenario_constraints)
            result = solve_exact(evaluator)
            assert not evaluator.problem.has_conflict(result.bits)


class TestExactDeterminism:
    """Ties break on the lowest mask and repeat runs agree exactly."""

    def test_lowest_mask_wins_tie(self, loose_constraints, build_evaluator):
        twins = [
            ActionRecord(id="first", effort_minutes=10, monthly_cashflow_delta=20, risk_reduction_score=3, conflicts_with={"second"}),
            ActionRecord(id="second", effort_minutes=10, monthly_cashflow_delta=20, risk_reduction_score=3),
        ]
        evaluator = build_evaluator(twins, loose_constraints)
        result = solve_exact(evaluator)
        # Masks 0b01 and 0b10 score the same; 0b01 is enumerated first
        assert result.bits.tolist() == [1, 0]

    def test_repeat_runs_identical(self, random_catalog, scenario_constraints, build_evaluator):
        catalog = random_catalog(42, 12, conflict_rate=0.2, synergy_rate=0.2)
        first = solve_exact(build_evaluator(catalog, scenario_constraints))
        second = solve_exact(build_evaluator(catalog, scenario_constraints))
        assert first.bits.tolist() == second.bits.tolist()
        assert first.score == second.score

    def test_chunk_size_does_not_change_result(self, random_catalog, scenario_constraints, build_evaluator):
        catalog = random_catalog(7, 10, conflict_rate=0.2)
        big = solve_exact(build_evaluator(catalog, scenario_constraints))
        small = solve_exact(
            build_evaluator(catalog, scenario_constraints, settings=SolverSettings(exact_chunk_size=7))
        )
        assert big.bits.tolist() == small.bits.tolist()


class TestExactFilters:
    """Required and ineligible actions are filtered before scoring."""

    def test_required_always_included(self, random_catalog, scenario_constraints, build_evaluator):
        for seed in range(6):
            catalog = random_catalog(seed, 8)
            required = [catalog[0].id, catalog[5].id]
            evaluator = build_evaluator(catalog, scenario_constraints, required_ids=required)
            result = solve_exact(evaluator)
            assert result.bits[0] == 1
            assert result.bits[5] == 1

    def test_required_included_despite_conflict(self, conflicting_pair, scenario_constraints, build_evaluator):
        evaluator = build_evaluator(conflicting_pair, scenario_constraints, required_ids=["B"])
        result = solve_exact(evaluator)
        assert result.bits.tolist() == [0, 1]
        assert result.score == pytest.approx(0.70)

    def test_ineligible_never_selected(self, loose_constraints, build_evaluator):
        catalog = [
            ActionRecord(id="good", effort_minutes=5, monthly_cashflow_delta=100, risk_reduction_score=9, eligible=False),
            ActionRecord(id="ok", effort_minutes=5, monthly_cashflow_delta=10, risk_reduction_score=1),
        ]
        evaluator = build_evaluator(catalog, loose_constraints)
        result = solve_exact(evaluator)
        assert result.bits.tolist() == [0, 1]

    def test_scored_count_reflects_filter(self, random_catalog, loose_constraints, build_evaluator):
        catalog = random_catalog(0, 6)
        evaluator = build_evaluator(catalog, loose_constraints, required_ids=[catalog[0].id])
        result = solve_exact(evaluator)
        # Half of the 64 masks leave action 0 unset
        assert result.iterations == 32

    def test_rejects_oversized_catalog(self, random_catalog, loose_constraints, build_evaluator):
        settings = SolverSettings(exact_max_actions=4)
        evaluator = build_evaluator(random_catalog(0, 5), loose_constraints, settings=settings)
        with pytest.raises(ValueError):
            solve_exact(evaluator)


class TestExactBudgets:
    """With dominating penalties, the optimum respects feasible budgets."""

    @pytest.mark.parametrize("seed", range(6))
    def test_budgets_respected_when_feasible(self, seed, random_catalog, build_evaluator, brute_force):
        settings = SolverSettings(lambda_effort=1e6, lambda_cash=1e6, lambda_buffer=1e6)
        constraints = Constraints(max_effort_minutes=60, max_upfront_cash=20, min_balance_after=450)
        catalog = random_catalog(seed, 9, conflict_rate=0.1)
        evaluator = build_evaluator(catalog, constraints, starting_balance=500.0, settings=settings)

        # The empty selection is feasible here (500 >= 450)
        result = solve_exact(evaluator)
        assert evaluator.within_budgets(evaluator.totals(result.bits))

    def test_infeasible_budget_still_returns(self, conflicting_pair, build_evaluator):
        constraints = Constraints(max_effort_minutes=0, max_upfront_cash=0, min_balance_after=0)
        evaluator = build_evaluator(conflicting_pair, constraints, required_ids=["A"], goal=Goal.STABILIZE_CASHFLOW)
        result = solve_exact(evaluator)
        assert result.bits.tolist() == [1, 0]
        assert evaluator.breakdown(result.bits).effort_penalty == pytest.approx(10 * 15 * 15)
