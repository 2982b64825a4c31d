"""Pytest configuration and fixtures."""

import itertools

import numpy as np
import pytest

from keel.optimizer.models import ActionRecord, Constraints, Goal
from keel.optimizer.objective import ObjectiveEvaluator
from keel.optimizer.problem import ProblemModel
from keel.optimizer.values import value_vector
from keel.settings import SolverSettings


@pytest.fixture
def conflicting_pair():
    """A and B conflict; A wins on stabilize, B wins on pay-down-debt."""
    return [
        ActionRecord(
            id="A",
            effort_minutes=15,
            monthly_cashflow_delta=30,
            risk_reduction_score=2,
            conflicts_with={"B"},
        ),
        ActionRecord(
            id="B",
            effort_minutes=30,
            monthly_cashflow_delta=50,
            risk_reduction_score=1,
            conflicts_with={"A"},
        ),
    ]


@pytest.fixture
def scenario_constraints():
    return Constraints(max_effort_minutes=120, max_upfront_cash=0, min_balance_after=100)


@pytest.fixture
def loose_constraints():
    return Constraints(max_effort_minutes=10_000, max_upfront_cash=10_000, min_balance_after=-10_000)


def make_random_catalog(seed, n, conflict_rate=0.1, synergy_rate=0.1, ineligible_rate=0.0):
    """Integer-valued random catalog; cross references declared on the lower index."""
    rng = np.random.default_rng(seed)
    ids = [f"a{i:02d}" for i in range(n)]
    conflicts = {i: set() for i in range(n)}
    synergies = {i: set() for i in range(n)}
    for i, j in itertools.combinations(range(n), 2):
        r = rng.random()
        if r < conflict_rate:
            conflicts[i].add(ids[j])
        elif r < conflict_rate + synergy_rate:
            synergies[i].add(ids[j])

    catalog = []
    for i in range(n):
        catalog.append(
            ActionRecord(
                id=ids[i],
                effort_minutes=int(rng.integers(0, 60)),
                upfront_cash_cost=float(rng.choice([0, 0, 10, 25])),
                monthly_cashflow_delta=float(rng.integers(-60, 100)),
                risk_reduction_score=float(rng.integers(0, 10)),
                goal_weights={Goal.STABILIZE_CASHFLOW: float(rng.integers(0, 5)) / 10},
                conflicts_with=conflicts[i],
                synergy_with=synergies[i],
                eligible=bool(rng.random() >= ineligible_rate),
            )
        )
    return catalog


@pytest.fixture
def random_catalog():
    """Factory: random_catalog(seed, n, **rates)."""
    return make_random_catalog


@pytest.fixture
def build_evaluator():
    """Factory returning an ObjectiveEvaluator for a catalog."""

    def _build(
        catalog,
        constraints,
        goal=Goal.STABILIZE_CASHFLOW,
        required_ids=(),
        starting_balance=500.0,
        settings=None,
    ):
        values = value_vector(catalog, goal)
        problem = ProblemModel.compile(catalog, values, constraints, starting_balance, required_ids)
        return ObjectiveEvaluator(problem, settings or SolverSettings())

    return _build


@pytest.fixture
def brute_force():
    """Reference optimum: best (score, mask) over admissible assignments, scalar-evaluated."""

    def _search(evaluator):
        problem = evaluator.problem
        best = None
        for mask in range(1 << problem.n):
            bits = problem.mask_to_bits(mask)
            if np.any(problem.required & (bits == 0)):
                continue
            if np.any(~problem.eligible & (bits == 1)):
                continue
            score = evaluator.evaluate(bits)
            if best is None or score > best[0]:
                best = (score, mask)
        return best

    return _search
