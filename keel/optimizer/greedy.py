"""
Greedy Solver - deterministic value-per-minute heuristic.

Required eligible actions go in first. The remaining eligible actions are
taken in descending value / max(effort, 1) order (catalog order on ties) and
kept only if they conflict with nothing already selected and the running
effort, upfront cash and balance totals still fit. No backtracking.
"""

from __future__ import annotations

import numpy as np

from .models import SolverKind
from .objective import Candidate, ObjectiveEvaluator


def greedy_order(evaluator: ObjectiveEvaluator) -> list[int]:
    """Indices of free eligible actions in the order greedy considers them."""
    problem = evaluator.problem
    ratios = problem.values / np.maximum(problem.effort, 1.0)
    candidates = [i for i in range(problem.n) if problem.eligible[i] and not problem.required[i]]
    # sorted() is stable, so equal ratios keep catalog order
    return sorted(candidates, key=lambda i: -ratios[i])


def solve_greedy(evaluator: ObjectiveEvaluator) -> Candidate:
    """Single deterministic assignment."""
    problem = evaluator.problem
    bits = problem.empty_assignment()
    bits[problem.required & problem.eligible] = 1
    totals = evaluator.totals(bits)

    order = greedy_order(evaluator)
    for i in order:
        conflicts = problem.conflict_neighbors[i]
        if len(conflicts) and bits[conflicts].any():
            continue

        _, tentative = evaluator.flip_delta(bits, totals, i)
        if not evaluator.within_budgets(tentative):
            continue

        bits[i] = 1
        totals = tentative

    return Candidate(bits=bits, score=evaluator.evaluate(bits), solver=SolverKind.GREEDY, iterations=len(order))
