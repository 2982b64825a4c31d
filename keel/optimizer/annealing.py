"""
Stochastic Solver - single-bit-flip simulated annealing for large catalogs.

Starts from the all-zero assignment with required actions forced on. Each
iteration flips one random free bit (eligible and not required), accepts
improvements unconditionally and a worsening of Δ with probability
exp(-Δ/T), then cools T geometrically. The best assignment seen at any point
is returned.

There is no optimality guarantee: the result is only as good as the
trajectory the generator produces.
"""

from __future__ import annotations

import logging
import math
from typing import Optional

import numpy as np

from .models import SolverKind
from .objective import Candidate, ObjectiveEvaluator

logger = logging.getLogger(__name__)


def initial_assignment(evaluator: ObjectiveEvaluator) -> np.ndarray:
    """All-zero assignment with every eligible required action switched on."""
    problem = evaluator.problem
    bits = problem.empty_assignment()
    bits[problem.required & problem.eligible] = 1
    return bits


def solve_annealing(
    evaluator: ObjectiveEvaluator,
    rng: Optional[np.random.Generator] = None,
) -> Candidate:
    """Best assignment found by simulated annealing.

    Args:
        evaluator: Objective for the compiled problem
        rng: Seeded generator; a fresh one from settings.seed is used if None

    Returns:
        Candidate with the best-seen assignment and its score
    """
    problem = evaluator.problem
    settings = evaluator.settings
    if rng is None:
        rng = np.random.default_rng(settings.seed)

    bits = initial_assignment(evaluator)
    totals = evaluator.totals(bits)
    current = evaluator.evaluate(bits)
    best_bits = bits.copy()
    best_score = current

    free = np.flatnonzero(problem.eligible & ~problem.required)
    if len(free) == 0 or settings.annealing_iterations == 0:
        return Candidate(bits=best_bits, score=best_score, solver=SolverKind.STOCHASTIC, iterations=0)

    temperature = settings.annealing_initial_temperature
    picks = rng.integers(0, len(free), size=settings.annealing_iterations)
    draws = rng.random(settings.annealing_iterations)
    accepted = 0

    for step in range(settings.annealing_iterations):
        i = int(free[picks[step]])
        delta, flipped_totals = evaluator.flip_delta(bits, totals, i)

        # delta is the score change; a drop of -delta is accepted with exp(delta / T)
        if delta >= 0 or draws[step] < math.exp(delta / temperature):
            bits[i] ^= 1
            totals = flipped_totals
            current += delta
            accepted += 1
            if current > best_score:
                best_score = current
                best_bits = bits.copy()

        temperature = max(temperature * settings.annealing_cooling_rate, settings.annealing_min_temperature)

    # Re-score to drop accumulated float drift from the incremental deltas
    best_score = evaluator.evaluate(best_bits)
    logger.debug(
        f"Annealing: {settings.annealing_iterations} iterations, {accepted} accepted, "
        f"best={best_score:.4f}, final T={temperature:.6f}"
    )
    return Candidate(
        bits=best_bits,
        score=best_score,
        solver=SolverKind.STOCHASTIC,
        iterations=settings.annealing_iterations,
    )
