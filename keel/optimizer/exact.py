"""
Exact Solver - full enumeration of every assignment for small catalogs.

Masks 0..2^n-1 are scored in vectorized chunks. A mask is dropped without
scoring when it leaves a required action unset or selects an ineligible one.
The strict maximum is kept, so among equal scores the lowest mask wins.
"""

from __future__ import annotations

import logging

import numpy as np

from .models import SolverKind
from .objective import Candidate, ObjectiveEvaluator

logger = logging.getLogger(__name__)


def solve_exact(evaluator: ObjectiveEvaluator) -> Candidate:
    """Globally optimal assignment under the evaluator.

    Raises:
        ValueError: if the catalog is larger than exact_max_actions
    """
    problem = evaluator.problem
    settings = evaluator.settings
    n = problem.n
    if n > settings.exact_max_actions:
        raise ValueError(f"Exact enumeration supports at most {settings.exact_max_actions} actions, got {n}")

    required_mask = problem.bits_to_mask(problem.required)
    ineligible_mask = problem.bits_to_mask(~problem.eligible)
    shifts = np.arange(n, dtype=np.int64)
    total = 1 << n

    best_mask = -1
    best_score = -np.inf
    scored = 0

    for start in range(0, total, settings.exact_chunk_size):
        masks = np.arange(start, min(start + settings.exact_chunk_size, total), dtype=np.int64)
        keep = ((masks & required_mask) == required_mask) & ((masks & ineligible_mask) == 0)
        masks = masks[keep]
        if len(masks) == 0:
            continue

        matrix = ((masks[:, None] >> shifts) & 1).astype(np.int8)
        scores = evaluator.evaluate_many(matrix)
        scored += len(masks)

        # argmax returns the first (lowest) mask among equal maxima
        idx = int(np.argmax(scores))
        if scores[idx] > best_score:
            best_score = float(scores[idx])
            best_mask = int(masks[idx])

    if best_mask < 0:
        # Only reachable if a required action is also ineligible, which validation rejects
        logger.warning("Exact enumeration found no admissible assignment")
        bits = problem.empty_assignment()
        return Candidate(bits=bits, score=evaluator.evaluate(bits), solver=SolverKind.EXACT, iterations=scored)

    bits = problem.mask_to_bits(best_mask)
    logger.debug(f"Exact enumeration scored {scored}/{total} masks, best mask={best_mask}")
    return Candidate(bits=bits, score=evaluator.evaluate(bits), solver=SolverKind.EXACT, iterations=scored)
