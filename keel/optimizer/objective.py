"""
Objective Evaluator - the score every solver maximizes.

    score = Σ value[i]·x[i]
          + synergy_bonus    · (# selected synergy pairs)
          − conflict_penalty · (# selected conflict pairs)
          − required_penalty · (# required actions left unselected)
          − λ_effort · max(0, effort_used − max_effort)²
          − λ_cash   · max(0, upfront_used − max_upfront)²
          − λ_buffer · max(0, min_balance_after − projected_balance)²

Higher is better. QUBO tooling that minimizes should use energy() = -score.
"""

from __future__ import annotations

from typing import NamedTuple

import numpy as np

from keel.settings import SolverSettings

from .models import ScoreBreakdown, SolverKind
from .problem import ProblemModel


class Totals(NamedTuple):
    """Running real-world quantities of an assignment."""

    effort: float
    cash: float
    balance: float


class ObjectiveEvaluator:
    """Scores assignments for one compiled problem."""

    def __init__(self, problem: ProblemModel, settings: SolverSettings | None = None):
        self.problem = problem
        self.settings = settings or SolverSettings()

    # ------------------------------------------------------------------
    # Real-world quantities
    # ------------------------------------------------------------------

    def totals(self, bits: np.ndarray) -> Totals:
        p = self.problem
        x = bits.astype(float)
        return Totals(
            effort=float(p.effort @ x),
            cash=float(p.upfront @ x),
            balance=p.starting_balance + float(p.cashflow @ x),
        )

    def constraint_penalty(self, totals: Totals) -> float:
        """Sum of the three quadratic budget penalties."""
        effort, cash, buffer = self._violation_penalties(totals)
        return effort + cash + buffer

    def _violation_penalties(self, totals: Totals) -> tuple[float, float, float]:
        c = self.problem.constraints
        s = self.settings
        effort_over = max(0.0, totals.effort - c.max_effort_minutes)
        cash_over = max(0.0, totals.cash - c.max_upfront_cash)
        buffer_short = max(0.0, c.min_balance_after - totals.balance)
        return (
            s.lambda_effort * effort_over * effort_over,
            s.lambda_cash * cash_over * cash_over,
            s.lambda_buffer * buffer_short * buffer_short,
        )

    def within_budgets(self, totals: Totals) -> bool:
        c = self.problem.constraints
        return (
            totals.effort <= c.max_effort_minutes
            and totals.cash <= c.max_upfront_cash
            and totals.balance >= c.min_balance_after
        )

    # ------------------------------------------------------------------
    # Scoring
    # ------------------------------------------------------------------

    def breakdown(self, bits: np.ndarray) -> ScoreBreakdown:
        """Every objective term for one assignment."""
        p = self.problem
        s = self.settings
        bits = np.asarray(bits, dtype=np.int8)

        synergy_count = _pair_count(bits, p.synergy_pairs)
        conflict_count = _pair_count(bits, p.conflict_pairs)
        missing_required = int(np.count_nonzero(p.required & (bits == 0)))
        effort_pen, cash_pen, buffer_pen = self._violation_penalties(self.totals(bits))

        return ScoreBreakdown(
            linear=float(p.values @ bits.astype(float)),
            synergy_bonus=s.synergy_bonus * synergy_count,
            conflict_penalty=s.conflict_penalty * conflict_count,
            effort_penalty=effort_pen,
            cash_penalty=cash_pen,
            buffer_penalty=buffer_pen,
            required_penalty=s.required_penalty * missing_required,
        )

    def evaluate(self, bits: np.ndarray) -> float:
        return self.breakdown(bits).total

    def energy(self, bits: np.ndarray) -> float:
        """Minimizing form of the objective."""
        return -self.evaluate(bits)

    def evaluate_many(self, matrix: np.ndarray) -> np.ndarray:
        """Score each row of an (m, n) 0/1 matrix."""
        p = self.problem
        s = self.settings
        c = p.constraints
        x = matrix.astype(float)

        score = x @ p.values
        if len(p.synergy_pairs):
            score += s.synergy_bonus * _pair_counts(matrix, p.synergy_pairs)
        if len(p.conflict_pairs):
            score -= s.conflict_penalty * _pair_counts(matrix, p.conflict_pairs)
        if p.required.any():
            missing = (matrix[:, p.required] == 0).sum(axis=1)
            score -= s.required_penalty * missing

        effort_over = np.maximum(0.0, x @ p.effort - c.max_effort_minutes)
        cash_over = np.maximum(0.0, x @ p.upfront - c.max_upfront_cash)
        buffer_short = np.maximum(0.0, c.min_balance_after - (p.starting_balance + x @ p.cashflow))
        score -= s.lambda_effort * effort_over**2
        score -= s.lambda_cash * cash_over**2
        score -= s.lambda_buffer * buffer_short**2
        return score

    def flip_delta(self, bits: np.ndarray, totals: Totals, i: int) -> tuple[float, Totals]:
        """Score change from flipping bit i, without mutating bits.

        Returns:
            (delta, totals after the flip)
        """
        p = self.problem
        s = self.settings
        sign = 1.0 if bits[i] == 0 else -1.0

        delta = sign * p.values[i]
        syn = p.synergy_neighbors[i]
        if len(syn):
            delta += sign * s.synergy_bonus * float(bits[syn].sum())
        conf = p.conflict_neighbors[i]
        if len(conf):
            delta -= sign * s.conflict_penalty * float(bits[conf].sum())
        if p.required[i]:
            delta += sign * s.required_penalty

        new_totals = Totals(
            effort=totals.effort + sign * p.effort[i],
            cash=totals.cash + sign * p.upfront[i],
            balance=totals.balance + sign * p.cashflow[i],
        )
        delta -= self.constraint_penalty(new_totals) - self.constraint_penalty(totals)
        return float(delta), new_totals


def _pair_count(bits: np.ndarray, pairs: np.ndarray) -> int:
    if len(pairs) == 0:
        return 0
    return int(np.count_nonzero(bits[pairs[:, 0]] & bits[pairs[:, 1]]))


def _pair_counts(matrix: np.ndarray, pairs: np.ndarray) -> np.ndarray:
    return (matrix[:, pairs[:, 0]] & matrix[:, pairs[:, 1]]).sum(axis=1)


class Candidate(NamedTuple):
    """One solver's proposed assignment."""

    bits: np.ndarray
    score: float
    solver: SolverKind
    iterations: int = 0
