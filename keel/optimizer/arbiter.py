"""
Solver Arbiter - runs the solvers and returns the best-scoring selection.

Usage:
    optimizer = ActionOptimizer()
    result = optimizer.optimize(
        actions=catalog,
        goal=Goal.STABILIZE_CASHFLOW,
        constraints=Constraints(max_effort_minutes=120, max_upfront_cash=0, min_balance_after=100),
        required_action_ids=["automate_min_payments"],
        starting_balance=500.0,
    )

Each call is independent: nothing is cached between calls and no state is
shared, so concurrent calls need no coordination.
"""

from __future__ import annotations

import logging
import time
from typing import Iterable, Optional, Sequence

import numpy as np

from keel.settings import SolverSettings

from .annealing import solve_annealing
from .exact import solve_exact
from .explain import ExplanationBuilder
from .greedy import solve_greedy
from .models import (
    ActionRecord,
    Constraints,
    Explanation,
    FinancialSnapshot,
    Goal,
    ResultMetrics,
    ScoreBreakdown,
    SolverDiagnostics,
    SolverKind,
    SolverResult,
)
from .objective import Candidate, ObjectiveEvaluator
from .problem import ProblemModel, validate_budgets, validate_catalog
from .values import value_vector

logger = logging.getLogger(__name__)


def pick_winner(primary: Candidate, greedy: Candidate) -> Candidate:
    """Higher score wins; an exact tie goes to the primary solver."""
    if greedy.score > primary.score:
        return greedy
    return primary


class ActionOptimizer:
    """Goal-conditioned selection of remediation actions under weekly budgets."""

    def __init__(
        self,
        settings: SolverSettings | None = None,
        rng: Optional[np.random.Generator] = None,
    ):
        """Initialize optimizer with optional dependency injection.

        Args:
            settings: Solver configuration (defaults if None)
            rng: Generator for the stochastic solver. When None, each call
                creates a fresh generator from settings.seed, so repeated
                calls are reproducible.
        """
        self._settings = settings or SolverSettings()
        self._rng = rng

    @property
    def settings(self) -> SolverSettings:
        return self._settings

    def optimize(
        self,
        actions: Sequence[ActionRecord],
        goal: Goal,
        constraints: Constraints,
        required_action_ids: Iterable[str] = (),
        starting_balance: Optional[float] = None,
        snapshot: Optional[FinancialSnapshot] = None,
        explain: bool = True,
    ) -> SolverResult:
        """Select the subset of actions that maximizes the goal-weighted score.

        Args:
            actions: Action catalog; ineligible actions are excluded from the search
            goal: User goal
            constraints: Effort, upfront cash and buffer limits
            required_action_ids: Ids that must be selected
            starting_balance: Checking balance before the actions apply.
                Taken from snapshot when omitted.
            snapshot: Optional snapshot supplying the starting balance
            explain: Attach an Explanation to the result

        Returns:
            SolverResult (score convention: higher is better)

        Raises:
            CatalogValidationError: malformed catalog, or a non-finite budget or balance
            RequiredActionError: required id absent or ineligible
        """
        started = time.perf_counter()
        goal = Goal(goal)
        required_ids = list(dict.fromkeys(required_action_ids))
        if starting_balance is None:
            starting_balance = snapshot.starting_balance if snapshot is not None else 0.0

        validate_catalog(actions, required_ids, self._settings.max_catalog_size)
        validate_budgets(constraints, starting_balance)

        catalog = [a for a in actions if a.eligible]
        if len(catalog) < len(actions):
            logger.debug(f"Excluded {len(actions) - len(catalog)} ineligible actions from the search")

        if not catalog:
            return self._empty_result(constraints, starting_balance, started, explain)

        values = value_vector(catalog, goal)
        problem = ProblemModel.compile(catalog, values, constraints, starting_balance, required_ids)
        evaluator = ObjectiveEvaluator(problem, self._settings)

        if problem.n <= self._settings.exact_max_actions:
            primary = solve_exact(evaluator)
        else:
            rng = self._rng if self._rng is not None else np.random.default_rng(self._settings.seed)
            primary = solve_annealing(evaluator, rng)
        greedy = solve_greedy(evaluator)
        winner = pick_winner(primary, greedy)

        metrics = self._metrics(evaluator, winner.bits)
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
        diagnostics = SolverDiagnostics(
            n_actions_considered=problem.n,
            primary_solver=primary.solver,
            primary_score=primary.score,
            greedy_score=greedy.score,
            optimality="guaranteed" if winner.solver == SolverKind.EXACT else "heuristic",
            iterations=primary.iterations,
            elapsed_ms=elapsed_ms,
            notes=self._notes(primary, greedy, winner, metrics),
        )

        explanation = None
        if explain:
            explanation = ExplanationBuilder(evaluator, catalog, goal).build(winner.bits)

        logger.info(
            f"Optimized {problem.n} actions for {goal.value}: solver={winner.solver.value}, "
            f"selected={int(winner.bits.sum())}, score={winner.score:.3f}, {elapsed_ms}ms"
        )

        return SolverResult(
            selected_ids=problem.selected_ids(winner.bits),
            score=winner.score,
            solver_used=winner.solver,
            metrics=metrics,
            breakdown=evaluator.breakdown(winner.bits),
            diagnostics=diagnostics,
            explanation=explanation,
        )

    def _metrics(self, evaluator: ObjectiveEvaluator, bits: np.ndarray) -> ResultMetrics:
        """Real-world totals of the winning assignment."""
        problem = evaluator.problem
        totals = evaluator.totals(bits)
        selected = bits.astype(bool)
        return ResultMetrics(
            effort_used=totals.effort,
            cash_used=totals.cash,
            projected_balance=round(totals.balance, 2),
            buffer_respected=totals.balance >= problem.constraints.min_balance_after,
            monthly_cash_impact=round(float(problem.cashflow[selected].sum()), 2),
            risk_reduction=float(problem.risk[selected].sum()),
            required_satisfied=bool(np.all(bits[problem.required] == 1)),
        )

    def _notes(
        self,
        primary: Candidate,
        greedy: Candidate,
        winner: Candidate,
        metrics: ResultMetrics,
    ) -> tuple[str, ...]:
        notes = []
        if primary.solver == SolverKind.STOCHASTIC:
            notes.append("Simulated annealing is a heuristic; the selection is not guaranteed optimal")
        if winner.solver == SolverKind.GREEDY:
            notes.append(f"Greedy heuristic outscored {primary.solver.value} ({greedy.score:.3f} > {primary.score:.3f})")
        if not metrics.required_satisfied:
            notes.append("A required action was left out; its penalty is included in the score")
        if not metrics.buffer_respected:
            notes.append("Projected balance falls below the minimum buffer")
        return tuple(notes)

    def _empty_result(
        self,
        constraints: Constraints,
        starting_balance: float,
        started: float,
        explain: bool,
    ) -> SolverResult:
        logger.info("No eligible actions to optimize")
        explanation = None
        if explain:
            explanation = Explanation(top_reasons=("No eligible actions available",))
        return SolverResult(
            selected_ids=(),
            score=0.0,
            solver_used=SolverKind.GREEDY,
            metrics=ResultMetrics(
                projected_balance=round(float(starting_balance), 2),
                buffer_respected=starting_balance >= constraints.min_balance_after,
            ),
            breakdown=ScoreBreakdown(),
            diagnostics=SolverDiagnostics(
                elapsed_ms=round((time.perf_counter() - started) * 1000, 2),
                notes=("No eligible actions available",),
            ),
            explanation=explanation,
        )


def optimize(
    actions: Sequence[ActionRecord],
    goal: Goal,
    constraints: Constraints,
    required_action_ids: Iterable[str] = (),
    starting_balance: float = 0.0,
    settings: SolverSettings | None = None,
    seed: Optional[int] = None,
) -> SolverResult:
    """Convenience wrapper around ActionOptimizer.optimize()."""
    rng = np.random.default_rng(seed) if seed is not None else None
    return ActionOptimizer(settings=settings, rng=rng).optimize(
        actions,
        goal,
        constraints,
        required_action_ids=required_action_ids,
        starting_balance=starting_balance,
    )
