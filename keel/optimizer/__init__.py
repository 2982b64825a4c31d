"""Optimizer package for goal-conditioned action selection.

This package provides components for:
- Weighting actions by the user's goal
- Scoring assignments with a quadratic objective
- Exact, simulated-annealing and greedy solvers
- Arbitrating between solvers and explaining the result
"""

from keel.optimizer.arbiter import ActionOptimizer, optimize
from keel.optimizer.explain import ExplanationBuilder, contributions_frame
from keel.optimizer.models import (
    ActionContribution,
    ActionRecord,
    Constraints,
    Explanation,
    FinancialSnapshot,
    Goal,
    GoalWeights,
    ResultMetrics,
    ScoreBreakdown,
    SolverDiagnostics,
    SolverKind,
    SolverResult,
)
from keel.optimizer.objective import ObjectiveEvaluator
from keel.optimizer.problem import ProblemModel, validate_budgets, validate_catalog

__all__ = [
    "ActionContribution",
    "ActionOptimizer",
    "ActionRecord",
    "Constraints",
    "Explanation",
    "ExplanationBuilder",
    "FinancialSnapshot",
    "Goal",
    "GoalWeights",
    "ObjectiveEvaluator",
    "ProblemModel",
    "ResultMetrics",
    "ScoreBreakdown",
    "SolverDiagnostics",
    "SolverKind",
    "SolverResult",
    "contributions_frame",
    "optimize",
    "validate_budgets",
    "validate_catalog",
]
