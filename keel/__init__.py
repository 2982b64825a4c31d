"""
Keel - goal-conditioned selection of personal-finance coaching actions.

Usage:
    from keel import ActionOptimizer, Constraints, Goal, build_catalog

    catalog = build_catalog(eligible_ids={"cancel_unused_sub", "set_overdraft_alert"})
    result = ActionOptimizer().optimize(
        catalog,
        Goal.STABILIZE_CASHFLOW,
        Constraints(max_effort_minutes=120, max_upfront_cash=0, min_balance_after=100),
        starting_balance=500.0,
    )
    result.selected_ids, result.score, result.solver_used
"""

from keel.catalog import ACTION_LIBRARY, build_catalog, default_constraints, default_required_ids
from keel.exceptions import CatalogValidationError, OptimizerError, RequiredActionError
from keel.optimizer import (
    ActionOptimizer,
    ActionRecord,
    Constraints,
    FinancialSnapshot,
    Goal,
    SolverKind,
    SolverResult,
    optimize,
)
from keel.settings import DEFAULTS, SolverSettings

__all__ = [
    "ACTION_LIBRARY",
    "ActionOptimizer",
    "ActionRecord",
    "CatalogValidationError",
    "Constraints",
    "DEFAULTS",
    "FinancialSnapshot",
    "Goal",
    "OptimizerError",
    "RequiredActionError",
    "SolverKind",
    "SolverResult",
    "SolverSettings",
    "build_catalog",
    "default_constraints",
    "default_required_ids",
    "optimize",
]
