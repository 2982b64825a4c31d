"""
Value Function - goal-weighted benefit of each action.

Usage:
    values = value_vector(catalog, Goal.PAY_DOWN_DEBT)

Cash impact and risk reduction are normalized by the largest magnitude in the
catalog so both land on a comparable 0-1 scale before the goal blend.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from .models import ActionRecord, Goal


def normalizers(catalog: Sequence[ActionRecord]) -> tuple[float, float]:
    """Return (max_cash, max_risk), each floored at 1 to avoid division by zero."""
    max_cash = max([1.0] + [abs(a.monthly_cashflow_delta) for a in catalog])
    max_risk = max([1.0] + [a.risk_reduction_score for a in catalog])
    return float(max_cash), float(max_risk)


def cash_risk_components(
    action: ActionRecord,
    goal: Goal,
    max_cash: float,
    max_risk: float,
) -> tuple[float, float]:
    """Goal-weighted (cash, risk) parts of an action's value before its goal multiplier."""
    weights = goal.weights
    cash = weights.cash * (action.monthly_cashflow_delta / max_cash)
    risk = weights.risk * (action.risk_reduction_score / max_risk)
    return cash, risk


def action_value(action: ActionRecord, goal: Goal, max_cash: float, max_risk: float) -> float:
    """
    Benefit of selecting an action for a goal.

    The blend is scaled by (1 + the action's own multiplier for the goal), so an
    action without goal multipliers keeps the plain cash/risk blend.
    """
    cash, risk = cash_risk_components(action, goal, max_cash, max_risk)
    return (cash + risk) * (1.0 + action.goal_multiplier(goal))


def value_vector(catalog: Sequence[ActionRecord], goal: Goal) -> np.ndarray:
    """Values for every action in catalog order."""
    if not catalog:
        return np.zeros(0, dtype=float)
    max_cash, max_risk = normalizers(catalog)
    return np.array([action_value(a, goal, max_cash, max_risk) for a in catalog], dtype=float)
