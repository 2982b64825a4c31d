"""
Explainability Reporter - read-only decoration of a winning assignment.

Usage:
    explanation = ExplanationBuilder(evaluator, catalog, goal).build(bits)
    frame = contributions_frame(explanation)
"""

from __future__ import annotations

from typing import Sequence

import numpy as np
import pandas as pd

from .models import ActionContribution, ActionRecord, Explanation, Goal
from .objective import ObjectiveEvaluator
from .values import cash_risk_components, normalizers

GOAL_REASONS: dict[Goal, str] = {
    Goal.STABILIZE_CASHFLOW: (
        "Risk reduction weighted 60% - actions that prevent overdrafts and late fees were prioritized"
    ),
    Goal.PAY_DOWN_DEBT: (
        "Cash impact weighted 70% - actions that free up money for debt payments were prioritized"
    ),
    Goal.BUILD_EMERGENCY_FUND: (
        "Balanced 50/50 weighting - actions that both free cash and reduce risk were prioritized"
    ),
}


def _pct(used: float, budget: float) -> str:
    if budget <= 0:
        return "no budget"
    return f"{round(used / budget * 100)}% used"


def _share(part: float, whole: float) -> float:
    return part / whole if whole > 0 else 0.0


class ExplanationBuilder:
    """Builds top reasons, per-action contributions and constraint notes."""

    def __init__(self, evaluator: ObjectiveEvaluator, catalog: Sequence[ActionRecord], goal: Goal):
        self._evaluator = evaluator
        self._catalog = list(catalog)
        self._goal = goal

    def build(self, bits: np.ndarray) -> Explanation:
        contributions = self._contributions(bits)
        reasons = self._top_reasons(bits, contributions)
        notes = self._constraint_notes(bits)
        return Explanation(
            top_reasons=tuple(reasons[: self._evaluator.settings.explain_max_reasons]),
            action_contributions=tuple(contributions),
            constraint_notes=tuple(notes),
        )

    def _contributions(self, bits: np.ndarray) -> list[ActionContribution]:
        """Per selected action: goal-weighted cash and risk parts plus its share of penalties.

        Budget penalties are split in proportion to each action's share of the
        overrun quantity; a conflict pair's penalty is split evenly.
        """
        problem = self._evaluator.problem
        settings = self._evaluator.settings
        max_cash, max_risk = normalizers(self._catalog)
        breakdown = self._evaluator.breakdown(bits)
        selected = np.flatnonzero(bits)

        total_effort = float(problem.effort[selected].sum())
        total_upfront = float(problem.upfront[selected].sum())
        drains = np.clip(-problem.cashflow, 0.0, None)
        total_drain = float(drains[selected].sum())

        contributions = []
        for i in selected:
            i = int(i)
            action = self._catalog[i]
            multiplier = 1.0 + action.goal_multiplier(self._goal)
            cash, risk = cash_risk_components(action, self._goal, max_cash, max_risk)
            cash *= multiplier
            risk *= multiplier

            penalty = breakdown.effort_penalty * _share(problem.effort[i], total_effort)
            penalty += breakdown.cash_penalty * _share(problem.upfront[i], total_upfront)
            penalty += breakdown.buffer_penalty * _share(drains[i], total_drain)
            clashes = problem.conflict_neighbors[i]
            if len(clashes):
                penalty += 0.5 * settings.conflict_penalty * float(bits[clashes].sum())

            contributions.append(
                ActionContribution(
                    id=action.id,
                    value=round(cash + risk - penalty, 3),
                    cash_component=round(cash, 3),
                    risk_component=round(risk, 3),
                    penalties=round(-penalty, 3),
                )
            )

        contributions.sort(key=lambda c: c.value, reverse=True)
        return contributions

    def _top_reasons(self, bits: np.ndarray, contributions: list[ActionContribution]) -> list[str]:
        problem = self._evaluator.problem
        threshold = self._evaluator.settings.explain_high_value_threshold
        labels = {a.id: a.label for a in self._catalog}
        reasons = []

        if contributions:
            top = contributions[0]
            reasons.append(f'"{labels[top.id]}" was selected for highest combined value ({top.value:.2f})')

        reasons.append(GOAL_REASONS[self._goal])

        for i in range(problem.n):
            if bits[i] == 1 or problem.values[i] <= threshold:
                continue
            for j in problem.conflict_neighbors[i]:
                if bits[j] == 1:
                    reasons.append(
                        f'"{self._catalog[i].label}" was skipped because it conflicts with "{self._catalog[int(j)].label}"'
                    )
        return reasons

    def _constraint_notes(self, bits: np.ndarray) -> list[str]:
        problem = self._evaluator.problem
        constraints = problem.constraints
        totals = self._evaluator.totals(bits)
        notes = [
            f"Effort budget: {totals.effort:g}/{constraints.max_effort_minutes:g} min "
            f"({_pct(totals.effort, constraints.max_effort_minutes)})",
            f"Upfront cash: ${totals.cash:,.2f}/${constraints.max_upfront_cash:,.2f} "
            f"({_pct(totals.cash, constraints.max_upfront_cash)})",
        ]
        if totals.balance >= constraints.min_balance_after:
            notes.append(
                f"Projected balance ${totals.balance:,.2f} keeps the ${constraints.min_balance_after:,.2f} buffer"
            )
        else:
            notes.append(
                f"Projected balance ${totals.balance:,.2f} falls "
                f"${constraints.min_balance_after - totals.balance:,.2f} short of the buffer"
            )

        missing = np.flatnonzero(problem.required & (bits == 0))
        for i in missing:
            notes.append(f'Required action "{self._catalog[int(i)].label}" could not be included')
        return notes


def contributions_frame(explanation: Explanation) -> pd.DataFrame:
    """Contribution table indexed by action id, highest value first."""
    columns = ["id", "value", "cash_component", "risk_component", "penalties"]
    rows = [
        {
            "id": c.id,
            "value": c.value,
            "cash_component": c.cash_component,
            "risk_component": c.risk_component,
            "penalties": c.penalties,
        }
        for c in explanation.action_contributions
    ]
    return pd.DataFrame(rows, columns=columns).set_index("id")
