"""Data models for the optimizer package."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, NamedTuple, Optional


class GoalWeights(NamedTuple):
    """Blend of normalized cash impact and risk reduction for a goal."""

    cash: float
    risk: float


class Goal(str, Enum):
    """The user's financial goal. Fixes the benefit weighting."""

    STABILIZE_CASHFLOW = "stabilize_cashflow"
    PAY_DOWN_DEBT = "pay_down_debt"
    BUILD_EMERGENCY_FUND = "build_emergency_fund"

    @property
    def weights(self) -> GoalWeights:
        return GOAL_WEIGHTS[self]

    @classmethod
    def from_alias(cls, text: Optional[str]) -> "Goal":
        """Resolve snapshot goal vocabulary ('stability', 'debt', 'emergency', 'auto').

        Canonical values are accepted as well. Anything else, including
        'auto', resolves to STABILIZE_CASHFLOW.
        """
        if text is None:
            return cls.STABILIZE_CASHFLOW
        key = text.strip().lower()
        for goal in cls:
            if goal.value == key:
                return goal
        return GOAL_ALIASES.get(key, cls.STABILIZE_CASHFLOW)


GOAL_WEIGHTS: dict[Goal, GoalWeights] = {
    Goal.STABILIZE_CASHFLOW: GoalWeights(cash=0.4, risk=0.6),
    Goal.PAY_DOWN_DEBT: GoalWeights(cash=0.7, risk=0.3),
    Goal.BUILD_EMERGENCY_FUND: GoalWeights(cash=0.5, risk=0.5),
}

GOAL_ALIASES: dict[str, Goal] = {
    "stability": Goal.STABILIZE_CASHFLOW,
    "debt": Goal.PAY_DOWN_DEBT,
    "emergency": Goal.BUILD_EMERGENCY_FUND,
}


class SolverKind(str, Enum):
    """Which solver produced the returned assignment."""

    EXACT = "exact"
    STOCHASTIC = "stochastic"
    GREEDY = "greedy"


@dataclass(frozen=True)
class ActionRecord:
    """One candidate remediation action."""

    id: str
    effort_minutes: int  # Cost against the weekly effort budget
    monthly_cashflow_delta: float  # Signed; paying extra on debt is negative
    risk_reduction_score: float  # 0-10, unrelated to cash
    upfront_cash_cost: float = 0.0  # Cost against the upfront cash budget
    goal_weights: Mapping[Goal, float] = field(default_factory=dict, hash=False)  # Per-goal multiplier
    conflicts_with: frozenset[str] = frozenset()
    synergy_with: frozenset[str] = frozenset()
    eligible: bool = True
    label: str = ""
    description: str = ""
    estimated_monthly_impact: tuple[float, float] = (0.0, 0.0)  # (low, high)

    def __post_init__(self):
        # Accept any iterable for the relation sets
        object.__setattr__(self, "conflicts_with", frozenset(self.conflicts_with))
        object.__setattr__(self, "synergy_with", frozenset(self.synergy_with))
        # Own a read-only copy so records built with replace() never share weights
        object.__setattr__(self, "goal_weights", MappingProxyType(dict(self.goal_weights)))
        if not self.label:
            object.__setattr__(self, "label", self.id)

    def goal_multiplier(self, goal: Goal) -> float:
        return float(self.goal_weights.get(goal, 0.0))


@dataclass(frozen=True)
class Constraints:
    """Budgets for one optimization call."""

    max_effort_minutes: float
    max_upfront_cash: float
    min_balance_after: float


@dataclass(frozen=True)
class FinancialSnapshot:
    """The slice of the user's snapshot the optimizer reads."""

    starting_balance: float
    monthly_income_est: float = 0.0
    monthly_essential_spend_est: float = 0.0
    risk_flags: tuple[str, ...] = ()
    has_debt: bool = False


@dataclass(frozen=True)
class ResultMetrics:
    """Real-world quantities of the winning selection (not the penalized score)."""

    effort_used: float = 0.0
    cash_used: float = 0.0
    projected_balance: float = 0.0
    buffer_respected: bool = True
    monthly_cash_impact: float = 0.0
    risk_reduction: float = 0.0
    required_satisfied: bool = True  # False when a required action was left out


@dataclass(frozen=True)
class ScoreBreakdown:
    """Objective terms. Penalties are reported as positive magnitudes."""

    linear: float = 0.0
    synergy_bonus: float = 0.0
    conflict_penalty: float = 0.0
    effort_penalty: float = 0.0
    cash_penalty: float = 0.0
    buffer_penalty: float = 0.0
    required_penalty: float = 0.0

    @property
    def total(self) -> float:
        return (
            self.linear
            + self.synergy_bonus
            - self.conflict_penalty
            - self.effort_penalty
            - self.cash_penalty
            - self.buffer_penalty
            - self.required_penalty
        )


@dataclass(frozen=True)
class SolverDiagnostics:
    """How the result was produced."""

    n_actions_considered: int = 0
    primary_solver: Optional[SolverKind] = None  # exact or stochastic, None for empty input
    primary_score: Optional[float] = None
    greedy_score: Optional[float] = None
    optimality: str = "heuristic"  # 'guaranteed' only when exact enumeration won
    iterations: int = 0  # Masks scored (exact) or moves proposed (stochastic)
    elapsed_ms: float = 0.0
    notes: tuple[str, ...] = ()


@dataclass(frozen=True)
class ActionContribution:
    """Isolated contribution of one selected action."""

    id: str
    value: float
    cash_component: float
    risk_component: float
    penalties: float


@dataclass(frozen=True)
class Explanation:
    """Human-readable decoration of a result."""

    top_reasons: tuple[str, ...] = ()
    action_contributions: tuple[ActionContribution, ...] = ()
    constraint_notes: tuple[str, ...] = ()


@dataclass(frozen=True)
class SolverResult:
    """Outcome of one optimization call."""

    selected_ids: tuple[str, ...]  # Catalog order
    score: float  # Higher is better
    solver_used: SolverKind
    metrics: ResultMetrics
    breakdown: ScoreBreakdown = field(default_factory=ScoreBreakdown)
    diagnostics: SolverDiagnostics = field(default_factory=SolverDiagnostics)
    explanation: Optional[Explanation] = None

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready shape for the plan narrator and presentation layer."""
        payload: dict[str, Any] = {
            "selected_ids": list(self.selected_ids),
            "score": round(self.score, 3),
            "solver_used": self.solver_used.value,
            "metrics": asdict(self.metrics),
            "breakdown": {**asdict(self.breakdown), "total": round(self.breakdown.total, 3)},
            "diagnostics": {
                **asdict(self.diagnostics),
                "primary_solver": self.diagnostics.primary_solver.value if self.diagnostics.primary_solver else None,
                "notes": list(self.diagnostics.notes),
            },
        }
        if self.explanation is not None:
            payload["top_reasons"] = list(self.explanation.top_reasons)
            payload["action_contributions"] = [asdict(c) for c in self.explanation.action_contributions]
            payload["constraint_notes"] = list(self.explanation.constraint_notes)
        return payload
