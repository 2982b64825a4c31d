"""
Action Library - the standard coaching actions and default budgets.

Usage:
    catalog = build_catalog(eligible_ids={"cancel_unused_sub", "meal_prep"})
    required = default_required_ids(snapshot, catalog)
    constraints = default_constraints()

Eligibility is decided upstream by the snapshot builder; this module only
applies the resulting id set.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, Optional, Sequence

from keel.optimizer.models import ActionRecord, Constraints, FinancialSnapshot, Goal

STABILITY = Goal.STABILIZE_CASHFLOW
DEBT = Goal.PAY_DOWN_DEBT
EMERGENCY = Goal.BUILD_EMERGENCY_FUND

# Default weekly budgets
DEFAULT_EFFORT_BUDGET_MINUTES = 180  # 3 hours/week
DEFAULT_UPFRONT_CASH = 200.0
DEFAULT_MIN_CASH_BUFFER = 50.0

ACTION_LIBRARY: tuple[ActionRecord, ...] = (
    ActionRecord(
        id="cancel_unused_sub",
        label="Cancel unused subscriptions",
        description="Cancel subscriptions you have not used in the past 30 days.",
        estimated_monthly_impact=(10, 60),
        risk_reduction_score=2,
        effort_minutes=15,
        monthly_cashflow_delta=30,
        goal_weights={STABILITY: 0.5, DEBT: 0.3, EMERGENCY: 0.2},
        synergy_with={"review_bank_fees"},
    ),
    ActionRecord(
        id="negotiate_bill",
        label="Negotiate a bill reduction",
        description="Call your phone, internet, or insurance provider and ask for a lower rate.",
        estimated_monthly_impact=(10, 50),
        risk_reduction_score=1,
        effort_minutes=30,
        monthly_cashflow_delta=20,
        goal_weights={STABILITY: 0.4, DEBT: 0.3, EMERGENCY: 0.3},
        conflicts_with={"switch_phone_plan"},
    ),
    ActionRecord(
        id="switch_phone_plan",
        label="Switch to a cheaper phone plan",
        description="Move to a prepaid or MVNO carrier plan.",
        estimated_monthly_impact=(25, 55),
        risk_reduction_score=1,
        effort_minutes=45,
        upfront_cash_cost=30,  # New SIM and first month
        monthly_cashflow_delta=40,
        goal_weights={STABILITY: 0.4, DEBT: 0.3, EMERGENCY: 0.3},
        conflicts_with={"negotiate_bill"},
    ),
    ActionRecord(
        id="set_overdraft_alert",
        label="Set up low-balance alerts",
        description="Enable bank alerts when your balance drops below $100 to avoid overdraft fees.",
        estimated_monthly_impact=(0, 35),
        risk_reduction_score=8,
        effort_minutes=5,
        monthly_cashflow_delta=0,
        goal_weights={STABILITY: 0.9, DEBT: 0.05, EMERGENCY: 0.05},
        synergy_with={"request_due_date_change"},
    ),
    ActionRecord(
        id="automate_min_payments",
        label="Automate minimum debt payments",
        description="Set up autopay for minimum payments on all debts to prevent late fees.",
        estimated_monthly_impact=(0, 70),
        risk_reduction_score=9,
        effort_minutes=15,
        monthly_cashflow_delta=0,
        goal_weights={STABILITY: 0.8, DEBT: 0.15, EMERGENCY: 0.05},
        synergy_with={"set_bill_reminders"},
    ),
    ActionRecord(
        id="avalanche_extra_payment",
        label="Pay extra on highest-APR debt",
        description="Put any extra cash toward your highest-interest debt first.",
        estimated_monthly_impact=(20, 80),
        risk_reduction_score=3,
        effort_minutes=10,
        monthly_cashflow_delta=-50,
        goal_weights={STABILITY: 0.1, DEBT: 0.8, EMERGENCY: 0.1},
        conflicts_with={"snowball_extra_payment"},
    ),
    ActionRecord(
        id="snowball_extra_payment",
        label="Pay extra on smallest debt",
        description="Put extra cash toward your smallest balance to pay it off faster.",
        estimated_monthly_impact=(15, 60),
        risk_reduction_score=2,
        effort_minutes=10,
        monthly_cashflow_delta=-50,
        goal_weights={STABILITY: 0.1, DEBT: 0.7, EMERGENCY: 0.2},
        conflicts_with={"avalanche_extra_payment"},
    ),
    ActionRecord(
        id="build_micro_emergency",
        label="Start a micro emergency fund",
        description="Save $10-$25 per week into a separate savings account.",
        estimated_monthly_impact=(0, 0),
        risk_reduction_score=7,
        effort_minutes=10,
        monthly_cashflow_delta=-15,
        goal_weights={STABILITY: 0.3, DEBT: 0.0, EMERGENCY: 0.7},
    ),
    ActionRecord(
        id="request_due_date_change",
        label="Request due date alignment",
        description="Ask creditors to move due dates closer to your payday.",
        estimated_monthly_impact=(0, 35),
        risk_reduction_score=7,
        effort_minutes=20,
        monthly_cashflow_delta=0,
        goal_weights={STABILITY: 0.9, DEBT: 0.05, EMERGENCY: 0.05},
        synergy_with={"set_overdraft_alert"},
    ),
    ActionRecord(
        id="hardship_program",
        label="Apply for a hardship program",
        description="Ask your creditor about hardship or forbearance programs.",
        estimated_monthly_impact=(30, 150),
        risk_reduction_score=5,
        effort_minutes=30,
        monthly_cashflow_delta=50,
        goal_weights={STABILITY: 0.5, DEBT: 0.4, EMERGENCY: 0.1},
    ),
    ActionRecord(
        id="reduce_discretionary",
        label="Reduce discretionary spending",
        description="Cut back on non-essential spending by 20%.",
        estimated_monthly_impact=(30, 100),
        risk_reduction_score=4,
        effort_minutes=15,
        monthly_cashflow_delta=60,
        goal_weights={STABILITY: 0.4, DEBT: 0.3, EMERGENCY: 0.3},
        synergy_with={"meal_prep"},
    ),
    ActionRecord(
        id="meal_prep",
        label="Meal prep weekly",
        description="Plan and prep meals for the week to cut grocery and dining costs.",
        estimated_monthly_impact=(40, 120),
        risk_reduction_score=2,
        effort_minutes=120,
        upfront_cash_cost=25,  # Containers
        monthly_cashflow_delta=80,
        goal_weights={STABILITY: 0.3, DEBT: 0.3, EMERGENCY: 0.4},
        synergy_with={"reduce_discretionary"},
    ),
    ActionRecord(
        id="sell_unused_items",
        label="Sell unused items",
        description="Sell clothes, electronics, or furniture you no longer need.",
        estimated_monthly_impact=(50, 200),
        risk_reduction_score=1,
        effort_minutes=60,
        monthly_cashflow_delta=100,
        goal_weights={STABILITY: 0.2, DEBT: 0.3, EMERGENCY: 0.5},
    ),
    ActionRecord(
        id="set_bill_reminders",
        label="Set bill payment reminders",
        description="Add calendar reminders 3 days before each bill is due.",
        estimated_monthly_impact=(0, 50),
        risk_reduction_score=6,
        effort_minutes=10,
        monthly_cashflow_delta=0,
        goal_weights={STABILITY: 0.8, DEBT: 0.1, EMERGENCY: 0.1},
        synergy_with={"automate_min_payments"},
    ),
    ActionRecord(
        id="review_bank_fees",
        label="Review and dispute bank fees",
        description="Check statements for overdraft or maintenance fees and call to dispute them.",
        estimated_monthly_impact=(0, 40),
        risk_reduction_score=3,
        effort_minutes=20,
        monthly_cashflow_delta=20,
        goal_weights={STABILITY: 0.6, DEBT: 0.2, EMERGENCY: 0.2},
        synergy_with={"cancel_unused_sub"},
    ),
)


def build_catalog(
    eligible_ids: Optional[Iterable[str]] = None,
    library: Sequence[ActionRecord] = ACTION_LIBRARY,
) -> list[ActionRecord]:
    """Library actions with the eligible flag applied.

    Args:
        eligible_ids: Ids the snapshot builder found applicable. None marks
            every action eligible.
        library: Source actions (the standard library by default)

    Raises:
        KeyError: if eligible_ids names an action not in the library
    """
    if eligible_ids is None:
        return list(library)

    eligible = set(eligible_ids)
    unknown = eligible - {a.id for a in library}
    if unknown:
        raise KeyError(f"Unknown action ids: {', '.join(sorted(unknown))}")

    return [replace(action, eligible=action.id in eligible) for action in library]


def default_required_ids(snapshot: FinancialSnapshot, catalog: Sequence[ActionRecord]) -> list[str]:
    """Actions the user should not skip given their snapshot.

    Minimum-payment autopay is required when the user carries debt, and
    low-balance alerts when any risk flag is active. Only ids present and
    eligible in the catalog are returned.
    """
    available = {a.id for a in catalog if a.eligible}
    required = []
    if snapshot.has_debt:
        required.append("automate_min_payments")
    if snapshot.risk_flags:
        required.append("set_overdraft_alert")
    return [r for r in required if r in available]


def default_constraints(
    max_effort_minutes: float = DEFAULT_EFFORT_BUDGET_MINUTES,
    max_upfront_cash: float = DEFAULT_UPFRONT_CASH,
    min_balance_after: float = DEFAULT_MIN_CASH_BUFFER,
) -> Constraints:
    """Weekly budgets used when the caller has no preferences."""
    return Constraints(
        max_effort_minutes=max_effort_minutes,
        max_upfront_cash=max_upfront_cash,
        min_balance_after=min_balance_after,
    )
