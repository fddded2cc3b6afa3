"""Pure analysis functions for budget month records.

All functions take already-loaded domain objects and return numbers or
result dataclasses. Totals are recomputed on every call and never cached.
"""

from datetime import date

from budget_buddy.models.results import (
    GoalProgress,
    GoalRecommendation,
    MonthTotals,
    ProjectionPoint,
    SavingsProjection,
)
from budget_buddy.models.schemas import MonthRecord, SavingsAccount, SavingsGoal

# Goals without a deadline are spread over a year
DEFAULT_GOAL_MONTHS = 12


# --- Month Totals ---


def total_income(month: MonthRecord) -> float:
    return sum(i.amount for i in month.incomes)


def total_expenses(month: MonthRecord) -> float:
    """Sum of all expenses, materialized debits included."""
    return sum(e.amount for e in month.expenses)


def set_aside_total(accounts: list[SavingsAccount]) -> float:
    """Monthly amount set aside across all savings accounts."""
    return sum(a.monthly_contribution for a in accounts)


def leftover(month: MonthRecord, accounts: list[SavingsAccount]) -> float:
    """Opening balance plus income minus expenses and set-aside. May be negative."""
    return (
        month.starting_balance
        + total_income(month)
        - total_expenses(month)
        - set_aside_total(accounts)
    )


def available_to_spend(month: MonthRecord, accounts: list[SavingsAccount]) -> float:
    """Opening balance plus income, minus the locked reserve and set-aside.

    Expenses are not subtracted: this is the ceiling used for
    recommendations, not the carry computation.
    """
    return (
        month.starting_balance
        + total_income(month)
        - month.reserved_carry
        - set_aside_total(accounts)
    )


def compute_totals(month: MonthRecord, accounts: list[SavingsAccount]) -> MonthTotals:
    return MonthTotals(
        month_key=month.key,
        starting=month.starting_balance,
        income=total_income(month),
        expenses=total_expenses(month),
        set_aside=set_aside_total(accounts),
        reserved_carry=month.reserved_carry,
        leftover=leftover(month, accounts),
        available_to_spend=available_to_spend(month, accounts),
    )


# --- Projections ---


def future_value(
    months: int,
    monthly_rate: float,
    initial: float,
    monthly_contribution: float,
) -> float:
    """Ordinary-annuity future value of *initial* plus monthly contributions.

    *monthly_rate* is a decimal (0.01 means 1% per month).
    """
    if months <= 0:
        return initial
    if monthly_rate == 0:
        return initial + monthly_contribution * months

    growth = (1 + monthly_rate) ** months
    return initial * growth + monthly_contribution * ((growth - 1) / monthly_rate)


def project_savings_account(
    account: SavingsAccount,
    horizons: list[int],
) -> SavingsProjection:
    """Project an account balance using its annual rate compounded monthly."""
    monthly_rate = account.annual_rate / 100 / 12
    points = [
        ProjectionPoint(
            months=m,
            value=round(
                future_value(m, monthly_rate, account.balance, account.monthly_contribution), 2
            ),
        )
        for m in horizons
    ]
    return SavingsProjection(
        account_name=account.name,
        balance=account.balance,
        monthly_contribution=account.monthly_contribution,
        annual_rate=account.annual_rate,
        points=points,
    )


def project_leftover(
    totals: MonthTotals,
    monthly_rate_percent: float,
    months: int,
) -> float:
    """Project this month's surplus forward with the set-aside as contribution.

    A negative leftover projects from zero.
    """
    return future_value(
        months,
        monthly_rate_percent / 100,
        max(0.0, totals.leftover),
        totals.set_aside,
    )


def months_to_target(
    goal: SavingsGoal,
    monthly_contribution: float,
    monthly_rate: float = 0.0,
    max_months: int = 600,
) -> int | None:
    """Smallest number of months until a goal is funded.

    Returns 0 when the goal is already met and ``None`` when it cannot be
    reached within *max_months*.
    """
    if goal.saved_so_far >= goal.target_amount:
        return 0
    if monthly_contribution <= 0 and monthly_rate <= 0:
        return None
    for m in range(1, max_months + 1):
        fv = future_value(m, monthly_rate, goal.saved_so_far, monthly_contribution)
        if fv >= goal.target_amount - 0.005:
            return m
    return None


# --- Goal Recommendations ---


def months_until(deadline: date, reference_date: date | None = None) -> int:
    """Calendar months from *reference_date* to *deadline*, at least 1.

    A deadline later in its month than today's day counts the partial final
    month as a full one; an earlier day-of-month drops it.
    """
    today = reference_date or date.today()
    months = (deadline.year - today.year) * 12 + (deadline.month - today.month)
    if deadline.day < today.day:
        months -= 1
    elif deadline.day > today.day:
        months += 1
    return max(1, months)


def recommend_contribution(
    goal: SavingsGoal,
    totals: MonthTotals,
    reference_date: date | None = None,
) -> GoalRecommendation:
    """Suggest a monthly contribution, capped at what is available to spend.

    Advisory only: when the cap applies the goal will be under-funded and
    ``shortfall`` is set.
    """
    available = max(0.0, totals.available_to_spend)
    if goal.deadline is not None:
        months_left = months_until(goal.deadline, reference_date)
    else:
        months_left = DEFAULT_GOAL_MONTHS

    needed = max(0.0, goal.target_amount - goal.saved_so_far)
    per_month = needed / months_left

    return GoalRecommendation(
        goal_title=goal.title,
        needed=round(needed, 2),
        months_left=months_left,
        per_month=round(per_month, 2),
        available=round(available, 2),
        recommended=round(min(per_month, available), 2),
        shortfall=per_month > available + 0.005,
    )


def goal_progress(
    goal: SavingsGoal,
    monthly_contribution: float = 0.0,
    monthly_rate: float = 0.0,
) -> GoalProgress:
    """Progress snapshot including months-to-target at the given pace."""
    pct = min(100.0, goal.saved_so_far / goal.target_amount * 100)
    return GoalProgress(
        goal_title=goal.title,
        target_amount=goal.target_amount,
        saved_so_far=goal.saved_so_far,
        remaining=round(goal.remaining, 2),
        pct_complete=round(pct, 1),
        deadline=goal.deadline.isoformat() if goal.deadline else None,
        months_to_target=months_to_target(goal, monthly_contribution, monthly_rate),
    )
