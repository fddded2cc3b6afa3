"""Shared test fixtures for budget buddy tests."""

from datetime import date

from budget_buddy.models.schemas import (
    BudgetState,
    DebitTemplate,
    Expense,
    Income,
    MonthRecord,
    SavingsAccount,
    SavingsGoal,
    Settings,
)

TODAY = date(2026, 10, 19)


def fixed_clock(today: date = TODAY):
    return lambda: today


def make_income(
    source: str = "Salary",
    amount: float = 2000.0,
    date: str = "2026-10-01",
) -> Income:
    return Income(
        id=f"inc-{source.lower().replace(' ', '-')}-{date}",
        source=source,
        amount=amount,
        date=date,
    )


def make_expense(
    category: str = "Groceries",
    amount: float = 500.0,
    date: str = "2026-10-05",
    debit_id: str | None = None,
) -> Expense:
    return Expense(
        id=f"exp-{category.lower().replace(' ', '-')}-{date}",
        category=category,
        amount=amount,
        date=date,
        debit_id=debit_id,
    )


def make_debit(
    title: str = "Rent",
    amount: float = 800.0,
    day: int = 1,
    enabled: bool = True,
) -> DebitTemplate:
    return DebitTemplate(
        id=f"deb-{title.lower().replace(' ', '-')}",
        title=title,
        amount=amount,
        day=day,
        enabled=enabled,
    )


def make_month(
    key: str = "2026-10",
    starting_balance: float = 0.0,
    reserved_carry: float = 0.0,
    incomes: list[Income] | None = None,
    expenses: list[Expense] | None = None,
) -> MonthRecord:
    return MonthRecord(
        key=key,
        starting_balance=starting_balance,
        reserved_carry=reserved_carry,
        incomes=incomes or [],
        expenses=expenses or [],
    )


def make_account(
    name: str = "Emergency Fund",
    balance: float = 0.0,
    monthly_contribution: float = 0.0,
    annual_rate: float = 0.0,
) -> SavingsAccount:
    return SavingsAccount(
        id=f"acc-{name.lower().replace(' ', '-')}",
        name=name,
        balance=balance,
        monthly_contribution=monthly_contribution,
        annual_rate=annual_rate,
    )


def make_goal(
    title: str = "Holiday",
    target_amount: float = 6000.0,
    saved_so_far: float = 0.0,
    deadline: date | None = None,
) -> SavingsGoal:
    return SavingsGoal(
        id=f"goal-{title.lower().replace(' ', '-')}",
        title=title,
        target_amount=target_amount,
        saved_so_far=saved_so_far,
        deadline=deadline,
    )


def make_state(
    months: list[MonthRecord] | None = None,
    current: str | None = None,
    debit_templates: list[DebitTemplate] | None = None,
    savings_accounts: list[SavingsAccount] | None = None,
    goals: list[SavingsGoal] | None = None,
    carry_percent: float | None = None,
) -> BudgetState:
    months = months or [make_month()]
    return BudgetState(
        current_month_key=current or months[-1].key,
        months={m.key: m for m in months},
        debit_templates=debit_templates or [],
        savings_accounts=savings_accounts or [],
        goals=goals or [],
        settings=Settings(carry_percent=carry_percent),
    )
