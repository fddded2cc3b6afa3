"""Budget ledger: the explicit state handle every operation goes through.

Wraps a :class:`BudgetState` document together with an id factory, a clock
and an optional store. Each mutating call validates its input first, then
mutates the document, then saves it, so a rejected call leaves the state
untouched and a successful one is persisted before it returns.
"""

from __future__ import annotations

import itertools
import logging
import math
from datetime import date
from typing import Callable, Optional, Protocol, TypeVar
from uuid import uuid4

from pydantic import BaseModel, ValidationError

from budget_buddy.core import analyzers, months
from budget_buddy.core.debits import apply_debit
from budget_buddy.core.month_keys import parse_month_key
from budget_buddy.models.results import (
    GoalProgress,
    GoalRecommendation,
    MonthTotals,
    SavingsProjection,
)
from budget_buddy.models.schemas import (
    BudgetState,
    DebitTemplate,
    Expense,
    Income,
    MonthRecord,
    SavingsAccount,
    SavingsGoal,
)

logger = logging.getLogger("budget_buddy.ledger")

ModelT = TypeVar("ModelT", bound=BaseModel)


class LedgerError(Exception):
    """Base exception for rejected ledger operations."""

    kind = "ledger_error"

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(detail)


class InvalidInputError(LedgerError):
    """Raised when an operation's input fails validation. Nothing is mutated."""

    kind = "invalid_input"

    def __init__(self, entity_type: str, detail: str):
        self.entity_type = entity_type
        super().__init__(f"Invalid {entity_type}: {detail}")


class NotFoundError(LedgerError):
    """Raised when an update or query names an id that does not exist."""

    kind = "not_found"

    def __init__(self, entity_type: str, entity_id: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"No {entity_type} with id '{entity_id}'.")


class StateStore(Protocol):
    def save(self, state: BudgetState) -> None: ...


def random_id(kind: str) -> str:
    """Default id factory: ``<kind>-<12 hex chars>``."""
    return f"{kind}-{uuid4().hex[:12]}"


def counter_ids(start: int = 1) -> Callable[[str], str]:
    """Deterministic id factory: ``<kind>-1``, ``<kind>-2``, ... (one shared counter)."""
    counter = itertools.count(start)
    return lambda kind: f"{kind}-{next(counter)}"


def _describe(e: ValidationError) -> str:
    parts = []
    for err in e.errors():
        loc = ".".join(str(p) for p in err["loc"])
        parts.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return "; ".join(parts)


def _build(model: type[ModelT], entity_type: str, **fields) -> ModelT:
    try:
        return model(**fields)
    except ValidationError as e:
        raise InvalidInputError(entity_type, _describe(e)) from e


def _remove_by_id(items: list, item_id: str) -> bool:
    for i, item in enumerate(items):
        if item.id == item_id:
            del items[i]
            return True
    return False


def _find_by_id(items: list, item_id: str):
    for item in items:
        if item.id == item_id:
            return item
    return None


class Ledger:
    """Budget operations over a single in-memory state document."""

    def __init__(
        self,
        state: Optional[BudgetState] = None,
        store: Optional[StateStore] = None,
        id_factory: Optional[Callable[[str], str]] = None,
        clock: Optional[Callable[[], date]] = None,
    ):
        self._clock = clock or date.today
        self._store = store
        self._id_factory = id_factory or random_id
        self.state = state if state is not None else months.new_state(self._clock())

    def _save(self):
        if self._store is not None:
            logger.debug("Saving state (current month %s)", self.state.current_month_key)
            self._store.save(self.state)

    def _month(self, month_key: str | None) -> MonthRecord:
        if month_key is None:
            return self.current_month()
        try:
            parse_month_key(month_key)
        except ValueError as e:
            raise InvalidInputError("month", str(e)) from e
        record = self.state.months.get(month_key)
        if record is None:
            raise NotFoundError("month", month_key)
        return record

    def _entry_date(self, entry_date: str | date | None) -> str:
        if entry_date is None:
            return self._clock().isoformat()
        if isinstance(entry_date, date):
            return entry_date.isoformat()
        return entry_date

    # --- Month navigation ---

    def ensure_month(self, month_key: str) -> MonthRecord:
        """Return the month, creating it (carry + debits) on first access."""
        try:
            parse_month_key(month_key)
        except ValueError as e:
            raise InvalidInputError("month", str(e)) from e
        created = month_key not in self.state.months
        record = months.ensure_month(self.state, month_key, self._id_factory)
        if created:
            self._save()
        return record

    def current_month(self) -> MonthRecord:
        return self.ensure_month(self.state.current_month_key)

    def advance_month(self, direction: int) -> str:
        if direction not in (1, -1):
            raise InvalidInputError("direction", f"expected +1 or -1, got {direction}")
        before = self.state.current_month_key
        try:
            key = months.advance_month(self.state, direction, self._id_factory)
        except ValueError as e:
            raise InvalidInputError("month", str(e)) from e
        if key != before:
            self._save()
        return key

    def select_month(self, month_key: str) -> MonthRecord:
        record = self.ensure_month(month_key)
        if self.state.current_month_key != month_key:
            self.state.current_month_key = month_key
            self._save()
        return record

    def set_starting_balance(self, amount: float, month_key: str | None = None) -> None:
        """Explicit user correction of a month's opening balance."""
        record = self._month(month_key)
        if isinstance(amount, bool) or not isinstance(amount, (int, float)) or not math.isfinite(amount):
            raise InvalidInputError("starting balance", "must be a finite number")
        record.starting_balance = float(amount)
        self._save()

    # --- Incomes and expenses ---

    def add_income(
        self,
        source: str,
        amount: float,
        entry_date: str | date | None = None,
        month_key: str | None = None,
    ) -> str:
        record = self._month(month_key)
        income = _build(
            Income, "income",
            id=self._id_factory("inc"), source=source, amount=amount,
            date=self._entry_date(entry_date),
        )
        record.incomes.append(income)
        self._save()
        return income.id

    def add_expense(
        self,
        category: str,
        amount: float,
        entry_date: str | date | None = None,
        month_key: str | None = None,
    ) -> str:
        record = self._month(month_key)
        expense = _build(
            Expense, "expense",
            id=self._id_factory("exp"), category=category, amount=amount,
            date=self._entry_date(entry_date),
        )
        record.expenses.append(expense)
        self._save()
        return expense.id

    def remove_income(self, income_id: str, month_key: str | None = None) -> bool:
        removed = _remove_by_id(self._month(month_key).incomes, income_id)
        if removed:
            self._save()
        return removed

    def remove_expense(self, expense_id: str, month_key: str | None = None) -> bool:
        removed = _remove_by_id(self._month(month_key).expenses, expense_id)
        if removed:
            self._save()
        return removed

    # --- Recurring debits ---

    def add_debit_template(
        self,
        title: str,
        amount: float,
        day: int = 1,
        enabled: bool = True,
        apply_to_current: bool = True,
    ) -> str:
        """Register a recurring debit for every month created from now on.

        With *apply_to_current*, the current month also receives it.
        """
        template = _build(
            DebitTemplate, "debit",
            id=self._id_factory("deb"), title=title, amount=amount, day=day, enabled=enabled,
        )
        self.state.debit_templates.append(template)
        if apply_to_current:
            record = self.current_month()
            if apply_debit(template, record, self._id_factory) is not None:
                record.debit_templates.append(template.model_copy(deep=True))
        self._save()
        return template.id

    def update_debit_template(self, template_id: str, **changes) -> DebitTemplate:
        """Change a template for future months. Past expenses are untouched."""
        template = _find_by_id(self.state.debit_templates, template_id)
        if template is None:
            raise NotFoundError("debit", template_id)
        rejected = sorted(k for k in changes if k == "id" or k not in DebitTemplate.model_fields)
        if rejected:
            raise InvalidInputError("debit", f"cannot update field(s): {', '.join(rejected)}")
        updated = _build(DebitTemplate, "debit", **{**template.model_dump(), **changes, "id": template.id})
        index = self.state.debit_templates.index(template)
        self.state.debit_templates[index] = updated
        self._save()
        return updated

    def set_debit_enabled(self, template_id: str, enabled: bool) -> DebitTemplate:
        return self.update_debit_template(template_id, enabled=enabled)

    def remove_debit_template(self, template_id: str) -> bool:
        removed = _remove_by_id(self.state.debit_templates, template_id)
        if removed:
            self._save()
        return removed

    # --- Savings accounts and goals ---

    def add_savings_account(
        self,
        name: str,
        balance: float = 0.0,
        monthly_contribution: float = 0.0,
        annual_rate: float = 0.0,
    ) -> str:
        account = _build(
            SavingsAccount, "savings account",
            id=self._id_factory("acc"), name=name, balance=balance,
            monthly_contribution=monthly_contribution, annual_rate=annual_rate,
        )
        self.state.savings_accounts.append(account)
        self._save()
        return account.id

    def remove_savings_account(self, account_id: str) -> bool:
        removed = _remove_by_id(self.state.savings_accounts, account_id)
        if removed:
            self._save()
        return removed

    def add_goal(
        self,
        title: str,
        target_amount: float,
        saved_so_far: float = 0.0,
        deadline: date | str | None = None,
    ) -> str:
        goal = _build(
            SavingsGoal, "goal",
            id=self._id_factory("goal"), title=title, target_amount=target_amount,
            saved_so_far=saved_so_far, deadline=deadline,
        )
        self.state.goals.append(goal)
        self._save()
        return goal.id

    def update_goal_saved(self, goal_id: str, saved_so_far: float) -> SavingsGoal:
        goal = _find_by_id(self.state.goals, goal_id)
        if goal is None:
            raise NotFoundError("goal", goal_id)
        updated = _build(SavingsGoal, "goal", **{**goal.model_dump(), "saved_so_far": saved_so_far})
        index = self.state.goals.index(goal)
        self.state.goals[index] = updated
        self._save()
        return updated

    def remove_goal(self, goal_id: str) -> bool:
        removed = _remove_by_id(self.state.goals, goal_id)
        if removed:
            self._save()
        return removed

    # --- Settings ---

    def update_settings(
        self,
        carry_percent: float | None = None,
        currency: str | None = None,
        monthly_interest_rate: float | None = None,
    ) -> None:
        changes = {}
        if carry_percent is not None:
            changes["carry_percent"] = carry_percent
        if currency is not None:
            changes["currency"] = currency.strip().upper()
        if monthly_interest_rate is not None:
            changes["monthly_interest_rate"] = monthly_interest_rate
        if not changes:
            return
        settings = self.state.settings
        self.state.settings = _build(
            type(settings), "settings", **{**settings.model_dump(), **changes}
        )
        self._save()

    # --- Queries ---

    def compute_totals(self, month_key: str | None = None) -> MonthTotals:
        return analyzers.compute_totals(self._month(month_key), self.state.savings_accounts)

    @staticmethod
    def project_future_value(
        months_ahead: int,
        monthly_rate: float,
        initial: float,
        monthly_contribution: float,
    ) -> float:
        return analyzers.future_value(months_ahead, monthly_rate, initial, monthly_contribution)

    def project_savings(self, horizons: list[int] | None = None) -> list[SavingsProjection]:
        horizons = horizons or [12, 60]
        return [
            analyzers.project_savings_account(a, horizons)
            for a in self.state.savings_accounts
        ]

    def goal_recommendation(
        self,
        goal_id: str,
        month_key: str | None = None,
    ) -> GoalRecommendation:
        goal = _find_by_id(self.state.goals, goal_id)
        if goal is None:
            raise NotFoundError("goal", goal_id)
        return analyzers.recommend_contribution(
            goal, self.compute_totals(month_key), reference_date=self._clock()
        )

    def recommend_goal_contribution(self, goal_id: str, month_key: str | None = None) -> float:
        return self.goal_recommendation(goal_id, month_key).recommended

    def goal_progress(self, month_key: str | None = None) -> list[GoalProgress]:
        """Progress for every goal, paced at its recommended contribution."""
        totals = self.compute_totals(month_key)
        monthly_rate = self.state.settings.monthly_interest_rate / 100
        report = []
        for goal in self.state.goals:
            rec = analyzers.recommend_contribution(goal, totals, reference_date=self._clock())
            report.append(analyzers.goal_progress(goal, rec.recommended, monthly_rate))
        return report
