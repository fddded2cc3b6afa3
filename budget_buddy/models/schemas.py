"""Pydantic models for the budget state document and MCP tool inputs."""

import math
from datetime import date
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from budget_buddy.core.month_keys import parse_month_key


# --- Currency display labels ---

CURRENCY_SYMBOLS = {
    "ZAR": "R",
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
}


def currency_symbol(currency: str) -> str:
    """Map a currency code to its display symbol (falls back to the code)."""
    return CURRENCY_SYMBOLS.get(currency.upper(), f"{currency} ")


def _require_finite_nonzero(v: float) -> float:
    if not math.isfinite(v) or v == 0:
        raise ValueError("amount must be a finite, non-zero number")
    return v


def _require_finite(v: float) -> float:
    if not math.isfinite(v):
        raise ValueError("value must be a finite number")
    return v


def _require_iso_date(v: str) -> str:
    date.fromisoformat(v)
    return v


def _require_month_key(v: str) -> str:
    parse_month_key(v)
    return v


# --- Ledger entries ---

class Income(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    id: str
    source: str = Field(..., min_length=1)
    amount: float
    date: str  # YYYY-MM-DD

    check_amount = field_validator("amount")(_require_finite_nonzero)
    check_date = field_validator("date")(_require_iso_date)


class Expense(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    id: str
    category: str = Field(..., min_length=1)
    amount: float
    date: str  # YYYY-MM-DD
    debit_id: Optional[str] = None  # template this expense was materialized from

    check_amount = field_validator("amount")(_require_finite_nonzero)
    check_date = field_validator("date")(_require_iso_date)

    @property
    def is_auto(self) -> bool:
        return self.debit_id is not None


class DebitTemplate(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    id: str
    title: str = Field(..., min_length=1)
    day: int = Field(default=1, ge=1, le=31)
    amount: float
    enabled: bool = True

    check_amount = field_validator("amount")(_require_finite_nonzero)


class SavingsAccount(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    id: str
    name: str = Field(..., min_length=1)
    balance: float = 0.0
    monthly_contribution: float = Field(default=0.0, ge=0)
    annual_rate: float = Field(default=0.0, ge=0)  # percent

    check_finite = field_validator("balance", "monthly_contribution", "annual_rate")(
        _require_finite
    )


class SavingsGoal(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    id: str
    title: str = Field(..., min_length=1)
    target_amount: float = Field(..., gt=0)
    saved_so_far: float = Field(default=0.0, ge=0)
    deadline: Optional[date] = None

    check_finite = field_validator("target_amount", "saved_so_far")(_require_finite)

    @property
    def remaining(self) -> float:
        return max(0.0, self.target_amount - self.saved_so_far)


# --- Month records and the state document ---

class MonthRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    key: str  # YYYY-MM
    starting_balance: float = 0.0
    reserved_carry: float = Field(default=0.0, ge=0)
    incomes: list[Income] = []
    expenses: list[Expense] = []
    debit_templates: list[DebitTemplate] = []  # snapshot taken at creation

    check_key = field_validator("key")(_require_month_key)


class Settings(BaseModel):
    model_config = ConfigDict(extra="ignore", validate_assignment=True)

    carry_percent: Optional[float] = None
    currency: str = "ZAR"
    monthly_interest_rate: float = 0.0  # flat monthly percent

    @field_validator("carry_percent", mode="before")
    @classmethod
    def _coerce_carry_percent(cls, v: Any) -> Optional[float]:
        """Unset or non-numeric carry percentages load as ``None``."""
        if v is None or isinstance(v, bool):
            return None
        try:
            value = float(v)
        except (TypeError, ValueError):
            return None
        return value if math.isfinite(value) else None

    @field_validator("monthly_interest_rate", mode="before")
    @classmethod
    def _coerce_interest_rate(cls, v: Any) -> float:
        try:
            value = float(v)
        except (TypeError, ValueError):
            return 0.0
        return value if math.isfinite(value) else 0.0


class BudgetState(BaseModel):
    """The single persisted document mutated by the ledger."""
    model_config = ConfigDict(extra="ignore")

    current_month_key: str
    months: dict[str, MonthRecord] = {}
    savings_accounts: list[SavingsAccount] = []
    goals: list[SavingsGoal] = []
    debit_templates: list[DebitTemplate] = []
    settings: Settings = Field(default_factory=Settings)

    check_current_key = field_validator("current_month_key")(_require_month_key)

    @model_validator(mode="after")
    def check_months_keyed_by_record(self) -> "BudgetState":
        for key, record in self.months.items():
            if record.key != key:
                raise ValueError(f"month stored under '{key}' has key '{record.key}'")
        return self


# --- MCP Tool Input Models ---


class AddIncomeInput(BaseModel):
    """Input for recording an income in the current month."""
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    source: str = Field(..., description="Where the money came from (e.g. 'Salary')", min_length=1)
    amount: float = Field(..., description="Income amount")
    date: Optional[str] = Field(None, description="Date (YYYY-MM-DD). Defaults to today.")


class AddExpenseInput(BaseModel):
    """Input for recording an expense in the current month."""
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    category: str = Field(..., description="What the money was spent on (e.g. 'Groceries')", min_length=1)
    amount: float = Field(..., description="Expense amount")
    date: Optional[str] = Field(None, description="Date (YYYY-MM-DD). Defaults to today.")


class AddDebitInput(BaseModel):
    """Input for creating a recurring fixed monthly debit."""
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    title: str = Field(..., description="Debit title (e.g. 'Rent')", min_length=1)
    amount: float = Field(..., description="Fixed monthly amount")
    day: int = Field(default=1, ge=1, le=31, description="Day of month the debit goes off")
    apply_now: bool = Field(
        default=True,
        description="Also add the debit to the current month if it is not there yet",
    )


class ToggleDebitInput(BaseModel):
    """Input for enabling or disabling a recurring debit."""
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    debit: str = Field(..., description="Debit title or id (partial match)")
    enabled: bool = Field(..., description="Whether future months should receive this debit")


class AddSavingsAccountInput(BaseModel):
    """Input for tracking a savings account."""
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    name: str = Field(..., description="Account name", min_length=1)
    balance: float = Field(default=0.0, description="Current balance")
    monthly_contribution: float = Field(
        default=0.0, ge=0, description="Amount set aside into this account every month"
    )
    annual_rate: float = Field(default=0.0, ge=0, description="Annual interest rate in percent")


class SavingsProjectionInput(BaseModel):
    """Input for projecting savings account balances."""
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    months: list[int] = Field(
        default=[12, 60], description="Projection horizons in months", min_length=1
    )


class AddGoalInput(BaseModel):
    """Input for creating a savings goal."""
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    title: str = Field(..., description="Goal title (e.g. 'Holiday')", min_length=1)
    target_amount: float = Field(..., gt=0, description="Amount to save")
    saved_so_far: float = Field(default=0.0, ge=0, description="Amount already saved")
    deadline: Optional[date] = Field(None, description="Target date (YYYY-MM-DD)")


class UpdateGoalSavedInput(BaseModel):
    """Input for updating how much has been saved toward a goal."""
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    goal: str = Field(..., description="Goal title or id (partial match)")
    saved_so_far: float = Field(..., ge=0, description="New saved amount")


class GoalRecommendationInput(BaseModel):
    """Input for recommending a monthly goal contribution."""
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    goal: str = Field(..., description="Goal title or id (partial match)")
    month: Optional[str] = Field(
        None, description="Month (YYYY-MM) to take available funds from. Defaults to the current month."
    )


class SelectMonthInput(BaseModel):
    """Input for jumping to a specific month."""
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    month: str = Field(..., description="Month to open (YYYY-MM)", pattern=r"^\d{4}-\d{2}$")


class RemoveEntryInput(BaseModel):
    """Input for removing an entry or entity by description or id."""
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    query: str = Field(..., description="Label, amount, date or id of the item to remove")


class SetStartingBalanceInput(BaseModel):
    """Input for correcting a month's opening balance."""
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    amount: float = Field(..., description="New starting balance")
    month: Optional[str] = Field(None, description="Month (YYYY-MM). Defaults to the current month.")


class UpdateSettingsInput(BaseModel):
    """Input for changing process-wide budget settings."""
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    carry_percent: Optional[float] = Field(
        None, description="Percent of a month's leftover reserved in the next month (minimum 2)"
    )
    currency: Optional[str] = Field(None, description="Display currency code (ZAR, USD, EUR, GBP)")
    monthly_interest_rate: Optional[float] = Field(
        None, ge=0, description="Flat monthly interest percent for goal and leftover projections"
    )
