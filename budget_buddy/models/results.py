"""Result dataclasses for budget analyzer outputs.

These are internal types consumed by formatters. They are plain dataclasses
rather than Pydantic models since they don't need validation.
"""

from dataclasses import dataclass, field


@dataclass
class MonthTotals:
    """Derived aggregates for a single month. Never persisted."""
    month_key: str
    starting: float
    income: float
    expenses: float              # includes materialized debits
    set_aside: float             # sum of savings account contributions
    reserved_carry: float
    leftover: float              # may be negative
    available_to_spend: float    # excludes the reserved carry


@dataclass
class ProjectionPoint:
    months: int
    value: float


@dataclass
class SavingsProjection:
    """Future value of one savings account at several horizons."""
    account_name: str
    balance: float
    monthly_contribution: float
    annual_rate: float           # percent
    points: list[ProjectionPoint] = field(default_factory=list)


@dataclass
class GoalRecommendation:
    """Suggested monthly contribution toward a savings goal."""
    goal_title: str
    needed: float                # target minus saved, floored at 0
    months_left: int
    per_month: float             # needed / months_left
    available: float             # available-to-spend, floored at 0
    recommended: float           # min(per_month, available)
    shortfall: bool              # per_month exceeds what is available


@dataclass
class GoalProgress:
    """Snapshot of a goal with an optional time-to-target estimate."""
    goal_title: str
    target_amount: float
    saved_so_far: float
    remaining: float
    pct_complete: float          # 0-100
    deadline: str | None = None
    months_to_target: int | None = None
