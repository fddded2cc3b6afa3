"""Markdown formatters for MCP tool responses.

Pure functions that take domain objects and return human-readable Markdown strings.
Currency is only a display symbol; amounts are never converted.
"""

from __future__ import annotations

import calendar

from budget_buddy.core.month_keys import parse_month_key
from budget_buddy.models.results import (
    GoalProgress,
    GoalRecommendation,
    MonthTotals,
    SavingsProjection,
)
from budget_buddy.models.schemas import DebitTemplate, MonthRecord, Settings


def money(amount: float, symbol: str) -> str:
    sign = "-" if amount < -0.005 else ""
    return f"{sign}{symbol}{abs(amount):,.2f}"


def month_label(key: str) -> str:
    year, month = parse_month_key(key)
    return f"{calendar.month_name[month]} {year}"


def format_month_summary(
    totals: MonthTotals,
    symbol: str,
    projections: dict[int, float] | None = None,
) -> str:
    lines = [
        f"## {month_label(totals.month_key)}\n",
        f"- **Starting balance:** {money(totals.starting, symbol)}",
        f"- **Income:** {money(totals.income, symbol)}",
        f"- **Expenses:** {money(totals.expenses, symbol)}",
    ]
    if totals.set_aside:
        lines.append(f"- **Set aside for savings:** {money(totals.set_aside, symbol)}")
    if totals.reserved_carry:
        lines.append(
            f"- **Reserved from last month:** {money(totals.reserved_carry, symbol)} (not spendable)"
        )
    status = "OK" if totals.leftover >= 0 else "!!"
    lines.append(f"- [{status}] **Leftover:** {money(totals.leftover, symbol)}")
    lines.append(f"- **Available to spend:** {money(totals.available_to_spend, symbol)}")

    if projections:
        lines.append("\n### Savings Projection")
        for months, value in sorted(projections.items()):
            lines.append(f"- In {months} months: {money(value, symbol)}")
    return "\n".join(lines)


def format_entries(month: MonthRecord, symbol: str) -> str:
    """Income and expense lists for a month, auto debits marked."""
    lines = [f"## Entries for {month_label(month.key)}\n", f"### Income ({len(month.incomes)})"]
    if not month.incomes:
        lines.append("_No income recorded._")
    for i in month.incomes:
        lines.append(f"- {i.date} **{money(i.amount, symbol)}** | {i.source} (`{i.id}`)")

    lines.append(f"\n### Expenses ({len(month.expenses)})")
    if not month.expenses:
        lines.append("_No expenses recorded._")
    for e in month.expenses:
        label = f"{e.category} (Auto)" if e.is_auto else e.category
        lines.append(f"- {e.date} **{money(e.amount, symbol)}** | {label} (`{e.id}`)")
    return "\n".join(lines)


def format_debits(templates: list[DebitTemplate], symbol: str) -> str:
    if not templates:
        return "No recurring debits set up."
    lines = ["## Recurring Debits\n"]
    for t in templates:
        state = "on" if t.enabled else "off"
        lines.append(
            f"- [{state}] **{t.title}**: {money(t.amount, symbol)} on day {t.day} (`{t.id}`)"
        )
    total = sum(t.amount for t in templates if t.enabled)
    lines.append(f"\n**Total per month:** {money(total, symbol)}")
    return "\n".join(lines)


def format_entry_added(kind: str, label: str, amount: float, entry_date: str, symbol: str) -> str:
    return f"Added {kind} **{label}**: {money(amount, symbol)} on {entry_date}."


def format_removed(kind: str, label: str, removed: bool) -> str:
    if not removed:
        return f"No {kind} '{label}' to remove. Nothing changed."
    return f"Removed {kind} **{label}**."


def format_savings_projections(projections: list[SavingsProjection], symbol: str) -> str:
    if not projections:
        return "No savings accounts tracked."
    lines = ["## Savings Projections\n"]
    for p in projections:
        lines.append(f"### {p.account_name}")
        lines.append(
            f"- Balance {money(p.balance, symbol)}, "
            f"+{money(p.monthly_contribution, symbol)}/month at {p.annual_rate:g}% a year"
        )
        for point in p.points:
            lines.append(f"- In {point.months} months: {money(point.value, symbol)}")
        lines.append("")
    total_monthly = sum(p.monthly_contribution for p in projections)
    lines.append(f"**Set aside per month:** {money(total_monthly, symbol)}")
    return "\n".join(lines)


def format_goals(progress: list[GoalProgress], symbol: str) -> str:
    if not progress:
        return "No goals yet."
    lines = ["## Savings Goals\n"]
    for g in progress:
        lines.append(f"### {g.goal_title} ({g.pct_complete:.0f}%)")
        lines.append(f"- **Target:** {money(g.target_amount, symbol)}")
        lines.append(f"- **Saved:** {money(g.saved_so_far, symbol)}")
        lines.append(f"- **Remaining:** {money(g.remaining, symbol)}")
        if g.deadline:
            lines.append(f"- **Deadline:** {g.deadline}")
        if g.months_to_target == 0:
            lines.append("- **Reached!**")
        elif g.months_to_target is not None:
            lines.append(f"- **At the recommended pace:** {g.months_to_target} months")
        else:
            lines.append("- **At the recommended pace:** not reachable")
        lines.append("")
    return "\n".join(lines).rstrip()


def format_goal_recommendation(rec: GoalRecommendation, symbol: str) -> str:
    status = "!!" if rec.shortfall else "OK"
    lines = [
        f"## [{status}] {rec.goal_title}: save {money(rec.recommended, symbol)} a month\n",
        f"- **Still needed:** {money(rec.needed, symbol)} over {rec.months_left} months",
        f"- **Ideal per month:** {money(rec.per_month, symbol)}",
        f"- **Available to spend:** {money(rec.available, symbol)}",
    ]
    if rec.shortfall:
        lines.append(
            "\nThe ideal amount is more than is available this month, "
            "so the recommendation is capped and the goal will fall behind."
        )
    return "\n".join(lines)


def format_settings(settings: Settings, effective_carry: float) -> str:
    return "\n".join([
        "## Settings\n",
        f"- **Carry reserve:** {effective_carry:g}% of each month's leftover",
        f"- **Currency:** {settings.currency}",
        f"- **Monthly interest (goals):** {settings.monthly_interest_rate:g}%",
    ])
