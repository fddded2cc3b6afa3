"""Entity resolution helpers for budget records.

Pure functions that resolve user-friendly names (partial, case-insensitive)
or exact ids to domain objects. They operate on the loaded state only.
"""

from __future__ import annotations

from budget_buddy.models.schemas import (
    DebitTemplate,
    Expense,
    Income,
    SavingsAccount,
    SavingsGoal,
)


class ResolverError(Exception):
    """Raised when an entity cannot be resolved by name."""

    def __init__(
        self,
        entity_type: str,
        query: str,
        available: list[str] | None = None,
    ):
        self.entity_type = entity_type
        self.query = query
        self.available = available or []
        detail = f"No {entity_type} found matching '{query}'."
        if self.available:
            detail += f" Available: {', '.join(self.available)}"
        super().__init__(detail)


def resolve_goal(goals: list[SavingsGoal], query: str) -> SavingsGoal:
    """Find a goal by id, then by title (partial, case-insensitive).

    Raises :class:`ResolverError` if nothing matches.
    """
    for g in goals:
        if g.id == query:
            return g
    for g in goals:
        if query.lower() in g.title.lower():
            return g
    raise ResolverError("goal", query, available=[g.title for g in goals])


def resolve_debit(templates: list[DebitTemplate], query: str) -> DebitTemplate:
    """Find a debit template by id, then by title (partial, case-insensitive)."""
    for t in templates:
        if t.id == query:
            return t
    for t in templates:
        if query.lower() in t.title.lower():
            return t
    raise ResolverError("debit", query, available=[t.title for t in templates])


def resolve_savings_account(
    accounts: list[SavingsAccount],
    query: str,
) -> SavingsAccount:
    """Find a savings account by id, then by name (partial, case-insensitive)."""
    for a in accounts:
        if a.id == query:
            return a
    for a in accounts:
        if query.lower() in a.name.lower():
            return a
    raise ResolverError("savings account", query, available=[a.name for a in accounts])


def _entry_label(entry: Income | Expense) -> str:
    return entry.source if isinstance(entry, Income) else entry.category


def resolve_entry(
    entries: list[Income] | list[Expense],
    query: str,
    entity_type: str = "entry",
) -> Income | Expense:
    """Find an income or expense matching a search query.

    Matches the id exactly, otherwise searches the label, date, and
    formatted amount. The most recent insertion wins when several match.
    """
    q = query.strip().lower()
    if not q:
        raise ResolverError(entity_type, query)
    for e in entries:
        if e.id == query:
            return e
    for e in reversed(entries):
        amount_str = f"{abs(e.amount):,.2f}"
        if (
            q in _entry_label(e).lower()
            or q in e.date
            or q in amount_str
        ):
            return e
    raise ResolverError(
        entity_type,
        query,
        available=[_entry_label(e) for e in entries[:20]],
    )
