"""Materialization of recurring debit templates into dated expenses.

Applying a template to a month is idempotent: the expense it creates carries
the template id as ``debit_id`` and a month never holds two expenses with the
same ``debit_id``.
"""

from __future__ import annotations

import logging
from typing import Callable

from budget_buddy.core.month_keys import days_in_month
from budget_buddy.models.schemas import DebitTemplate, Expense, MonthRecord

logger = logging.getLogger("budget_buddy.debits")


def debit_date(template: DebitTemplate, month_key: str) -> str:
    """ISO date of the debit in *month_key*, with the day clamped to the month."""
    day = min(max(template.day, 1), days_in_month(month_key))
    return f"{month_key}-{day:02d}"


def find_materialized(month: MonthRecord, template_id: str) -> Expense | None:
    for e in month.expenses:
        if e.debit_id == template_id:
            return e
    return None


def apply_debit(
    template: DebitTemplate,
    month: MonthRecord,
    id_factory: Callable[[str], str],
) -> Expense | None:
    """Append the template's expense to *month* unless it is disabled or already there.

    Returns the new expense, or ``None`` when nothing was added.
    """
    if not template.enabled:
        return None
    if find_materialized(month, template.id) is not None:
        return None

    expense = Expense(
        id=id_factory("exp"),
        category=template.title,
        amount=template.amount,
        date=debit_date(template, month.key),
        debit_id=template.id,
    )
    month.expenses.append(expense)
    logger.info(
        "Applied debit %s (%s) to %s on %s", template.id, template.title, month.key, expense.date
    )
    return expense


def apply_debits(
    templates: list[DebitTemplate],
    month: MonthRecord,
    id_factory: Callable[[str], str],
) -> list[Expense]:
    """Apply every template to *month*; returns only the newly created expenses."""
    created = []
    for t in templates:
        expense = apply_debit(t, month, id_factory)
        if expense is not None:
            created.append(expense)
    return created
