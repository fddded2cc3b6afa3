"""Month sequencing and the carry-forward state machine.

A month record is created exactly once, the first time navigation reaches
its key; creation computes the opening balance and reserved carry from the
previous month and materializes the enabled debit templates.
"""

from __future__ import annotations

import logging
import math
from datetime import date
from typing import Callable

from budget_buddy.core.analyzers import leftover as month_leftover
from budget_buddy.core.debits import apply_debits
from budget_buddy.core.month_keys import month_key, parse_month_key, shift_month
from budget_buddy.models.schemas import BudgetState, MonthRecord, Settings

logger = logging.getLogger("budget_buddy.months")

MIN_CARRY_PERCENT = 2.0


# --- Carry computation ---


def effective_carry_percent(settings: Settings) -> float:
    """Configured carry percent, clamped to the minimum; unset means the minimum."""
    pct = settings.carry_percent
    if pct is None or not math.isfinite(pct):
        return MIN_CARRY_PERCENT
    return max(MIN_CARRY_PERCENT, pct)


def compute_carry(leftover: float, carry_percent: float) -> float:
    """Portion of a positive leftover locked away in the next month."""
    if leftover <= 0:
        return 0.0
    reserved = round(leftover * carry_percent / 100, 2)
    return min(reserved, leftover)


# --- State machine ---


def new_state(reference_date: date | None = None) -> BudgetState:
    """Fresh document holding one empty month for the current calendar month."""
    key = month_key(reference_date or date.today())
    return BudgetState(current_month_key=key, months={key: MonthRecord(key=key)})


def ensure_month(
    state: BudgetState,
    key: str,
    id_factory: Callable[[str], str],
) -> MonthRecord:
    """Return the record for *key*, creating it from the previous month if missing.

    Calling this again for an existing key changes nothing.
    """
    existing = state.months.get(key)
    if existing is not None:
        return existing

    parse_month_key(key)
    previous = state.months.get(shift_month(key, -1))
    if previous is None:
        prev_leftover = 0.0
        prev_starting = 0.0
    else:
        prev_leftover = month_leftover(previous, state.savings_accounts)
        prev_starting = previous.starting_balance

    reserved = compute_carry(prev_leftover, effective_carry_percent(state.settings))

    record = MonthRecord(
        key=key,
        starting_balance=prev_starting + prev_leftover,
        reserved_carry=reserved,
        debit_templates=[t.model_copy(deep=True) for t in state.debit_templates],
    )
    state.months[key] = record

    applied = apply_debits(record.debit_templates, record, id_factory)
    logger.info(
        "Created month %s: starting=%.2f reserved=%.2f debits=%d",
        key, record.starting_balance, record.reserved_carry, len(applied),
    )
    return record


def current_month(state: BudgetState, id_factory: Callable[[str], str]) -> MonthRecord:
    return ensure_month(state, state.current_month_key, id_factory)


def select_month(
    state: BudgetState,
    key: str,
    id_factory: Callable[[str], str],
) -> MonthRecord:
    """Jump to *key*, creating the month if needed."""
    record = ensure_month(state, key, id_factory)
    state.current_month_key = key
    return record


def advance_month(
    state: BudgetState,
    direction: int,
    id_factory: Callable[[str], str],
) -> str:
    """Move the current pointer one month forward (+1) or back (-1).

    Forward creates the next month when it does not exist yet. Backward
    never creates months and stays put at the earliest one. Returns the
    resulting current key.
    """
    if direction not in (1, -1):
        raise ValueError(f"direction must be +1 or -1, got {direction}")

    current = state.current_month_key
    if direction == 1:
        select_month(state, shift_month(current, 1), id_factory)
    else:
        earlier = [k for k in state.months if k < current]
        if earlier:
            state.current_month_key = max(earlier)
    return state.current_month_key
