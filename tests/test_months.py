"""Tests for budget_buddy/core/months.py and month key helpers."""

from datetime import date

import pytest

from tests.conftest import make_account, make_debit, make_expense, make_income, make_month, make_state
from budget_buddy.core.ledger import counter_ids
from budget_buddy.core.month_keys import days_in_month, month_key, parse_month_key, shift_month
from budget_buddy.core.months import (
    MIN_CARRY_PERCENT,
    advance_month,
    compute_carry,
    current_month,
    effective_carry_percent,
    ensure_month,
    new_state,
    select_month,
)
from budget_buddy.models.schemas import Settings


# --- Month keys ---


class TestMonthKeys:
    def test_month_key_from_date(self):
        assert month_key(date(2026, 3, 9)) == "2026-03"

    def test_shift_forward_across_year(self):
        assert shift_month("2026-12", 1) == "2027-01"

    def test_shift_backward_across_year(self):
        assert shift_month("2026-01", -1) == "2025-12"

    def test_shift_many_months(self):
        assert shift_month("2026-10", 15) == "2028-01"

    def test_days_in_month(self):
        assert days_in_month("2026-04") == 30
        assert days_in_month("2028-02") == 29
        assert days_in_month("2026-02") == 28

    @pytest.mark.parametrize("bad", ["2026-13", "2026-00", "26-01", "2026/01", "2026-1", ""])
    def test_malformed_keys_rejected(self, bad):
        with pytest.raises(ValueError):
            parse_month_key(bad)


# --- Carry computation ---


class TestCarry:
    def test_unset_percent_defaults_to_minimum(self):
        assert effective_carry_percent(Settings()) == MIN_CARRY_PERCENT

    def test_percent_below_minimum_is_clamped(self):
        assert effective_carry_percent(Settings(carry_percent=0.5)) == 2.0

    def test_non_numeric_percent_defaults_to_minimum(self):
        assert effective_carry_percent(Settings(carry_percent="lots")) == 2.0

    def test_configured_percent_used(self):
        assert effective_carry_percent(Settings(carry_percent=10)) == 10.0

    def test_positive_leftover_rounded_to_cents(self):
        assert compute_carry(1234.567, 10) == 123.46

    def test_negative_leftover_reserves_nothing(self):
        assert compute_carry(-300.0, 10) == 0.0

    def test_zero_leftover_reserves_nothing(self):
        assert compute_carry(0.0, 50) == 0.0

    def test_reserve_never_exceeds_leftover(self):
        assert compute_carry(100.0, 250) == 100.0


# --- ensure_month ---


class TestEnsureMonth:
    def test_carry_scenario(self):
        month_a = make_month(
            "2026-10",
            starting_balance=1000,
            incomes=[make_income(amount=2000)],
            expenses=[make_expense(amount=500)],
        )
        state = make_state([month_a], carry_percent=10)
        month_b = ensure_month(state, "2026-11", counter_ids())
        assert month_b.reserved_carry == 250.0
        assert month_b.starting_balance == 3500.0

    def test_existing_month_returned_unchanged(self):
        month = make_month("2026-10", starting_balance=42, incomes=[make_income()])
        state = make_state([month])
        before = month.model_dump()
        result = ensure_month(state, "2026-10", counter_ids())
        assert result is month
        assert result.model_dump() == before

    def test_idempotent_creation(self):
        state = make_state([make_month()], debit_templates=[make_debit()])
        ids = counter_ids()
        first = ensure_month(state, "2026-11", ids).model_dump()
        second = ensure_month(state, "2026-11", ids).model_dump()
        assert first == second
        assert len(state.months["2026-11"].expenses) == 1

    def test_no_previous_month_starts_empty(self):
        state = make_state([make_month("2026-10", starting_balance=900)])
        record = ensure_month(state, "2027-03", counter_ids())
        assert record.starting_balance == 0.0
        assert record.reserved_carry == 0.0

    def test_negative_leftover_flows_into_starting_balance(self):
        month_a = make_month(
            "2026-10",
            starting_balance=100,
            expenses=[make_expense(amount=400)],
        )
        state = make_state([month_a], carry_percent=10)
        month_b = ensure_month(state, "2026-11", counter_ids())
        assert month_b.reserved_carry == 0.0
        assert month_b.starting_balance == pytest.approx(100 + (100 - 400))

    def test_set_aside_reduces_carried_leftover(self):
        month_a = make_month("2026-10", incomes=[make_income(amount=1000)])
        state = make_state(
            [month_a],
            savings_accounts=[make_account(monthly_contribution=200)],
            carry_percent=10,
        )
        month_b = ensure_month(state, "2026-11", counter_ids())
        assert month_b.starting_balance == 800.0
        assert month_b.reserved_carry == 80.0

    def test_reserve_bounded_by_previous_leftover(self):
        month_a = make_month("2026-10", incomes=[make_income(amount=333.33)])
        state = make_state([month_a], carry_percent=100)
        month_b = ensure_month(state, "2026-11", counter_ids())
        assert 0 <= month_b.reserved_carry <= 333.33

    def test_enabled_debits_materialized(self):
        state = make_state(
            [make_month()],
            debit_templates=[make_debit("Rent", 800, day=31), make_debit("Gym", 30, enabled=False)],
        )
        record = ensure_month(state, "2026-11", counter_ids())
        assert len(record.expenses) == 1
        rent = record.expenses[0]
        assert rent.category == "Rent"
        assert rent.date == "2026-11-30"
        assert rent.debit_id == "deb-rent"

    def test_templates_snapshotted(self):
        template = make_debit("Rent", 800)
        state = make_state([make_month()], debit_templates=[template])
        record = ensure_month(state, "2026-11", counter_ids())
        state.debit_templates[0] = template.model_copy(update={"amount": 900})
        assert record.debit_templates[0].amount == 800
        assert record.expenses[0].amount == 800

    def test_malformed_key_rejected(self):
        state = make_state()
        with pytest.raises(ValueError):
            ensure_month(state, "November", counter_ids())
        assert list(state.months) == ["2026-10"]


# --- Navigation ---


class TestAdvanceMonth:
    def test_forward_creates_next_month(self):
        state = make_state()
        key = advance_month(state, 1, counter_ids())
        assert key == "2026-11"
        assert "2026-11" in state.months
        assert state.current_month_key == "2026-11"

    def test_forward_into_existing_month_does_not_recreate(self):
        existing = make_month("2026-11", starting_balance=77)
        state = make_state([make_month("2026-10"), existing], current="2026-10")
        advance_month(state, 1, counter_ids())
        assert state.months["2026-11"] is existing
        assert existing.starting_balance == 77

    def test_backward_moves_to_previous(self):
        state = make_state([make_month("2026-09"), make_month("2026-10")])
        assert advance_month(state, -1, counter_ids()) == "2026-09"

    def test_backward_noop_at_earliest(self):
        state = make_state([make_month("2026-10")])
        assert advance_month(state, -1, counter_ids()) == "2026-10"
        assert list(state.months) == ["2026-10"]

    def test_backward_never_creates_months(self):
        state = make_state([make_month("2026-06"), make_month("2026-10")])
        assert advance_month(state, -1, counter_ids()) == "2026-06"
        assert sorted(state.months) == ["2026-06", "2026-10"]

    def test_invalid_direction(self):
        with pytest.raises(ValueError):
            advance_month(make_state(), 2, counter_ids())

    def test_current_month_ensures_pointer(self):
        state = make_state([make_month("2026-10")], current="2026-11")
        record = current_month(state, counter_ids())
        assert record.key == "2026-11"
        assert "2026-11" in state.months

    def test_select_month_creates_and_moves(self):
        state = make_state()
        select_month(state, "2027-01", counter_ids())
        assert state.current_month_key == "2027-01"
        assert "2027-01" in state.months


class TestNewState:
    def test_fresh_document_has_one_empty_month(self):
        state = new_state(date(2026, 10, 19))
        assert state.current_month_key == "2026-10"
        assert list(state.months) == ["2026-10"]
        record = state.months["2026-10"]
        assert record.starting_balance == 0
        assert record.incomes == [] and record.expenses == []
