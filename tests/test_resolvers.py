"""Tests for entity resolution helpers."""

import pytest

from tests.conftest import make_account, make_debit, make_expense, make_goal, make_income
from budget_buddy.core.resolvers import (
    ResolverError,
    resolve_debit,
    resolve_entry,
    resolve_goal,
    resolve_savings_account,
)


class TestResolveGoal:
    def test_exact_id_match(self):
        goals = [make_goal("Holiday"), make_goal("Car")]
        assert resolve_goal(goals, "goal-car").title == "Car"

    def test_partial_case_insensitive_match(self):
        goals = [make_goal("Summer Holiday")]
        assert resolve_goal(goals, "holi").title == "Summer Holiday"

    def test_no_match_raises_with_available(self):
        goals = [make_goal("Holiday")]
        with pytest.raises(ResolverError) as exc_info:
            resolve_goal(goals, "Wedding")
        assert "Holiday" in str(exc_info.value)
        assert exc_info.value.query == "Wedding"

    def test_no_goals_raises(self):
        with pytest.raises(ResolverError):
            resolve_goal([], "anything")


class TestResolveDebit:
    def test_partial_match(self):
        debits = [make_debit("Rent"), make_debit("Internet")]
        assert resolve_debit(debits, "inter").title == "Internet"

    def test_id_wins_over_title(self):
        debits = [make_debit("deb-gym"), make_debit("Gym")]
        assert resolve_debit(debits, "deb-gym").title == "Gym"

    def test_no_match(self):
        with pytest.raises(ResolverError):
            resolve_debit([make_debit("Rent")], "Insurance")


class TestResolveSavingsAccount:
    def test_partial_match(self):
        accounts = [make_account("Emergency Fund"), make_account("Tax Free")]
        assert resolve_savings_account(accounts, "tax").name == "Tax Free"

    def test_no_match_lists_accounts(self):
        with pytest.raises(ResolverError) as exc_info:
            resolve_savings_account([make_account("Emergency Fund")], "Pension")
        assert "Emergency Fund" in str(exc_info.value)


class TestResolveEntry:
    def test_exact_id(self):
        entries = [make_income("Salary"), make_income("Bonus", 500)]
        assert resolve_entry(entries, entries[0].id).source == "Salary"

    def test_label_match(self):
        entries = [make_expense("Groceries"), make_expense("Fuel", 300)]
        assert resolve_entry(entries, "fuel").category == "Fuel"

    def test_amount_match(self):
        entries = [make_expense("Groceries", 1234.5), make_expense("Fuel", 300)]
        assert resolve_entry(entries, "1,234.50").category == "Groceries"

    def test_date_match(self):
        entries = [
            make_expense("Groceries", date="2026-10-02"),
            make_expense("Fuel", date="2026-10-09"),
        ]
        assert resolve_entry(entries, "2026-10-09").category == "Fuel"

    def test_newest_wins(self):
        entries = [
            make_expense("Groceries", 100, date="2026-10-02"),
            make_expense("Groceries", 200, date="2026-10-09"),
        ]
        assert resolve_entry(entries, "groceries").amount == 200

    def test_blank_query_rejected(self):
        with pytest.raises(ResolverError):
            resolve_entry([make_expense()], "   ")

    def test_no_match_uses_entity_type(self):
        with pytest.raises(ResolverError) as exc_info:
            resolve_entry([make_income()], "Lottery", "income")
        assert "income" in str(exc_info.value)
        assert exc_info.value.entity_type == "income"
