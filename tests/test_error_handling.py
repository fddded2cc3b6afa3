"""Tests for MCP error handling decorator."""

from pydantic import ValidationError

from budget_buddy.core.ledger import InvalidInputError, LedgerError, NotFoundError
from budget_buddy.core.resolvers import ResolverError
from budget_buddy.mcp.error_handling import handle_tool_errors


class TestHandleToolErrors:
    async def test_returns_result_on_success(self):
        @handle_tool_errors
        async def tool():
            return "ok"

        assert await tool() == "ok"

    async def test_catches_invalid_input(self):
        @handle_tool_errors
        async def tool():
            raise InvalidInputError("expense", "amount must be a finite, non-zero number")

        result = await tool()
        assert result.startswith("Rejected:")
        assert "Invalid expense" in result
        assert "Nothing was changed" in result

    async def test_catches_not_found(self):
        @handle_tool_errors
        async def tool():
            raise NotFoundError("goal", "goal-404")

        result = await tool()
        assert "Not found" in result
        assert "goal-404" in result

    async def test_catches_ledger_error(self):
        @handle_tool_errors
        async def tool():
            raise LedgerError("state is read-only")

        assert await tool() == "Budget error: state is read-only"

    async def test_catches_resolver_error(self):
        @handle_tool_errors
        async def tool():
            raise ResolverError("goal", "xyz", ["Holiday", "Car"])

        result = await tool()
        assert "xyz" in result
        assert "Holiday" in result

    async def test_catches_validation_error(self):
        @handle_tool_errors
        async def tool():
            from budget_buddy.models.schemas import AddExpenseInput
            AddExpenseInput()  # type: ignore[call-arg]

        result = await tool()
        assert "Invalid data" in result
        assert "validation error" in result

    async def test_catches_unexpected_exception(self):
        @handle_tool_errors
        async def tool():
            raise RuntimeError("boom")

        result = await tool()
        assert "Unexpected error" in result
        assert "RuntimeError" in result
        assert "boom" in result

    async def test_preserves_name(self):
        @handle_tool_errors
        async def budget_get_month():
            return "ok"

        assert budget_get_month.__name__ == "budget_get_month"

    def test_validation_error_is_not_ledger_error(self):
        assert not issubclass(ValidationError, LedgerError)
