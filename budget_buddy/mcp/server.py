"""Budget Buddy MCP Server.

Exposes the monthly budget ledger as MCP tools: month navigation with
carry-forward, incomes and expenses, recurring debits, savings accounts
and goals. Every mutating tool is saved to the local state file before
it returns.
"""

import sys
from contextlib import asynccontextmanager
from pathlib import Path
from dotenv import load_dotenv
from mcp.server.fastmcp import Context, FastMCP

# Ensure project root is on sys.path so `budget_buddy` is importable when loaded
# directly by tools like `mcp dev` (which use importlib, not `python -m`).
_project_root = str(Path(__file__).resolve().parent.parent.parent)
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

load_dotenv()

from budget_buddy.core.analyzers import project_leftover
from budget_buddy.core.ledger import Ledger
from budget_buddy.core.months import effective_carry_percent
from budget_buddy.core.resolvers import (
    resolve_debit,
    resolve_entry,
    resolve_goal,
    resolve_savings_account,
)
from budget_buddy.core.storage import JsonStateStore
from budget_buddy.mcp.error_handling import handle_tool_errors
from budget_buddy.mcp.formatters import (
    format_debits,
    format_entries,
    format_entry_added,
    format_goal_recommendation,
    format_goals,
    format_month_summary,
    format_removed,
    format_savings_projections,
    format_settings,
    month_label,
)
from budget_buddy.models.schemas import (
    AddDebitInput,
    AddExpenseInput,
    AddGoalInput,
    AddIncomeInput,
    AddSavingsAccountInput,
    GoalRecommendationInput,
    RemoveEntryInput,
    SavingsProjectionInput,
    SelectMonthInput,
    SetStartingBalanceInput,
    ToggleDebitInput,
    UpdateGoalSavedInput,
    UpdateSettingsInput,
    currency_symbol,
)

PROJECTION_HORIZONS = (12, 60)


# --- Lifespan: load the state document ---


@asynccontextmanager
async def app_lifespan(server: FastMCP):
    store = JsonStateStore()
    ledger = Ledger(state=store.load(), store=store)
    ledger.current_month()

    yield {"ledger": ledger}


mcp = FastMCP("budget_buddy_mcp", lifespan=app_lifespan)


# --- Helpers ---


def _get_ledger(ctx) -> Ledger:
    return ctx.request_context.lifespan_context["ledger"]


def _symbol(ledger: Ledger) -> str:
    return currency_symbol(ledger.state.settings.currency)


def _month_summary(ledger: Ledger, month_key: str | None = None) -> str:
    totals = ledger.compute_totals(month_key)
    rate = ledger.state.settings.monthly_interest_rate
    projections = {
        m: project_leftover(totals, rate, m) for m in PROJECTION_HORIZONS
    }
    return format_month_summary(totals, _symbol(ledger), projections)


# --- Month Tools ---


@mcp.tool(
    name="budget_get_month",
    annotations={
        "title": "Current Month Summary",
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": False,
    },
)
@handle_tool_errors
async def budget_get_month(ctx: Context) -> str:
    """Summarize the current month: balances, leftover, reserve and projections."""
    ledger = _get_ledger(ctx)
    return _month_summary(ledger)


@mcp.tool(
    name="budget_get_entries",
    annotations={
        "title": "List Month Entries",
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": False,
    },
)
@handle_tool_errors
async def budget_get_entries(ctx: Context) -> str:
    """List the incomes and expenses of the current month."""
    ledger = _get_ledger(ctx)
    return format_entries(ledger.current_month(), _symbol(ledger))


@mcp.tool(
    name="budget_next_month",
    annotations={
        "title": "Go To Next Month",
        "readOnlyHint": False,
        "destructiveHint": False,
        "idempotentHint": False,
        "openWorldHint": False,
    },
)
@handle_tool_errors
async def budget_next_month(ctx: Context) -> str:
    """Move to the next month, creating it with carried balance and recurring debits."""
    ledger = _get_ledger(ctx)
    ledger.advance_month(1)
    return _month_summary(ledger)


@mcp.tool(
    name="budget_previous_month",
    annotations={
        "title": "Go To Previous Month",
        "readOnlyHint": False,
        "destructiveHint": False,
        "idempotentHint": False,
        "openWorldHint": False,
    },
)
@handle_tool_errors
async def budget_previous_month(ctx: Context) -> str:
    """Move back one month. Stays put at the earliest recorded month."""
    ledger = _get_ledger(ctx)
    before = ledger.state.current_month_key
    key = ledger.advance_month(-1)
    if key == before:
        return f"Already at the earliest month ({month_label(key)})."
    return _month_summary(ledger)


@mcp.tool(
    name="budget_select_month",
    annotations={
        "title": "Open Month",
        "readOnlyHint": False,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": False,
    },
)
@handle_tool_errors
async def budget_select_month(params: SelectMonthInput, ctx: Context) -> str:
    """Open a specific month (YYYY-MM), creating it if it does not exist yet."""
    ledger = _get_ledger(ctx)
    ledger.select_month(params.month)
    return _month_summary(ledger)


@mcp.tool(
    name="budget_set_starting_balance",
    annotations={
        "title": "Set Starting Balance",
        "readOnlyHint": False,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": False,
    },
)
@handle_tool_errors
async def budget_set_starting_balance(params: SetStartingBalanceInput, ctx: Context) -> str:
    """Correct the opening balance of a month."""
    ledger = _get_ledger(ctx)
    ledger.set_starting_balance(params.amount, params.month)
    return _month_summary(ledger, params.month)


# --- Income / Expense Tools ---


@mcp.tool(
    name="budget_add_income",
    annotations={
        "title": "Add Income",
        "readOnlyHint": False,
        "destructiveHint": False,
        "idempotentHint": False,
        "openWorldHint": False,
    },
)
@handle_tool_errors
async def budget_add_income(params: AddIncomeInput, ctx: Context) -> str:
    """Record an income in the current month."""
    ledger = _get_ledger(ctx)
    income_id = ledger.add_income(params.source, params.amount, params.date)
    income = next(i for i in ledger.current_month().incomes if i.id == income_id)
    return format_entry_added("income", income.source, income.amount, income.date, _symbol(ledger))


@mcp.tool(
    name="budget_add_expense",
    annotations={
        "title": "Add Expense",
        "readOnlyHint": False,
        "destructiveHint": False,
        "idempotentHint": False,
        "openWorldHint": False,
    },
)
@handle_tool_errors
async def budget_add_expense(params: AddExpenseInput, ctx: Context) -> str:
    """Record an expense in the current month."""
    ledger = _get_ledger(ctx)
    expense_id = ledger.add_expense(params.category, params.amount, params.date)
    expense = next(e for e in ledger.current_month().expenses if e.id == expense_id)
    return format_entry_added(
        "expense", expense.category, expense.amount, expense.date, _symbol(ledger)
    )


@mcp.tool(
    name="budget_remove_income",
    annotations={
        "title": "Remove Income",
        "readOnlyHint": False,
        "destructiveHint": True,
        "idempotentHint": True,
        "openWorldHint": False,
    },
)
@handle_tool_errors
async def budget_remove_income(params: RemoveEntryInput, ctx: Context) -> str:
    """Remove an income from the current month by source, amount, date or id."""
    ledger = _get_ledger(ctx)
    income = resolve_entry(ledger.current_month().incomes, params.query, "income")
    removed = ledger.remove_income(income.id)
    return format_removed("income", income.source, removed)


@mcp.tool(
    name="budget_remove_expense",
    annotations={
        "title": "Remove Expense",
        "readOnlyHint": False,
        "destructiveHint": True,
        "idempotentHint": True,
        "openWorldHint": False,
    },
)
@handle_tool_errors
async def budget_remove_expense(params: RemoveEntryInput, ctx: Context) -> str:
    """Remove an expense from the current month by category, amount, date or id."""
    ledger = _get_ledger(ctx)
    expense = resolve_entry(ledger.current_month().expenses, params.query, "expense")
    removed = ledger.remove_expense(expense.id)
    return format_removed("expense", expense.category, removed)


# --- Recurring Debit Tools ---


@mcp.tool(
    name="budget_list_debits",
    annotations={
        "title": "List Recurring Debits",
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": False,
    },
)
@handle_tool_errors
async def budget_list_debits(ctx: Context) -> str:
    """List the recurring fixed debits applied to every new month."""
    ledger = _get_ledger(ctx)
    return format_debits(ledger.state.debit_templates, _symbol(ledger))


@mcp.tool(
    name="budget_add_debit",
    annotations={
        "title": "Add Recurring Debit",
        "readOnlyHint": False,
        "destructiveHint": False,
        "idempotentHint": False,
        "openWorldHint": False,
    },
)
@handle_tool_errors
async def budget_add_debit(params: AddDebitInput, ctx: Context) -> str:
    """Add a fixed monthly debit (rent, subscriptions) that is auto-added to each new month."""
    ledger = _get_ledger(ctx)
    ledger.add_debit_template(
        params.title, params.amount, day=params.day, apply_to_current=params.apply_now
    )
    return format_debits(ledger.state.debit_templates, _symbol(ledger))


@mcp.tool(
    name="budget_toggle_debit",
    annotations={
        "title": "Enable/Disable Recurring Debit",
        "readOnlyHint": False,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": False,
    },
)
@handle_tool_errors
async def budget_toggle_debit(params: ToggleDebitInput, ctx: Context) -> str:
    """Enable or disable a recurring debit for months created from now on."""
    ledger = _get_ledger(ctx)
    template = resolve_debit(ledger.state.debit_templates, params.debit)
    ledger.set_debit_enabled(template.id, params.enabled)
    return format_debits(ledger.state.debit_templates, _symbol(ledger))


@mcp.tool(
    name="budget_remove_debit",
    annotations={
        "title": "Remove Recurring Debit",
        "readOnlyHint": False,
        "destructiveHint": True,
        "idempotentHint": True,
        "openWorldHint": False,
    },
)
@handle_tool_errors
async def budget_remove_debit(params: RemoveEntryInput, ctx: Context) -> str:
    """Stop a recurring debit. Expenses already added to past months stay."""
    ledger = _get_ledger(ctx)
    template = resolve_debit(ledger.state.debit_templates, params.query)
    removed = ledger.remove_debit_template(template.id)
    return format_removed("debit", template.title, removed)


# --- Savings Tools ---


@mcp.tool(
    name="budget_add_savings_account",
    annotations={
        "title": "Add Savings Account",
        "readOnlyHint": False,
        "destructiveHint": False,
        "idempotentHint": False,
        "openWorldHint": False,
    },
)
@handle_tool_errors
async def budget_add_savings_account(params: AddSavingsAccountInput, ctx: Context) -> str:
    """Track a savings account and the amount set aside into it every month."""
    ledger = _get_ledger(ctx)
    ledger.add_savings_account(
        params.name,
        balance=params.balance,
        monthly_contribution=params.monthly_contribution,
        annual_rate=params.annual_rate,
    )
    return format_savings_projections(
        ledger.project_savings(list(PROJECTION_HORIZONS)), _symbol(ledger)
    )


@mcp.tool(
    name="budget_remove_savings_account",
    annotations={
        "title": "Remove Savings Account",
        "readOnlyHint": False,
        "destructiveHint": True,
        "idempotentHint": True,
        "openWorldHint": False,
    },
)
@handle_tool_errors
async def budget_remove_savings_account(params: RemoveEntryInput, ctx: Context) -> str:
    """Stop tracking a savings account."""
    ledger = _get_ledger(ctx)
    account = resolve_savings_account(ledger.state.savings_accounts, params.query)
    removed = ledger.remove_savings_account(account.id)
    return format_removed("savings account", account.name, removed)


@mcp.tool(
    name="budget_project_savings",
    annotations={
        "title": "Project Savings",
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": False,
    },
)
@handle_tool_errors
async def budget_project_savings(params: SavingsProjectionInput, ctx: Context) -> str:
    """Project every savings account forward with compound interest and contributions."""
    ledger = _get_ledger(ctx)
    return format_savings_projections(ledger.project_savings(params.months), _symbol(ledger))


# --- Goal Tools ---


@mcp.tool(
    name="budget_list_goals",
    annotations={
        "title": "List Savings Goals",
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": False,
    },
)
@handle_tool_errors
async def budget_list_goals(ctx: Context) -> str:
    """Show savings goals with progress and time to target."""
    ledger = _get_ledger(ctx)
    return format_goals(ledger.goal_progress(), _symbol(ledger))


@mcp.tool(
    name="budget_add_goal",
    annotations={
        "title": "Add Savings Goal",
        "readOnlyHint": False,
        "destructiveHint": False,
        "idempotentHint": False,
        "openWorldHint": False,
    },
)
@handle_tool_errors
async def budget_add_goal(params: AddGoalInput, ctx: Context) -> str:
    """Create a savings goal with an optional deadline."""
    ledger = _get_ledger(ctx)
    goal_id = ledger.add_goal(
        params.title,
        params.target_amount,
        saved_so_far=params.saved_so_far,
        deadline=params.deadline,
    )
    return format_goal_recommendation(ledger.goal_recommendation(goal_id), _symbol(ledger))


@mcp.tool(
    name="budget_update_goal_saved",
    annotations={
        "title": "Update Goal Progress",
        "readOnlyHint": False,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": False,
    },
)
@handle_tool_errors
async def budget_update_goal_saved(params: UpdateGoalSavedInput, ctx: Context) -> str:
    """Set how much has been saved toward a goal so far."""
    ledger = _get_ledger(ctx)
    goal = resolve_goal(ledger.state.goals, params.goal)
    ledger.update_goal_saved(goal.id, params.saved_so_far)
    return format_goals(ledger.goal_progress(), _symbol(ledger))


@mcp.tool(
    name="budget_remove_goal",
    annotations={
        "title": "Remove Savings Goal",
        "readOnlyHint": False,
        "destructiveHint": True,
        "idempotentHint": True,
        "openWorldHint": False,
    },
)
@handle_tool_errors
async def budget_remove_goal(params: RemoveEntryInput, ctx: Context) -> str:
    """Delete a savings goal."""
    ledger = _get_ledger(ctx)
    goal = resolve_goal(ledger.state.goals, params.query)
    removed = ledger.remove_goal(goal.id)
    return format_removed("goal", goal.title, removed)


@mcp.tool(
    name="budget_recommend_goal",
    annotations={
        "title": "Recommend Goal Contribution",
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": False,
    },
)
@handle_tool_errors
async def budget_recommend_goal(params: GoalRecommendationInput, ctx: Context) -> str:
    """Suggest how much to put toward a goal this month, capped at what is available."""
    ledger = _get_ledger(ctx)
    goal = resolve_goal(ledger.state.goals, params.goal)
    rec = ledger.goal_recommendation(goal.id, params.month)
    return format_goal_recommendation(rec, _symbol(ledger))


# --- Settings ---


@mcp.tool(
    name="budget_update_settings",
    annotations={
        "title": "Update Budget Settings",
        "readOnlyHint": False,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": False,
    },
)
@handle_tool_errors
async def budget_update_settings(params: UpdateSettingsInput, ctx: Context) -> str:
    """Change the carry reserve percent, display currency, or goal interest rate."""
    ledger = _get_ledger(ctx)
    ledger.update_settings(
        carry_percent=params.carry_percent,
        currency=params.currency,
        monthly_interest_rate=params.monthly_interest_rate,
    )
    settings = ledger.state.settings
    return format_settings(settings, effective_carry_percent(settings))


# --- Entry point ---

if __name__ == "__main__":
    mcp.run()
