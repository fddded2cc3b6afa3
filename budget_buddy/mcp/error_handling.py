"""Consistent error handling for MCP tool functions."""

from __future__ import annotations

import functools
import logging
from typing import Callable

from pydantic import ValidationError

from budget_buddy.core.ledger import InvalidInputError, LedgerError, NotFoundError
from budget_buddy.core.resolvers import ResolverError

logger = logging.getLogger("budget_buddy_mcp")


def handle_tool_errors(fn: Callable) -> Callable:
    """Decorator that catches known exceptions and returns user-friendly error strings.

    MCP tools must return ``str``, not raise.  This ensures all tools
    follow that contract without duplicating try/except blocks.
    """

    @functools.wraps(fn)
    async def wrapper(*args, **kwargs):
        try:
            return await fn(*args, **kwargs)
        except InvalidInputError as e:
            return f"Rejected: {e.detail} Nothing was changed."
        except NotFoundError as e:
            return f"Not found: {e.detail}"
        except LedgerError as e:
            return f"Budget error: {e.detail}"
        except ResolverError as e:
            return str(e)
        except ValidationError as e:
            return f"Invalid data: {e.error_count()} validation error(s). Check your input."
        except Exception as e:
            logger.exception("Unexpected error in tool %s", fn.__name__)
            return f"Unexpected error: {type(e).__name__}: {e}"

    return wrapper
