"""JSON file persistence for the budget state document.

The store only loads and saves; it never repairs a document. A file that
cannot be parsed or validated is replaced by a fresh document.
"""

import logging
import os
from datetime import date
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from budget_buddy.core.months import new_state
from budget_buddy.models.schemas import BudgetState

logger = logging.getLogger("budget_buddy.storage")

STATE_FILE_ENV = "BUDGET_BUDDY_STATE_FILE"


def default_state_file() -> str:
    return os.environ.get(
        STATE_FILE_ENV,
        str(Path.home() / ".budget-buddy" / "state.json"),
    )


class JsonStateStore:
    """Reads and writes the whole state document as one JSON file."""

    def __init__(self, state_file: Optional[str] = None):
        self._state_file = state_file or default_state_file()

    @property
    def path(self) -> Path:
        return Path(self._state_file)

    def load(self, reference_date: date | None = None) -> BudgetState:
        """Load the document, or a fresh one when the file is missing or corrupt."""
        path = self.path
        if not path.exists():
            return new_state(reference_date)
        try:
            return BudgetState.model_validate_json(path.read_text(encoding="utf-8"))
        except (ValidationError, OSError, UnicodeDecodeError) as e:
            logger.warning("Resetting corrupt budget state at %s: %s", path, e)
            return new_state(reference_date)

    def save(self, state: BudgetState):
        """Persist the document, replacing the file atomically."""
        path = self.path
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(path.suffix + ".tmp")
        tmp.write_text(state.model_dump_json(indent=2), encoding="utf-8")
        tmp.replace(path)
