"""Persistence for expenses and budgets.

``Repository`` is the seam the store talks to. ``JsonRepository`` keeps both
collections in one JSON document:

    {"expenses": [{"id": ..., "description": ..., "amount": ..., "category": ..., "date": ...}],
     "budgets":  [{"category": ..., "amount": ...}]}

Every mutating call returns the updated collection. Failures to read or
write the document surface as ``NetworkError``.
"""
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Protocol, Tuple, Union

from expense_tracker.domain import Budget, Category, Expense
from expense_tracker.errors import NetworkError, ValidationError
from expense_tracker.snapshot import (
    AddExpense,
    Command,
    DeleteBudget,
    DeleteExpense,
    Snapshot,
    UpdateExpense,
    UpsertBudget,
)
from expense_tracker.transforms import apply_command, load_seed, snapshot_to_dict

logger = logging.getLogger(__name__)


class Repository(Protocol):
    def list_expenses(self) -> Tuple[Expense, ...]: ...

    def create_expense(self, expense: Expense) -> Tuple[Expense, ...]: ...

    def update_expense(self, expense_id: str, expense: Expense) -> Tuple[Expense, ...]: ...

    def delete_expense(self, expense_id: str) -> Tuple[Expense, ...]: ...

    def list_budgets(self) -> Tuple[Budget, ...]: ...

    def upsert_budget(self, budget: Budget) -> Tuple[Budget, ...]: ...

    def delete_budget(self, category: Category) -> Tuple[Budget, ...]: ...


class JsonRepository:
    def __init__(self, path: Union[str, Path], seed_path: Union[str, Path, None] = None):
        self.path = Path(path)
        self.seed_path = Path(seed_path) if seed_path else None

    def _read(self) -> Snapshot:
        source: Optional[Path] = self.path
        if not self.path.exists():
            source = self.seed_path if self.seed_path and self.seed_path.exists() else None
        if source is None:
            logger.debug("No document at %s, starting empty", self.path)
            return Snapshot()
        try:
            snapshot = load_seed(source)
        except (OSError, ValueError) as e:
            raise NetworkError(f"Could not read {source}: {e}") from e
        except ValidationError as e:
            raise NetworkError(f"Stored document {source} is invalid: {e}") from e
        logger.debug("Read %d expenses, %d budgets from %s",
                     len(snapshot.expenses), len(snapshot.budgets), source)
        return snapshot

    def _write(self, snapshot: Snapshot) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        except OSError as e:
            raise NetworkError(f"Could not write {self.path}: {e}") from e
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(snapshot_to_dict(snapshot), f, indent=2)
            os.replace(tmp, self.path)
        except OSError as e:
            os.unlink(tmp)
            raise NetworkError(f"Could not write {self.path}: {e}") from e
        logger.debug("Wrote %s", self.path)

    def _mutate(self, command: Command) -> Snapshot:
        snapshot = apply_command(self._read(), command)
        self._write(snapshot)
        return snapshot

    def list_expenses(self) -> Tuple[Expense, ...]:
        return self._read().expenses

    def create_expense(self, expense: Expense) -> Tuple[Expense, ...]:
        return self._mutate(AddExpense(expense)).expenses

    def update_expense(self, expense_id: str, expense: Expense) -> Tuple[Expense, ...]:
        return self._mutate(UpdateExpense(expense_id, expense)).expenses

    def delete_expense(self, expense_id: str) -> Tuple[Expense, ...]:
        return self._mutate(DeleteExpense(expense_id)).expenses

    def list_budgets(self) -> Tuple[Budget, ...]:
        return self._read().budgets

    def upsert_budget(self, budget: Budget) -> Tuple[Budget, ...]:
        return self._mutate(UpsertBudget(budget)).budgets

    def delete_budget(self, category: Category) -> Tuple[Budget, ...]:
        return self._mutate(DeleteBudget(category)).budgets
