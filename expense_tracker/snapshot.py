from dataclasses import dataclass
from typing import Union
from uuid import uuid4

from expense_tracker.domain import Budget, Category, Expense
from expense_tracker.functional import Maybe, maybe


@dataclass(frozen=True)
class Snapshot:
    """Immutable view of both stores, handed to the aggregation functions."""

    expenses: tuple[Expense, ...] = ()
    budgets: tuple[Budget, ...] = ()

    def find_expense(self, expense_id: str) -> Maybe[Expense]:
        return maybe(next((e for e in self.expenses if e.id == expense_id), None))

    def find_budget(self, category: Category) -> Maybe[Budget]:
        return maybe(next((b for b in self.budgets if b.category == category), None))


def new_expense_id() -> str:
    return str(uuid4())


@dataclass(frozen=True)
class AddExpense:
    expense: Expense


@dataclass(frozen=True)
class UpdateExpense:
    expense_id: str
    expense: Expense


@dataclass(frozen=True)
class DeleteExpense:
    expense_id: str


@dataclass(frozen=True)
class UpsertBudget:
    budget: Budget


@dataclass(frozen=True)
class DeleteBudget:
    category: Category


Command = Union[AddExpense, UpdateExpense, DeleteExpense, UpsertBudget, DeleteBudget]
