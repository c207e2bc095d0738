import json
from functools import singledispatch
from pathlib import Path
from typing import Tuple, Union

from expense_tracker.domain import Budget, Category, Expense
from expense_tracker.errors import NotFound, ValidationError
from expense_tracker.snapshot import (
    AddExpense,
    DeleteBudget,
    DeleteExpense,
    Snapshot,
    UpdateExpense,
    UpsertBudget,
)


def _records(data: dict, key: str) -> list:
    records = data.get(key) or []
    if not isinstance(records, list) or not all(isinstance(r, dict) for r in records):
        raise ValidationError({key: "Expected a list of records"})
    return records


def snapshot_from_dict(data: dict) -> Snapshot:
    if not isinstance(data, dict):
        raise ValidationError({"document": f"Expected an object, got {type(data).__name__}"})
    expenses = tuple(Expense.from_dict(e) for e in _records(data, "expenses"))
    budgets = tuple(Budget.from_dict(b) for b in _records(data, "budgets"))
    return Snapshot(expenses=expenses, budgets=budgets)


def snapshot_to_dict(snapshot: Snapshot) -> dict:
    return {
        "expenses": [e.to_dict() for e in snapshot.expenses],
        "budgets": [b.to_dict() for b in snapshot.budgets],
    }


def load_seed(path: Union[str, Path]) -> Snapshot:
    with open(path, "r", encoding="utf-8") as f:
        return snapshot_from_dict(json.load(f))


def add_expense(expenses: Tuple[Expense, ...], e: Expense) -> Tuple[Expense, ...]:
    return expenses + (e,)


def update_expense(
    expenses: Tuple[Expense, ...], expense_id: str, e: Expense
) -> Tuple[Expense, ...]:
    if not any(x.id == expense_id for x in expenses):
        raise NotFound("expense", expense_id)
    return tuple(
        Expense(
            id=x.id,
            description=e.description,
            amount=e.amount,
            category=e.category,
            date=e.date,
        )
        if x.id == expense_id
        else x
        for x in expenses
    )


def delete_expense(expenses: Tuple[Expense, ...], expense_id: str) -> Tuple[Expense, ...]:
    remaining = tuple(x for x in expenses if x.id != expense_id)
    if len(remaining) == len(expenses):
        raise NotFound("expense", expense_id)
    return remaining


def upsert_budget(budgets: Tuple[Budget, ...], b: Budget) -> Tuple[Budget, ...]:
    if any(x.category == b.category for x in budgets):
        return tuple(b if x.category == b.category else x for x in budgets)
    return budgets + (b,)


def delete_budget(budgets: Tuple[Budget, ...], category: Category) -> Tuple[Budget, ...]:
    remaining = tuple(x for x in budgets if x.category != category)
    if len(remaining) == len(budgets):
        raise NotFound("budget", category)
    return remaining


@singledispatch
def _apply(command, snapshot: Snapshot) -> Snapshot:
    raise TypeError(f"Unknown command: {command!r}")


@_apply.register
def _(command: AddExpense, snapshot: Snapshot) -> Snapshot:
    return Snapshot(add_expense(snapshot.expenses, command.expense), snapshot.budgets)


@_apply.register
def _(command: UpdateExpense, snapshot: Snapshot) -> Snapshot:
    return Snapshot(
        update_expense(snapshot.expenses, command.expense_id, command.expense), snapshot.budgets
    )


@_apply.register
def _(command: DeleteExpense, snapshot: Snapshot) -> Snapshot:
    return Snapshot(delete_expense(snapshot.expenses, command.expense_id), snapshot.budgets)


@_apply.register
def _(command: UpsertBudget, snapshot: Snapshot) -> Snapshot:
    return Snapshot(snapshot.expenses, upsert_budget(snapshot.budgets, command.budget))


@_apply.register
def _(command: DeleteBudget, snapshot: Snapshot) -> Snapshot:
    return Snapshot(snapshot.expenses, delete_budget(snapshot.budgets, command.category))


def apply_command(snapshot: Snapshot, command) -> Snapshot:
    """Return the snapshot ``command`` produces; ``snapshot`` itself is untouched."""
    return _apply(command, snapshot)
