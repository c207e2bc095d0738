from datetime import date

import pytest

from expense_tracker.domain import Budget, Category, Expense
from expense_tracker.errors import NetworkError, NotFound
from expense_tracker.events import STORE_CHANGED, EventBus, budget_alert_handler
from expense_tracker.repository import JsonRepository
from expense_tracker.snapshot import (
    AddExpense,
    DeleteBudget,
    DeleteExpense,
    Snapshot,
    UpdateExpense,
    UpsertBudget,
)
from expense_tracker.store import ExpenseStore


class BrokenRepository(JsonRepository):
    """Reads work, every write fails."""

    def _write(self, snapshot):
        raise NetworkError("connection reset")


def make_store(repo, bus=None):
    bus = bus or EventBus()
    return ExpenseStore(repo, bus=bus, today=lambda: date(2024, 3, 20))


def test_load_mirrors_repository(tmp_path):
    repo = JsonRepository(tmp_path / "store.json")
    repo.create_expense(Expense("e1", "Lunch", 10.0, Category.FOOD, "2024-03-01"))
    repo.upsert_budget(Budget(Category.FOOD, 100.0))

    store = make_store(repo)
    snap = store.load()
    assert snap is store.snapshot
    assert [e.id for e in snap.expenses] == ["e1"]
    assert snap.budgets == (Budget(Category.FOOD, 100.0),)


def test_dispatch_produces_new_snapshot(tmp_path):
    store = make_store(JsonRepository(tmp_path / "store.json"))
    before = store.snapshot

    store.dispatch(AddExpense(Expense("e1", "Lunch", 10.0, Category.FOOD, "2024-03-01")))
    store.dispatch(UpsertBudget(Budget(Category.FOOD, 50.0)))
    store.dispatch(UpdateExpense("e1", Expense("e1", "Dinner", 20.0, Category.FOOD, "2024-03-02")))

    assert before == Snapshot()
    assert store.snapshot.expenses == (Expense("e1", "Dinner", 20.0, Category.FOOD, "2024-03-02"),)
    assert store.snapshot.find_budget(Category.FOOD).get_or_else(None).amount == 50.0

    store.dispatch(DeleteExpense("e1"))
    store.dispatch(DeleteBudget(Category.FOOD))
    assert store.snapshot == Snapshot()


def test_failed_write_leaves_snapshot_unchanged(tmp_path):
    store = make_store(BrokenRepository(tmp_path / "store.json"))
    seen = []
    store.bus.subscribe(STORE_CHANGED, lambda event, payload: seen.append(payload) or {})

    with pytest.raises(NetworkError):
        store.dispatch(AddExpense(Expense("e1", "Lunch", 10.0, Category.FOOD, "2024-03-01")))

    assert store.snapshot == Snapshot()
    assert seen == []


def test_not_found_propagates(tmp_path):
    store = make_store(JsonRepository(tmp_path / "store.json"))
    with pytest.raises(NotFound):
        store.dispatch(DeleteExpense("ghost"))
    assert store.snapshot == Snapshot()


def test_dispatch_publishes_budget_alerts(tmp_path):
    bus = EventBus()
    bus.subscribe(STORE_CHANGED, budget_alert_handler)
    store = make_store(JsonRepository(tmp_path / "store.json"), bus)

    store.dispatch(UpsertBudget(Budget(Category.FOOD, 100.0)))
    results = store.dispatch(AddExpense(Expense("e1", "Feast", 85.0, Category.FOOD, "2024-03-10")))

    assert len(results) == 1
    alerts = results[0]["alerts"]
    assert [s.category for s in alerts] == [Category.FOOD]
    assert alerts[0].percent_used == 85


def test_expenses_outside_current_month_do_not_alert(tmp_path):
    bus = EventBus()
    bus.subscribe(STORE_CHANGED, budget_alert_handler)
    store = make_store(JsonRepository(tmp_path / "store.json"), bus)

    store.dispatch(UpsertBudget(Budget(Category.FOOD, 100.0)))
    results = store.dispatch(AddExpense(Expense("e1", "Feast", 500.0, Category.FOOD, "2024-02-10")))
    assert results == [{}]
