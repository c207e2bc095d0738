import logging
from dataclasses import replace
from datetime import date
from functools import singledispatchmethod
from typing import Callable, List, Optional

from expense_tracker.aggregation import DEFAULT_ALERT_THRESHOLD
from expense_tracker.errors import NetworkError, NotFound
from expense_tracker.events import STORE_CHANGED, EventBus, event_bus
from expense_tracker.repository import Repository
from expense_tracker.snapshot import (
    AddExpense,
    Command,
    DeleteBudget,
    DeleteExpense,
    Snapshot,
    UpdateExpense,
    UpsertBudget,
)

logger = logging.getLogger(__name__)


class ExpenseStore:
    """Client-side mirror of the persisted expenses and budgets.

    Every mutation goes through ``dispatch``: the repository call runs first
    and only its response replaces the snapshot, so a failed call leaves the
    store exactly as it was.
    """

    def __init__(
        self,
        repository: Repository,
        bus: EventBus = event_bus,
        threshold: float = DEFAULT_ALERT_THRESHOLD,
        today: Callable[[], date] = date.today,
        snapshot: Optional[Snapshot] = None,
    ):
        self.repository = repository
        self.bus = bus
        self.threshold = threshold
        self._today = today
        self._snapshot = snapshot or Snapshot()

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot

    def load(self) -> Snapshot:
        try:
            expenses = self.repository.list_expenses()
            budgets = self.repository.list_budgets()
        except NetworkError:
            logger.error("Loading expenses and budgets failed", exc_info=True)
            raise
        self._snapshot = Snapshot(expenses=tuple(expenses), budgets=tuple(budgets))
        logger.info("Loaded %d expenses and %d budgets", len(expenses), len(budgets))
        return self._snapshot

    def dispatch(self, command: Command) -> List[dict]:
        """Persist ``command``, adopt the response and return the event handlers' results."""
        name = type(command).__name__
        try:
            self._snapshot = self._execute(command, self._snapshot)
        except NetworkError:
            logger.error("%s failed, change discarded", name, exc_info=True)
            raise
        except NotFound as e:
            logger.warning("%s: %s", name, e)
            raise
        logger.info("%s applied (%d expenses, %d budgets)",
                    name, len(self._snapshot.expenses), len(self._snapshot.budgets))
        return self.bus.publish(
            STORE_CHANGED,
            {
                "command": command,
                "snapshot": self._snapshot,
                "today": self._today(),
                "threshold": self.threshold,
            },
        )

    @singledispatchmethod
    def _execute(self, command, snapshot: Snapshot) -> Snapshot:
        raise TypeError(f"Unknown command: {command!r}")

    @_execute.register
    def _(self, command: AddExpense, snapshot: Snapshot) -> Snapshot:
        return replace(snapshot, expenses=tuple(self.repository.create_expense(command.expense)))

    @_execute.register
    def _(self, command: UpdateExpense, snapshot: Snapshot) -> Snapshot:
        expenses = self.repository.update_expense(command.expense_id, command.expense)
        return replace(snapshot, expenses=tuple(expenses))

    @_execute.register
    def _(self, command: DeleteExpense, snapshot: Snapshot) -> Snapshot:
        return replace(snapshot, expenses=tuple(self.repository.delete_expense(command.expense_id)))

    @_execute.register
    def _(self, command: UpsertBudget, snapshot: Snapshot) -> Snapshot:
        return replace(snapshot, budgets=tuple(self.repository.upsert_budget(command.budget)))

    @_execute.register
    def _(self, command: DeleteBudget, snapshot: Snapshot) -> Snapshot:
        return replace(snapshot, budgets=tuple(self.repository.delete_budget(command.category)))
