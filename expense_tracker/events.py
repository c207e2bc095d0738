from datetime import date, datetime
from typing import Callable, Dict, List, NamedTuple

from expense_tracker.aggregation import (
    DEFAULT_ALERT_THRESHOLD,
    budget_status,
    spend_by_category,
    threshold_alerts,
)
from expense_tracker.domain import month_window
from expense_tracker.errors import InvalidBudget

__all__ = ['event_bus', 'STORE_CHANGED', 'Event', 'EventBus', 'budget_alert_handler']


class Event(NamedTuple):
    name: str
    ts: str
    payload: dict


Handler = Callable[[Event, dict], dict]


class EventBus:
    def __init__(self):
        self._subscribers: Dict[str, List[Handler]] = {}

    def subscribe(self, name: str, handler: Handler) -> None:
        self._subscribers.setdefault(name, []).append(handler)

    def publish(self, name: str, payload: dict) -> List[dict]:
        handlers = self._subscribers.get(name)
        if not handlers:
            return []
        event = Event(name=name, ts=datetime.now().isoformat(), payload=payload)
        return [handler(event, payload) for handler in list(handlers)]

    def unsubscribe(self, name: str, handler: Handler) -> None:
        if handler in self._subscribers.get(name, []):
            self._subscribers[name].remove(handler)


# payload: {"command": <command>, "snapshot": <Snapshot>, "today": <date, optional>,
#           "threshold": <percent, optional>}
STORE_CHANGED = "STORE_CHANGED"

event_bus = EventBus()


def budget_alert_handler(event: Event, payload: dict) -> dict:
    """Report this month's budgets at or over the alert threshold."""
    snapshot = payload["snapshot"]
    window = month_window(payload.get("today") or date.today())
    spend = spend_by_category(snapshot.expenses, window.start, window.end)
    try:
        statuses = budget_status(snapshot.budgets, spend)
    except InvalidBudget as e:
        return {"error": str(e)}
    alerts = threshold_alerts(statuses, payload.get("threshold", DEFAULT_ALERT_THRESHOLD))
    return {"alerts": alerts} if alerts else {}


def register_default_handlers(bus: EventBus = event_bus) -> None:
    bus.subscribe(STORE_CHANGED, budget_alert_handler)


register_default_handlers()
