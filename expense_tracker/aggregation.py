"""Pure aggregation over snapshots of the expense and budget stores.

Nothing here does I/O or mutates its arguments; the dashboard simply calls
these again on every rerun.
"""
import math
from collections import defaultdict
from datetime import date
from typing import Iterable, Iterator, Mapping, Optional, Sequence

from expense_tracker.domain import Budget, BudgetStatus, Category, DateWindow, Expense
from expense_tracker.errors import InvalidBudget
from expense_tracker.filters import by_date_range
from expense_tracker.lazy import daily_series, expenses_in_window, iter_expenses

DEFAULT_ALERT_THRESHOLD = 80

__all__ = [
    "DEFAULT_ALERT_THRESHOLD",
    "spend_by_category",
    "budget_status",
    "daily_series",
    "threshold_alerts",
    "total_spent",
    "average_daily",
    "recent_expenses",
    "round_half_up",
]


def round_half_up(value: float) -> int:
    # 12.5 -> 13, unlike the built-in round()
    return int(math.floor(value + 0.5))


def spend_by_category(
    expenses: Iterable[Expense], window_start: str, window_end: str
) -> dict[Category, float]:
    """Sum amounts per category for expenses dated within ``[window_start, window_end]``.

    Categories without a matching expense are left out rather than mapped to 0.
    """
    totals: dict[Category, float] = defaultdict(float)
    for e in iter_expenses(expenses, by_date_range(window_start, window_end)):
        totals[e.category] += e.amount
    return dict(totals)


def _check_budget(b: Budget) -> float:
    amount = b.amount
    if isinstance(amount, bool) or not isinstance(amount, (int, float)):
        raise InvalidBudget(b.category, amount)
    if math.isnan(amount) or amount <= 0:
        raise InvalidBudget(b.category, amount)
    return float(amount)


def budget_status(
    budgets: Sequence[Budget], spend: Mapping[Category, float]
) -> list[BudgetStatus]:
    statuses = []
    for b in budgets:
        amount = _check_budget(b)
        spent = spend.get(b.category, 0)
        statuses.append(
            BudgetStatus(
                category=b.category,
                budget_amount=amount,
                spent_amount=spent,
                remaining_amount=amount - spent,
                percent_used=round_half_up(100 * spent / amount),
            )
        )
    return statuses


def threshold_alerts(
    statuses: Iterable[BudgetStatus], threshold_percent: float = DEFAULT_ALERT_THRESHOLD
) -> list[BudgetStatus]:
    return [s for s in statuses if s.percent_used >= threshold_percent]


def total_spent(expenses: Iterable[Expense], window: Optional[DateWindow] = None) -> float:
    source: Iterator[Expense] = iter(expenses) if window is None else expenses_in_window(expenses, window)
    return sum((e.amount for e in source), 0.0)


def average_daily(month_total: float, anchor_date: date) -> float:
    """Month-to-date spend spread over the days elapsed so far."""
    return month_total / max(anchor_date.day, 1)


def recent_expenses(expenses: Iterable[Expense], limit: int = 5) -> list[Expense]:
    ordered = sorted(expenses, key=lambda e: e.date, reverse=True)
    return ordered[: max(0, limit)]
