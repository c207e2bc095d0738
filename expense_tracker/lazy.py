from collections import defaultdict
from datetime import date, timedelta
from typing import Callable, Iterable, Iterator, Mapping

from expense_tracker.domain import Category, DateWindow, Expense
from expense_tracker.filters import by_window


def iter_expenses(
    expenses: Iterable[Expense], pred: Callable[[Expense], bool]
) -> Iterator[Expense]:
    for e in expenses:
        if pred(e):
            yield e


def expenses_in_window(expenses: Iterable[Expense], window: DateWindow) -> Iterator[Expense]:
    return iter_expenses(expenses, by_window(window))


def daily_series(
    expenses: Iterable[Expense], days: int, anchor_date: date
) -> Iterator[tuple[str, float]]:
    """Yield ``(date, total)`` for ``days`` consecutive days ending at ``anchor_date``.

    Oldest first, and dense: a day without expenses yields 0. The input is
    read once, when the first pair is requested.
    """
    if days <= 0:
        return
    first = anchor_date - timedelta(days=days - 1)
    window = DateWindow(first.isoformat(), anchor_date.isoformat())

    totals: dict[str, float] = defaultdict(float)
    for e in expenses_in_window(expenses, window):
        totals[e.date] += e.amount

    for offset in range(days):
        day = (first + timedelta(days=offset)).isoformat()
        yield day, totals.get(day, 0)


def top_categories(spend: Mapping[Category, float], k: int) -> Iterator[tuple[Category, float]]:
    ordered = sorted(spend.items(), key=lambda item: item[1], reverse=True)
    for category, total in ordered[: max(0, k)]:
        yield category, total
