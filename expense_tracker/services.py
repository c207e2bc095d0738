from datetime import date
from typing import Any, Dict, Iterable, Sequence

import pandas as pd

from expense_tracker.aggregation import (
    DEFAULT_ALERT_THRESHOLD,
    average_daily,
    budget_status,
    daily_series,
    recent_expenses,
    spend_by_category,
    threshold_alerts,
    total_spent,
)
from expense_tracker.domain import BudgetStatus, Category, Expense, month_window, trailing_window
from expense_tracker.snapshot import Snapshot

EXPENSE_COLUMNS = ["id", "date", "description", "category", "amount"]


def expenses_frame(expenses: Iterable[Expense]) -> pd.DataFrame:
    rows = [
        {
            "id": e.id,
            "date": pd.to_datetime(e.date, errors="coerce"),
            "description": e.description,
            "category": e.category.label,
            "amount": e.amount,
        }
        for e in expenses
    ]
    return pd.DataFrame(rows, columns=EXPENSE_COLUMNS)


def spend_frame(spend: Dict[Category, float]) -> pd.DataFrame:
    return pd.DataFrame(
        [{"Category": c.label, "Spent": v} for c, v in spend.items()],
        columns=["Category", "Spent"],
    )


def status_frame(statuses: Sequence[BudgetStatus]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "Category": s.category.label,
                "Budget": s.budget_amount,
                "Spent": s.spent_amount,
                "Remaining": s.remaining_amount,
                "Used %": s.percent_used,
            }
            for s in statuses
        ],
        columns=["Category", "Budget", "Spent", "Remaining", "Used %"],
    )


class DashboardService:
    """Builds everything the dashboard page shows from one snapshot."""

    def __init__(self, threshold: float = DEFAULT_ALERT_THRESHOLD, chart_days: int = 7):
        self.threshold = threshold
        self.chart_days = chart_days

    def month_status(self, snapshot: Snapshot, today: date) -> list[BudgetStatus]:
        window = month_window(today)
        spend = spend_by_category(snapshot.expenses, window.start, window.end)
        return budget_status(snapshot.budgets, spend)

    def summary(self, snapshot: Snapshot, today: date) -> Dict[str, Any]:
        month = month_window(today)
        week = trailing_window(today, self.chart_days)

        month_spend = spend_by_category(snapshot.expenses, month.start, month.end)
        month_total = total_spent(snapshot.expenses, month)
        statuses = budget_status(snapshot.budgets, month_spend)

        return {
            "month": month,
            "total": total_spent(snapshot.expenses),
            "month_total": month_total,
            "recent_total": total_spent(snapshot.expenses, week),
            "recent_window": week,
            "average_daily": average_daily(month_total, today),
            "spend_by_category": month_spend,
            "daily": list(daily_series(snapshot.expenses, self.chart_days, today)),
            "statuses": statuses,
            "alerts": threshold_alerts(statuses, self.threshold),
            "recent": recent_expenses(snapshot.expenses, 5),
        }
