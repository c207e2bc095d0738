"""Display helpers for amounts, percentages and budget alerts."""
from typing import Union

from expense_tracker.domain import BudgetStatus


def format_money(amount: Union[float, int], currency: str = "$") -> str:
    """Format an amount with two decimals, e.g. ``$1,234.50``.

    Negative amounts keep the sign in front of the currency: ``-$20.00``.
    """
    sign = "-" if amount < 0 else ""
    return f"{sign}{currency}{abs(amount):,.2f}"


def format_percent(status: BudgetStatus) -> str:
    # raw value; only the progress bar is clamped
    return f"{status.percent_used}% used"


def remaining_text(status: BudgetStatus, currency: str = "$") -> str:
    if status.is_over_budget:
        return f"Over budget by: {format_money(abs(status.remaining_amount), currency)}"
    return f"Remaining: {format_money(status.remaining_amount, currency)}"


def alert_text(status: BudgetStatus, currency: str = "$") -> str:
    if status.percent_used >= 100:
        return f"Over budget by {format_money(abs(status.remaining_amount), currency)}"
    return (
        f"{format_money(status.remaining_amount, currency)} remaining of "
        f"{format_money(status.budget_amount, currency)}"
    )


def status_color(status: BudgetStatus) -> str:
    return {"over": "red", "warning": "orange", "ok": "green"}[status.level]


def escape_dollars(text: str) -> str:
    """Escape ``$`` so Streamlit markdown does not read amounts as LaTeX."""
    return text.replace("$", "\\$")
