from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import Any, Optional

from expense_tracker.errors import ValidationError


class Category(str, Enum):
    FOOD = "food"
    TRANSPORTATION = "transportation"
    HOUSING = "housing"
    UTILITIES = "utilities"
    ENTERTAINMENT = "entertainment"
    HEALTHCARE = "healthcare"
    EDUCATION = "education"
    SHOPPING = "shopping"
    TRAVEL = "travel"
    OTHER = "other"

    @property
    def label(self) -> str:
        return self.value.capitalize()


# registry order is the order forms and charts iterate in
CATEGORIES: tuple[Category, ...] = tuple(Category)


def parse_category(value: Any) -> Category:
    if isinstance(value, Category):
        return value
    try:
        return Category(str(value).strip().lower())
    except ValueError:
        raise ValidationError({"category": f"Unknown category: {value!r}"}) from None


@dataclass(frozen=True)
class Expense:
    id: str
    description: str
    amount: float
    category: Category
    date: str  # YYYY-MM-DD

    @classmethod
    def from_dict(cls, data: dict) -> "Expense":
        try:
            return cls(
                id=str(data["id"]),
                description=str(data["description"]),
                amount=float(data["amount"]),
                category=parse_category(data["category"]),
                date=str(data["date"]),
            )
        except KeyError as e:
            raise ValidationError({e.args[0]: "Missing field"}) from None
        except (TypeError, ValueError):
            raise ValidationError({"amount": f"Not a number: {data.get('amount')!r}"}) from None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "description": self.description,
            "amount": self.amount,
            "category": self.category.value,
            "date": self.date,
        }


# One budget per category; category is the key.
@dataclass(frozen=True)
class Budget:
    category: Category
    amount: float

    @classmethod
    def from_dict(cls, data: dict) -> "Budget":
        try:
            return cls(category=parse_category(data["category"]), amount=float(data["amount"]))
        except KeyError as e:
            raise ValidationError({e.args[0]: "Missing field"}) from None
        except (TypeError, ValueError):
            raise ValidationError({"amount": f"Not a number: {data.get('amount')!r}"}) from None

    def to_dict(self) -> dict:
        return {"category": self.category.value, "amount": self.amount}


@dataclass(frozen=True)
class BudgetStatus:
    category: Category
    budget_amount: float
    spent_amount: float
    remaining_amount: float
    percent_used: int  # unbounded above

    @property
    def bar_width(self) -> int:
        """Progress-bar width in percent; the printed figure stays ``percent_used``."""
        return max(0, min(self.percent_used, 100))

    @property
    def is_over_budget(self) -> bool:
        return self.remaining_amount < 0

    @property
    def level(self) -> str:
        if self.percent_used > 100:
            return "over"
        if self.percent_used > 80:
            return "warning"
        return "ok"


@dataclass(frozen=True)
class DateWindow:
    start: str
    end: str

    def contains(self, day: str) -> bool:
        return self.start <= day <= self.end


def month_window(anchor: date) -> DateWindow:
    first = anchor.replace(day=1)
    if first.month == 12:
        next_first = first.replace(year=first.year + 1, month=1)
    else:
        next_first = first.replace(month=first.month + 1)
    last = next_first - timedelta(days=1)
    return DateWindow(first.isoformat(), last.isoformat())


def trailing_window(anchor: date, days: int) -> DateWindow:
    """Window from ``anchor - days`` up to and including ``anchor``."""
    return DateWindow((anchor - timedelta(days=days)).isoformat(), anchor.isoformat())


def parse_iso_date(value: Any) -> Optional[date]:
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        return None
