from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Generic, Mapping, Optional, TypeVar

from expense_tracker.domain import Budget, Category, Expense, parse_category
from expense_tracker.errors import ValidationError

T = TypeVar('T')
U = TypeVar('U')
E = TypeVar('E')


class Maybe(Generic[T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_some(self) -> bool:
        pass

    def is_none(self) -> bool:
        return not self.is_some()


@dataclass(frozen=True)
class Some(Maybe[T]):
    value: T

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Some(f(self.value))

    def get_or_else(self, default: T) -> T:
        return self.value

    def is_some(self) -> bool:
        return True


@dataclass(frozen=True)
class Nothing(Maybe[T]):

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Nothing()

    def get_or_else(self, default: T) -> T:
        return default

    def is_some(self) -> bool:
        return False


def maybe(value: Optional[T]) -> Maybe[T]:
    return Nothing() if value is None else Some(value)


class Either(Generic[E, T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_right(self) -> bool:
        pass

    def is_left(self) -> bool:
        return not self.is_right()

    @abstractmethod
    def get_error(self) -> E:
        pass


@dataclass(frozen=True)
class Right(Either[E, T]):
    value: T

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return Right(f(self.value))

    def get_or_else(self, default: T) -> T:
        return self.value

    def is_right(self) -> bool:
        return True

    def get_error(self) -> E:
        raise ValueError("Cannot get error from Right")


@dataclass(frozen=True)
class Left(Either[E, T]):
    error: E

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return self

    def get_or_else(self, default: T) -> T:
        return default

    def is_right(self) -> bool:
        return False

    def get_error(self) -> E:
        return self.error


def _check_amount(raw: Any, errors: dict, required_msg: str, invalid_msg: str) -> float:
    if raw is None or str(raw).strip() == "":
        errors["amount"] = required_msg
        return 0.0
    try:
        amount = float(str(raw).strip())
    except ValueError:
        errors["amount"] = invalid_msg
        return 0.0
    # nan fails the comparison as well
    if not amount > 0 or amount == float("inf"):
        errors["amount"] = invalid_msg
    return amount


def _check_category(raw: Any, errors: dict) -> Optional[Category]:
    try:
        return parse_category(raw)
    except ValidationError as e:
        errors.update(e.errors)
        return None


def validate_expense_form(expense_id: str, form: Mapping[str, Any]) -> Either[dict, Expense]:
    """Validate raw form input for an expense.

    Returns ``Right(Expense)`` or ``Left({field: message})`` so each message
    can be shown beside its field.
    """
    errors: dict[str, str] = {}

    description = str(form.get("description") or "").strip()
    if not description:
        errors["description"] = "Description is required"

    amount = _check_amount(
        form.get("amount"), errors, "Amount is required", "Amount must be a positive number"
    )
    category = _check_category(form.get("category"), errors)

    raw_date = form.get("date")
    if isinstance(raw_date, date):
        day = raw_date.isoformat()
    else:
        day = str(raw_date or "").strip()
    if not day:
        errors["date"] = "Date is required"
    else:
        try:
            day = date.fromisoformat(day).isoformat()
        except ValueError:
            errors["date"] = "Date must be in YYYY-MM-DD format"

    if errors:
        return Left(errors)
    return Right(Expense(id=expense_id, description=description, amount=amount, category=category, date=day))


def validate_budget_form(form: Mapping[str, Any]) -> Either[dict, Budget]:
    errors: dict[str, str] = {}
    amount = _check_amount(
        form.get("amount"),
        errors,
        "Budget amount is required",
        "Budget amount must be a positive number",
    )
    category = _check_category(form.get("category"), errors)
    if errors:
        return Left(errors)
    return Right(Budget(category=category, amount=amount))
