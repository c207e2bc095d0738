import copy

import pytest

from expense_tracker.aggregation import (
    average_daily,
    budget_status,
    daily_series,
    recent_expenses,
    round_half_up,
    spend_by_category,
    threshold_alerts,
    total_spent,
)
from expense_tracker.domain import Budget, BudgetStatus, Category, DateWindow, Expense
from expense_tracker.errors import InvalidBudget
from datetime import date


def make_expenses():
    return (
        Expense("e1", "Groceries", 50.0, Category.FOOD, "2024-03-01"),
        Expense("e2", "Dinner", 30.0, Category.FOOD, "2024-03-15"),
        Expense("e3", "Taxi", 12.5, Category.TRANSPORTATION, "2024-03-31"),
        Expense("e4", "Old rent", 900.0, Category.HOUSING, "2024-02-29"),
        Expense("e5", "Next rent", 900.0, Category.HOUSING, "2024-04-01"),
    )


def test_spend_by_category_march_example():
    expenses = (
        Expense("a", "x", 50, Category.FOOD, "2024-03-01"),
        Expense("b", "y", 30, Category.FOOD, "2024-03-15"),
    )
    spend = spend_by_category(expenses, "2024-03-01", "2024-03-31")
    assert spend == {Category.FOOD: 80}

    statuses = budget_status([Budget(Category.FOOD, 100)], spend)
    assert statuses == [
        BudgetStatus(
            category=Category.FOOD,
            budget_amount=100,
            spent_amount=80,
            remaining_amount=20,
            percent_used=80,
        )
    ]
    assert threshold_alerts(statuses, 80) == statuses


def test_spend_by_category_inclusive_bounds():
    spend = spend_by_category(make_expenses(), "2024-03-01", "2024-03-31")
    assert spend[Category.FOOD] == 80.0
    assert spend[Category.TRANSPORTATION] == 12.5
    assert Category.HOUSING not in spend


def test_spend_by_category_omits_empty_categories_and_sums_window():
    expenses = make_expenses()
    spend = spend_by_category(expenses, "2024-03-01", "2024-03-31")
    assert all(v != 0 for v in spend.values())
    windowed = sum(e.amount for e in expenses if "2024-03-01" <= e.date <= "2024-03-31")
    assert sum(spend.values()) == pytest.approx(windowed)


def test_spend_by_category_empty_window():
    assert spend_by_category(make_expenses(), "2030-01-01", "2030-01-31") == {}


def test_budget_status_preserves_order_and_length():
    budgets = [
        Budget(Category.TRAVEL, 200),
        Budget(Category.FOOD, 100),
        Budget(Category.HOUSING, 1000),
    ]
    statuses = budget_status(budgets, {Category.FOOD: 40.0})
    assert [s.category for s in statuses] == [Category.TRAVEL, Category.FOOD, Category.HOUSING]
    assert len(statuses) == len(budgets)
    assert statuses[0].spent_amount == 0
    assert statuses[0].percent_used == 0
    assert statuses[1].remaining_amount == 60.0


def test_budget_status_percent_unbounded_and_rounded_half_up():
    statuses = budget_status(
        [Budget(Category.FOOD, 100), Budget(Category.TRAVEL, 200)],
        {Category.FOOD: 250.0, Category.TRAVEL: 25.0},
    )
    assert statuses[0].percent_used == 250
    assert statuses[0].remaining_amount == -150.0
    assert statuses[0].bar_width == 100
    assert statuses[0].is_over_budget
    assert statuses[1].percent_used == 13  # 12.5 rounds up


def test_budget_status_zero_amount_raises_invalid_budget():
    with pytest.raises(InvalidBudget):
        budget_status([Budget(Category.FOOD, 0)], {Category.FOOD: 10.0})


def test_budget_status_negative_or_nan_amount_raises():
    with pytest.raises(InvalidBudget):
        budget_status([Budget(Category.FOOD, -5)], {})
    with pytest.raises(InvalidBudget):
        budget_status([Budget(Category.FOOD, float("nan"))], {})
    with pytest.raises(InvalidBudget):
        budget_status([Budget(Category.FOOD, "100")], {})


def test_threshold_alerts_default_and_order():
    statuses = [
        BudgetStatus(Category.FOOD, 100, 79, 21, 79),
        BudgetStatus(Category.TRAVEL, 100, 120, -20, 120),
        BudgetStatus(Category.HOUSING, 100, 80, 20, 80),
    ]
    alerts = threshold_alerts(statuses)
    assert [s.category for s in alerts] == [Category.TRAVEL, Category.HOUSING]
    assert threshold_alerts(statuses, 100) == [statuses[1]]


def test_daily_series_dense_three_days():
    expenses = (Expense("a", "x", 10, Category.FOOD, "2024-03-02"),)
    series = list(daily_series(expenses, 3, date(2024, 3, 3)))
    assert series == [("2024-03-01", 0), ("2024-03-02", 10), ("2024-03-03", 0)]


def test_daily_series_is_lazy_and_handles_zero_days():
    gen = daily_series(make_expenses(), 7, date(2024, 3, 31))
    first = next(gen)
    assert first == ("2024-03-25", 0)
    assert list(daily_series(make_expenses(), 0, date(2024, 3, 31))) == []


def test_daily_series_crosses_month_boundary():
    series = dict(daily_series(make_expenses(), 3, date(2024, 3, 1)))
    assert list(series) == ["2024-02-28", "2024-02-29", "2024-03-01"]
    assert series["2024-02-29"] == 900.0
    assert series["2024-03-01"] == 50.0


def test_aggregations_are_idempotent_and_do_not_mutate_inputs():
    expenses = list(make_expenses())
    budgets = [Budget(Category.FOOD, 100)]
    before = copy.deepcopy((expenses, budgets))

    spend1 = spend_by_category(expenses, "2024-03-01", "2024-03-31")
    spend2 = spend_by_category(expenses, "2024-03-01", "2024-03-31")
    assert spend1 == spend2
    assert budget_status(budgets, spend1) == budget_status(budgets, spend2)
    assert list(daily_series(expenses, 5, date(2024, 3, 31))) == list(
        daily_series(expenses, 5, date(2024, 3, 31))
    )
    assert (expenses, budgets) == before


def test_total_spent_and_average_daily():
    expenses = make_expenses()
    assert total_spent(expenses) == pytest.approx(1892.5)
    march = DateWindow("2024-03-01", "2024-03-31")
    assert total_spent(expenses, march) == pytest.approx(92.5)
    assert total_spent(()) == 0
    assert average_daily(90.0, date(2024, 3, 10)) == 9.0


def test_recent_expenses_newest_first():
    recent = recent_expenses(make_expenses(), 2)
    assert [e.id for e in recent] == ["e5", "e3"]
    assert recent_expenses((), 5) == []


def test_round_half_up():
    assert round_half_up(0.5) == 1
    assert round_half_up(2.5) == 3
    assert round_half_up(2.49) == 2
