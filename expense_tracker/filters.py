from expense_tracker.domain import Category, DateWindow, Expense


def by_category(category: Category):
    def _filter(e: Expense) -> bool:
        return e.category == category

    return _filter


def by_date_range(start: str, end: str):
    # ISO dates compare lexically in chronological order
    def _filter(e: Expense) -> bool:
        return start <= e.date <= end

    return _filter


def by_window(window: DateWindow):
    return by_date_range(window.start, window.end)


def by_text(query: str):
    needle = query.strip().lower()

    def _filter(e: Expense) -> bool:
        return needle in e.description.lower()

    return _filter
