class ExpenseTrackerError(Exception):
    pass


class ValidationError(ExpenseTrackerError):
    """Bad user input; ``errors`` maps form field -> message."""

    def __init__(self, errors: dict):
        self.errors = dict(errors)
        super().__init__("; ".join(f"{k}: {v}" for k, v in self.errors.items()))


class InvalidBudget(ExpenseTrackerError):
    def __init__(self, category, amount):
        self.category = category
        self.amount = amount
        super().__init__(f"Budget for {getattr(category, 'value', category)} must be positive, got {amount!r}")


class NotFound(ExpenseTrackerError):
    def __init__(self, kind: str, key):
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} {getattr(key, 'value', key)!r} not found")


class NetworkError(ExpenseTrackerError):
    """A persistence call failed. The mutation it carried is dropped."""
