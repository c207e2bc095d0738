import asyncio

from expense_tracker.repository import Repository
from expense_tracker.snapshot import Snapshot


async def load_snapshot(repository: Repository) -> Snapshot:
    """Fetch expenses and budgets concurrently and combine them into one snapshot.

    The repository calls are blocking, so each runs in a worker thread.
    Any ``NetworkError`` propagates unchanged.
    """
    expenses, budgets = await asyncio.gather(
        asyncio.to_thread(repository.list_expenses),
        asyncio.to_thread(repository.list_budgets),
    )
    return Snapshot(expenses=tuple(expenses), budgets=tuple(budgets))
