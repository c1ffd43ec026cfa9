"""
Resource Stores Package

One reactive in-memory store per backend resource.
"""

from pocketplan.stores.base import ResourceStore, remove_by_id, replace_by_id, upsert
from pocketplan.stores.budget_items import BudgetItemStore
from pocketplan.stores.budgets import BudgetStore
from pocketplan.stores.categories import CategoryStore
from pocketplan.stores.transactions import TransactionStore

__all__ = [
    "BudgetItemStore",
    "BudgetStore",
    "CategoryStore",
    "ResourceStore",
    "TransactionStore",
    "remove_by_id",
    "replace_by_id",
    "upsert",
]
