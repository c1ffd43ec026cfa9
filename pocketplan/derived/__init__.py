"""Derived views and the aggregation functions behind them."""

from pocketplan.derived.aggregates import (
    UNKNOWN_CATEGORY,
    budget_item_progress,
    budget_summary,
    category_name,
    group_transactions_by_category,
    items_of_type,
    savings_category_balance,
    transactions_for_account,
)
from pocketplan.derived.views import FinanceViews

__all__ = [
    "UNKNOWN_CATEGORY",
    "FinanceViews",
    "budget_item_progress",
    "budget_summary",
    "category_name",
    "group_transactions_by_category",
    "items_of_type",
    "savings_category_balance",
    "transactions_for_account",
]
