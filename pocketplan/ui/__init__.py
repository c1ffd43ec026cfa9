"""View-layer state shared by the Streamlit pages."""

from pocketplan.ui.state import (
    BudgetDetailState,
    BudgetTab,
    TransactionTab,
    TransactionsState,
    current_month_year,
    month_name,
)

__all__ = [
    "BudgetDetailState",
    "BudgetTab",
    "TransactionTab",
    "TransactionsState",
    "current_month_year",
    "month_name",
]
