"""
View-layer State

Purely local UI state: which tab is open, what the search box holds,
which row is being edited. Nothing here talks to the backend; pages
read and write these objects and call the flows for everything else.
"""

import calendar
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Callable, Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field

from pocketplan.models.finance import AccountType, BudgetItem, CategoryType


class BudgetTab(str, Enum):
    CASH = "Cash"
    MONTHLY = "Monthly"
    SAVINGS = "Savings"
    INCOME = "Income"

    @property
    def category_type(self) -> CategoryType:
        return CategoryType(self.value.lower())


class TransactionTab(str, Enum):
    CHECKING = "Checking"
    SAVINGS = "Savings"

    @property
    def account_type(self) -> AccountType:
        return AccountType(self.value.lower())


def month_name(month: int) -> str:
    """'January' for 1. Raises ValueError outside 1-12."""
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month}")
    return calendar.month_name[month]


def current_month_year(today: Optional[date] = None) -> tuple[int, int]:
    today = today or date.today()
    return today.month, today.year


def _format_amount(amount: Decimal) -> str:
    return f"{amount:.2f}"


class BudgetDetailState(BaseModel):
    """State of the budget detail page."""
    model_config = ConfigDict(validate_assignment=True)

    active_tab: BudgetTab = BudgetTab.CASH
    search: str = ""
    selected_month: int = Field(default_factory=lambda: current_month_year()[0], ge=1, le=12)
    selected_year: int = Field(default_factory=lambda: current_month_year()[1])
    editing_item_id: Optional[int] = None
    year_window: int = Field(default=5, ge=0)

    @property
    def active_category_type(self) -> CategoryType:
        return self.active_tab.category_type

    @property
    def month_name(self) -> str:
        return month_name(self.selected_month)

    @property
    def title(self) -> str:
        return f"{self.month_name} {self.selected_year}"

    def year_options(self, today: Optional[date] = None) -> list[int]:
        """Current year plus and minus the window, ascending."""
        _, year = current_month_year(today)
        return list(range(year - self.year_window, year + self.year_window + 1))

    def select_month(self, month: int, year: int) -> None:
        self.selected_month = month
        self.selected_year = year
        self.editing_item_id = None

    def switch_tab(self, tab: BudgetTab) -> None:
        """Changing tabs abandons any edit in progress."""
        if tab != self.active_tab:
            self.active_tab = tab
            self.editing_item_id = None

    def start_editing(self, item_id: int) -> None:
        self.editing_item_id = item_id

    def stop_editing(self) -> None:
        self.editing_item_id = None

    def filter_items(
        self,
        items: Iterable[BudgetItem],
        name_of: Callable[[Optional[int]], str],
    ) -> list[BudgetItem]:
        """
        Items whose category name or amount contains the search text.

        Matching ignores case and surrounding whitespace. An empty search
        keeps everything.
        """
        query = self.search.strip().lower()
        items = list(items)
        if not query:
            return items
        return [
            item for item in items
            if query in name_of(item.category_id).lower()
            or query in _format_amount(item.amount)
        ]


class TransactionsState(BaseModel):
    """State of the transactions page."""
    model_config = ConfigDict(validate_assignment=True)

    active_tab: TransactionTab = TransactionTab.CHECKING
    editing_transaction_id: Optional[int] = None

    @property
    def active_account_type(self) -> AccountType:
        return self.active_tab.account_type

    def switch_tab(self, tab: TransactionTab) -> None:
        if tab != self.active_tab:
            self.active_tab = tab
            self.editing_transaction_id = None

    def start_editing(self, transaction_id: int) -> None:
        self.editing_transaction_id = transaction_id

    def stop_editing(self) -> None:
        self.editing_transaction_id = None
