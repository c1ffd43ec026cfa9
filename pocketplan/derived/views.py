"""
Derived Views

Read-only computed values over the resource stores. Views never store
anything of their own: each one is a pure function of the collections it
names, recomputed on the first read after any of those collections
changes. View components read these instead of aggregating themselves.
"""

from decimal import Decimal
from typing import Optional

from pocketplan.derived import aggregates
from pocketplan.models.finance import (
    AccountType,
    BudgetItem,
    BudgetItemProgress,
    BudgetSummary,
    Category,
    CategoryType,
    SavingsCategoryBalance,
    Transaction,
)
from pocketplan.reactive import Computed
from pocketplan.stores import BudgetItemStore, CategoryStore, TransactionStore


class FinanceViews:
    """
    Computed views over categories, budget items and transactions.

    The stores are injected; the views only ever read them.
    """

    def __init__(
        self,
        categories: CategoryStore,
        budget_items: BudgetItemStore,
        transactions: TransactionStore,
        unknown_category_label: str = aggregates.UNKNOWN_CATEGORY,
    ):
        self._categories = categories
        self._budget_items = budget_items
        self._transactions = transactions
        self._placeholder = unknown_category_label

        cats = categories.items
        items = budget_items.items
        txns = transactions.items

        # Budget items
        self.budget_summary: Computed[BudgetSummary] = Computed(
            lambda: aggregates.budget_summary(items(), cats()), items, cats
        )
        self.income_items = self._items_of(CategoryType.INCOME)
        self.cash_items = self._items_of(CategoryType.CASH)
        self.monthly_items = self._items_of(CategoryType.MONTHLY)
        self.savings_items = self._items_of(CategoryType.SAVINGS)

        # Categories
        self.income_categories = self._categories_of(CategoryType.INCOME)
        self.cash_categories = self._categories_of(CategoryType.CASH)
        self.monthly_categories = self._categories_of(CategoryType.MONTHLY)
        self.savings_categories = self._categories_of(CategoryType.SAVINGS)

        # Transactions
        self.checking_transactions: Computed[list[Transaction]] = Computed(
            lambda: aggregates.transactions_for_account(txns(), AccountType.CHECKING), txns
        )
        self.savings_transactions: Computed[list[Transaction]] = Computed(
            lambda: aggregates.transactions_for_account(txns(), AccountType.SAVINGS), txns
        )
        self.checking_total: Computed[Decimal] = Computed(
            lambda: aggregates.sum_amounts(self.checking_transactions()),
            self.checking_transactions,
        )
        self.savings_total: Computed[Decimal] = Computed(
            lambda: aggregates.sum_amounts(self.savings_transactions()),
            self.savings_transactions,
        )
        self.total_transactions: Computed[Decimal] = Computed(
            lambda: self.checking_total() + self.savings_total(),
            self.checking_total,
            self.savings_total,
        )

        # Cross-store
        self.savings_balances: Computed[dict[int, SavingsCategoryBalance]] = Computed(
            lambda: {
                category.id: aggregates.savings_category_balance(
                    category.id, items(), txns(), cats()
                )
                for category in self.savings_categories()
            },
            self.savings_categories,
            items,
            txns,
        )
        self.item_progress: Computed[list[BudgetItemProgress]] = Computed(
            lambda: aggregates.budget_item_progress(items(), txns()), items, txns
        )

    def _items_of(self, category_type: CategoryType) -> Computed[list[BudgetItem]]:
        items = self._budget_items.items
        cats = self._categories.items
        return Computed(
            lambda: aggregates.items_of_type(items(), category_type, cats()), items, cats
        )

    def _categories_of(self, category_type: CategoryType) -> Computed[list[Category]]:
        cats = self._categories.items
        return Computed(lambda: aggregates.categories_of_type(cats(), category_type), cats)

    def items_of_type(self, category_type: CategoryType) -> list[BudgetItem]:
        return {
            CategoryType.INCOME: self.income_items,
            CategoryType.CASH: self.cash_items,
            CategoryType.MONTHLY: self.monthly_items,
            CategoryType.SAVINGS: self.savings_items,
        }[category_type]()

    def categories_of_type(self, category_type: CategoryType) -> list[Category]:
        return {
            CategoryType.INCOME: self.income_categories,
            CategoryType.CASH: self.cash_categories,
            CategoryType.MONTHLY: self.monthly_categories,
            CategoryType.SAVINGS: self.savings_categories,
        }[category_type]()

    def transactions_for(self, account_type: AccountType) -> list[Transaction]:
        if account_type == AccountType.CHECKING:
            return self.checking_transactions()
        return self.savings_transactions()

    def account_total(self, account_type: AccountType) -> Decimal:
        if account_type == AccountType.CHECKING:
            return self.checking_total()
        return self.savings_total()

    def savings_category_balance(self, category_id: int) -> SavingsCategoryBalance:
        """
        Balance of any category id, savings or not.

        Unknown ids and categories without items or transactions are all zero.
        """
        return aggregates.savings_category_balance(
            category_id,
            self._budget_items.items(),
            self._transactions.items(),
            self._categories.items(),
        )

    def category_name(self, category_id: Optional[int]) -> str:
        return aggregates.category_name(
            category_id, self._categories.items(), self._placeholder
        )

    def budget_item_label(self, budget_item_id: Optional[int]) -> str:
        """'Groceries (cash)' for a budget item, placeholder if it is unknown."""
        item = self._budget_items.find(budget_item_id) if budget_item_id is not None else None
        if item is None:
            return self._placeholder
        name = self.category_name(item.category_id)
        if item.category_type is None:
            return name
        return f"{name} ({item.category_type.value})"

    def transaction_category_name(self, transaction: Transaction) -> str:
        category_id = aggregates.transaction_category_id(
            transaction, self._budget_items.items()
        )
        return self.category_name(category_id)

    def transactions_by_category(self, account_type: AccountType) -> dict[str, list[Transaction]]:
        return aggregates.group_transactions_by_category(
            self.transactions_for(account_type),
            self._budget_items.items(),
            self._categories.items(),
            self._placeholder,
        )
