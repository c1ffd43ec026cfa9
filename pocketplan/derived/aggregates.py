"""
Aggregation Functions

Pure filter / reduce over in-memory collections. Every function here is
deterministic and side-effect free; FinanceViews binds them to the
stores as computed values.

Missing data is never an error:
- no items or transactions means zero totals
- a reference to an unknown or archived category resolves to a
  placeholder label instead of raising
"""

from collections import defaultdict
from decimal import Decimal
from typing import Iterable, Optional

from pocketplan.models.finance import (
    EXPENSE_TYPES,
    ZERO,
    AccountType,
    BudgetItem,
    BudgetItemProgress,
    BudgetSummary,
    Category,
    CategoryType,
    SavingsCategoryBalance,
    Transaction,
)

UNKNOWN_CATEGORY = "Unknown Category"


def category_type_map(categories: Iterable[Category]) -> dict[int, CategoryType]:
    return {category.id: category.type for category in categories}


def resolve_item_type(
    item: BudgetItem,
    type_by_category: dict[int, CategoryType],
) -> Optional[CategoryType]:
    """The item's own category_type, else the type of the category it references."""
    if item.category_type is not None:
        return item.category_type
    return type_by_category.get(item.category_id)


def sum_amounts(entries: Iterable) -> Decimal:
    return sum((entry.amount for entry in entries), ZERO)


def budget_summary(
    items: Iterable[BudgetItem],
    categories: Iterable[Category] = (),
) -> BudgetSummary:
    """
    Planned totals by category type.

    total_expenses = savings + cash + monthly
    balance        = total_income - total_expenses
    Items whose type cannot be resolved are left out of every bucket.
    """
    type_by_category = category_type_map(categories)
    buckets: dict[CategoryType, Decimal] = {t: ZERO for t in CategoryType}

    for item in items:
        item_type = resolve_item_type(item, type_by_category)
        if item_type is not None:
            buckets[item_type] += item.amount

    total_income = buckets[CategoryType.INCOME]
    total_expenses = sum((buckets[t] for t in EXPENSE_TYPES), ZERO)

    return BudgetSummary(
        total_income=total_income,
        total_expenses=total_expenses,
        balance=total_income - total_expenses,
        savings_amount=buckets[CategoryType.SAVINGS],
        cash_amount=buckets[CategoryType.CASH],
        monthly_amount=buckets[CategoryType.MONTHLY],
    )


def items_of_type(
    items: Iterable[BudgetItem],
    category_type: CategoryType,
    categories: Iterable[Category] = (),
) -> list[BudgetItem]:
    type_by_category = category_type_map(categories)
    return [
        item for item in items
        if resolve_item_type(item, type_by_category) == category_type
    ]


def categories_of_type(
    categories: Iterable[Category],
    category_type: CategoryType,
) -> list[Category]:
    return [category for category in categories if category.type == category_type]


def transactions_for_account(
    transactions: Iterable[Transaction],
    account_type: AccountType,
) -> list[Transaction]:
    return [txn for txn in transactions if txn.account_type == account_type]


def transaction_category_id(
    transaction: Transaction,
    items: Iterable[BudgetItem],
) -> Optional[int]:
    """
    Category a transaction spends from.

    Savings transactions name it directly; checking transactions go
    through their budget item.
    """
    if transaction.category_id is not None:
        return transaction.category_id
    if transaction.budget_item_id is None:
        return None
    for item in items:
        if item.id == transaction.budget_item_id:
            return item.category_id
    return None


def savings_category_balance(
    category_id: int,
    items: Iterable[BudgetItem],
    transactions: Iterable[Transaction],
    categories: Iterable[Category] = (),
) -> SavingsCategoryBalance:
    """
    Funded, spent and available amounts for one savings category.

    funded = savings budget items allocated to the category
    spent  = savings transactions drawn from the category
    """
    items = list(items)
    type_by_category = category_type_map(categories)

    funded = sum_amounts(
        item for item in items
        if item.category_id == category_id
        and resolve_item_type(item, type_by_category) == CategoryType.SAVINGS
    )
    spent = sum_amounts(
        txn for txn in transactions
        if txn.account_type == AccountType.SAVINGS
        and transaction_category_id(txn, items) == category_id
    )

    return SavingsCategoryBalance(
        category_id=category_id,
        funded_amount=funded,
        spent_amount=spent,
    )


def budget_item_progress(
    items: Iterable[BudgetItem],
    transactions: Iterable[Transaction],
) -> list[BudgetItemProgress]:
    """Budgeted vs spent per budget item, from checking transactions."""
    spent_by_item: dict[int, Decimal] = defaultdict(lambda: ZERO)
    for txn in transactions:
        if txn.account_type == AccountType.CHECKING and txn.budget_item_id is not None:
            spent_by_item[txn.budget_item_id] += txn.amount

    return [
        BudgetItemProgress(
            budget_item_id=item.id,
            category_id=item.category_id,
            budgeted=item.amount,
            spent=spent_by_item.get(item.id, ZERO),
        )
        for item in items
    ]


def category_name(
    category_id: Optional[int],
    categories: Iterable[Category],
    placeholder: str = UNKNOWN_CATEGORY,
) -> str:
    if category_id is None:
        return placeholder
    for category in categories:
        if category.id == category_id:
            return category.name
    return placeholder


def group_transactions_by_category(
    transactions: Iterable[Transaction],
    items: Iterable[BudgetItem],
    categories: Iterable[Category],
    placeholder: str = UNKNOWN_CATEGORY,
) -> dict[str, list[Transaction]]:
    """Transactions keyed by the name of the category they spend from."""
    items = list(items)
    categories = list(categories)
    grouped: dict[str, list[Transaction]] = {}
    for txn in transactions:
        name = category_name(transaction_category_id(txn, items), categories, placeholder)
        grouped.setdefault(name, []).append(txn)
    return grouped
