"""
Core Data Models for PocketPlan

These models mirror the resources served by the finance backend and the
aggregates the client derives from them. They are designed to:
1. Enforce type safety at the network boundary
2. Provide clear validation error messages
3. Serialize back to the JSON the backend expects
4. Keep money as Decimal end to end

The backend owns the canonical data. Nothing here is persisted locally.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    model_validator,
)


# Decimals travel as JSON numbers, not strings
Money = Annotated[
    Decimal,
    PlainSerializer(float, return_type=float, when_used="json"),
]

ZERO = Decimal("0")


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class CategoryType(str, Enum):
    """
    How a category behaves in budgeting and aggregation.

    Income is money in; the other three are all expenses.
    """
    INCOME = "income"
    CASH = "cash"
    MONTHLY = "monthly"
    SAVINGS = "savings"


EXPENSE_TYPES = (CategoryType.SAVINGS, CategoryType.CASH, CategoryType.MONTHLY)


class AccountType(str, Enum):
    """
    Account a transaction is drawn from.

    Checking transactions spend a budget item; savings transactions
    spend a savings category directly.
    """
    CHECKING = "checking"
    SAVINGS = "savings"


# =============================================================================
# CATEGORIES
# =============================================================================

class Category(BaseModel):
    """A spending or income category. Archived categories have is_active=False."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: int
    name: str = Field(..., min_length=1, max_length=100)
    type: CategoryType
    description: Optional[str] = None
    is_active: bool = True


class CategoryCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=100)
    type: CategoryType
    description: Optional[str] = Field(default=None, max_length=500)


class CategoryUpdate(BaseModel):
    """Category patch. The type is fixed once a category exists."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)


# =============================================================================
# BUDGETS
# =============================================================================

class Budget(BaseModel):
    """
    A monthly budget.

    One budget per (month, year) by convention; the client looks budgets
    up by that pair but does not enforce uniqueness.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: int
    month: int = Field(..., ge=1, le=12)
    year: int
    name: str
    description: Optional[str] = None
    is_active: bool = True
    created_at: datetime


class BudgetCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=2000, le=2100)
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)


class BudgetUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    is_active: Optional[bool] = None


# =============================================================================
# BUDGET ITEMS
# =============================================================================

class BudgetItem(BaseModel):
    """
    Planned allocation of `amount` to a category for one budget.

    category_type is a copy of the category's type taken at allocation
    time. Older backend payloads omit it; aggregation then joins on the
    category instead.
    """

    id: int
    budget_id: int
    category_id: int
    category_type: Optional[CategoryType] = None
    amount: Money = Field(..., ge=0)
    is_active: bool = True

    @property
    def natural_key(self) -> tuple[int, int, Optional[CategoryType]]:
        """Identity of the logical allocation, independent of the row id."""
        return (self.budget_id, self.category_id, self.category_type)


class BudgetItemCreate(BaseModel):
    budget_id: int
    category_id: int
    category_type: CategoryType
    amount: Money = Field(..., gt=0)


class BudgetItemUpdate(BaseModel):
    category_id: Optional[int] = None
    category_type: Optional[CategoryType] = None
    amount: Optional[Money] = Field(default=None, gt=0)


# =============================================================================
# TRANSACTIONS
# =============================================================================

class Transaction(BaseModel):
    """
    Actual money movement.

    Checking transactions reference a budget item; savings transactions
    reference a category. Payloads from the backend are accepted as-is,
    creation payloads are checked by TransactionCreate.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: int
    amount: Money = Field(..., gt=0)
    description: Optional[str] = None
    transaction_date: date
    account_type: AccountType
    budget_item_id: Optional[int] = None
    category_id: Optional[int] = None
    is_active: bool = True
    created_at: Optional[datetime] = None


def _check_linkage(
    account_type: Optional[AccountType],
    budget_item_id: Optional[int],
    category_id: Optional[int],
) -> None:
    if account_type == AccountType.CHECKING and budget_item_id is None:
        raise ValueError("Checking transactions require a budget item")
    if account_type == AccountType.SAVINGS and category_id is None:
        raise ValueError("Savings transactions require a category")


class TransactionCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    amount: Money = Field(..., gt=0)
    description: Optional[str] = Field(default=None, max_length=255)
    transaction_date: Optional[date] = None
    account_type: AccountType
    budget_item_id: Optional[int] = None
    category_id: Optional[int] = None

    @model_validator(mode='after')
    def validate_linkage(self) -> 'TransactionCreate':
        """The category linkage must match the account type."""
        _check_linkage(self.account_type, self.budget_item_id, self.category_id)
        return self


class TransactionUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    amount: Optional[Money] = Field(default=None, gt=0)
    description: Optional[str] = Field(default=None, max_length=255)
    transaction_date: Optional[date] = None
    account_type: Optional[AccountType] = None
    budget_item_id: Optional[int] = None
    category_id: Optional[int] = None

    @model_validator(mode='after')
    def validate_linkage(self) -> 'TransactionUpdate':
        """Switching account type must bring the matching linkage along."""
        _check_linkage(self.account_type, self.budget_item_id, self.category_id)
        return self


# =============================================================================
# DERIVED AGGREGATES (computed client-side)
# =============================================================================

class BudgetSummary(BaseModel):
    """Planned totals of a budget, grouped by category type."""

    total_income: Money = ZERO
    total_expenses: Money = ZERO
    balance: Money = ZERO
    savings_amount: Money = ZERO
    cash_amount: Money = ZERO
    monthly_amount: Money = ZERO


class SavingsCategoryBalance(BaseModel):
    """What is left to spend in one savings category."""

    category_id: int
    funded_amount: Money = ZERO
    spent_amount: Money = ZERO

    @property
    def available_balance(self) -> Decimal:
        return self.funded_amount - self.spent_amount


class BudgetItemProgress(BaseModel):
    """Budgeted versus spent for a single budget item."""

    budget_item_id: int
    category_id: int
    budgeted: Money = ZERO
    spent: Money = ZERO

    @property
    def remaining(self) -> Decimal:
        return self.budgeted - self.spent

    @property
    def is_overspent(self) -> bool:
        return self.spent > self.budgeted


# =============================================================================
# SERVER-COMPUTED SUMMARIES (fetched, not derived)
# =============================================================================

class CategoryTypeVariance(BaseModel):
    category_type: CategoryType
    budgeted: Money = ZERO
    actual: Money = ZERO
    variance: Money = ZERO


class MonthsEndSummary(BaseModel):
    """
    Budgeted vs actual vs variance per category type for a closed month.

    Computed by the backend; the client only displays it.
    """

    budget_id: int
    month: Optional[int] = Field(default=None, ge=1, le=12)
    year: Optional[int] = None
    categories: list[CategoryTypeVariance] = Field(default_factory=list)
    total_budgeted: Money = ZERO
    total_actual: Money = ZERO
    total_variance: Money = ZERO

    def for_type(self, category_type: CategoryType) -> Optional[CategoryTypeVariance]:
        """Row for one category type, if the backend returned it."""
        for row in self.categories:
            if row.category_type == category_type:
                return row
        return None


class CategorySpending(BaseModel):
    budgeted: Money = ZERO
    spent: Money = ZERO
    remaining: Money = ZERO


class AccountSpending(BaseModel):
    total_spent: Money = ZERO
    categories: dict[str, CategorySpending] = Field(default_factory=dict)


class TransactionSummary(BaseModel):
    """Per-account spending for one budget, as reported by the backend."""

    checking: AccountSpending = Field(default_factory=AccountSpending)
    savings: AccountSpending = Field(default_factory=AccountSpending)


# =============================================================================
# AUTHENTICATION
# =============================================================================

class User(BaseModel):
    id: int
    email: str


class LoginResponse(BaseModel):
    message: str = ""


class TokenResponse(BaseModel):
    access_token: str = Field(..., min_length=1)
    token_type: str = "bearer"
