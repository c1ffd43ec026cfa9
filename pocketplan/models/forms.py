"""
Form Models

Drafts hold what the user has typed so far. They are deliberately
loose (everything optional) so a half-filled form can be represented;
FormValidator decides whether a draft may be turned into a backend
payload.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from pocketplan.models.finance import (
    AccountType,
    BudgetCreate,
    BudgetItemCreate,
    BudgetItemUpdate,
    CategoryCreate,
    CategoryType,
    TransactionCreate,
    TransactionUpdate,
)


# =============================================================================
# DRAFTS
# =============================================================================

class BudgetDraft(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    month: Optional[int] = None
    year: Optional[int] = None
    name: str = ""
    description: Optional[str] = None

    def to_create(self) -> BudgetCreate:
        return BudgetCreate(
            month=self.month,
            year=self.year,
            name=self.name,
            description=self.description or None,
        )


class CategoryDraft(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = ""
    type: Optional[CategoryType] = None
    description: Optional[str] = None

    def to_create(self) -> CategoryCreate:
        return CategoryCreate(
            name=self.name,
            type=self.type,
            description=self.description or None,
        )


class BudgetItemDraft(BaseModel):
    """
    Allocation form. category_type comes from the active tab, not the user.
    """

    category_id: Optional[int] = None
    amount: Optional[Decimal] = None
    category_type: Optional[CategoryType] = None
    editing_item_id: Optional[int] = None

    @property
    def is_editing(self) -> bool:
        return self.editing_item_id is not None

    def to_create(self, budget_id: int) -> BudgetItemCreate:
        return BudgetItemCreate(
            budget_id=budget_id,
            category_id=self.category_id,
            category_type=self.category_type,
            amount=self.amount,
        )

    def to_update(self) -> BudgetItemUpdate:
        return BudgetItemUpdate(
            category_id=self.category_id,
            category_type=self.category_type,
            amount=self.amount,
        )


class TransactionDraft(BaseModel):
    """Transaction form. account_type comes from the active tab."""
    model_config = ConfigDict(str_strip_whitespace=True)

    amount: Optional[Decimal] = None
    description: str = ""
    transaction_date: Optional[date] = None
    account_type: AccountType = AccountType.CHECKING
    budget_item_id: Optional[int] = None
    category_id: Optional[int] = None
    editing_transaction_id: Optional[int] = None

    @property
    def is_editing(self) -> bool:
        return self.editing_transaction_id is not None

    def _linkage(self) -> dict:
        if self.account_type == AccountType.CHECKING:
            return {"budget_item_id": self.budget_item_id}
        return {"category_id": self.category_id}

    def to_create(self) -> TransactionCreate:
        return TransactionCreate(
            amount=self.amount,
            description=self.description or None,
            transaction_date=self.transaction_date,
            account_type=self.account_type,
            **self._linkage(),
        )

    def to_update(self) -> TransactionUpdate:
        fields = {
            "amount": self.amount,
            "description": self.description or None,
            "account_type": self.account_type,
            **self._linkage(),
        }
        if self.transaction_date is not None:
            fields["transaction_date"] = self.transaction_date
        return TransactionUpdate(**fields)


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single problem with a form field."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'out_of_range', 'insufficient_balance')"
    )
    message: str = Field(
        ...,
        description="Human-readable description shown next to the field"
    )
    severity: str = Field(
        default="error",
        pattern="^(error|warning)$",
        description="Issue severity"
    )


class ValidationResult(BaseModel):
    """Outcome of validating one form submission."""

    form: str
    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    def messages_for(self, field: str) -> list[str]:
        return [issue.message for issue in self.issues if issue.field == field]

    def as_dicts(self) -> list[dict]:
        return [
            {"field": i.field, "type": i.issue_type, "message": i.message}
            for i in self.issues
        ]
