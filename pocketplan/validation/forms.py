"""
Form Validation

Validation errors are caught here, before any network call, and are
rendered inline next to the offending field. A draft that fails
validation never reaches a store.

Checks fall into two groups:

FIELD CHECKS:
- required values present
- numbers in range (month 1-12, year 2000-2100, amount >= 0.01)
- email shape
- names and descriptions within the payload length limits

CROSS CHECKS (need current store contents):
- a budget item's category type matches the referenced category
- a checking transaction names a budget item, a savings one a category
- a savings withdrawal does not exceed the category's available balance

Validation NEVER fixes input. It only reports.
"""

import re
from decimal import Decimal
from typing import Iterable, Optional

from pocketplan.models.finance import AccountType, Category
from pocketplan.models.forms import (
    BudgetDraft,
    BudgetItemDraft,
    CategoryDraft,
    TransactionDraft,
    ValidationIssue,
    ValidationResult,
)

MIN_AMOUNT = Decimal("0.01")
MIN_YEAR = 2000
MAX_YEAR = 2100

# Same limits as the create/update payloads in models.finance
MAX_NAME_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 500
MAX_TRANSACTION_DESCRIPTION_LENGTH = 255

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _missing(field: str, label: str) -> ValidationIssue:
    return ValidationIssue(
        field=field,
        issue_type="missing",
        message=f"{label} is required",
    )


def _check_length(
    value: Optional[str],
    field: str,
    label: str,
    limit: int,
    issues: list[ValidationIssue],
) -> None:
    if value and len(value) > limit:
        issues.append(ValidationIssue(
            field=field,
            issue_type="too_long",
            message=f"{label} must be at most {limit} characters",
        ))


def _check_amount(amount: Optional[Decimal], issues: list[ValidationIssue]) -> None:
    if amount is None:
        issues.append(_missing("amount", "Amount"))
    elif amount < MIN_AMOUNT:
        issues.append(ValidationIssue(
            field="amount",
            issue_type="out_of_range",
            message=f"Amount must be at least {MIN_AMOUNT}",
        ))


class FormValidator:
    """Validates form drafts; one method per form."""

    def validate_login(self, email: str) -> ValidationResult:
        issues = []
        email = (email or "").strip()
        if not email:
            issues.append(_missing("email", "Email"))
        elif not EMAIL_PATTERN.match(email):
            issues.append(ValidationIssue(
                field="email",
                issue_type="invalid_format",
                message="Enter a valid email address",
            ))
        return ValidationResult(form="login", issues=issues)

    def validate_budget(self, draft: BudgetDraft) -> ValidationResult:
        issues = []

        if draft.month is None:
            issues.append(_missing("month", "Month"))
        elif not 1 <= draft.month <= 12:
            issues.append(ValidationIssue(
                field="month",
                issue_type="out_of_range",
                message="Month must be between 1 and 12",
            ))

        if draft.year is None:
            issues.append(_missing("year", "Year"))
        elif not MIN_YEAR <= draft.year <= MAX_YEAR:
            issues.append(ValidationIssue(
                field="year",
                issue_type="out_of_range",
                message=f"Year must be between {MIN_YEAR} and {MAX_YEAR}",
            ))

        if not draft.name:
            issues.append(_missing("name", "Budget name"))
        _check_length(draft.name, "name", "Budget name", MAX_NAME_LENGTH, issues)
        _check_length(
            draft.description, "description", "Description", MAX_DESCRIPTION_LENGTH, issues
        )

        return ValidationResult(form="budget", issues=issues)

    def validate_category(self, draft: CategoryDraft) -> ValidationResult:
        issues = []
        if not draft.name:
            issues.append(_missing("name", "Category name"))
        _check_length(draft.name, "name", "Category name", MAX_NAME_LENGTH, issues)
        _check_length(
            draft.description, "description", "Description", MAX_DESCRIPTION_LENGTH, issues
        )
        if draft.type is None:
            issues.append(_missing("type", "Category type"))
        return ValidationResult(form="category", issues=issues)

    def validate_budget_item(
        self,
        draft: BudgetItemDraft,
        categories: Iterable[Category],
    ) -> ValidationResult:
        """
        Check an allocation against the loaded categories.

        The category's own type must equal the type the item is filed under.
        """
        issues = []

        if draft.category_type is None:
            issues.append(_missing("category_type", "Category type"))

        if draft.category_id is None:
            issues.append(_missing("category_id", "Category"))
        else:
            category = next((c for c in categories if c.id == draft.category_id), None)
            if category is None:
                issues.append(ValidationIssue(
                    field="category_id",
                    issue_type="unknown_reference",
                    message="Selected category no longer exists",
                ))
            elif draft.category_type is not None and category.type != draft.category_type:
                issues.append(ValidationIssue(
                    field="category_id",
                    issue_type="type_mismatch",
                    message=(
                        f"{category.name} is a {category.type.value} category, "
                        f"not {draft.category_type.value}"
                    ),
                ))

        _check_amount(draft.amount, issues)

        return ValidationResult(form="budget_item", issues=issues)

    def validate_transaction(
        self,
        draft: TransactionDraft,
        available_balance: Optional[Decimal] = None,
    ) -> ValidationResult:
        """
        Check a transaction draft.

        Args:
            draft: The form contents
            available_balance: For savings drafts, what the selected savings
                category still holds. None skips the balance check.
        """
        issues = []

        _check_amount(draft.amount, issues)
        _check_length(
            draft.description,
            "description",
            "Description",
            MAX_TRANSACTION_DESCRIPTION_LENGTH,
            issues,
        )

        if draft.account_type == AccountType.CHECKING:
            if draft.budget_item_id is None:
                issues.append(_missing("budget_item_id", "Budget item"))
        else:
            if draft.category_id is None:
                issues.append(_missing("category_id", "Savings category"))
            elif (
                available_balance is not None
                and draft.amount is not None
                and draft.amount > available_balance
            ):
                issues.append(ValidationIssue(
                    field="amount",
                    issue_type="insufficient_balance",
                    message=(
                        f"Amount exceeds the available balance of {available_balance:.2f}"
                    ),
                ))

        return ValidationResult(form="transaction", issues=issues)
