"""Tests for form validation."""

from decimal import Decimal

import pytest

from pocketplan.models.finance import AccountType, Category, CategoryType
from pocketplan.models.forms import (
    BudgetDraft,
    BudgetItemDraft,
    CategoryDraft,
    TransactionDraft,
)
from pocketplan.validation import FormValidator

CATEGORIES = [
    Category(id=1, name="Groceries", type=CategoryType.CASH),
    Category(id=2, name="Vacation", type=CategoryType.SAVINGS),
]


@pytest.fixture
def validator():
    return FormValidator()


class TestLoginValidation:
    """Tests for the email field."""

    def test_valid_email(self, validator):
        assert validator.validate_login("ana@example.com").is_valid

    @pytest.mark.parametrize("email", ["", "   ", "ana", "ana@", "ana@example"])
    def test_invalid_email(self, validator, email):
        result = validator.validate_login(email)
        assert result.has_errors
        assert result.issues[0].field == "email"


class TestBudgetValidation:
    """Tests for the budget form."""

    def test_valid(self, validator):
        assert validator.validate_budget(BudgetDraft(month=3, year=2024, name="March")).is_valid

    def test_month_out_of_range(self, validator):
        result = validator.validate_budget(BudgetDraft(month=13, year=2024, name="X"))
        assert result.messages_for("month") == ["Month must be between 1 and 12"]

    def test_all_missing(self, validator):
        result = validator.validate_budget(BudgetDraft())
        assert {i.field for i in result.issues} == {"month", "year", "name"}

    def test_name_too_long(self, validator):
        result = validator.validate_budget(BudgetDraft(month=3, year=2024, name="y" * 101))
        assert result.issues[0].issue_type == "too_long"
        assert result.messages_for("name") == ["Budget name must be at most 100 characters"]

    def test_name_at_limit_allowed(self, validator):
        draft = BudgetDraft(month=3, year=2024, name="y" * 100, description="d" * 500)
        assert validator.validate_budget(draft).is_valid


class TestCategoryValidation:
    """Tests for the category form."""

    def test_name_required(self, validator):
        result = validator.validate_category(CategoryDraft(name="  ", type=CategoryType.CASH))
        assert result.messages_for("name") == ["Category name is required"]

    def test_type_required(self, validator):
        result = validator.validate_category(CategoryDraft(name="Fun"))
        assert result.messages_for("type") == ["Category type is required"]

    def test_name_too_long(self, validator):
        result = validator.validate_category(CategoryDraft(name="x" * 101, type=CategoryType.CASH))
        assert result.messages_for("name") == ["Category name must be at most 100 characters"]

    def test_description_too_long(self, validator):
        draft = CategoryDraft(name="Fun", type=CategoryType.CASH, description="d" * 501)
        result = validator.validate_category(draft)
        assert result.messages_for("description") == ["Description must be at most 500 characters"]


class TestBudgetItemValidation:
    """Tests for the allocation form."""

    def test_valid(self, validator):
        draft = BudgetItemDraft(category_id=1, amount=Decimal("50"),
                                category_type=CategoryType.CASH)
        assert validator.validate_budget_item(draft, CATEGORIES).is_valid

    def test_amount_below_minimum(self, validator):
        draft = BudgetItemDraft(category_id=1, amount=Decimal("0"),
                                category_type=CategoryType.CASH)
        result = validator.validate_budget_item(draft, CATEGORIES)
        assert result.issues[0].issue_type == "out_of_range"

    def test_category_type_mismatch(self, validator):
        """Test that a savings category cannot be filed under cash."""
        draft = BudgetItemDraft(category_id=2, amount=Decimal("50"),
                                category_type=CategoryType.CASH)
        result = validator.validate_budget_item(draft, CATEGORIES)
        assert result.issues[0].issue_type == "type_mismatch"

    def test_unknown_category(self, validator):
        draft = BudgetItemDraft(category_id=99, amount=Decimal("50"),
                                category_type=CategoryType.CASH)
        result = validator.validate_budget_item(draft, CATEGORIES)
        assert result.issues[0].issue_type == "unknown_reference"

    def test_category_required(self, validator):
        draft = BudgetItemDraft(amount=Decimal("50"), category_type=CategoryType.CASH)
        result = validator.validate_budget_item(draft, CATEGORIES)
        assert result.messages_for("category_id") == ["Category is required"]


class TestTransactionValidation:
    """Tests for the transaction form."""

    def test_checking_requires_budget_item(self, validator):
        draft = TransactionDraft(amount=Decimal("10"), account_type=AccountType.CHECKING)
        result = validator.validate_transaction(draft)
        assert result.messages_for("budget_item_id") == ["Budget item is required"]

    def test_savings_requires_category(self, validator):
        draft = TransactionDraft(amount=Decimal("10"), account_type=AccountType.SAVINGS)
        result = validator.validate_transaction(draft)
        assert result.messages_for("category_id") == ["Savings category is required"]

    def test_savings_over_balance(self, validator):
        draft = TransactionDraft(amount=Decimal("250"), account_type=AccountType.SAVINGS,
                                 category_id=2)
        result = validator.validate_transaction(draft, available_balance=Decimal("220"))
        assert result.issues[0].issue_type == "insufficient_balance"
        assert "220.00" in result.issues[0].message

    def test_savings_exact_balance_allowed(self, validator):
        draft = TransactionDraft(amount=Decimal("220"), account_type=AccountType.SAVINGS,
                                 category_id=2)
        assert validator.validate_transaction(draft, available_balance=Decimal("220")).is_valid

    def test_amount_minimum(self, validator):
        draft = TransactionDraft(amount=Decimal("0.001"), budget_item_id=4)
        result = validator.validate_transaction(draft)
        assert result.messages_for("amount") == ["Amount must be at least 0.01"]

    def test_description_too_long(self, validator):
        draft = TransactionDraft(amount=Decimal("5"), budget_item_id=1, description="z" * 256)
        result = validator.validate_transaction(draft)
        assert result.issues[0].issue_type == "too_long"
        assert result.messages_for("description") == [
            "Description must be at most 255 characters"
        ]

    def test_description_at_limit_allowed(self, validator):
        draft = TransactionDraft(amount=Decimal("5"), budget_item_id=1, description="z" * 255)
        assert validator.validate_transaction(draft).is_valid
