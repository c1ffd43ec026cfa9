"""
Data Models Package

This package contains all Pydantic models used in PocketPlan.
Everything read from or sent to the backend conforms to these schemas.
"""

from pocketplan.models.finance import (
    EXPENSE_TYPES,
    AccountSpending,
    AccountType,
    Budget,
    BudgetCreate,
    BudgetItem,
    BudgetItemCreate,
    BudgetItemProgress,
    BudgetItemUpdate,
    BudgetSummary,
    BudgetUpdate,
    Category,
    CategoryCreate,
    CategorySpending,
    CategoryType,
    CategoryTypeVariance,
    CategoryUpdate,
    LoginResponse,
    Money,
    MonthsEndSummary,
    SavingsCategoryBalance,
    TokenResponse,
    Transaction,
    TransactionCreate,
    TransactionSummary,
    TransactionUpdate,
    User,
)
from pocketplan.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from pocketplan.models.forms import (
    BudgetDraft,
    BudgetItemDraft,
    CategoryDraft,
    TransactionDraft,
    ValidationIssue,
    ValidationResult,
)

__all__ = [
    # Finance models
    "EXPENSE_TYPES",
    "AccountSpending",
    "AccountType",
    "Budget",
    "BudgetCreate",
    "BudgetItem",
    "BudgetItemCreate",
    "BudgetItemProgress",
    "BudgetItemUpdate",
    "BudgetSummary",
    "BudgetUpdate",
    "Category",
    "CategoryCreate",
    "CategorySpending",
    "CategoryType",
    "CategoryTypeVariance",
    "CategoryUpdate",
    "LoginResponse",
    "Money",
    "MonthsEndSummary",
    "SavingsCategoryBalance",
    "TokenResponse",
    "Transaction",
    "TransactionCreate",
    "TransactionSummary",
    "TransactionUpdate",
    "User",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
    # Form models
    "BudgetDraft",
    "BudgetItemDraft",
    "CategoryDraft",
    "TransactionDraft",
    "ValidationIssue",
    "ValidationResult",
]
