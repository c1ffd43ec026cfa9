"""
Abstract Finance Backend Interface

The stores talk to the backend only through this interface, which
allows us to:
1. Swap the HTTP implementation for an in-memory one in tests
2. Keep store reconciliation logic independent of transport details

One method per backend call. Every method either returns a parsed model
or raises a BackendError subclass; nothing else escapes.
"""

from abc import ABC, abstractmethod
from typing import Optional

from pocketplan.models.finance import (
    AccountType,
    Budget,
    BudgetCreate,
    BudgetItem,
    BudgetItemCreate,
    BudgetItemUpdate,
    BudgetUpdate,
    Category,
    CategoryCreate,
    CategoryUpdate,
    LoginResponse,
    MonthsEndSummary,
    TokenResponse,
    Transaction,
    TransactionCreate,
    TransactionSummary,
    TransactionUpdate,
    User,
)


class FinanceBackend(ABC):
    """
    Abstract interface for the finance REST API.

    Any backend implementation (HTTP, in-memory) must implement these methods.
    """

    # -- Authentication ------------------------------------------------------

    @abstractmethod
    async def request_login_link(self, email: str) -> LoginResponse:
        """
        Ask the backend to email a one-time login link.

        Raises:
            BackendError: If the request fails
        """
        pass

    @abstractmethod
    async def verify_login_token(self, token: str) -> TokenResponse:
        """
        Exchange a one-time link token for a session token.

        Raises:
            AuthenticationError: If the token is invalid or expired
        """
        pass

    @abstractmethod
    async def get_current_user(self) -> User:
        """
        Fetch the user owning the current session token.

        Raises:
            AuthenticationError: If there is no valid session
        """
        pass

    # -- Budgets -------------------------------------------------------------

    @abstractmethod
    async def list_budgets(self) -> list[Budget]:
        pass

    @abstractmethod
    async def get_current_budget(self) -> Budget:
        """
        Budget for the current month.

        Raises:
            NotFoundError: If no budget exists for the current month
        """
        pass

    @abstractmethod
    async def get_budget_by_month(self, month: int, year: int) -> Optional[Budget]:
        """Budget for a given month, or None if there is none."""
        pass

    @abstractmethod
    async def create_budget(self, budget: BudgetCreate) -> Budget:
        pass

    @abstractmethod
    async def update_budget(self, budget_id: int, patch: BudgetUpdate) -> Budget:
        pass

    @abstractmethod
    async def delete_budget(self, budget_id: int) -> None:
        pass

    @abstractmethod
    async def get_months_end_summary(self, budget_id: int) -> MonthsEndSummary:
        """Server-computed budgeted/actual/variance per category type."""
        pass

    # -- Categories ----------------------------------------------------------

    @abstractmethod
    async def list_categories(self) -> list[Category]:
        pass

    @abstractmethod
    async def create_category(self, category: CategoryCreate) -> Category:
        pass

    @abstractmethod
    async def update_category(self, category_id: int, patch: CategoryUpdate) -> Category:
        pass

    @abstractmethod
    async def archive_category(self, category_id: int) -> None:
        """Soft delete: the backend marks the category inactive."""
        pass

    # -- Budget items --------------------------------------------------------

    @abstractmethod
    async def list_budget_items(self, budget_id: int) -> list[BudgetItem]:
        pass

    @abstractmethod
    async def create_budget_item(self, item: BudgetItemCreate) -> BudgetItem:
        """
        Create an allocation.

        The backend treats this as an upsert on
        (budget_id, category_id, category_type) and may return an
        existing row with a new amount.
        """
        pass

    @abstractmethod
    async def update_budget_item(
        self,
        budget_id: int,
        item_id: int,
        patch: BudgetItemUpdate,
    ) -> BudgetItem:
        pass

    @abstractmethod
    async def delete_budget_item(self, budget_id: int, item_id: int) -> None:
        pass

    # -- Transactions --------------------------------------------------------

    @abstractmethod
    async def list_transactions(
        self,
        budget_id: Optional[int] = None,
        account_type: Optional[AccountType] = None,
    ) -> list[Transaction]:
        """
        List transactions with optional filters.

        Args:
            budget_id: Only transactions belonging to this budget
            account_type: Only checking or only savings transactions
        """
        pass

    @abstractmethod
    async def create_transaction(self, transaction: TransactionCreate) -> Transaction:
        pass

    @abstractmethod
    async def update_transaction(
        self,
        transaction_id: int,
        patch: TransactionUpdate,
    ) -> Transaction:
        pass

    @abstractmethod
    async def delete_transaction(self, transaction_id: int) -> None:
        pass

    @abstractmethod
    async def get_transaction_summary(self, budget_id: int) -> TransactionSummary:
        pass


class BackendError(Exception):
    """Base exception for backend operations."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class NotFoundError(BackendError):
    """Entity not found on the backend."""
    pass


class AuthenticationError(BackendError):
    """Missing, invalid or expired credentials."""
    pass


class BackendConnectionError(BackendError):
    """Could not reach the backend."""
    pass


class ResponseFormatError(BackendError):
    """The backend answered with a payload that does not fit our models."""
    pass
