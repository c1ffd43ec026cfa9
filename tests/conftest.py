"""
Shared fixtures.

InMemoryBackend stands in for the REST API. It records every call by
name and can be told to fail any of them:

    backend.fail["list_budgets"] = BackendConnectionError("down")
"""

import itertools
from datetime import date, datetime
from decimal import Decimal
from typing import Callable, Optional

import pytest

from pocketplan.audit import AuditLogger
from pocketplan.auth import AuthSession, MemoryTokenStore
from pocketplan.derived import FinanceViews
from pocketplan.models.finance import (
    AccountSpending,
    AccountType,
    Budget,
    BudgetCreate,
    BudgetItem,
    BudgetItemCreate,
    BudgetItemUpdate,
    BudgetUpdate,
    Category,
    CategoryCreate,
    CategoryType,
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
from pocketplan.services.backend import (
    AuthenticationError,
    BackendError,
    FinanceBackend,
    NotFoundError,
)
from pocketplan.stores import BudgetItemStore, BudgetStore, CategoryStore, TransactionStore


class InMemoryBackend(FinanceBackend):
    """A FinanceBackend holding everything in dicts."""

    def __init__(self):
        self.budgets: dict[int, Budget] = {}
        self.categories: dict[int, Category] = {}
        self.items: dict[int, BudgetItem] = {}
        self.transactions: dict[int, Transaction] = {}
        self.transaction_budget: dict[int, int] = {}

        self.user = User(id=1, email="ana@example.com")
        self.link_tokens = {"good-link": "session-token"}
        self.session_tokens = {"session-token"}
        self.token_provider: Optional[Callable[[], Optional[str]]] = None

        self.calls: list[str] = []
        self.fail: dict[str, BackendError] = {}
        self._ids = itertools.count(1)

    def _check(self, name: str) -> None:
        self.calls.append(name)
        if name in self.fail:
            raise self.fail[name]

    def _next_id(self) -> int:
        return next(self._ids)

    # -- Seeding helpers -----------------------------------------------------

    def seed_category(self, name: str, category_type: CategoryType) -> Category:
        category = Category(id=self._next_id(), name=name, type=category_type)
        self.categories[category.id] = category
        return category

    def seed_budget(self, month: int, year: int, name: str = "Budget") -> Budget:
        budget = Budget(
            id=self._next_id(), month=month, year=year, name=name,
            created_at=datetime(year, month, 1),
        )
        self.budgets[budget.id] = budget
        return budget

    def seed_item(
        self,
        budget: Budget,
        category: Category,
        amount: str,
        category_type: Optional[CategoryType] = None,
    ) -> BudgetItem:
        item = BudgetItem(
            id=self._next_id(),
            budget_id=budget.id,
            category_id=category.id,
            category_type=category_type or category.type,
            amount=Decimal(amount),
        )
        self.items[item.id] = item
        return item

    def seed_transaction(
        self,
        budget: Budget,
        amount: str,
        account_type: AccountType,
        budget_item_id: Optional[int] = None,
        category_id: Optional[int] = None,
    ) -> Transaction:
        txn = Transaction(
            id=self._next_id(),
            amount=Decimal(amount),
            transaction_date=date(budget.year, budget.month, 15),
            account_type=account_type,
            budget_item_id=budget_item_id,
            category_id=category_id,
        )
        self.transactions[txn.id] = txn
        self.transaction_budget[txn.id] = budget.id
        return txn

    # -- Authentication ------------------------------------------------------

    async def request_login_link(self, email: str) -> LoginResponse:
        self._check("request_login_link")
        return LoginResponse(message=f"Login link sent to {email}")

    async def verify_login_token(self, token: str) -> TokenResponse:
        self._check("verify_login_token")
        if token not in self.link_tokens:
            raise AuthenticationError("Invalid token", status_code=401)
        return TokenResponse(access_token=self.link_tokens[token])

    async def get_current_user(self) -> User:
        self._check("get_current_user")
        token = self.token_provider() if self.token_provider else "session-token"
        if token not in self.session_tokens:
            raise AuthenticationError("Not authenticated", status_code=401)
        return self.user

    # -- Budgets -------------------------------------------------------------

    async def list_budgets(self) -> list[Budget]:
        self._check("list_budgets")
        return list(self.budgets.values())

    async def get_current_budget(self) -> Budget:
        self._check("get_current_budget")
        today = date.today()
        budget = await self.get_budget_by_month(today.month, today.year)
        if budget is None:
            raise NotFoundError("No budget for the current month", status_code=404)
        return budget

    async def get_budget_by_month(self, month: int, year: int) -> Optional[Budget]:
        self._check("get_budget_by_month")
        for budget in self.budgets.values():
            if (budget.month, budget.year) == (month, year):
                return budget
        return None

    async def create_budget(self, budget: BudgetCreate) -> Budget:
        self._check("create_budget")
        created = Budget(id=self._next_id(), created_at=datetime.now(), **budget.model_dump())
        self.budgets[created.id] = created
        return created

    async def update_budget(self, budget_id: int, patch: BudgetUpdate) -> Budget:
        self._check("update_budget")
        if budget_id not in self.budgets:
            raise NotFoundError("Budget not found", status_code=404)
        updated = self.budgets[budget_id].model_copy(update=patch.model_dump(exclude_unset=True))
        self.budgets[budget_id] = updated
        return updated

    async def delete_budget(self, budget_id: int) -> None:
        self._check("delete_budget")
        if self.budgets.pop(budget_id, None) is None:
            raise NotFoundError("Budget not found", status_code=404)

    async def get_months_end_summary(self, budget_id: int) -> MonthsEndSummary:
        self._check("get_months_end_summary")
        if budget_id not in self.budgets:
            raise NotFoundError("Budget not found", status_code=404)
        return MonthsEndSummary(budget_id=budget_id)

    # -- Categories ----------------------------------------------------------

    async def list_categories(self) -> list[Category]:
        self._check("list_categories")
        return [c for c in self.categories.values() if c.is_active]

    async def create_category(self, category: CategoryCreate) -> Category:
        self._check("create_category")
        created = Category(id=self._next_id(), **category.model_dump())
        self.categories[created.id] = created
        return created

    async def update_category(self, category_id: int, patch: CategoryUpdate) -> Category:
        self._check("update_category")
        if category_id not in self.categories:
            raise NotFoundError("Category not found", status_code=404)
        updated = self.categories[category_id].model_copy(
            update=patch.model_dump(exclude_unset=True)
        )
        self.categories[category_id] = updated
        return updated

    async def archive_category(self, category_id: int) -> None:
        self._check("archive_category")
        category = self.categories.get(category_id)
        if category is None or not category.is_active:
            raise NotFoundError("Category not found", status_code=404)
        self.categories[category_id] = category.model_copy(update={"is_active": False})

    # -- Budget items --------------------------------------------------------

    async def list_budget_items(self, budget_id: int) -> list[BudgetItem]:
        self._check("list_budget_items")
        return [i for i in self.items.values() if i.budget_id == budget_id]

    async def create_budget_item(self, item: BudgetItemCreate) -> BudgetItem:
        self._check("create_budget_item")
        for existing in self.items.values():
            if existing.natural_key == (item.budget_id, item.category_id, item.category_type):
                updated = existing.model_copy(update={"amount": item.amount})
                self.items[existing.id] = updated
                return updated
        created = BudgetItem(id=self._next_id(), **item.model_dump())
        self.items[created.id] = created
        return created

    async def update_budget_item(
        self,
        budget_id: int,
        item_id: int,
        patch: BudgetItemUpdate,
    ) -> BudgetItem:
        self._check("update_budget_item")
        item = self.items.get(item_id)
        if item is None or item.budget_id != budget_id:
            raise NotFoundError("Budget item not found", status_code=404)
        updated = item.model_copy(update=patch.model_dump(exclude_unset=True))
        self.items[item_id] = updated
        return updated

    async def delete_budget_item(self, budget_id: int, item_id: int) -> None:
        self._check("delete_budget_item")
        item = self.items.get(item_id)
        if item is None or item.budget_id != budget_id:
            raise NotFoundError("Budget item not found", status_code=404)
        del self.items[item_id]

    # -- Transactions --------------------------------------------------------

    async def list_transactions(
        self,
        budget_id: Optional[int] = None,
        account_type: Optional[AccountType] = None,
    ) -> list[Transaction]:
        self._check("list_transactions")
        return [
            txn for txn in self.transactions.values()
            if (budget_id is None or self.transaction_budget.get(txn.id) == budget_id)
            and (account_type is None or txn.account_type == account_type)
        ]

    async def create_transaction(self, transaction: TransactionCreate) -> Transaction:
        self._check("create_transaction")
        data = transaction.model_dump()
        data["transaction_date"] = data["transaction_date"] or date.today()
        created = Transaction(id=self._next_id(), **data)
        self.transactions[created.id] = created
        if created.budget_item_id in self.items:
            self.transaction_budget[created.id] = self.items[created.budget_item_id].budget_id
        else:
            for budget in self.budgets.values():
                if (budget.month, budget.year) == (
                    created.transaction_date.month, created.transaction_date.year
                ):
                    self.transaction_budget[created.id] = budget.id
        return created

    async def update_transaction(
        self,
        transaction_id: int,
        patch: TransactionUpdate,
    ) -> Transaction:
        self._check("update_transaction")
        if transaction_id not in self.transactions:
            raise NotFoundError("Transaction not found", status_code=404)
        updated = self.transactions[transaction_id].model_copy(
            update=patch.model_dump(exclude_unset=True)
        )
        self.transactions[transaction_id] = updated
        return updated

    async def delete_transaction(self, transaction_id: int) -> None:
        self._check("delete_transaction")
        if self.transactions.pop(transaction_id, None) is None:
            raise NotFoundError("Transaction not found", status_code=404)

    async def get_transaction_summary(self, budget_id: int) -> TransactionSummary:
        self._check("get_transaction_summary")
        txns = await self.list_transactions(budget_id=budget_id)
        checking = sum(
            (t.amount for t in txns if t.account_type == AccountType.CHECKING), Decimal("0")
        )
        savings = sum(
            (t.amount for t in txns if t.account_type == AccountType.SAVINGS), Decimal("0")
        )
        return TransactionSummary(
            checking=AccountSpending(total_spent=checking),
            savings=AccountSpending(total_spent=savings),
        )


@pytest.fixture
def backend():
    return InMemoryBackend()


@pytest.fixture
def audit_logger():
    return AuditLogger()


@pytest.fixture
def budget_store(backend, audit_logger):
    return BudgetStore(backend, audit_logger)


@pytest.fixture
def category_store(backend, audit_logger):
    return CategoryStore(backend, audit_logger)


@pytest.fixture
def item_store(backend, audit_logger):
    return BudgetItemStore(backend, audit_logger)


@pytest.fixture
def transaction_store(backend, audit_logger):
    return TransactionStore(backend, audit_logger)


@pytest.fixture
def views(category_store, item_store, transaction_store):
    return FinanceViews(category_store, item_store, transaction_store)


@pytest.fixture
def token_store():
    return MemoryTokenStore()


@pytest.fixture
def session(backend, token_store, audit_logger):
    backend.token_provider = token_store.get
    return AuthSession(backend, token_store, audit_logger)
