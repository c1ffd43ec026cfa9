"""
Main Orchestrator for PocketPlan

This module ties together all the components and defines the
user-facing flows:
1. Budget planning (pick month → load budget, items, transactions → allocate)
2. Transaction entry (draft → validate → savings balance check → save)
3. Category management (create, rename, archive)

DESIGN DECISION: The orchestrator enforces the boundaries:
- No draft reaches the backend without passing validation
- No savings withdrawal larger than the category's balance is sent
- No deletion without an explicit confirmation flag
- Every rejection is audited

Pages call flows; flows call stores; stores call the backend.
"""

from decimal import Decimal
from typing import NamedTuple, Optional
from uuid import UUID

from pocketplan.audit import AuditLogger, configure_logging, create_correlation_id
from pocketplan.auth import AuthSession, FileTokenStore, TokenStore
from pocketplan.config import Settings, get_settings
from pocketplan.derived import FinanceViews
from pocketplan.models.finance import (
    AccountType,
    Budget,
    BudgetItem,
    Category,
    CategoryUpdate,
    Transaction,
)
from pocketplan.models.forms import (
    BudgetDraft,
    BudgetItemDraft,
    CategoryDraft,
    TransactionDraft,
    ValidationIssue,
    ValidationResult,
)
from pocketplan.services.backend import ApiClient, FinanceBackend, HttpFinanceBackend
from pocketplan.stores import BudgetItemStore, BudgetStore, CategoryStore, TransactionStore
from pocketplan.validation import FormValidator


def _reject(
    result: ValidationResult,
    audit_logger: Optional[AuditLogger],
    correlation_id: Optional[UUID],
) -> None:
    if audit_logger:
        audit_logger.log_validation_failed(
            form=result.form,
            issues=result.as_dicts(),
            correlation_id=correlation_id,
        )


class BudgetPlanningFlow:
    """
    Orchestrates the budget detail page.

    Flow:
    1. Select month → load that month's budget (or none)
    2. Budget found → load its items and transactions
    3. No budget → clear items and transactions, offer to create one
    4. Allocate → validate draft, then create or update a budget item
    5. Delete → only with explicit confirmation
    """

    def __init__(
        self,
        budgets: BudgetStore,
        budget_items: BudgetItemStore,
        transactions: TransactionStore,
        categories: CategoryStore,
        validator: Optional[FormValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._budgets = budgets
        self._budget_items = budget_items
        self._transactions = transactions
        self._categories = categories
        self._validator = validator or FormValidator()
        self._audit_logger = audit_logger

    async def load_reference_data(self) -> bool:
        """Categories are needed by every page; load them once per session."""
        return await self._categories.load()

    async def select_month(self, month: int, year: int) -> Optional[Budget]:
        """
        Make (month, year) the month on screen.

        Returns the month's budget, or None when the month has none
        (or the lookup failed; the budget store's error says which).
        """
        budget = await self._budgets.load_for_month(month, year)
        if budget is None:
            self._budget_items.clear()
            await self._transactions.set_selected_budget(None)
            return None

        await self._budget_items.load(budget.id)
        await self._transactions.set_selected_budget(budget.id)
        return budget

    async def create_budget(
        self,
        draft: BudgetDraft,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[Optional[Budget], ValidationResult]:
        """
        Create a budget for the drafted month and switch to it.

        Returns:
            (budget, validation) where budget is None if validation or
            the backend call failed
        """
        correlation_id = correlation_id or create_correlation_id()

        result = self._validator.validate_budget(draft)
        if result.has_errors:
            _reject(result, self._audit_logger, correlation_id)
            return None, result

        budget = await self._budgets.create(draft.to_create())
        if budget is not None:
            await self._budget_items.load(budget.id)
            await self._transactions.set_selected_budget(budget.id)
        return budget, result

    async def save_allocation(
        self,
        draft: BudgetItemDraft,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[Optional[BudgetItem], ValidationResult]:
        """
        Create a budget item, or update the one being edited.

        Allocations always go to the current budget.
        """
        correlation_id = correlation_id or create_correlation_id()

        budget = self._budgets.current_budget()
        if budget is None:
            result = ValidationResult(
                form="budget_item",
                issues=[ValidationIssue(
                    field="budget_id",
                    issue_type="missing",
                    message="Create a budget for this month first",
                )],
            )
            _reject(result, self._audit_logger, correlation_id)
            return None, result

        result = self._validator.validate_budget_item(draft, self._categories.items())
        if result.has_errors:
            _reject(result, self._audit_logger, correlation_id)
            return None, result

        if draft.is_editing:
            item = await self._budget_items.update(draft.editing_item_id, draft.to_update())
        else:
            item = await self._budget_items.create(draft.to_create(budget.id))
        return item, result

    async def delete_allocation(self, item_id: int, confirmed: bool = False) -> bool:
        """Delete a budget item. Without `confirmed` nothing happens."""
        if not confirmed:
            return False
        return await self._budget_items.remove(item_id)


class TransactionEntryFlow:
    """
    Orchestrates the transactions page.

    Flow:
    1. Validate → amount, linkage for the account
    2. Balance check → savings withdrawals may not exceed the
       category's available balance (computed locally)
    3. Save → create, or update the transaction being edited
    4. Delete → only with explicit confirmation

    A draft rejected in steps 1-2 is NEVER sent to the backend.
    """

    def __init__(
        self,
        transactions: TransactionStore,
        views: FinanceViews,
        validator: Optional[FormValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._transactions = transactions
        self._views = views
        self._validator = validator or FormValidator()
        self._audit_logger = audit_logger

    def available_balance(self, draft: TransactionDraft) -> Optional[Decimal]:
        """
        What the draft's savings category can still pay for.

        When editing, the transaction's own current amount is not counted
        as spent. None for checking drafts or drafts without a category.
        """
        if draft.account_type != AccountType.SAVINGS or draft.category_id is None:
            return None

        available = self._views.savings_category_balance(draft.category_id).available_balance
        if draft.is_editing:
            existing = self._transactions.find(draft.editing_transaction_id)
            if (
                existing is not None
                and existing.account_type == AccountType.SAVINGS
                and existing.category_id == draft.category_id
            ):
                available += existing.amount
        return available

    async def save_transaction(
        self,
        draft: TransactionDraft,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[Optional[Transaction], ValidationResult]:
        """
        Validate and save a transaction draft.

        Returns:
            (transaction, validation) where transaction is None if the
            draft was rejected or the backend call failed
        """
        correlation_id = correlation_id or create_correlation_id()

        available = self.available_balance(draft)
        result = self._validator.validate_transaction(draft, available)
        if result.has_errors:
            if self._audit_logger and any(
                issue.issue_type == "insufficient_balance" for issue in result.issues
            ):
                self._audit_logger.log_balance_check_rejected(
                    category_id=draft.category_id,
                    amount=str(draft.amount),
                    available=str(available),
                    correlation_id=correlation_id,
                )
            _reject(result, self._audit_logger, correlation_id)
            return None, result

        if draft.is_editing:
            transaction = await self._transactions.update(
                draft.editing_transaction_id, draft.to_update()
            )
        else:
            transaction = await self._transactions.create(draft.to_create())
        return transaction, result

    async def delete_transaction(self, transaction_id: int, confirmed: bool = False) -> bool:
        """Delete a transaction. Without `confirmed` nothing happens."""
        if not confirmed:
            return False
        return await self._transactions.remove(transaction_id)


class CategoryFlow:
    """Orchestrates category management."""

    def __init__(
        self,
        categories: CategoryStore,
        validator: Optional[FormValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._categories = categories
        self._validator = validator or FormValidator()
        self._audit_logger = audit_logger

    async def create_category(
        self,
        draft: CategoryDraft,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[Optional[Category], ValidationResult]:
        correlation_id = correlation_id or create_correlation_id()

        result = self._validator.validate_category(draft)
        if result.has_errors:
            _reject(result, self._audit_logger, correlation_id)
            return None, result

        category = await self._categories.create(draft.to_create())
        return category, result

    async def rename_category(
        self,
        category_id: int,
        name: str,
        description: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[Optional[Category], ValidationResult]:
        """
        Rename a category. Its type is fixed once created.
        """
        correlation_id = correlation_id or create_correlation_id()

        existing = self._categories.find(category_id)
        draft = CategoryDraft(
            name=name,
            type=existing.type if existing else None,
            description=description,
        )
        result = self._validator.validate_category(draft)
        if result.has_errors:
            _reject(result, self._audit_logger, correlation_id)
            return None, result

        patch = CategoryUpdate(name=draft.name, description=draft.description or None)
        category = await self._categories.update(category_id, patch)
        return category, result

    async def archive_category(self, category_id: int, confirmed: bool = False) -> bool:
        """Archive a category. Without `confirmed` nothing happens."""
        if not confirmed:
            return False
        return await self._categories.archive(category_id)


class AppComponents(NamedTuple):
    """Everything the UI needs, wired together."""

    settings: Settings
    audit_logger: AuditLogger
    token_store: TokenStore
    backend: FinanceBackend
    session: AuthSession
    budgets: BudgetStore
    categories: CategoryStore
    budget_items: BudgetItemStore
    transactions: TransactionStore
    views: FinanceViews
    budget_flow: BudgetPlanningFlow
    transaction_flow: TransactionEntryFlow
    category_flow: CategoryFlow


def create_app_components(
    settings: Optional[Settings] = None,
    backend: Optional[FinanceBackend] = None,
    token_store: Optional[TokenStore] = None,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        settings: Defaults to the environment-derived settings
        backend: Defaults to the HTTP backend. Tests pass an in-memory one.
        token_store: Defaults to the token file under the auth token dir

    Returns:
        AppComponents with every store, view and flow wired to one backend
    """
    settings = settings or get_settings()
    configure_logging(settings.app.log_level)

    audit_logger = AuditLogger()
    token_store = token_store or FileTokenStore(settings.auth.token_path)

    if backend is None:
        client = ApiClient(settings=settings.api, token_provider=token_store.get)
        backend = HttpFinanceBackend(client)

    session = AuthSession(backend, token_store, audit_logger)

    budgets = BudgetStore(backend, audit_logger)
    categories = CategoryStore(backend, audit_logger)
    budget_items = BudgetItemStore(backend, audit_logger)
    transactions = TransactionStore(backend, audit_logger)

    views = FinanceViews(
        categories,
        budget_items,
        transactions,
        unknown_category_label=settings.app.unknown_category_label,
    )

    validator = FormValidator()

    return AppComponents(
        settings=settings,
        audit_logger=audit_logger,
        token_store=token_store,
        backend=backend,
        session=session,
        budgets=budgets,
        categories=categories,
        budget_items=budget_items,
        transactions=transactions,
        views=views,
        budget_flow=BudgetPlanningFlow(
            budgets, budget_items, transactions, categories, validator, audit_logger
        ),
        transaction_flow=TransactionEntryFlow(transactions, views, validator, audit_logger),
        category_flow=CategoryFlow(categories, validator, audit_logger),
    )
