"""Tests for the resource stores against the in-memory backend."""

from decimal import Decimal

import pytest

from pocketplan.models.audit import AuditEventType
from pocketplan.models.finance import (
    AccountType,
    BudgetCreate,
    BudgetItem,
    BudgetItemCreate,
    BudgetItemUpdate,
    BudgetUpdate,
    CategoryCreate,
    CategoryType,
    CategoryUpdate,
    TransactionCreate,
)
from pocketplan.services.backend import BackendConnectionError, BackendError, NotFoundError
from pocketplan.stores import remove_by_id, upsert


class TestCollectionHelpers:
    """Tests for the pure reconciliation helpers."""

    def _item(self, id, category_id, amount, category_type=CategoryType.CASH):
        return BudgetItem(id=id, budget_id=1, category_id=category_id,
                          category_type=category_type, amount=Decimal(amount))

    def test_upsert_replaces_in_place(self):
        items = [self._item(1, 10, "5"), self._item(2, 11, "6")]
        incoming = self._item(1, 10, "50")

        result, replaced = upsert(items, incoming, lambda a, b: a.natural_key == b.natural_key)

        assert replaced
        assert [i.amount for i in result] == [Decimal("50"), Decimal("6")]

    def test_upsert_appends_new(self):
        items = [self._item(1, 10, "5")]
        result, replaced = upsert(items, self._item(2, 11, "6"), lambda a, b: a.id == b.id)
        assert not replaced
        assert len(result) == 2
        assert len(items) == 1

    def test_remove_by_id_missing_is_noop(self):
        items = [self._item(1, 10, "5")]
        assert remove_by_id(items, 99) == items


class TestCategoryStore:
    """Tests for the category store."""

    @pytest.mark.asyncio
    async def test_load(self, backend, category_store):
        backend.seed_category("Salary", CategoryType.INCOME)
        backend.seed_category("Rent", CategoryType.MONTHLY)

        assert await category_store.load()

        assert [c.name for c in category_store.items()] == ["Salary", "Rent"]
        assert category_store.error() is None
        assert not category_store.loading()

    @pytest.mark.asyncio
    async def test_load_failure_keeps_previous_collection(self, backend, category_store):
        """Test that a failed load leaves stale data in place and sets the message."""
        backend.seed_category("Salary", CategoryType.INCOME)
        await category_store.load()
        backend.fail["list_categories"] = BackendConnectionError("down")

        assert not await category_store.load()

        assert len(category_store.items()) == 1
        assert category_store.error() == "Failed to load categories"
        assert not category_store.loading()

    @pytest.mark.asyncio
    async def test_create_update_archive(self, backend, category_store):
        created = await category_store.create(
            CategoryCreate(name="Fun", type=CategoryType.CASH)
        )
        renamed = await category_store.update(created.id, CategoryUpdate(name="Fun money"))

        assert category_store.items()[0].name == "Fun money"
        assert renamed.type == CategoryType.CASH

        assert await category_store.archive(created.id)
        assert category_store.items() == []

    @pytest.mark.asyncio
    async def test_archive_failure_message(self, backend, category_store):
        backend.fail["archive_category"] = BackendError("boom", status_code=500)
        assert not await category_store.archive(1)
        assert category_store.error() == "Failed to archive category"

    @pytest.mark.asyncio
    async def test_error_is_cleared_by_next_call(self, backend, category_store):
        backend.fail["list_categories"] = BackendConnectionError("down")
        await category_store.load()
        del backend.fail["list_categories"]

        await category_store.load()

        assert category_store.error() is None


class TestBudgetStore:
    """Tests for the budget store."""

    @pytest.mark.asyncio
    async def test_create_selects_budget(self, budget_store):
        budget = await budget_store.create(BudgetCreate(month=5, year=2024, name="May"))
        assert budget_store.current_budget() == budget
        assert budget_store.items() == [budget]

    @pytest.mark.asyncio
    async def test_create_upserts_by_month_and_year(self, backend, budget_store):
        """Test that a second budget for the same month replaces the first."""
        first = backend.seed_budget(5, 2024, name="May")
        await budget_store.load()
        backend.budgets.pop(first.id)

        second = await budget_store.create(BudgetCreate(month=5, year=2024, name="May again"))

        assert budget_store.items() == [second]

    @pytest.mark.asyncio
    async def test_load_for_month_without_budget(self, budget_store):
        """Test that a month with no budget is not an error."""
        assert await budget_store.load_for_month(1, 2030) is None
        assert budget_store.error() is None
        assert budget_store.current_budget() is None

    @pytest.mark.asyncio
    async def test_load_for_month_failure(self, backend, budget_store):
        budget = backend.seed_budget(2, 2024)
        await budget_store.load_for_month(2, 2024)
        backend.fail["get_budget_by_month"] = BackendConnectionError("down")

        assert await budget_store.load_for_month(2, 2024) is None

        assert budget_store.error() == "Failed to load budget"
        assert budget_store.current_budget() is None
        assert budget.id in backend.budgets

    @pytest.mark.asyncio
    async def test_load_current_not_found_is_none(self, budget_store):
        assert await budget_store.load_current() is None
        assert budget_store.error() is None

    @pytest.mark.asyncio
    async def test_update_refreshes_current(self, backend, budget_store):
        budget = await budget_store.create(BudgetCreate(month=5, year=2024, name="May"))
        await budget_store.update(budget.id, BudgetUpdate(name="Maybe"))
        assert budget_store.current_budget().name == "Maybe"

    @pytest.mark.asyncio
    async def test_remove_clears_current(self, budget_store):
        budget = await budget_store.create(BudgetCreate(month=5, year=2024, name="May"))
        assert await budget_store.remove(budget.id)
        assert budget_store.current_budget() is None
        assert budget_store.items() == []

    @pytest.mark.asyncio
    async def test_months_end_summary(self, backend, budget_store):
        budget = backend.seed_budget(1, 2024)
        summary = await budget_store.load_months_end_summary(budget.id)
        assert budget_store.months_end_summary() == summary

        backend.fail["get_months_end_summary"] = BackendError("boom", status_code=500)
        await budget_store.load_months_end_summary(budget.id)
        assert budget_store.error() == "Failed to load months end summary"


class TestBudgetItemStore:
    """Tests for the budget item store."""

    @pytest.mark.asyncio
    async def test_create_same_natural_key_replaces(self, backend, item_store):
        """Test that re-allocating a category replaces, not duplicates."""
        budget = backend.seed_budget(3, 2024)
        category = backend.seed_category("Food", CategoryType.CASH)
        await item_store.load(budget.id)

        payload = BudgetItemCreate(budget_id=budget.id, category_id=category.id,
                                   category_type=CategoryType.CASH, amount=Decimal("100"))
        await item_store.create(payload)
        await item_store.create(payload.model_copy(update={"amount": Decimal("150")}))

        assert len(item_store.items()) == 1
        assert item_store.items()[0].amount == Decimal("150")

    @pytest.mark.asyncio
    async def test_replacement_is_audited(self, backend, item_store, audit_logger):
        budget = backend.seed_budget(3, 2024)
        category = backend.seed_category("Food", CategoryType.CASH)
        payload = BudgetItemCreate(budget_id=budget.id, category_id=category.id,
                                   category_type=CategoryType.CASH, amount=Decimal("100"))
        await item_store.create(payload)
        await item_store.create(payload)

        types = [e.event_type for e in audit_logger.history]
        assert types[-2:] == [AuditEventType.ENTITY_CREATED, AuditEventType.ENTITY_REPLACED]

    @pytest.mark.asyncio
    async def test_legacy_item_without_type_matches(self, backend, item_store):
        budget = backend.seed_budget(3, 2024)
        category = backend.seed_category("Food", CategoryType.CASH)
        legacy = backend.seed_item(budget, category, "10")
        backend.items[legacy.id] = legacy.model_copy(update={"category_type": None})
        await item_store.load(budget.id)

        await item_store.create(
            BudgetItemCreate(budget_id=budget.id, category_id=category.id,
                             category_type=CategoryType.CASH, amount=Decimal("20"))
        )

        assert len(item_store.items()) == 1
        assert item_store.items()[0].category_type == CategoryType.CASH

    @pytest.mark.asyncio
    async def test_update_and_remove(self, backend, item_store):
        budget = backend.seed_budget(3, 2024)
        category = backend.seed_category("Food", CategoryType.CASH)
        item = backend.seed_item(budget, category, "10")
        await item_store.load(budget.id)

        updated = await item_store.update(item.id, BudgetItemUpdate(amount=Decimal("30")))
        assert updated.amount == Decimal("30")
        assert item_store.items()[0].amount == Decimal("30")

        assert await item_store.remove(item.id)
        assert item_store.items() == []

    @pytest.mark.asyncio
    async def test_remove_already_deleted_is_success(self, backend, item_store):
        """Test that deleting an item the backend no longer has still removes it."""
        budget = backend.seed_budget(3, 2024)
        category = backend.seed_category("Food", CategoryType.CASH)
        item = backend.seed_item(budget, category, "10")
        await item_store.load(budget.id)
        del backend.items[item.id]

        assert await item_store.remove(item.id)
        assert item_store.items() == []
        assert item_store.error() is None

    @pytest.mark.asyncio
    async def test_remove_failure_keeps_item(self, backend, item_store):
        budget = backend.seed_budget(3, 2024)
        category = backend.seed_category("Food", CategoryType.CASH)
        item = backend.seed_item(budget, category, "10")
        await item_store.load(budget.id)
        backend.fail["delete_budget_item"] = BackendError("boom", status_code=500)

        assert not await item_store.remove(item.id)

        assert len(item_store.items()) == 1
        assert item_store.error() == "Failed to delete budget item"

    @pytest.mark.asyncio
    async def test_update_without_loaded_budget(self, item_store):
        assert await item_store.update(5, BudgetItemUpdate(amount=Decimal("1"))) is None
        assert item_store.error() == "Failed to update budget item"

    @pytest.mark.asyncio
    async def test_clear(self, backend, item_store):
        budget = backend.seed_budget(3, 2024)
        await item_store.load(budget.id)
        item_store.clear()
        assert item_store.budget_id() is None


class TestTransactionStore:
    """Tests for the transaction store."""

    @pytest.mark.asyncio
    async def test_set_selected_budget(self, backend, transaction_store):
        march = backend.seed_budget(3, 2024)
        april = backend.seed_budget(4, 2024)
        category = backend.seed_category("Rainy day", CategoryType.SAVINGS)
        backend.seed_transaction(march, "10", AccountType.SAVINGS, category_id=category.id)
        backend.seed_transaction(april, "20", AccountType.SAVINGS, category_id=category.id)

        await transaction_store.set_selected_budget(march.id)

        assert [t.amount for t in transaction_store.items()] == [Decimal("10")]
        assert transaction_store.selected_budget_id() == march.id

        await transaction_store.set_selected_budget(None)
        assert transaction_store.items() == []

    @pytest.mark.asyncio
    async def test_create_appends(self, backend, transaction_store):
        category = backend.seed_category("Rainy day", CategoryType.SAVINGS)
        created = await transaction_store.create(
            TransactionCreate(amount=Decimal("5"), account_type=AccountType.SAVINGS,
                              category_id=category.id)
        )
        assert transaction_store.items() == [created]

    @pytest.mark.asyncio
    async def test_create_failure_message(self, backend, transaction_store):
        backend.fail["create_transaction"] = BackendError("boom", status_code=500)
        result = await transaction_store.create(
            TransactionCreate(amount=Decimal("5"), account_type=AccountType.SAVINGS,
                              category_id=1)
        )
        assert result is None
        assert transaction_store.error() == "Failed to create transaction"
        assert transaction_store.items() == []

    @pytest.mark.asyncio
    async def test_load_by_account(self, backend, transaction_store):
        budget = backend.seed_budget(3, 2024)
        category = backend.seed_category("Food", CategoryType.CASH)
        item = backend.seed_item(budget, category, "100")
        backend.seed_transaction(budget, "10", AccountType.CHECKING, budget_item_id=item.id)
        backend.seed_transaction(budget, "20", AccountType.SAVINGS, category_id=category.id)

        await transaction_store.load_by_account(AccountType.CHECKING)

        assert [t.account_type for t in transaction_store.items()] == [AccountType.CHECKING]

    @pytest.mark.asyncio
    async def test_fetch_budget_summary(self, backend, transaction_store):
        budget = backend.seed_budget(3, 2024)
        category = backend.seed_category("Rainy day", CategoryType.SAVINGS)
        backend.seed_transaction(budget, "20", AccountType.SAVINGS, category_id=category.id)

        summary = await transaction_store.fetch_budget_summary(budget.id)

        assert summary.savings.total_spent == Decimal("20")
        assert transaction_store.summary() == summary

    @pytest.mark.asyncio
    async def test_failed_request_is_audited(self, backend, transaction_store, audit_logger):
        backend.fail["list_transactions"] = NotFoundError("gone", status_code=404)
        await transaction_store.load()
        event = audit_logger.history[-1]
        assert event.event_type == AuditEventType.REQUEST_FAILED
        assert event.description == "Failed to load transactions"
