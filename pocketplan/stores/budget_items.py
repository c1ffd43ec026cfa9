"""
Budget Item Store

Allocations of the currently loaded budget.

The backend's create endpoint behaves as an upsert on
(budget_id, category_id, category_type): submitting an amount for a
category that already has one returns the updated row. The store mirrors
that with the same natural key, so re-submitting an allocation never
duplicates a row.
"""

from typing import Hashable, Optional

from pocketplan.audit import AuditLogger
from pocketplan.models.finance import (
    BudgetItem,
    BudgetItemCreate,
    BudgetItemUpdate,
)
from pocketplan.reactive import ReadonlySignal, Signal
from pocketplan.services.backend import FinanceBackend, NotFoundError
from pocketplan.stores.base import ResourceStore


class BudgetItemStore(ResourceStore[BudgetItem]):
    """Budget items of one budget; `budget_id` names the budget loaded."""

    resource = "budget item"
    plural = "budget items"

    def __init__(
        self,
        backend: FinanceBackend,
        audit_logger: Optional[AuditLogger] = None,
    ):
        super().__init__(backend, audit_logger)
        self._budget_id: Signal[Optional[int]] = Signal(None)
        self.budget_id: ReadonlySignal[Optional[int]] = self._budget_id.readonly()

    def natural_key(self, entity: BudgetItem) -> Hashable:
        return entity.natural_key

    def _matches(self, existing: BudgetItem, incoming: BudgetItem) -> bool:
        if existing.budget_id != incoming.budget_id:
            return False
        if existing.category_id != incoming.category_id:
            return False
        # Legacy rows without a type still match on (budget_id, category_id)
        if existing.category_type is None or incoming.category_type is None:
            return True
        return existing.category_type == incoming.category_type

    def _owning_budget(self, item_id: int) -> Optional[int]:
        item = self.find(item_id)
        if item is not None:
            return item.budget_id
        return self._budget_id()

    async def _create_remote(self, payload: BudgetItemCreate) -> BudgetItem:
        return await self._backend.create_budget_item(payload)

    async def _update_remote(self, entity_id: int, patch: BudgetItemUpdate) -> BudgetItem:
        budget_id = self._owning_budget(entity_id)
        if budget_id is None:
            raise NotFoundError(f"Budget item {entity_id} is not part of a loaded budget")
        return await self._backend.update_budget_item(budget_id, entity_id, patch)

    async def _delete_remote(self, entity_id: int) -> None:
        budget_id = self._owning_budget(entity_id)
        if budget_id is None:
            # Nothing loaded, nothing to delete
            return
        await self._backend.delete_budget_item(budget_id, entity_id)

    async def load(self, budget_id: int) -> bool:  # type: ignore[override]
        """Replace the collection with the items of `budget_id`."""
        ok = await self._load(self._backend.list_budget_items(budget_id))
        if ok:
            self._budget_id.set(budget_id)
        return ok

    def clear(self) -> None:
        """Forget the loaded budget, e.g. when the selected month has none."""
        self._items.set([])
        self._budget_id.set(None)
