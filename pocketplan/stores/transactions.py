"""Transaction store: checking and savings transactions of the selected budget."""

from typing import Optional

from pocketplan.audit import AuditLogger
from pocketplan.models.finance import (
    AccountType,
    Transaction,
    TransactionCreate,
    TransactionSummary,
    TransactionUpdate,
)
from pocketplan.reactive import ReadonlySignal, Signal
from pocketplan.services.backend import FinanceBackend
from pocketplan.stores.base import ResourceStore


class TransactionStore(ResourceStore[Transaction]):
    """
    Transactions for one budget (both accounts), one account, or all.

    The view decides which slice to show; the store always holds the
    last list fetched.
    """

    resource = "transaction"
    plural = "transactions"

    def __init__(
        self,
        backend: FinanceBackend,
        audit_logger: Optional[AuditLogger] = None,
    ):
        super().__init__(backend, audit_logger)
        self._selected_budget_id: Signal[Optional[int]] = Signal(None)
        self._summary: Signal[Optional[TransactionSummary]] = Signal(None)

        self.selected_budget_id: ReadonlySignal[Optional[int]] = (
            self._selected_budget_id.readonly()
        )
        self.summary: ReadonlySignal[Optional[TransactionSummary]] = self._summary.readonly()

    async def _fetch_all(self) -> list[Transaction]:
        return await self._backend.list_transactions()

    async def _create_remote(self, payload: TransactionCreate) -> Transaction:
        return await self._backend.create_transaction(payload)

    async def _update_remote(self, entity_id: int, patch: TransactionUpdate) -> Transaction:
        return await self._backend.update_transaction(entity_id, patch)

    async def _delete_remote(self, entity_id: int) -> None:
        await self._backend.delete_transaction(entity_id)

    async def load_for_budget(self, budget_id: int) -> bool:
        """All transactions of a budget, checking and savings alike."""
        return await self._load(self._backend.list_transactions(budget_id=budget_id))

    async def load_by_account(self, account_type: AccountType) -> bool:
        return await self._load(self._backend.list_transactions(account_type=account_type))

    async def set_selected_budget(self, budget_id: Optional[int]) -> bool:
        """Switch budgets; None empties the collection."""
        self._selected_budget_id.set(budget_id)
        if budget_id is None:
            self.clear()
            return True
        return await self.load_for_budget(budget_id)

    async def fetch_budget_summary(self, budget_id: int) -> Optional[TransactionSummary]:
        """Backend-computed spending per account and category for a budget."""
        ok, summary = await self._run(
            "load",
            self._backend.get_transaction_summary(budget_id),
            message="Failed to load transaction summary",
            entity_id=budget_id,
        )
        if ok:
            self._summary.set(summary)
        return summary

    def clear(self) -> None:
        self._items.set([])
        self._summary.set(None)
