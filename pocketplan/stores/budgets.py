"""Budget store: the list of monthly budgets and the one currently selected."""

from typing import Hashable, Optional

from pocketplan.audit import AuditLogger
from pocketplan.models.finance import (
    Budget,
    BudgetCreate,
    BudgetUpdate,
    MonthsEndSummary,
)
from pocketplan.reactive import ReadonlySignal, Signal
from pocketplan.services.backend import FinanceBackend, NotFoundError
from pocketplan.stores.base import ResourceStore


class BudgetStore(ResourceStore[Budget]):
    """
    Budgets keyed by (month, year).

    Besides the collection it tracks `current_budget` (the budget the
    user is looking at) and the last fetched `months_end_summary`.
    """

    resource = "budget"
    plural = "budgets"

    def __init__(
        self,
        backend: FinanceBackend,
        audit_logger: Optional[AuditLogger] = None,
    ):
        super().__init__(backend, audit_logger)
        self._current_budget: Signal[Optional[Budget]] = Signal(None)
        self._months_end_summary: Signal[Optional[MonthsEndSummary]] = Signal(None)

        self.current_budget: ReadonlySignal[Optional[Budget]] = self._current_budget.readonly()
        self.months_end_summary: ReadonlySignal[Optional[MonthsEndSummary]] = (
            self._months_end_summary.readonly()
        )

    def natural_key(self, entity: Budget) -> Hashable:
        return (entity.month, entity.year)

    async def _fetch_all(self) -> list[Budget]:
        return await self._backend.list_budgets()

    async def _create_remote(self, payload: BudgetCreate) -> Budget:
        return await self._backend.create_budget(payload)

    async def _update_remote(self, entity_id: int, patch: BudgetUpdate) -> Budget:
        return await self._backend.update_budget(entity_id, patch)

    async def _delete_remote(self, entity_id: int) -> None:
        await self._backend.delete_budget(entity_id)

    async def _current_or_none(self) -> Optional[Budget]:
        try:
            return await self._backend.get_current_budget()
        except NotFoundError:
            return None

    async def load_current(self) -> Optional[Budget]:
        """
        Fetch this month's budget into `current_budget`.

        A month without a budget is a normal state, not an error.
        """
        ok, budget = await self._run(
            "load", self._current_or_none(), message="Failed to load current budget"
        )
        if ok:
            self._current_budget.set(budget)
        return budget

    async def load_for_month(self, month: int, year: int) -> Optional[Budget]:
        """Select the budget for (month, year); None when there is none."""
        ok, budget = await self._run(
            "load",
            self._backend.get_budget_by_month(month, year),
            message="Failed to load budget",
        )
        if not ok:
            self._current_budget.set(None)
            return None
        self._current_budget.set(budget)
        return budget

    async def load_months_end_summary(self, budget_id: int) -> Optional[MonthsEndSummary]:
        ok, summary = await self._run(
            "load",
            self._backend.get_months_end_summary(budget_id),
            message="Failed to load months end summary",
            entity_id=budget_id,
        )
        if ok:
            self._months_end_summary.set(summary)
        return summary

    def select(self, budget: Optional[Budget]) -> None:
        self._current_budget.set(budget)

    async def create(self, payload: BudgetCreate) -> Optional[Budget]:
        """Create a budget and make it the current one."""
        budget = await super().create(payload)
        if budget is not None:
            self._current_budget.set(budget)
        return budget

    async def update(self, entity_id: int, patch: BudgetUpdate) -> Optional[Budget]:
        budget = await super().update(entity_id, patch)
        current = self._current_budget()
        if budget is not None and current is not None and current.id == budget.id:
            self._current_budget.set(budget)
        return budget

    async def remove(self, entity_id: int) -> bool:
        removed = await super().remove(entity_id)
        current = self._current_budget()
        if removed and current is not None and current.id == entity_id:
            self._current_budget.set(None)
        return removed
