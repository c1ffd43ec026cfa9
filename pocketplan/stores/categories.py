"""Category store. Categories are archived, never hard deleted."""

from pocketplan.models.finance import Category, CategoryCreate, CategoryUpdate
from pocketplan.stores.base import ResourceStore


class CategoryStore(ResourceStore[Category]):
    """Active categories; archiving drops a category from the collection."""

    resource = "category"
    plural = "categories"
    remove_verb = "archive"

    async def _fetch_all(self) -> list[Category]:
        return await self._backend.list_categories()

    async def _create_remote(self, payload: CategoryCreate) -> Category:
        return await self._backend.create_category(payload)

    async def _update_remote(self, entity_id: int, patch: CategoryUpdate) -> Category:
        return await self._backend.update_category(entity_id, patch)

    async def _delete_remote(self, entity_id: int) -> None:
        await self._backend.archive_category(entity_id)

    async def archive(self, category_id: int) -> bool:
        """Soft delete on the backend; the category leaves the active list."""
        return await self.remove(category_id)
