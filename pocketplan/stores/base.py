"""
Resource Store Base

One store per backend resource. A store holds the latest fetched
collection plus `loading` / `error` flags, all as reactive signals, and
exposes mutation methods that call the backend and then reconcile the
in-memory collection.

GUARANTEES:
- No public method raises. Every BackendError becomes the store's fixed,
  human-readable error message and a None / False return value.
- The collection is replaced all-or-nothing. A failed call leaves it
  exactly as it was (stale but available).
- create() upserts on the store's natural key: a collision replaces the
  existing entry in place, anything else is appended.
- remove() of an id the backend no longer knows counts as removed.

Overlapping calls are not serialized. A late response applies its
reconciliation to whatever the collection holds when it arrives.
"""

from typing import Any, Awaitable, Callable, Generic, Hashable, Optional, TypeVar

from pydantic import BaseModel

from pocketplan.audit import AuditLogger
from pocketplan.reactive import ReadonlySignal, Signal
from pocketplan.services.backend import BackendError, FinanceBackend, NotFoundError

T = TypeVar("T", bound=BaseModel)
R = TypeVar("R")


def upsert(
    items: list[T],
    entity: T,
    matches: Callable[[T, T], bool],
) -> tuple[list[T], bool]:
    """
    Replace the first element matching `entity`, or append it.

    Returns (new_list, replaced).
    """
    for index, existing in enumerate(items):
        if matches(existing, entity):
            updated = list(items)
            updated[index] = entity
            return updated, True
    return [*items, entity], False


def replace_by_id(items: list[T], entity: T) -> list[T]:
    entity_id = getattr(entity, "id")
    return [entity if getattr(item, "id") == entity_id else item for item in items]


def remove_by_id(items: list[T], entity_id: int) -> list[T]:
    return [item for item in items if getattr(item, "id") != entity_id]


class ResourceStore(Generic[T]):
    """
    Reactive in-memory mirror of one backend collection.

    Subclasses set `resource` / `plural` (used in messages and logs) and
    implement the `_create_remote`, `_update_remote` and `_delete_remote`
    hooks. Stores whose collection can be fetched without arguments also
    implement `_fetch_all`.
    """

    resource = "record"
    plural = "records"
    remove_verb = "delete"

    def __init__(
        self,
        backend: FinanceBackend,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._backend = backend
        self._audit_logger = audit_logger

        self._items: Signal[list[T]] = Signal([])
        self._loading: Signal[bool] = Signal(False)
        self._error: Signal[Optional[str]] = Signal(None)

        # Public readonly signals
        self.items: ReadonlySignal[list[T]] = self._items.readonly()
        self.loading: ReadonlySignal[bool] = self._loading.readonly()
        self.error: ReadonlySignal[Optional[str]] = self._error.readonly()

    # -- Upsert key ----------------------------------------------------------

    def natural_key(self, entity: T) -> Hashable:
        """
        Identity used by create() to detect "the same logical entity".

        Defaults to the surrogate id.
        """
        return getattr(entity, "id")

    def _matches(self, existing: T, incoming: T) -> bool:
        return self.natural_key(existing) == self.natural_key(incoming)

    # -- Backend hooks -------------------------------------------------------

    async def _fetch_all(self) -> list[T]:
        raise NotImplementedError(f"{type(self).__name__} cannot be loaded without arguments")

    async def _create_remote(self, payload: Any) -> T:
        raise NotImplementedError

    async def _update_remote(self, entity_id: int, patch: Any) -> T:
        raise NotImplementedError

    async def _delete_remote(self, entity_id: int) -> None:
        raise NotImplementedError

    # -- Helpers -------------------------------------------------------------

    def _message(self, operation: str) -> str:
        if operation == "load":
            return f"Failed to load {self.plural}"
        if operation == "remove":
            return f"Failed to {self.remove_verb} {self.resource}"
        return f"Failed to {operation} {self.resource}"

    async def _run(
        self,
        operation: str,
        request: Awaitable[R],
        message: Optional[str] = None,
        entity_id: Optional[int] = None,
    ) -> tuple[bool, Optional[R]]:
        """
        Await one backend call with loading / error bookkeeping.

        Returns (succeeded, result). Never raises BackendError.
        """
        self._loading.set(True)
        self._error.set(None)
        try:
            result = await request
        except BackendError as e:
            error_message = message or self._message(operation)
            self._error.set(error_message)
            self._loading.set(False)
            if self._audit_logger:
                self._audit_logger.log_request_failed(
                    resource=self.resource,
                    operation=operation,
                    message=error_message,
                    error=e,
                    entity_id=entity_id,
                )
            return False, None
        self._loading.set(False)
        return True, result

    async def _load(self, request: Awaitable[list[T]]) -> bool:
        ok, items = await self._run("load", request)
        if not ok:
            return False
        self._items.set(list(items or []))
        if self._audit_logger:
            self._audit_logger.log_collection_loaded(self.resource, len(items or []))
        return True

    def find(self, entity_id: int) -> Optional[T]:
        """Element of the current collection with this id, if loaded."""
        for item in self._items():
            if getattr(item, "id") == entity_id:
                return item
        return None

    def clear_error(self) -> None:
        self._error.set(None)

    # -- Public contract -----------------------------------------------------

    async def load(self) -> bool:
        """
        Replace the collection with the backend's current list.

        On failure the previous collection is kept and `error` is set.
        """
        return await self._load(self._fetch_all())

    async def create(self, payload: Any) -> Optional[T]:
        """Create an entity and upsert it into the collection by natural key."""
        ok, entity = await self._run("create", self._create_remote(payload))
        if not ok or entity is None:
            return None

        items, replaced = upsert(self._items(), entity, self._matches)
        self._items.set(items)
        if self._audit_logger:
            self._audit_logger.log_entity_written(
                self.resource, "create", getattr(entity, "id"), replaced=replaced
            )
        return entity

    async def update(self, entity_id: int, patch: Any) -> Optional[T]:
        """Patch an entity and replace it by id in the collection."""
        ok, entity = await self._run(
            "update", self._update_remote(entity_id, patch), entity_id=entity_id
        )
        if not ok or entity is None:
            return None

        self._items.set(replace_by_id(self._items(), entity))
        if self._audit_logger:
            self._audit_logger.log_entity_written(self.resource, "update", entity_id)
        return entity

    async def remove(self, entity_id: int) -> bool:
        """
        Delete an entity and filter it out of the collection.

        Confirmation is the caller's concern.
        """
        ok, _ = await self._run(
            "remove", self._delete_idempotent(entity_id), entity_id=entity_id
        )
        if not ok:
            return False

        self._items.set(remove_by_id(self._items(), entity_id))
        if self._audit_logger:
            self._audit_logger.log_entity_written(self.resource, "remove", entity_id)
        return True

    async def _delete_idempotent(self, entity_id: int) -> None:
        try:
            await self._delete_remote(entity_id)
        except NotFoundError:
            # Already gone on the backend
            pass
