"""
HTTP Finance Backend

Talks JSON over HTTP to the finance REST API with httpx.

Each call opens a short-lived AsyncClient, so the backend can be driven
from any event loop (the Streamlit front end runs a fresh loop per
interaction). There are no retries and, unless configured, no timeout:
a failed call surfaces once and the user re-triggers the action.
"""

from typing import Any, Callable, Optional, TypeVar

import httpx
import structlog
from pydantic import BaseModel, TypeAdapter, ValidationError

from pocketplan.config import ApiSettings, get_settings
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
from pocketplan.services.backend.interface import (
    AuthenticationError,
    BackendConnectionError,
    BackendError,
    FinanceBackend,
    NotFoundError,
    ResponseFormatError,
)

ModelT = TypeVar("ModelT", bound=BaseModel)

TokenProvider = Callable[[], Optional[str]]


class ApiClient:
    """
    Low-level JSON client.

    Attaches the bearer token, maps HTTP failures onto BackendError
    subclasses and decodes response bodies.
    """

    def __init__(
        self,
        settings: Optional[ApiSettings] = None,
        token_provider: Optional[TokenProvider] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._settings = settings or get_settings().api
        self._token_provider = token_provider
        self._transport = transport
        self._logger = structlog.get_logger("pocketplan.api")

    @property
    def base_url(self) -> str:
        return self._settings.base_url

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        token = self._token_provider() if self._token_provider else None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def request(
        self,
        method: str,
        path: str,
        json: Optional[dict] = None,
        params: Optional[dict] = None,
    ) -> Any:
        """
        Perform one request and return the decoded JSON body (None if empty).

        Raises:
            BackendConnectionError: If the backend cannot be reached
            AuthenticationError: On 401/403
            NotFoundError: On 404
            BackendError: On any other non-2xx status
            ResponseFormatError: If the body is not JSON
        """
        try:
            async with httpx.AsyncClient(
                base_url=self._settings.base_url,
                timeout=self._settings.timeout_seconds,
                transport=self._transport,
            ) as client:
                response = await client.request(
                    method,
                    path,
                    json=json,
                    params=params,
                    headers=self._headers(),
                )
        except httpx.RequestError as e:
            self._logger.warning("api_unreachable", method=method, path=path, error=str(e))
            raise BackendConnectionError(f"Could not reach backend: {e}")

        self._logger.debug(
            "api_request",
            method=method,
            path=path,
            status=response.status_code,
        )
        self._raise_for_status(response)

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            raise ResponseFormatError(
                f"Backend returned non-JSON body for {method} {path}",
                status_code=response.status_code,
            )

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        if response.is_success:
            return

        detail = response.reason_phrase
        try:
            body = response.json()
            if isinstance(body, dict) and body.get("detail"):
                detail = str(body["detail"])
        except ValueError:
            # Plain-text error body; keep the reason phrase
            pass

        status = response.status_code
        if status in (401, 403):
            raise AuthenticationError(detail, status_code=status)
        if status == 404:
            raise NotFoundError(detail, status_code=status)
        raise BackendError(f"Backend error {status}: {detail}", status_code=status)


def _parse(model: type[ModelT], data: Any) -> ModelT:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ResponseFormatError(f"Unexpected {model.__name__} payload: {e}")


def _parse_list(model: type[ModelT], data: Any) -> list[ModelT]:
    if data is None:
        return []
    try:
        return TypeAdapter(list[model]).validate_python(data)
    except ValidationError as e:
        raise ResponseFormatError(f"Unexpected {model.__name__} list payload: {e}")


def _body(payload: BaseModel, partial: bool = False) -> dict:
    """Serialize a request model; partial bodies only carry fields that were set."""
    if partial:
        return payload.model_dump(mode="json", exclude_unset=True)
    return payload.model_dump(mode="json", exclude_none=True)


class HttpFinanceBackend(FinanceBackend):
    """
    REST implementation of the finance backend.

    Paths are relative to ApiSettings.base_url.
    """

    def __init__(self, client: Optional[ApiClient] = None):
        self._client = client or ApiClient()

    # -- Authentication ------------------------------------------------------

    async def request_login_link(self, email: str) -> LoginResponse:
        data = await self._client.request("POST", "/auth/login", json={"email": email})
        return _parse(LoginResponse, data or {})

    async def verify_login_token(self, token: str) -> TokenResponse:
        data = await self._client.request("POST", "/auth/verify", json={"token": token})
        return _parse(TokenResponse, data)

    async def get_current_user(self) -> User:
        data = await self._client.request("GET", "/users/me")
        return _parse(User, data)

    # -- Budgets -------------------------------------------------------------

    async def list_budgets(self) -> list[Budget]:
        data = await self._client.request("GET", "/budgets")
        return _parse_list(Budget, data)

    async def get_current_budget(self) -> Budget:
        data = await self._client.request("GET", "/budgets/current")
        if data is None:
            raise NotFoundError("No budget for the current month", status_code=404)
        return _parse(Budget, data)

    async def get_budget_by_month(self, month: int, year: int) -> Optional[Budget]:
        try:
            data = await self._client.request("GET", f"/budgets/month/{year}/{month}")
        except NotFoundError:
            return None
        if data is None:
            return None
        return _parse(Budget, data)

    async def create_budget(self, budget: BudgetCreate) -> Budget:
        data = await self._client.request("POST", "/budgets", json=_body(budget))
        return _parse(Budget, data)

    async def update_budget(self, budget_id: int, patch: BudgetUpdate) -> Budget:
        data = await self._client.request(
            "PATCH", f"/budgets/{budget_id}", json=_body(patch, partial=True)
        )
        return _parse(Budget, data)

    async def delete_budget(self, budget_id: int) -> None:
        await self._client.request("DELETE", f"/budgets/{budget_id}")

    async def get_months_end_summary(self, budget_id: int) -> MonthsEndSummary:
        data = await self._client.request("GET", f"/budgets/{budget_id}/months-end-summary")
        return _parse(MonthsEndSummary, data)

    # -- Categories ----------------------------------------------------------

    async def list_categories(self) -> list[Category]:
        data = await self._client.request("GET", "/categories")
        return _parse_list(Category, data)

    async def create_category(self, category: CategoryCreate) -> Category:
        data = await self._client.request("POST", "/categories", json=_body(category))
        return _parse(Category, data)

    async def update_category(self, category_id: int, patch: CategoryUpdate) -> Category:
        data = await self._client.request(
            "PATCH", f"/categories/{category_id}", json=_body(patch, partial=True)
        )
        return _parse(Category, data)

    async def archive_category(self, category_id: int) -> None:
        await self._client.request("DELETE", f"/categories/{category_id}")

    # -- Budget items --------------------------------------------------------

    async def list_budget_items(self, budget_id: int) -> list[BudgetItem]:
        data = await self._client.request("GET", f"/budgets/items/{budget_id}")
        return _parse_list(BudgetItem, data)

    async def create_budget_item(self, item: BudgetItemCreate) -> BudgetItem:
        data = await self._client.request("POST", "/budgets/items", json=_body(item))
        return _parse(BudgetItem, data)

    async def update_budget_item(
        self,
        budget_id: int,
        item_id: int,
        patch: BudgetItemUpdate,
    ) -> BudgetItem:
        data = await self._client.request(
            "PATCH",
            f"/budgets/{budget_id}/items/{item_id}",
            json=_body(patch, partial=True),
        )
        return _parse(BudgetItem, data)

    async def delete_budget_item(self, budget_id: int, item_id: int) -> None:
        await self._client.request("DELETE", f"/budgets/{budget_id}/items/{item_id}")

    # -- Transactions --------------------------------------------------------

    async def list_transactions(
        self,
        budget_id: Optional[int] = None,
        account_type: Optional[AccountType] = None,
    ) -> list[Transaction]:
        params: dict[str, Any] = {}
        if budget_id is not None:
            params["budget_id"] = budget_id
        if account_type is not None:
            params["account_type"] = account_type.value
        data = await self._client.request("GET", "/transactions", params=params or None)
        return _parse_list(Transaction, data)

    async def create_transaction(self, transaction: TransactionCreate) -> Transaction:
        data = await self._client.request("POST", "/transactions", json=_body(transaction))
        return _parse(Transaction, data)

    async def update_transaction(
        self,
        transaction_id: int,
        patch: TransactionUpdate,
    ) -> Transaction:
        data = await self._client.request(
            "PUT", f"/transactions/{transaction_id}", json=_body(patch, partial=True)
        )
        return _parse(Transaction, data)

    async def delete_transaction(self, transaction_id: int) -> None:
        await self._client.request("DELETE", f"/transactions/{transaction_id}")

    async def get_transaction_summary(self, budget_id: int) -> TransactionSummary:
        data = await self._client.request("GET", f"/transactions/budget/{budget_id}/summary")
        return _parse(TransactionSummary, data)
