"""Services package."""

from pocketplan.services.backend import (
    ApiClient,
    AuthenticationError,
    BackendConnectionError,
    BackendError,
    FinanceBackend,
    HttpFinanceBackend,
    NotFoundError,
    ResponseFormatError,
)

__all__ = [
    "ApiClient",
    "AuthenticationError",
    "BackendConnectionError",
    "BackendError",
    "FinanceBackend",
    "HttpFinanceBackend",
    "NotFoundError",
    "ResponseFormatError",
]
