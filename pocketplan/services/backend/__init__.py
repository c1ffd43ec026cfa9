"""
Finance Backend Package

Provides the abstract backend interface and its REST implementation.
"""

from pocketplan.services.backend.interface import (
    AuthenticationError,
    BackendConnectionError,
    BackendError,
    FinanceBackend,
    NotFoundError,
    ResponseFormatError,
)
from pocketplan.services.backend.http_backend import (
    ApiClient,
    HttpFinanceBackend,
)

__all__ = [
    # Interface
    "FinanceBackend",
    # Exceptions
    "AuthenticationError",
    "BackendConnectionError",
    "BackendError",
    "NotFoundError",
    "ResponseFormatError",
    # HTTP implementation
    "ApiClient",
    "HttpFinanceBackend",
]
