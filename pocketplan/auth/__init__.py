"""Authentication package."""

from pocketplan.auth.session import AuthSession, AuthState
from pocketplan.auth.token_store import FileTokenStore, MemoryTokenStore, TokenStore

__all__ = [
    "AuthSession",
    "AuthState",
    "FileTokenStore",
    "MemoryTokenStore",
    "TokenStore",
]
