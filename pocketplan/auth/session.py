"""
Authentication Session

Passwordless login as a small state machine:

    anonymous --request_link--> link_sent --verify--> authenticated
        ^                                                   |
        +------------- logout / verification failure ------+

A stored token at startup triggers restore(): the current user is
fetched and, if that fails, the token is dropped and the session
silently returns to anonymous. Only request_link() and verify() surface
an error message.
"""

from enum import Enum
from typing import Optional

from pocketplan.audit import AuditLogger
from pocketplan.auth.token_store import TokenStore
from pocketplan.models.audit import AuditEventType
from pocketplan.models.finance import User
from pocketplan.reactive import ReadonlySignal, Signal
from pocketplan.services.backend import BackendError, FinanceBackend


class AuthState(str, Enum):
    ANONYMOUS = "anonymous"
    LINK_SENT = "link_sent"
    AUTHENTICATED = "authenticated"


class AuthSession:
    """Owns the session token and the signed-in user."""

    def __init__(
        self,
        backend: FinanceBackend,
        token_store: TokenStore,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._backend = backend
        self._token_store = token_store
        self._audit_logger = audit_logger

        self._state: Signal[AuthState] = Signal(AuthState.ANONYMOUS)
        self._user: Signal[Optional[User]] = Signal(None)
        self._error: Signal[Optional[str]] = Signal(None)
        self._loading: Signal[bool] = Signal(False)
        self._pending_email: Signal[Optional[str]] = Signal(None)

        self.state: ReadonlySignal[AuthState] = self._state.readonly()
        self.user: ReadonlySignal[Optional[User]] = self._user.readonly()
        self.error: ReadonlySignal[Optional[str]] = self._error.readonly()
        self.loading: ReadonlySignal[bool] = self._loading.readonly()
        self.pending_email: ReadonlySignal[Optional[str]] = self._pending_email.readonly()

    def token(self) -> Optional[str]:
        """Current session token, used as the API client's token provider."""
        return self._token_store.get()

    @property
    def has_token(self) -> bool:
        return bool(self._token_store.get())

    @property
    def is_authenticated(self) -> bool:
        return self._state() == AuthState.AUTHENTICATED

    def _log(
        self,
        event_type: AuditEventType,
        description: str,
        error: Optional[Exception] = None,
    ) -> None:
        if self._audit_logger:
            self._audit_logger.log_session(event_type, description, error)

    def _become_anonymous(self) -> None:
        self._token_store.clear()
        self._user.set(None)
        self._pending_email.set(None)
        self._state.set(AuthState.ANONYMOUS)

    async def request_link(self, email: str) -> bool:
        """Ask the backend to email a login link to `email`."""
        self._loading.set(True)
        self._error.set(None)
        try:
            await self._backend.request_login_link(email)
        except BackendError as e:
            self._error.set("Failed to send login link")
            self._log(AuditEventType.LOGIN_FAILED, "Login link request failed", e)
            return False
        finally:
            self._loading.set(False)

        self._pending_email.set(email)
        self._state.set(AuthState.LINK_SENT)
        self._log(AuditEventType.LOGIN_LINK_REQUESTED, "Login link requested")
        return True

    async def verify(self, link_token: str) -> bool:
        """
        Exchange the one-time link token for a session and load the user.

        Any failure leaves the session anonymous with no stored token.
        """
        self._loading.set(True)
        self._error.set(None)
        try:
            response = await self._backend.verify_login_token(link_token)
            self._token_store.set(response.access_token)
            user = await self._backend.get_current_user()
        except BackendError as e:
            self._become_anonymous()
            self._error.set("Login link is invalid or has expired")
            self._log(AuditEventType.LOGIN_FAILED, "Login link verification failed", e)
            return False
        finally:
            self._loading.set(False)

        self._user.set(user)
        self._pending_email.set(None)
        self._state.set(AuthState.AUTHENTICATED)
        self._log(AuditEventType.LOGIN_VERIFIED, "Login link verified")
        return True

    async def restore(self) -> bool:
        """
        Best-effort revalidation of a stored token at startup.

        Never sets the error flag.
        """
        if not self.has_token:
            return False

        self._loading.set(True)
        try:
            user = await self._backend.get_current_user()
        except BackendError as e:
            self._become_anonymous()
            self._log(AuditEventType.SESSION_CLEARED, "Stored session rejected", e)
            return False
        finally:
            self._loading.set(False)

        self._user.set(user)
        self._state.set(AuthState.AUTHENTICATED)
        self._log(AuditEventType.SESSION_RESTORED, "Stored session restored")
        return True

    def logout(self) -> None:
        self._become_anonymous()
        self._error.set(None)
        self._log(AuditEventType.LOGGED_OUT, "User logged out")

    def clear_error(self) -> None:
        self._error.set(None)
