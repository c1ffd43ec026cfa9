"""
Session Token Storage

One opaque token string, persisted so a restart can resume the session
the way a browser reload does with local storage.
"""

import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

import structlog


class TokenStore(ABC):
    """Holds at most one session token."""

    @abstractmethod
    def get(self) -> Optional[str]:
        pass

    @abstractmethod
    def set(self, token: str) -> None:
        pass

    @abstractmethod
    def clear(self) -> None:
        pass


class MemoryTokenStore(TokenStore):
    """Token kept for the lifetime of the process only."""

    def __init__(self, token: Optional[str] = None):
        self._token = token

    def get(self) -> Optional[str]:
        return self._token

    def set(self, token: str) -> None:
        self._token = token

    def clear(self) -> None:
        self._token = None


class FileTokenStore(TokenStore):
    """
    Token persisted in a single file.

    The file is created with owner-only permissions. An unreadable file
    is treated as "no token". If the file cannot be written the token is
    kept in memory for the rest of the process.
    """

    def __init__(self, path: Path):
        self._path = Path(path)
        self._unsaved_token: Optional[str] = None
        self._logger = structlog.get_logger("pocketplan.auth")

    @property
    def path(self) -> Path:
        return self._path

    def get(self) -> Optional[str]:
        if self._unsaved_token:
            return self._unsaved_token
        try:
            token = self._path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None
        except OSError as e:
            self._logger.warning("token_read_failed", path=str(self._path), error=str(e))
            return None
        return token or None

    def set(self, token: str) -> None:
        self._unsaved_token = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd = os.open(self._path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(token)
            # A pre-existing file keeps its old mode under O_CREAT
            self._path.chmod(0o600)
        except OSError as e:
            self._logger.warning("token_write_failed", path=str(self._path), error=str(e))
            self._unsaved_token = token

    def clear(self) -> None:
        self._unsaved_token = None
        try:
            self._path.unlink(missing_ok=True)
        except OSError as e:
            self._logger.warning("token_clear_failed", path=str(self._path), error=str(e))
