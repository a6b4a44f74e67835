"""Client-side storage for the session token."""
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)


class TokenStore(ABC):
    """Where the client keeps its bearer token between runs."""

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
    """Token lives only as long as the process."""

    def __init__(self, token: Optional[str] = None):
        self._token = token

    def get(self) -> Optional[str]:
        return self._token

    def set(self, token: str) -> None:
        self._token = token

    def clear(self) -> None:
        self._token = None


class FileTokenStore(TokenStore):
    """Token persisted to a file (0600), e.g. ~/.stocktracker/token."""

    def __init__(self, path: Union[str, Path, None] = None):
        self.path = Path(path) if path else Path.home() / ".stocktracker" / "token"

    def get(self) -> Optional[str]:
        try:
            token = self.path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.error(f"Could not read token file {self.path}: {e}")
            return None
        return token or None

    def set(self, token: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(token, encoding="utf-8")
        self.path.chmod(0o600)

    def clear(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
