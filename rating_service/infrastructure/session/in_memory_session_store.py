"""In-memory implementation of SessionStore for testing."""
import threading
from typing import Dict

from rating_service.domain.repositories.session_store import SessionStore


class InMemorySessionStore(SessionStore):
    """Flags for one actor session held in a dict."""

    def __init__(self):
        self._flags: Dict[str, bool] = {}
        self._lock = threading.Lock()

    async def get(self, key: str) -> bool:
        return self._flags.get(key, False)

    async def set(self, key: str, value: bool = True) -> None:
        with self._lock:
            if value:
                self._flags[key] = True
            else:
                self._flags.pop(key, None)

    async def set_if_absent(self, key: str) -> bool:
        with self._lock:
            if key in self._flags:
                return False
            self._flags[key] = True
            return True
