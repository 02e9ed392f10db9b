"""Session store interface - per-actor key/value flags backing vote locks."""
from abc import ABC, abstractmethod


class SessionStore(ABC):
    """Key/value capability scoped to a single actor session."""

    @abstractmethod
    async def get(self, key: str) -> bool:
        """Return True if the flag is set for this session."""
        pass

    @abstractmethod
    async def set(self, key: str, value: bool = True) -> None:
        """Set a flag for this session. Setting False removes it."""
        pass

    @abstractmethod
    async def set_if_absent(self, key: str) -> bool:
        """Atomically set a flag that is not yet set.

        Returns:
            True if this call set the flag, False if it was already set
        """
        pass
