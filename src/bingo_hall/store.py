"""Key-value storage for rooms, with expiry.

Entries live for ``ttl_sec`` seconds after their last ``set`` or ``touch``.
Expired entries are dropped lazily on access and by :meth:`purge_expired`.
"""

from __future__ import annotations

import time
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple

DEFAULT_TTL_SEC = 60 * 60 * 12


class RoomStore(Protocol):
    def get(self, key: str) -> Optional[Any]: ...

    def set(self, key: str, value: Any) -> None: ...

    def delete(self, key: str) -> None: ...

    def touch(self, key: str) -> bool: ...

    def keys(self) -> List[str]: ...


class InMemoryRoomStore:
    def __init__(self, ttl_sec: float = DEFAULT_TTL_SEC, clock: Callable[[], float] = time.monotonic):
        self.ttl_sec = ttl_sec
        self._clock = clock
        self._entries: Dict[str, Tuple[Any, Optional[float]]] = {}

    def _deadline(self) -> Optional[float]:
        if self.ttl_sec <= 0:
            return None
        return self._clock() + self.ttl_sec

    def _expired(self, deadline: Optional[float]) -> bool:
        return deadline is not None and self._clock() >= deadline

    def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, deadline = entry
        if self._expired(deadline):
            del self._entries[key]
            return None
        return value

    def set(self, key: str, value: Any) -> None:
        self._entries[key] = (value, self._deadline())

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def touch(self, key: str) -> bool:
        value = self.get(key)
        if value is None:
            return False
        self._entries[key] = (value, self._deadline())
        return True

    def keys(self) -> List[str]:
        self.purge_expired()
        return list(self._entries)

    def purge_expired(self) -> int:
        stale = [k for k, (_v, deadline) in self._entries.items() if self._expired(deadline)]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def __len__(self) -> int:
        return len(self.keys())
