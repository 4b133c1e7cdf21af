from __future__ import annotations

from asyncio import Lock
import time
from typing import Any

from .config import STANDINGS_CACHE_TTL


class TTLCache:
    """In-memory cache whose entries expire after ``ttl_seconds``.

    ``generation`` changes on every ``clear``. A writer that read it before
    computing a value passes it back to ``set`` so a value computed from data
    that has since been invalidated is dropped instead of stored.
    """

    def __init__(self, ttl_seconds: float = 300.0) -> None:
        self._ttl = ttl_seconds
        self._lock = Lock()
        self._store: dict[Any, tuple[Any, float]] = {}
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    async def get(self, key: Any) -> Any | None:
        now = time.monotonic()
        async with self._lock:
            entry = self._store.get(key)
            if not entry:
                return None
            value, expires_at = entry
            if expires_at <= now:
                self._store.pop(key, None)
                return None
            return value

    async def set(self, key: Any, value: Any, *, generation: int | None = None) -> bool:
        if self._ttl <= 0:
            return False
        async with self._lock:
            if generation is not None and generation != self._generation:
                return False
            self._store[key] = (value, time.monotonic() + self._ttl)
            return True

    async def clear(self) -> None:
        async with self._lock:
            self._store.clear()
            self._generation += 1


# Standings depend on teams, matchups and scores; every write to those clears it.
standings_cache = TTLCache(ttl_seconds=STANDINGS_CACHE_TTL)
