"""TTL cache helper for read-mostly listings such as the public cook list."""
from __future__ import annotations

from threading import RLock
from typing import Callable, Generic, Optional, TypeVar

from cachetools import TTLCache

T = TypeVar("T")


class SimpleTTLCache(Generic[T]):
    """``TTLCache`` guarded by a lock; sync endpoints touch it from the threadpool."""

    def __init__(self, ttl: int, maxsize: int = 256) -> None:
        self._cache: TTLCache[str, T] = TTLCache(maxsize=maxsize, ttl=ttl)
        self._lock = RLock()

    def get(self, key: str) -> Optional[T]:
        with self._lock:
            return self._cache.get(key)

    def set(self, key: str, value: T) -> None:
        with self._lock:
            self._cache[key] = value

    def get_or_set(self, key: str, factory: Callable[[], T]) -> T:
        """Return the cached value for ``key``, computing and storing it on a miss."""

        with self._lock:
            cached = self._cache.get(key)
            if cached is not None:
                return cached
            value = factory()
            self._cache[key] = value
            return value

    def pop(self, key: str) -> None:
        with self._lock:
            self._cache.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()
