from __future__ import annotations

import time
from typing import Any, Optional


class ReadCache:
    """In-process TTL cache for static Judge0 metadata (languages, statuses)."""

    def __init__(self, default_ttl: int = 60, enabled: bool = True) -> None:
        self.default_ttl = default_ttl
        self.enabled = enabled
        self._store: dict[str, tuple[Any, float]] = {}

    def get(self, key: str) -> Any | None:
        if not self.enabled:
            return None
        item = self._store.get(key)
        if not item:
            return None
        value, expires = item
        if time.monotonic() < expires:
            return value
        self._store.pop(key, None)
        return None

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        if not self.enabled:
            return
        ttl_s = int(ttl if ttl is not None else self.default_ttl)
        self._store[key] = (value, time.monotonic() + max(1, ttl_s))

    def clear(self, prefix: Optional[str] = None) -> None:
        if prefix is None:
            self._store.clear()
            return
        for key in [k for k in self._store if k.startswith(prefix)]:
            self._store.pop(key, None)
