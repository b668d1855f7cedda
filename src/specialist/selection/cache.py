"""Time-bounded caches for selection and extraction results."""

from __future__ import annotations

import hashlib
import logging
import re
import time
from collections.abc import Callable
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

V = TypeVar("V")

DEFAULT_TTL_SECONDS = 3600.0

_WHITESPACE_RE = re.compile(r"\s+")


def fingerprint(text: str) -> str:
    """Return a stable cache key for request text.

    Whitespace runs are collapsed and case is folded so trivially different
    phrasings of the same request share an entry.
    """
    normalized = _WHITESPACE_RE.sub(" ", text).strip().casefold()
    return "prompt_" + hashlib.sha256(normalized.encode()).hexdigest()[:16]


class TTLCache(Generic[V]):
    """A key/value store whose entries expire a fixed time after being set.

    Expired entries are dropped lazily on ``get`` or by ``prune_expired``.
    When ``max_entries`` is set, inserting into a full cache evicts the
    entry closest to expiry.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_entries: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: dict[str, tuple[V, float]] = {}

    def get(self, key: str) -> V | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    def set(self, key: str, value: V) -> None:
        if (
            self.max_entries is not None
            and key not in self._entries
            and len(self._entries) >= self.max_entries
        ):
            self.prune_expired()
            if len(self._entries) >= self.max_entries:
                oldest = min(self._entries, key=lambda k: self._entries[k][1])
                del self._entries[oldest]
        self._entries[key] = (value, self._clock() + self.ttl_seconds)

    def clear(self) -> None:
        self._entries.clear()

    def prune_expired(self) -> int:
        """Drop expired entries and return how many were removed."""
        now = self._clock()
        expired = [k for k, (_, expires_at) in self._entries.items() if now >= expires_at]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.get(key) is not None


class PromptCache:
    """Independent caches for the selection and extraction phases."""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_entries: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.selection: TTLCache[Any] = TTLCache(ttl_seconds, max_entries, clock)
        self.variables: TTLCache[dict[str, str]] = TTLCache(ttl_seconds, max_entries, clock)

    def clear(self) -> None:
        self.selection.clear()
        self.variables.clear()

    def prune_expired(self) -> int:
        return self.selection.prune_expired() + self.variables.prune_expired()

    def stats(self) -> dict[str, int]:
        return {"selection": len(self.selection), "variables": len(self.variables)}
