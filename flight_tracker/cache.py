"""Time-boxed cache for FlightAware lookups.

Entries are immutable snapshots keyed by flight identifier and expire a
fixed interval after insertion. Expiry is checked lazily on read, so an
expired entry behaves exactly like a miss and is dropped at that point.
A cached ``None`` is a valid entry: it records that the identifier was
looked up and nothing usable came back.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import time
from typing import Callable, Optional

from flight_tracker.config import settings
from flight_tracker.models.flight import FlightDetails

logger = logging.getLogger("flight_tracker.cache")


@dataclass(frozen=True)
class _CacheEntry:
    value: Optional[FlightDetails]
    expires_at: float


class FlightDetailsCache:
    """Identifier -> ``FlightDetails | None`` with per-entry TTL."""

    def __init__(
        self,
        ttl_seconds: float | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = (
            settings.flight_cache_ttl_seconds if ttl_seconds is None else ttl_seconds
        )
        self._clock = clock
        self._entries: dict[str, _CacheEntry] = {}
        self._hits = 0
        self._misses = 0

    def _live_entry(self, ident: str) -> _CacheEntry | None:
        entry = self._entries.get(ident)
        if entry is None:
            return None
        if self._clock() >= entry.expires_at:
            del self._entries[ident]
            logger.debug("Cache entry for %s expired", ident)
            return None
        return entry

    def lookup(self, ident: str) -> tuple[bool, Optional[FlightDetails]]:
        """Return ``(found, value)`` from a single expiry check."""

        entry = self._live_entry(ident)
        if entry is None:
            self._misses += 1
            return False, None
        self._hits += 1
        return True, entry.value

    def has(self, ident: str) -> bool:
        """Return True when a non-expired entry exists for ``ident``."""

        found, _ = self.lookup(ident)
        return found

    def get(self, ident: str) -> Optional[FlightDetails]:
        """Return the cached value, or None for a miss or a cached ``None``."""

        entry = self._live_entry(ident)
        return entry.value if entry else None

    def set(self, ident: str, value: Optional[FlightDetails]) -> None:
        self._entries[ident] = _CacheEntry(
            value=value, expires_at=self._clock() + self.ttl_seconds
        )

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def stats(self) -> dict[str, int]:
        return {"entries": len(self._entries), "hits": self._hits, "misses": self._misses}


__all__ = ["FlightDetailsCache"]
