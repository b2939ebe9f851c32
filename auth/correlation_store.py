"""
Correlation store: state token → pending authorization.

Entries live for a fixed TTL from creation and are removed (not flagged)
when taken, so a state token can never be used twice. A secondary
``user → state`` index keeps at most one pending entry per user.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import Dict, Optional

from cachetools import TTLCache

from auth.clock import Clock, SystemClock
from auth.models import PendingAuthorization

logger = logging.getLogger(__name__)


class CorrelationStore(ABC):
    """Contract shared by the in-memory and Redis backends."""

    @abstractmethod
    async def put(self, state: str, pending: PendingAuthorization) -> None:
        """Insert, replacing any pending entry for the same user."""
        ...

    @abstractmethod
    async def take(self, state: str) -> Optional[PendingAuthorization]:
        """Atomically remove and return the entry, or ``None`` if unknown/expired."""
        ...

    async def purge_expired(self) -> int:
        """Drop expired entries; backends with native TTLs have nothing to do."""
        return 0


class InMemoryCorrelationStore(CorrelationStore):
    def __init__(
        self,
        ttl_seconds: float = 600,
        capacity: int = 1024,
        clock: Optional[Clock] = None,
    ):
        self._clock = clock or SystemClock()
        self._ttl = ttl_seconds
        self._entries: TTLCache = TTLCache(maxsize=capacity, ttl=ttl_seconds, timer=self._clock.time)
        self._by_user: Dict[str, str] = {}
        self._lock = threading.Lock()

    async def put(self, state: str, pending: PendingAuthorization) -> None:
        with self._lock:
            self._purge_locked()
            previous = self._by_user.get(pending.user)
            if previous is not None and previous != state:
                self._entries.pop(previous, None)
                logger.debug("Replaced pending authorization %s… for user %s", previous[:8], pending.user)
            if state not in self._entries and len(self._entries) >= self._entries.maxsize:
                # TTLCache evicts the oldest entry itself; keep the index in step.
                oldest = next(iter(self._entries), None)
                if oldest is not None:
                    self._drop_locked(oldest)
            self._entries[state] = pending
            self._by_user[pending.user] = state

    async def take(self, state: str) -> Optional[PendingAuthorization]:
        with self._lock:
            pending = self._entries.pop(state, None)
            if pending is None:
                return None
            if self._by_user.get(pending.user) == state:
                del self._by_user[pending.user]
        # TTLCache hides expired keys, but created_at is the authority.
        if pending.expires_at(self._ttl) <= self._clock.time():
            return None
        return pending

    async def purge_expired(self) -> int:
        with self._lock:
            return self._purge_locked()

    def __len__(self) -> int:
        with self._lock:
            self._entries.expire()
            return len(self._entries)

    # ── internals (caller holds the lock) ───────────────────────────────

    def _purge_locked(self) -> int:
        expired = self._entries.expire()
        for state, pending in expired:
            if self._by_user.get(pending.user) == state:
                del self._by_user[pending.user]
        # The user index may still point at states the cache already dropped.
        stale = [u for u, s in self._by_user.items() if s not in self._entries]
        for user in stale:
            del self._by_user[user]
        if expired:
            logger.debug("Purged %d expired pending authorizations", len(expired))
        return len(expired)

    def _drop_locked(self, state: str) -> None:
        pending = self._entries.pop(state, None)
        if pending is not None and self._by_user.get(pending.user) == state:
            del self._by_user[pending.user]
