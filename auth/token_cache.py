"""
Token cache: user → credential.

Retention is keyed off each credential's own ``expires_at`` plus a grace
period, never off insertion time, so an expired access token is still
around for the credential provider to refresh. Capacity is bounded with
LRU eviction; an evicted user simply has no credential.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import Optional

from cachetools import TLRUCache

from auth.clock import Clock, SystemClock
from auth.models import Credential

logger = logging.getLogger(__name__)


class TokenCache(ABC):
    @abstractmethod
    async def get(self, user: str) -> Optional[Credential]:
        ...

    @abstractmethod
    async def put(self, user: str, credential: Credential) -> None:
        ...

    @abstractmethod
    async def invalidate(self, user: str) -> None:
        ...


class InMemoryTokenCache(TokenCache):
    def __init__(
        self,
        capacity: int = 4096,
        retention_grace_seconds: float = 30 * 24 * 3600,
        clock: Optional[Clock] = None,
    ):
        self._clock = clock or SystemClock()
        self._grace = retention_grace_seconds
        self._entries: TLRUCache = TLRUCache(
            maxsize=capacity,
            ttu=self._time_to_use,
            timer=self._clock.time,
        )
        self._lock = threading.Lock()

    def _time_to_use(self, _user: str, credential: Credential, _now: float) -> float:
        return credential.expires_at + self._grace

    async def get(self, user: str) -> Optional[Credential]:
        with self._lock:
            return self._entries.get(user)

    async def put(self, user: str, credential: Credential) -> None:
        if credential.user != user:
            raise ValueError(f"Credential for {credential.user!r} stored under {user!r}")
        with self._lock:
            self._entries[user] = credential

    async def invalidate(self, user: str) -> None:
        with self._lock:
            if self._entries.pop(user, None) is not None:
                logger.info("Invalidated credential for user %s", user)

    def retention_seconds(self, credential: Credential) -> float:
        """Remaining time the credential should be kept, from now."""
        return credential.expires_at + self._grace - self._clock.time()

    def __len__(self) -> int:
        with self._lock:
            self._entries.expire()
            return len(self._entries)
