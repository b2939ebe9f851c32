"""
Redis backends for multi-process deployments.

Key layout (TTL set natively by Redis):
  • ``corr:<state>``  pending authorization JSON
  • ``corr-user:<user>``  the user's current state token
  • ``tok:<user>``  credential JSON, token strings Fernet-encrypted

The client is a ``redis.asyncio.Redis`` created with ``decode_responses=True``.
"""

from __future__ import annotations

import json
import logging
import math
from typing import Any, Optional

from redis.asyncio import Redis
from redis.exceptions import RedisError

from auth.clock import Clock, SystemClock
from auth.correlation_store import CorrelationStore
from auth.models import Credential, PendingAuthorization
from auth.token_cache import InMemoryTokenCache, TokenCache
from connectors.encryption import TokenCipher

logger = logging.getLogger(__name__)

# Delete KEYS[1] only while it still holds ARGV[1].
_DELETE_IF_EQUALS = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
end
return 0
"""


def _corr_key(state: str) -> str:
    return f"corr:{state}"


def _corr_user_key(user: str) -> str:
    return f"corr-user:{user}"


def _tok_key(user: str) -> str:
    return f"tok:{user}"


class RedisCorrelationStore(CorrelationStore):
    def __init__(self, client: Redis, ttl_seconds: float = 600, clock: Optional[Clock] = None):
        self._client = client
        self._ttl = ttl_seconds
        self._clock = clock or SystemClock()

    async def put(self, state: str, pending: PendingAuthorization) -> None:
        remaining = pending.expires_at(self._ttl) - self._clock.time()
        ttl = max(1, math.ceil(remaining))
        await self._client.set(_corr_key(state), pending.model_dump_json(), ex=ttl)
        previous = await self._client.set(_corr_user_key(pending.user), state, ex=ttl, get=True)
        if previous and previous != state:
            await self._client.delete(_corr_key(previous))
            logger.debug("Replaced pending authorization %s… for user %s", previous[:8], pending.user)

    async def take(self, state: str) -> Optional[PendingAuthorization]:
        try:
            raw = await self._client.getdel(_corr_key(state))
        except RedisError as exc:
            logger.warning("Redis read for state %s… failed, treating as unknown: %s", state[:8], exc)
            return None
        if raw is None:
            return None
        pending = PendingAuthorization.model_validate_json(raw)
        try:
            await self._client.eval(_DELETE_IF_EQUALS, 1, _corr_user_key(pending.user), state)
        except RedisError as exc:
            # Index key carries the same TTL as the entry.
            logger.warning("Redis index cleanup for user %s failed: %s", pending.user, exc)
        if pending.expires_at(self._ttl) <= self._clock.time():
            return None
        return pending


class RedisTokenCache(TokenCache):
    """
    Write-through mirror of an ``InMemoryTokenCache``.

    Redis is authoritative: a local entry that has expired, or expires
    within ``skew`` seconds, is re-read from Redis so a refresh done by
    another process is picked up. Redis outages degrade to the local cache
    with a warning.
    """

    def __init__(
        self,
        client: Redis,
        local: InMemoryTokenCache,
        cipher: TokenCipher,
        clock: Optional[Clock] = None,
        skew: float = 0.0,
    ):
        self._client = client
        self._local = local
        self._cipher = cipher
        self._clock = clock or SystemClock()
        self._skew = skew

    async def get(self, user: str) -> Optional[Credential]:
        cached = await self._local.get(user)
        if cached is not None and not cached.is_expired(self._clock.time(), self._skew):
            return cached
        try:
            raw = await self._client.get(_tok_key(user))
        except RedisError as exc:
            logger.warning("Redis read for %s failed, using local cache: %s", user, exc)
            return cached
        if raw is None:
            if cached is not None:
                await self._local.invalidate(user)
            return None
        credential = self._decode(raw)
        await self._local.put(user, credential)
        return credential

    async def put(self, user: str, credential: Credential) -> None:
        await self._local.put(user, credential)
        ttl = math.ceil(self._local.retention_seconds(credential))
        try:
            if ttl <= 0:
                await self._client.delete(_tok_key(user))
            else:
                await self._client.set(_tok_key(user), self._encode(credential), ex=ttl)
        except RedisError as exc:
            logger.warning("Redis write for %s failed, credential kept locally: %s", user, exc)

    async def invalidate(self, user: str) -> None:
        await self._local.invalidate(user)
        try:
            await self._client.delete(_tok_key(user))
        except RedisError as exc:
            logger.warning("Redis delete for %s failed: %s", user, exc)

    # ── serialisation ───────────────────────────────────────────────────

    def _encode(self, credential: Credential) -> str:
        data: dict[str, Any] = credential.model_dump()
        data["access_token"] = self._cipher.encrypt(credential.access_token)
        if credential.refresh_token:
            data["refresh_token"] = self._cipher.encrypt(credential.refresh_token)
        return json.dumps(data)

    def _decode(self, raw: str) -> Credential:
        data = json.loads(raw)
        data["access_token"] = self._cipher.decrypt(data["access_token"])
        if data.get("refresh_token"):
            data["refresh_token"] = self._cipher.decrypt(data["refresh_token"])
        return Credential.model_validate(data)
