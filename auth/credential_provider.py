"""
Credential provider: the single interface domain callers use to get an
access token for a user.

1. Look up the credential.
2. If it is still valid (with a small skew), return it.
3. If it has expired, refresh it, at most one refresh per user in flight.
4. Otherwise signal that the user must authorize again.
"""

from __future__ import annotations

import asyncio
import logging
import weakref
from typing import Dict, Optional

from auth.clock import Clock, SystemClock
from auth.errors import NotAuthorized, RefreshFailed
from auth.models import Credential
from auth.token_cache import TokenCache
from connectors.base import BaseConnector, ConnectorError

logger = logging.getLogger(__name__)


class CredentialProvider:
    def __init__(
        self,
        tokens: TokenCache,
        connector: BaseConnector,
        clock: Optional[Clock] = None,
        refresh_timeout: float = 10.0,
        expiry_skew: float = 60.0,
    ):
        self._tokens = tokens
        self._connector = connector
        self._clock = clock or SystemClock()
        self._timeout = refresh_timeout
        self._skew = expiry_skew
        # Locks disappear once no resolve() holds a reference.
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    async def resolve(self, user: str) -> str:
        """
        Return a currently valid access token for ``user``.

        Raises
        ------
        NotAuthorized – no credential, or expired without a refresh token
        RefreshFailed – the refresh grant failed; the credential was dropped
        """
        credential = await self._tokens.get(user)
        if credential is None:
            raise NotAuthorized(user=user)
        if not credential.is_expired(self._clock.time(), self._skew):
            return credential.access_token

        lock = self._lock_for(user)
        async with lock:
            # Another caller may have refreshed while we waited.
            credential = await self._tokens.get(user)
            if credential is None:
                raise NotAuthorized(user=user)
            if not credential.is_expired(self._clock.time(), self._skew):
                return credential.access_token
            refreshed = await self._refresh(user, credential)
            return refreshed.access_token

    async def bearer_headers(self, user: str) -> Dict[str, str]:
        """Authorization header for a tracker API call made on behalf of ``user``."""
        token = await self.resolve(user)
        return {"Authorization": f"Bearer {token}"}

    async def is_authorized(self, user: str) -> bool:
        """True if a credential exists (it may still need a refresh)."""
        return await self._tokens.get(user) is not None

    async def revoke(self, user: str) -> None:
        """Forget the user's credential locally."""
        await self._tokens.invalidate(user)
        logger.info("Credential revoked for user %s", user)

    # ── internals ───────────────────────────────────────────────────────

    def _lock_for(self, user: str) -> asyncio.Lock:
        lock = self._locks.get(user)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[user] = lock
        return lock

    async def _refresh(self, user: str, credential: Credential) -> Credential:
        if not credential.refresh_token:
            await self._tokens.invalidate(user)
            logger.info("Credential for user %s expired and has no refresh token", user)
            raise NotAuthorized("access token expired", user=user)

        try:
            response = await asyncio.wait_for(
                self._connector.refresh_access_token(credential.refresh_token, credential.scopes),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError as exc:
            await self._tokens.invalidate(user)
            logger.warning("Token refresh timed out after %.1fs for user %s", self._timeout, user)
            raise RefreshFailed("token refresh timed out", user=user) from exc
        except ConnectorError as exc:
            await self._tokens.invalidate(user)
            logger.warning("Token refresh failed for user %s: %s", user, exc)
            raise RefreshFailed(str(exc), user=user) from exc

        refreshed = Credential.from_token_response(
            user,
            response,
            now=self._clock.time(),
            previous=credential,
        )
        await self._tokens.put(user, refreshed)
        logger.info("Refreshed %s token for user %s", self._connector.provider_name, user)
        return refreshed
