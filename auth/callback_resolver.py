"""
Callback resolver: turns an inbound OAuth2 redirect back into a chat user.

This is where the stateless HTTP redirect meets the stateful chat
conversation: the state token is consumed exactly once, the code is
exchanged, and the resulting credential is filed under the user that
started the flow.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from auth.clock import Clock, SystemClock
from auth.correlation_store import CorrelationStore
from auth.errors import Denied, ExchangeFailed, ProviderError, UnknownOrExpiredState
from auth.models import Credential
from auth.token_cache import TokenCache
from connectors.base import BaseConnector, ConnectorError

logger = logging.getLogger(__name__)

_DENIAL_CODES = frozenset({"access_denied"})


class CallbackResolver:
    def __init__(
        self,
        store: CorrelationStore,
        tokens: TokenCache,
        connector: BaseConnector,
        clock: Optional[Clock] = None,
        exchange_timeout: float = 10.0,
    ):
        self._store = store
        self._tokens = tokens
        self._connector = connector
        self._clock = clock or SystemClock()
        self._timeout = exchange_timeout

    async def complete(
        self,
        state: Optional[str],
        code: Optional[str] = None,
        error: Optional[str] = None,
        error_description: Optional[str] = None,
    ) -> str:
        """
        Resolve a redirect callback.

        Returns
        -------
        The user identity that started the flow.

        Raises
        ------
        Denied                – the user declined consent
        ProviderError         – the provider reported another error
        UnknownOrExpiredState – forged, replayed or late callback
        ExchangeFailed        – the code exchange failed or timed out
        """
        if error:
            # Consume the entry anyway so the link cannot be reused.
            pending = await self._store.take(state) if state else None
            user = pending.user if pending else None
            detail = error_description or error
            if error in _DENIAL_CODES:
                logger.info("Authorization denied: user=%s state=%s…", user, (state or "")[:8])
                raise Denied(detail, user=user)
            logger.warning("Provider error on callback: user=%s error=%s (%s)", user, error, detail)
            raise ProviderError(f"{error}: {detail}", user=user)

        pending = await self._store.take(state) if state else None
        if pending is None:
            logger.warning("Callback with unknown or expired state %s…", (state or "")[:8])
            raise UnknownOrExpiredState()

        if not code:
            raise ProviderError("callback carried neither code nor error", user=pending.user)

        try:
            response = await asyncio.wait_for(
                self._connector.exchange_code(code, code_verifier=pending.code_verifier),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError as exc:
            logger.warning("Code exchange timed out after %.1fs for user %s", self._timeout, pending.user)
            raise ExchangeFailed("token exchange timed out", user=pending.user) from exc
        except ConnectorError as exc:
            logger.warning("Code exchange failed for user %s: %s", pending.user, exc)
            raise ExchangeFailed(str(exc), user=pending.user) from exc

        credential = Credential.from_token_response(
            pending.user,
            response,
            now=self._clock.time(),
            requested_scopes=pending.scopes,
        )
        await self._tokens.put(pending.user, credential)
        logger.info("Authorization complete: user=%s scopes=%s", pending.user, " ".join(credential.scopes))
        return pending.user
