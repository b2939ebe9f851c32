"""
Authorization initiator: the chat-side entry point of the flow.

``begin`` mints a correlation token, records who asked for it and returns
the provider URL to hand to the user. No network I/O happens here.
"""

from __future__ import annotations

import base64
import hashlib
import logging
import secrets
from typing import Any, Iterable, List, Optional

from auth.clock import Clock, SystemClock
from auth.correlation_store import CorrelationStore
from auth.models import PendingAuthorization, validate_user_identity
from connectors.base import BaseConnector

logger = logging.getLogger(__name__)


def new_state_token() -> str:
    """256 bits from the OS CSPRNG, URL-safe."""
    return secrets.token_urlsafe(32)


def new_code_verifier() -> str:
    """PKCE verifier (RFC 7636 §4.1): 43 chars from the unreserved set."""
    return secrets.token_urlsafe(32)


def code_challenge_s256(verifier: str) -> str:
    digest = hashlib.sha256(verifier.encode("ascii")).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


class AuthorizationInitiator:
    def __init__(
        self,
        store: CorrelationStore,
        connector: BaseConnector,
        clock: Optional[Clock] = None,
        use_pkce: bool = True,
    ):
        self._store = store
        self._connector = connector
        self._clock = clock or SystemClock()
        self._use_pkce = use_pkce

    async def begin(self, user: Any, scopes: Optional[Iterable[str]] = None) -> str:
        """
        Start an authorization attempt for ``user``.

        Any earlier pending attempt by the same user is invalidated, so only
        the most recent link can complete.

        Returns
        -------
        The provider authorization URL to deliver to the user.
        """
        user_id = validate_user_identity(user)
        requested: List[str] = list(scopes) if scopes else self._connector.default_scopes
        state = new_state_token()
        verifier = new_code_verifier() if self._use_pkce else None

        pending = PendingAuthorization(
            state=state,
            user=user_id,
            scopes=requested,
            created_at=self._clock.time(),
            code_verifier=verifier,
        )
        await self._store.put(state, pending)

        url = self._connector.get_auth_url(
            state,
            requested,
            code_challenge=code_challenge_s256(verifier) if verifier else None,
        )
        logger.info(
            "Authorization requested: user=%s state=%s… scopes=%s",
            user_id, state[:8], " ".join(requested),
        )
        return url
