"""
Records held by the correlation store and the token cache.
"""

from __future__ import annotations

import re
from typing import Any, List, Optional

from pydantic import BaseModel, Field

from utils.schemas import TokenResponse

# Used when a token endpoint omits ``expires_in``.
DEFAULT_TOKEN_LIFETIME = 3600

_USER_ID_RE = re.compile(r"^[A-Za-z0-9_.:@-]{1,128}$")


def validate_user_identity(user: Any) -> str:
    """
    Normalise a chat platform user id to the string key used by the stores.

    Raises ``ValueError`` for empty, over-long or oddly shaped ids.
    """
    if isinstance(user, bool) or user is None:
        raise ValueError(f"Invalid user identity: {user!r}")
    text = str(user).strip()
    if not _USER_ID_RE.match(text):
        raise ValueError(f"Invalid user identity: {user!r}")
    return text


class PendingAuthorization(BaseModel):
    """An authorization request waiting for its redirect callback."""

    state: str
    user: str
    scopes: List[str] = Field(default_factory=list)
    created_at: float
    code_verifier: Optional[str] = None   # PKCE secret, never leaves the server

    def expires_at(self, ttl: float) -> float:
        return self.created_at + ttl


class Credential(BaseModel):
    """Delegated authority to call the tracker as ``user``."""

    user: str
    access_token: str
    refresh_token: Optional[str] = None
    expires_at: float
    scopes: List[str] = Field(default_factory=list)
    token_type: str = "Bearer"

    @classmethod
    def from_token_response(
        cls,
        user: str,
        response: TokenResponse,
        now: float,
        previous: Optional["Credential"] = None,
        requested_scopes: Optional[List[str]] = None,
    ) -> "Credential":
        """
        Build a credential from a token endpoint answer.

        A refresh answer without ``refresh_token`` keeps the previous one;
        one that carries a new token rotates it.
        """
        lifetime = response.expires_in if response.expires_in is not None else DEFAULT_TOKEN_LIFETIME
        refresh_token = response.refresh_token
        if refresh_token is None and previous is not None:
            refresh_token = previous.refresh_token
        scopes = response.scopes()
        if not scopes:
            scopes = list(requested_scopes or (previous.scopes if previous else []))
        return cls(
            user=user,
            access_token=response.access_token,
            refresh_token=refresh_token,
            expires_at=now + lifetime,
            scopes=scopes,
            token_type=response.token_type or "Bearer",
        )

    def is_expired(self, now: float, skew: float = 0.0) -> bool:
        return self.expires_at - skew <= now

    def __repr__(self) -> str:
        # Keep token material out of logs and tracebacks.
        return (
            f"Credential(user={self.user!r}, expires_at={self.expires_at!r}, "
            f"has_refresh_token={self.refresh_token is not None})"
        )

    __str__ = __repr__
