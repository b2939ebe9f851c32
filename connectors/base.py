"""
BaseConnector: abstract interface for OAuth2 authorization servers.

A connector knows the provider's endpoints and wire format; it does not
hold any per-user state. The auth core calls it to build authorization
URLs, exchange codes and refresh tokens.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

from utils.schemas import TokenResponse


class ConnectorError(Exception):
    """Transport or provider failure while talking to a token endpoint."""

    def __init__(
        self,
        message: str,
        *,
        error: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.error = error
        self.status_code = status_code


class BaseConnector(ABC):
    """Abstract base for OAuth2 authorization-code providers."""

    # ── Identity ────────────────────────────────────────────────────────
    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Unique slug, e.g. 'youtrack'."""
        ...

    @property
    @abstractmethod
    def default_scopes(self) -> List[str]:
        """Scopes requested when the caller does not ask for specific ones."""
        ...

    # ── OAuth flow ──────────────────────────────────────────────────────

    @abstractmethod
    def get_auth_url(
        self,
        state: str,
        scopes: List[str],
        code_challenge: Optional[str] = None,
    ) -> str:
        """
        Build the provider's authorization URL.

        Parameters
        ----------
        state : str
            Correlation token echoed back on the redirect.
        scopes : list of str
            Scopes to request.
        code_challenge : str, optional
            PKCE S256 challenge; omitted from the URL when ``None``.
        """
        ...

    @abstractmethod
    async def exchange_code(
        self,
        code: str,
        code_verifier: Optional[str] = None,
    ) -> TokenResponse:
        """
        Exchange an authorization code for tokens.

        Raises
        ------
        ConnectorError – on transport errors, non-2xx answers or malformed bodies.
        """
        ...

    @abstractmethod
    async def refresh_access_token(
        self,
        refresh_token: str,
        scopes: Optional[List[str]] = None,
    ) -> TokenResponse:
        """
        Run the refresh grant.

        Raises
        ------
        ConnectorError – same conditions as ``exchange_code``.
        """
        ...

    # ── Helpers ─────────────────────────────────────────────────────────

    def is_configured(self) -> bool:
        return True
