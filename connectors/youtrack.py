"""
YouTrackConnector: OAuth2 against JetBrains Hub, the authorization
server in front of YouTrack.

Endpoints are derived from the Hub base URL:
  • ``{hub}/api/rest/oauth2/auth``   browser authorization
  • ``{hub}/api/rest/oauth2/token``  code exchange and refresh grant

Hub authenticates confidential clients with HTTP Basic auth on the token
endpoint and only issues refresh tokens for ``access_type=offline``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

import httpx
from pydantic import ValidationError

from config.settings import Settings
from connectors.base import BaseConnector, ConnectorError
from utils.schemas import TokenErrorResponse, TokenResponse

logger = logging.getLogger(__name__)


class YouTrackConnector(BaseConnector):
    """OAuth2 connector for YouTrack via Hub."""

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._settings = settings
        self._transport = transport

    @property
    def provider_name(self) -> str:
        return "youtrack"

    @property
    def default_scopes(self) -> List[str]:
        return list(self._settings.oauth_scopes)

    def is_configured(self) -> bool:
        return bool(self._settings.youtrack_client_id and self._settings.youtrack_client_secret)

    def get_auth_url(
        self,
        state: str,
        scopes: List[str],
        code_challenge: Optional[str] = None,
    ) -> str:
        params = {
            "response_type": "code",
            "client_id": self._settings.youtrack_client_id,
            "redirect_uri": self._settings.auth_callback_url,
            "scope": " ".join(scopes),
            "state": state,
            "access_type": "offline",        # gets refresh_token
            "request_credentials": "default",
        }
        if code_challenge:
            params["code_challenge"] = code_challenge
            params["code_challenge_method"] = "S256"
        return f"{self._settings.authorize_endpoint}?{urlencode(params)}"

    async def exchange_code(
        self,
        code: str,
        code_verifier: Optional[str] = None,
    ) -> TokenResponse:
        data = {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": self._settings.auth_callback_url,
        }
        if code_verifier:
            data["code_verifier"] = code_verifier
        return await self._post_token(data, "code exchange")

    async def refresh_access_token(
        self,
        refresh_token: str,
        scopes: Optional[List[str]] = None,
    ) -> TokenResponse:
        data = {
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
        }
        if scopes:
            data["scope"] = " ".join(scopes)
        return await self._post_token(data, "refresh")

    # ── HTTP ────────────────────────────────────────────────────────────

    async def _post_token(self, data: Dict[str, str], what: str) -> TokenResponse:
        try:
            async with httpx.AsyncClient(
                timeout=self._settings.oauth_http_timeout_seconds,
                transport=self._transport,
            ) as client:
                resp = await client.post(
                    self._settings.token_endpoint,
                    data=data,
                    auth=(self._settings.youtrack_client_id, self._settings.youtrack_client_secret),
                    headers={"Accept": "application/json"},
                )
        except httpx.HTTPError as exc:
            logger.warning("YouTrack %s request failed: %s", what, exc)
            raise ConnectorError(f"{what} request failed: {exc}") from exc

        body = _json_or_none(resp)
        if resp.status_code >= 400 or (isinstance(body, dict) and "error" in body):
            error = _parse_error(body)
            logger.warning(
                "YouTrack %s rejected: status=%d error=%s",
                what, resp.status_code, error.error if error else "(no body)",
            )
            if error is not None:
                raise ConnectorError(
                    f"{what} rejected: {error.error_description or error.error}",
                    error=error.error,
                    status_code=resp.status_code,
                )
            raise ConnectorError(f"{what} rejected with HTTP {resp.status_code}", status_code=resp.status_code)

        try:
            return TokenResponse.model_validate(body)
        except ValidationError as exc:
            raise ConnectorError(f"{what} returned a malformed token response") from exc


def _json_or_none(resp: httpx.Response) -> Any:
    try:
        return resp.json()
    except ValueError:
        return None


def _parse_error(body: Any) -> Optional[TokenErrorResponse]:
    if not isinstance(body, dict):
        return None
    try:
        return TokenErrorResponse.model_validate(body)
    except ValidationError:
        return None
