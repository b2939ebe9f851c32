"""
Shared fixtures: a controllable clock and a scripted OAuth2 connector.
"""

import asyncio
import threading
from typing import List, Optional, Tuple
from urllib.parse import urlencode

import pytest

from config.settings import Settings
from connectors.base import BaseConnector, ConnectorError
from utils.schemas import TokenResponse


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: float = 1_700_000_000.0):
        self._now = start
        self._lock = threading.Lock()

    def time(self) -> float:
        with self._lock:
            return self._now

    def advance(self, seconds: float) -> float:
        with self._lock:
            self._now += seconds
            return self._now


class StubConnector(BaseConnector):
    """Connector whose token endpoint answers are scripted by the test."""

    def __init__(self):
        self.exchange_calls: List[Tuple[str, Optional[str]]] = []
        self.refresh_calls: List[str] = []
        self.exchange_result = TokenResponse(access_token="AT1", refresh_token="RT1", expires_in=3600)
        self.exchange_error: Optional[Exception] = None
        self.exchange_delay = 0.0
        self.refresh_error: Optional[Exception] = None
        self.refresh_delay = 0.0
        self.rotate_refresh_token = False

    @property
    def provider_name(self) -> str:
        return "stub"

    @property
    def default_scopes(self) -> List[str]:
        return ["YouTrack"]

    def get_auth_url(self, state, scopes, code_challenge=None) -> str:
        params = {
            "response_type": "code",
            "client_id": "cid",
            "redirect_uri": "http://testserver/callback",
            "scope": " ".join(scopes),
            "state": state,
        }
        if code_challenge:
            params["code_challenge"] = code_challenge
            params["code_challenge_method"] = "S256"
        return f"https://hub.example/api/rest/oauth2/auth?{urlencode(params)}"

    async def exchange_code(self, code, code_verifier=None) -> TokenResponse:
        self.exchange_calls.append((code, code_verifier))
        if self.exchange_delay:
            await asyncio.sleep(self.exchange_delay)
        if self.exchange_error is not None:
            raise self.exchange_error
        return self.exchange_result

    async def refresh_access_token(self, refresh_token, scopes=None) -> TokenResponse:
        self.refresh_calls.append(refresh_token)
        n = len(self.refresh_calls)
        if self.refresh_delay:
            await asyncio.sleep(self.refresh_delay)
        if self.refresh_error is not None:
            raise self.refresh_error
        return TokenResponse(
            access_token=f"AT-refreshed-{n}",
            refresh_token=f"RT-rotated-{n}" if self.rotate_refresh_token else None,
            expires_in=3600,
        )


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def connector() -> StubConnector:
    return StubConnector()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        youtrack_hub_url="https://hub.example",
        youtrack_client_id="cid",
        youtrack_client_secret="secret",
        auth_callback_url="http://testserver/callback",
        oauth_state_ttl_seconds=600,
        oauth_expiry_skew_seconds=60,
        oauth_http_timeout_seconds=0.5,
        redis_url=None,
    )


@pytest.fixture
def connector_error() -> ConnectorError:
    return ConnectorError("invalid_grant", error="invalid_grant", status_code=400)
