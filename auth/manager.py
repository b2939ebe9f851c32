"""
AuthManager: builds and owns the authorization components.

One instance per process, stored on the FastAPI application state and
handed to the chat side; nothing here is a module-level global.
"""

from __future__ import annotations

import logging
from typing import Optional

from redis.asyncio import Redis

from auth.callback_resolver import CallbackResolver
from auth.clock import Clock, SystemClock
from auth.correlation_store import CorrelationStore, InMemoryCorrelationStore
from auth.credential_provider import CredentialProvider
from auth.initiator import AuthorizationInitiator
from auth.redis_store import RedisCorrelationStore, RedisTokenCache
from auth.token_cache import InMemoryTokenCache, TokenCache
from config.settings import Settings
from connectors.base import BaseConnector
from connectors.encryption import TokenCipher
from connectors.youtrack import YouTrackConnector

logger = logging.getLogger(__name__)


class AuthManager:
    def __init__(
        self,
        settings: Settings,
        connector: Optional[BaseConnector] = None,
        clock: Optional[Clock] = None,
        redis_client: Optional[Redis] = None,
    ):
        self.settings = settings
        self.clock = clock or SystemClock()
        self.connector = connector or YouTrackConnector(settings)
        if not self.connector.is_configured():
            logger.warning(
                "Connector %s is not configured (missing client id/secret), code exchange will fail",
                self.connector.provider_name,
            )

        self._redis = redis_client
        self.correlations: CorrelationStore
        self.tokens: TokenCache
        local_tokens = InMemoryTokenCache(
            capacity=settings.token_cache_capacity,
            retention_grace_seconds=settings.token_retention_grace_seconds,
            clock=self.clock,
        )
        if redis_client is not None:
            self.correlations = RedisCorrelationStore(
                redis_client,
                ttl_seconds=settings.oauth_state_ttl_seconds,
                clock=self.clock,
            )
            self.tokens = RedisTokenCache(
                redis_client,
                local_tokens,
                TokenCipher(settings.token_encryption_key),
                clock=self.clock,
                skew=settings.oauth_expiry_skew_seconds,
            )
            logger.info("Auth stores backed by Redis")
        else:
            self.correlations = InMemoryCorrelationStore(
                ttl_seconds=settings.oauth_state_ttl_seconds,
                capacity=settings.oauth_state_capacity,
                clock=self.clock,
            )
            self.tokens = local_tokens
            logger.info("Auth stores kept in process memory")

        self.initiator = AuthorizationInitiator(
            self.correlations,
            self.connector,
            clock=self.clock,
            use_pkce=settings.oauth_use_pkce,
        )
        self.resolver = CallbackResolver(
            self.correlations,
            self.tokens,
            self.connector,
            clock=self.clock,
            exchange_timeout=settings.oauth_http_timeout_seconds,
        )
        self.credentials = CredentialProvider(
            self.tokens,
            self.connector,
            clock=self.clock,
            refresh_timeout=settings.oauth_http_timeout_seconds,
            expiry_skew=settings.oauth_expiry_skew_seconds,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "AuthManager":
        """Build with a Redis client when ``REDIS_URL`` is set."""
        client = None
        if settings.redis_url:
            client = Redis.from_url(settings.redis_url, decode_responses=True)
        return cls(settings, redis_client=client)

    async def close(self) -> None:
        if self._redis is not None:
            await self._redis.aclose()
