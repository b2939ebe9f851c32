"""
Tests for the in-memory token cache.
"""

import pytest

from auth.models import Credential
from auth.token_cache import InMemoryTokenCache


def _cred(user: str, expires_at: float, refresh_token: str | None = "RT") -> Credential:
    return Credential(user=user, access_token=f"AT-{user}", refresh_token=refresh_token, expires_at=expires_at)


class TestTokenCache:
    @pytest.mark.asyncio
    async def test_put_get_invalidate(self, clock):
        cache = InMemoryTokenCache(clock=clock)
        await cache.put("42", _cred("42", clock.time() + 3600))

        assert (await cache.get("42")).access_token == "AT-42"
        await cache.invalidate("42")
        assert await cache.get("42") is None

    @pytest.mark.asyncio
    async def test_put_overwrites(self, clock):
        cache = InMemoryTokenCache(clock=clock)
        await cache.put("42", _cred("42", clock.time() + 10))
        newer = Credential(user="42", access_token="AT-new", expires_at=clock.time() + 3600)
        await cache.put("42", newer)

        assert (await cache.get("42")).access_token == "AT-new"

    @pytest.mark.asyncio
    async def test_expired_credential_is_retained_for_refresh(self, clock):
        cache = InMemoryTokenCache(retention_grace_seconds=86400, clock=clock)
        await cache.put("42", _cred("42", clock.time() + 3600))

        clock.advance(7200)
        cred = await cache.get("42")
        assert cred is not None
        assert cred.is_expired(clock.time())

    @pytest.mark.asyncio
    async def test_dropped_after_retention_grace(self, clock):
        cache = InMemoryTokenCache(retention_grace_seconds=100, clock=clock)
        await cache.put("42", _cred("42", clock.time() + 3600))

        clock.advance(3701)
        assert await cache.get("42") is None

    @pytest.mark.asyncio
    async def test_lru_eviction_reads_as_missing(self, clock):
        cache = InMemoryTokenCache(capacity=2, clock=clock)
        await cache.put("a", _cred("a", clock.time() + 3600))
        await cache.put("b", _cred("b", clock.time() + 3600))
        await cache.get("a")                      # a is now most recently used
        await cache.put("c", _cred("c", clock.time() + 3600))

        assert await cache.get("b") is None
        assert await cache.get("a") is not None
        assert await cache.get("c") is not None

    @pytest.mark.asyncio
    async def test_rejects_mismatched_user(self, clock):
        cache = InMemoryTokenCache(clock=clock)
        with pytest.raises(ValueError):
            await cache.put("42", _cred("43", clock.time() + 3600))

    def test_credential_repr_hides_tokens(self, clock):
        text = repr(_cred("42", clock.time() + 3600))
        assert "AT-42" not in text
        assert "RT" not in text.replace("has_refresh_token", "")
