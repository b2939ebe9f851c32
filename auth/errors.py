"""
Authorization error taxonomy.

Every provider or network failure is translated into one of these before it
leaves the callback resolver or the credential provider, so chat-facing and
HTTP-facing code only ever deals with ``AuthError``.
"""

from __future__ import annotations

from typing import Optional


class AuthError(Exception):
    """Base class, scoped to a single user's authorization attempt."""

    kind: str = "auth_error"
    user_message: str = "Authorization failed."

    def __init__(self, detail: str = "", *, user: Optional[str] = None):
        super().__init__(detail or self.user_message)
        self.detail = detail or self.user_message
        self.user = user


class UnknownOrExpiredState(AuthError):
    """Forged, replayed or late callback."""

    kind = "unknown_or_expired_state"
    user_message = "This authorization link is no longer valid, please restart authorization."


class Denied(AuthError):
    """The user declined consent at the provider."""

    kind = "denied"
    user_message = "Authorization was cancelled."


class ProviderError(AuthError):
    """The provider reported a failure other than a denial."""

    kind = "provider_error"
    user_message = "The tracker could not complete the authorization, please try again later."


class ExchangeFailed(AuthError):
    """The authorization code could not be exchanged (codes are single-use)."""

    kind = "exchange_failed"
    user_message = "Could not finish the authorization, please start it again."


class NotAuthorized(AuthError):
    """No usable credential; the caller should start a new authorization."""

    kind = "not_authorized"
    user_message = "No valid access token found, use /login to sign in to the tracker."


class RefreshFailed(NotAuthorized):
    """The refresh grant failed; the refresh token is presumed dead."""

    kind = "refresh_failed"
    user_message = "Your tracker session has expired, use /login to sign in again."
