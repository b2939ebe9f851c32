"""
OAuth2 redirect endpoint and health check.

The callback path is registered verbatim with the provider as the
redirect URI, so it is configurable rather than hard-coded.
"""

from __future__ import annotations

import logging
from typing import Dict, Optional, Type

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import HTMLResponse

from api.dependencies import get_auth_manager, get_notifier
from api.pages import callback_page
from auth.errors import (
    AuthError,
    Denied,
    ExchangeFailed,
    ProviderError,
    UnknownOrExpiredState,
)
from auth.manager import AuthManager
from bot.notifier import ChatNotifier

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: Dict[Type[AuthError], int] = {
    UnknownOrExpiredState: status.HTTP_400_BAD_REQUEST,
    Denied: status.HTTP_200_OK,
    ProviderError: status.HTTP_502_BAD_GATEWAY,
    ExchangeFailed: status.HTTP_502_BAD_GATEWAY,
}


def create_router(callback_path: str = "/callback") -> APIRouter:
    router = APIRouter(tags=["oauth"])

    @router.get(callback_path, response_class=HTMLResponse)
    async def oauth_callback(
        state: Optional[str] = Query(None),
        code: Optional[str] = Query(None),
        error: Optional[str] = Query(None),
        error_description: Optional[str] = Query(None),
        manager: AuthManager = Depends(get_auth_manager),
        notifier: ChatNotifier = Depends(get_notifier),
    ) -> HTMLResponse:
        """
        Provider redirect target.

        Resolves the callback to the chat user that started the flow, then
        lets the chat side know. The page is informational only.
        """
        try:
            user = await manager.resolver.complete(
                state,
                code=code,
                error=error,
                error_description=error_description,
            )
        except AuthError as exc:
            if exc.user is not None:
                await _notify_failed(notifier, exc.user, exc)
            return HTMLResponse(
                content=callback_page(False, "Authorization failed", exc.user_message),
                status_code=_STATUS_BY_ERROR.get(type(exc), status.HTTP_400_BAD_REQUEST),
            )

        await _notify_completed(notifier, user)
        return HTMLResponse(
            content=callback_page(True, "Connected!", "You can return to the chat now."),
            status_code=status.HTTP_200_OK,
        )

    @router.get("/health")
    async def health_check() -> Dict[str, str]:
        return {"status": "ok"}

    return router


# The page must render even if the chat side is unreachable.


async def _notify_completed(notifier: ChatNotifier, user: str) -> None:
    try:
        await notifier.authorization_completed(user)
    except Exception:
        logger.exception("Chat notification failed for user %s", user)


async def _notify_failed(notifier: ChatNotifier, user: str, error: AuthError) -> None:
    try:
        await notifier.authorization_failed(user, error)
    except Exception:
        logger.exception("Chat notification failed for user %s", user)
