"""
Chat notifier: how the callback endpoint resumes the conversation.

The callback resolver returns the user that started the flow; the HTTP
route passes it here so the chat transport can tell the user what happened.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from auth.errors import AuthError

logger = logging.getLogger(__name__)


class ChatNotifier(ABC):
    @abstractmethod
    async def authorization_completed(self, user: str) -> None:
        ...

    @abstractmethod
    async def authorization_failed(self, user: str, error: AuthError) -> None:
        ...


class LoggingNotifier(ChatNotifier):
    """Default notifier when no chat transport is attached."""

    async def authorization_completed(self, user: str) -> None:
        logger.info("User %s is now authorized", user)

    async def authorization_failed(self, user: str, error: AuthError) -> None:
        logger.info("Authorization for user %s failed: %s", user, error.kind)
