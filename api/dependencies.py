"""
FastAPI dependencies (shared across routes).
"""

from __future__ import annotations

from fastapi import Request

from auth.manager import AuthManager
from bot.notifier import ChatNotifier


def get_auth_manager(request: Request) -> AuthManager:
    """The process-wide manager created by ``create_app``."""
    return request.app.state.auth_manager


def get_notifier(request: Request) -> ChatNotifier:
    return request.app.state.notifier
