"""
Tracker Assistant: OAuth2 callback service entry point.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

import uvicorn
from fastapi import FastAPI

from api.middleware import register_middleware
from api.routes import create_router
from auth.manager import AuthManager
from bot.notifier import ChatNotifier, LoggingNotifier
from config.settings import Settings, config

logging.basicConfig(
    level=logging.DEBUG if config.debug else logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    stream=sys.stdout,
)
for _noisy in ("httpcore", "httpx", "urllib3"):
    logging.getLogger(_noisy).setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    manager: Optional[AuthManager] = None,
    notifier: Optional[ChatNotifier] = None,
) -> FastAPI:
    settings = settings or config
    app = FastAPI(
        title="Tracker Assistant",
        version="0.3.0",
        description="OAuth2 authorization bridge between the chat bot and the issue tracker.",
    )

    app.state.settings = settings
    app.state.auth_manager = manager or AuthManager.from_settings(settings)
    app.state.notifier = notifier or LoggingNotifier()

    register_middleware(app, settings.callback_path)
    app.include_router(create_router(settings.callback_path))

    @app.on_event("shutdown")
    async def on_shutdown():
        await app.state.auth_manager.close()
        logger.info("Auth manager closed.")

    logger.info("OAuth callback listening on %s (redirect URI %s)", settings.callback_path, settings.auth_callback_url)
    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level="debug" if config.debug else "info",
    )
