"""
Global middleware.
"""

from __future__ import annotations

import logging
import time

from fastapi import FastAPI, Request

logger = logging.getLogger(__name__)

# The callback URL carries the code and state in its query string.
_NO_LEAK_HEADERS = {
    "Cache-Control": "no-store",
    "Referrer-Policy": "no-referrer",
}


def register_middleware(app: FastAPI, callback_path: str) -> None:
    """Attach request timing and callback hardening headers."""

    @app.middleware("http")
    async def request_timer(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - start
        response.headers["X-Process-Time"] = f"{elapsed:.4f}"
        if request.url.path == callback_path:
            response.headers.update(_NO_LEAK_HEADERS)
        # Path only: never log the query string of a callback.
        logger.debug("%s %s %d %.3fs", request.method, request.url.path, response.status_code, elapsed)
        return response
