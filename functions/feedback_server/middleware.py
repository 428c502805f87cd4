"""
CORS and access logging.
"""

from __future__ import annotations

import logging
import time
from typing import Awaitable, Callable

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

logger = logging.getLogger(__name__)


def add_cors(app: FastAPI, origins: list[str]) -> None:
    # The public form and the dashboard are served from another origin and
    # send the bearer key and X-Admin-Token headers.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins or ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )


async def log_requests(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """One access-log line per request; headers and bodies are never logged."""
    started = time.monotonic()
    try:
        response = await call_next(request)
    except Exception:
        logger.warning(
            "%s %s failed after %.1fms",
            request.method,
            request.url.path,
            (time.monotonic() - started) * 1000,
        )
        raise
    logger.info(
        "%s %s %d %.1fms",
        request.method,
        request.url.path,
        response.status_code,
        (time.monotonic() - started) * 1000,
    )
    return response
