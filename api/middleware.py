"""
Global middleware.
"""

from __future__ import annotations

import asyncio
import logging
import time

from fastapi import FastAPI, Request, status

from api.errors import error_response

logger = logging.getLogger(__name__)


def register_middleware(app: FastAPI, request_timeout: float) -> None:
    """Attach any app-level middleware."""

    @app.middleware("http")
    async def request_timeout_guard(request: Request, call_next):
        try:
            return await asyncio.wait_for(call_next(request), timeout=request_timeout)
        except asyncio.TimeoutError:
            logger.error(
                "%s %s timed out after %.1fs",
                request.method, request.url.path, request_timeout,
            )
            return error_response(
                status.HTTP_500_INTERNAL_SERVER_ERROR, "Request timed out."
            )

    @app.middleware("http")
    async def request_timer(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - start
        response.headers["X-Process-Time"] = f"{elapsed:.4f}"
        logger.debug("%s %s — %.3fs", request.method, request.url.path, elapsed)
        return response
