"""
Todo List API — application entry point.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from api.errors import register_exception_handlers
from api.middleware import register_middleware
from api.routes import router as task_router
from auth.jwt import TokenService
from auth.password import PasswordHasher
from auth.routes import router as auth_router
from config.settings import Settings, get_settings
from database.session import Database

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
        stream=sys.stdout,
    )
    for _noisy in ("sqlalchemy.engine", "asyncio"):
        logging.getLogger(_noisy).setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    db: Database = app.state.db
    try:
        await db.verify_connection()
    except Exception:
        logger.critical("FATAL: database connection failed, check DATABASE_URL")
        raise
    await db.create_all()
    logger.info("Database connection successful. Application ready to accept requests.")
    yield
    await db.dispose()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="Todo List API",
        version="1.0.0",
        description="User accounts and per-user task lists behind bearer tokens.",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.db = Database(settings)
    app.state.hasher = PasswordHasher(rounds=settings.bcrypt_rounds)
    app.state.tokens = TokenService(settings.jwt_secret, settings.jwt_expiry_seconds)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_middleware(app, request_timeout=settings.request_timeout_seconds)
    register_exception_handlers(app)

    # Routes
    app.include_router(auth_router, prefix="/api")
    app.include_router(task_router, prefix="/api")

    @app.get("/", response_class=PlainTextResponse)
    async def status_page() -> str:
        return "Todo List API Server is running and connected to database."

    return app


async def _probe_database(settings: Settings) -> None:
    probe = Database(settings)
    try:
        await probe.verify_connection()
    finally:
        await probe.dispose()


def run() -> None:
    settings = get_settings()
    configure_logging(settings)

    try:
        asyncio.run(_probe_database(settings))
    except Exception as exc:
        logger.critical("FATAL ERROR: Database connection failed: %s", exc)
        logger.critical("Check DATABASE_URL and ensure the database is running.")
        sys.exit(1)

    logger.info("Server running on port %s", settings.port)
    uvicorn.run(
        "main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level="debug" if settings.debug else "info",
    )


if __name__ == "__main__":
    run()
