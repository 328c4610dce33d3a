"""
FastAPI application bootstrap with: \n
- Lifespan-managed process resources (database engine and session factory,
  S3 client, completion service) stored on `app.state` \n
- Per-IP rate limiting (slowapi) and gzip compression of larger responses \n
- CORS configured for the frontend \n
- Uniform error translation (`humanlenk.api.errors`) \n
- Routers for health, auth, chat, files, admin and surveys \n

Environment contract (from `Settings`): \n
- FRONTEND_URL: allowed CORS origin. \n
- RATE_LIMIT: per-IP request budget, e.g. "100 per 15 minutes". \n
- DB_*: database connection; DB_AUTO_CREATE creates missing tables on start-up. \n
- BUCKET_NAME: S3 storage is disabled (503 on storage routes) when unset. \n
- API_KEY: the completion service reports "not configured" when unset. \n

Run with ``uvicorn humanlenk.main:create_app --factory``.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from slowapi.middleware import SlowAPIMiddleware

from humanlenk.api.aws_bucket_funcs.funcs import get_client
from humanlenk.api.completion_service import CompletionService
from humanlenk.api.errors import register_exception_handlers
from humanlenk.api.rate_limit import build_limiter
from humanlenk.api.routers import admin, auth, chat, files, health, surveys
from humanlenk.database.config.config import Settings, get_settings
from humanlenk.database.config.connection_engine import build_engine, build_session_factory, metadata
from humanlenk.database.config.logging_config import setup_logging
import humanlenk.database.entities  # noqa: F401  registers every mapper on `metadata`

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    App lifespan manager.

    Notes
    ------------
    - On startup (before yielding):
        * Build the engine (one pool per process) and the session factory.
        * Create missing tables when DB_AUTO_CREATE is set.
        * Build the S3 client when a bucket is configured.
        * Build the completion service.
    - On shutdown (after yielding):
        * Dispose of the engine and its pooled connections.
    """
    settings: Settings = app.state.settings

    engine = build_engine(settings)
    if settings.DB_AUTO_CREATE:
        metadata.create_all(engine)
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)

    if settings.BUCKET_NAME:
        app.state.storage_client = get_client(settings)
    else:
        app.state.storage_client = None
        logger.warning("BUCKET_NAME is not set, file storage is disabled")

    app.state.completion_service = CompletionService(settings)
    logger.info(
        "HumanLenk API started: environment=%s completion_configured=%s storage_configured=%s",
        settings.ENVIRONMENT, app.state.completion_service.configured, app.state.storage_client is not None,
    )

    try:
        yield
    finally:
        engine.dispose()
        logger.info("HumanLenk API shut down, database pool disposed")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Parameters
    ----------
    settings : Settings, optional
        Configuration to use; read from the environment / `.env` when omitted.

    Returns
    -------
    FastAPI
        The application, with routers, middleware and exception handlers registered.
    """
    settings = settings or get_settings()
    setup_logging(settings)

    app = FastAPI(title="HumanLenk API", lifespan=lifespan)
    app.state.settings = settings
    app.state.limiter = build_limiter(settings)

    # Added last runs first: CORS wraps the gzip layer, which wraps the limiter.
    app.add_middleware(SlowAPIMiddleware)
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.FRONTEND_URL],      # Frontend origin
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(chat.router)
    app.include_router(files.router)
    app.include_router(admin.router)
    app.include_router(surveys.router)
    return app
