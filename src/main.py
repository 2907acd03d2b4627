"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import DBAPIError

from config.settings import settings
from src.tf_admin.api.router import router as admin_router
from src.tf_common.database import (
    INVALID_TEXT_REPRESENTATION_SQLSTATE,
    async_session_factory,
    engine,
    is_missing_schema_error,
    sqlstate_of,
)
from src.tf_common.errors import (
    AppError,
    DatabaseError,
    MalformedIdentifierError,
    SchemaNotInitializedError,
)
from src.tf_common.redis_client import close_redis, redis_ok
from src.tf_common.response import error_response
from src.tf_content.api.follows_router import router as follows_router
from src.tf_content.api.router import router as content_router
from src.tf_gateway.api.router import router as auth_router
from src.tf_gateway.middleware.rate_limit import RateLimitMiddleware
from src.tf_gateway.middleware.request_log import RequestLogMiddleware
from src.tf_ledger.api.ads_router import router as ads_router
from src.tf_ledger.api.router import router as wallet_router
from src.tf_messaging.api.router import router as messaging_router
from src.tf_notification.api.router import router as notification_router
from src.tf_notification.application.service import dispatcher
from src.tf_profile.api.router import router as profile_router
from src.tf_profile.application.service import ProfileService
from src.tf_settings.api.router import router as settings_router
from src.tf_settings.application.service import settings_cache

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

VERSION = "0.1.0"


async def _bootstrap() -> None:
    """Load site settings and apply the configured admin, if any."""
    async with async_session_factory() as db:
        await settings_cache.load(db)
    if not settings.ADMIN_EMAIL:
        return
    async with async_session_factory() as db:
        try:
            await ProfileService().bootstrap_admin(
                db, settings.ADMIN_EMAIL, settings.ADMIN_SEED_BALANCE_MICROS
            )
        except DBAPIError as e:
            if not is_missing_schema_error(e):
                raise
            logger.warning("schema missing, admin bootstrap skipped; run `alembic upgrade head`")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify DB, check Redis, load settings, bootstrap admin, start fan-out."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    if not await redis_ok():
        logger.warning("starting without Redis; rate limiting will let requests through")
    await _bootstrap()
    dispatcher.start()
    yield
    await dispatcher.stop()
    await engine.dispose()
    await close_redis()


app = FastAPI(
    title=settings.APP_NAME,
    version=VERSION,
    lifespan=lifespan,
)


# Starlette runs the last-added middleware first: request ids exist before rate limiting
app.add_middleware(RateLimitMiddleware)
app.add_middleware(RequestLogMiddleware)


def _error_json(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return JSONResponse(status_code=exc.http_status, content=resp.model_dump())


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return _error_json(request, exc)


@app.exception_handler(DBAPIError)
async def db_error_handler(request: Request, exc: DBAPIError) -> JSONResponse:
    if is_missing_schema_error(exc):
        logger.error("database schema missing: run `alembic upgrade head`")
        return _error_json(request, SchemaNotInitializedError())
    if sqlstate_of(exc) == INVALID_TEXT_REPRESENTATION_SQLSTATE:
        return _error_json(request, MalformedIdentifierError())
    logger.exception("database error on %s %s", request.method, request.url.path)
    return _error_json(request, DatabaseError())


app.include_router(auth_router, prefix="/api/v1")
app.include_router(profile_router, prefix="/api/v1")
app.include_router(content_router, prefix="/api/v1")
app.include_router(follows_router, prefix="/api/v1")
app.include_router(wallet_router, prefix="/api/v1")
app.include_router(ads_router, prefix="/api/v1")
app.include_router(messaging_router, prefix="/api/v1")
app.include_router(notification_router, prefix="/api/v1")
app.include_router(settings_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    """Liveness plus schema and Redis status; never fails on a missing schema."""
    schema = "ok"
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1 FROM settings LIMIT 1"))
    except DBAPIError as e:
        if not is_missing_schema_error(e):
            raise
        schema = "missing"
    redis = "ok" if await redis_ok() else "down"
    return {"status": "ok", "version": VERSION, "schema": schema, "redis": redis}
