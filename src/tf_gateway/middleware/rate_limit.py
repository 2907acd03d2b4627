"""Fixed-window rate limiting backed by Redis.

Rules (per minute, configurable in Settings):
  - auth endpoints:   RATE_LIMIT_AUTH_PER_MIN per client IP (anti brute-force)
  - write requests:   RATE_LIMIT_WRITE_PER_MIN per user (or IP if anonymous)
  - read requests:    RATE_LIMIT_READ_PER_MIN per user (or IP if anonymous)

Counting is INCR + EXPIRE on "ratelimit:{identity}:{group}:{window}".
The identity of a Bearer caller is the token subject; the token is only
decoded here, never looked up. If Redis is unreachable the request is let
through and the failure logged.

Exceptions raised inside BaseHTTPMiddleware bypass the app's exception
handlers, so a rejection is rendered to the error envelope directly.
"""

import logging
import time
from collections.abc import Awaitable, Callable

import redis.asyncio as aioredis
from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from config.settings import settings
from src.tf_common.errors import AppError, RateLimitError
from src.tf_common.redis_client import get_redis
from src.tf_common.response import error_response
from src.tf_gateway.auth.security import ACCESS, decode_token

logger = logging.getLogger(__name__)

WINDOW_SECONDS = 60
_READ_METHODS = {"GET", "HEAD", "OPTIONS"}
_EXEMPT_PATHS = {"/health", "/docs", "/openapi.json", "/redoc"}

RedisFactory = Callable[[], Awaitable[aioredis.Redis]]


def client_ip(request: Request) -> str:
    """Real client IP, honoring the first X-Forwarded-For hop."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def classify(request: Request) -> tuple[str, int]:
    """Return (group, limit_per_window) for a request."""
    if "/auth/" in request.url.path:
        return "auth", settings.RATE_LIMIT_AUTH_PER_MIN
    if request.method in _READ_METHODS:
        return "read", settings.RATE_LIMIT_READ_PER_MIN
    return "write", settings.RATE_LIMIT_WRITE_PER_MIN


def identity(request: Request, group: str) -> str:
    if group != "auth":
        header = request.headers.get("authorization", "")
        scheme, _, token = header.partition(" ")
        if scheme.lower() == "bearer" and token:
            try:
                return f"user:{decode_token(token, expected_type=ACCESS)['sub']}"
            except AppError:
                pass  # invalid token: the auth dependency will reject it; count by IP
    return f"ip:{client_ip(request)}"


async def hit(redis: aioredis.Redis, key: str, limit: int) -> tuple[bool, int]:
    """Count one request against `key`; returns (allowed, retry_after_seconds)."""
    count = await redis.incr(key)
    if count == 1:
        await redis.expire(key, WINDOW_SECONDS)
    if count > limit:
        ttl = await redis.ttl(key)
        return False, ttl if ttl and ttl > 0 else WINDOW_SECONDS
    return True, 0


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app: ASGIApp,
        enabled: bool | None = None,
        redis_factory: RedisFactory = get_redis,
    ) -> None:
        super().__init__(app)
        self._enabled = settings.RATE_LIMIT_ENABLED if enabled is None else enabled
        self._redis_factory = redis_factory

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if not self._enabled or request.url.path in _EXEMPT_PATHS:
            return await call_next(request)

        group, limit = classify(request)
        window = int(time.time()) // WINDOW_SECONDS
        key = f"ratelimit:{identity(request, group)}:{group}:{window}"
        try:
            allowed, retry_after = await hit(await self._redis_factory(), key, limit)
        except RedisError:
            logger.warning("rate limiter unavailable, allowing %s", key, exc_info=True)
            return await call_next(request)

        if not allowed:
            err = RateLimitError()
            logger.info("rate limit exceeded: %s", key)
            body = error_response(err.code, err.message)
            body.request_id = getattr(request.state, "request_id", body.request_id)
            return JSONResponse(
                status_code=err.http_status,
                content=body.model_dump(),
                headers={"Retry-After": str(retry_after)},
            )
        return await call_next(request)
