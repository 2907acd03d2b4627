"""Unit tests for the Redis fixed-window rate limiter."""

import httpx
import pytest
from fastapi import FastAPI
from redis.exceptions import ConnectionError as RedisConnectionError
from starlette.requests import Request

from config.settings import settings
from src.tf_gateway.auth.security import create_access_token
from src.tf_gateway.middleware.rate_limit import (
    WINDOW_SECONDS,
    RateLimitMiddleware,
    classify,
    hit,
    identity,
)


class FakeRedis:
    def __init__(self) -> None:
        self.counts: dict[str, int] = {}
        self.expiries: dict[str, int] = {}

    async def incr(self, key: str) -> int:
        self.counts[key] = self.counts.get(key, 0) + 1
        return self.counts[key]

    async def expire(self, key: str, seconds: int) -> bool:
        self.expiries[key] = seconds
        return True

    async def ttl(self, key: str) -> int:
        return 42


def _request(method: str = "GET", path: str = "/api/v1/posts", headers=None) -> Request:
    scope = {
        "type": "http",
        "method": method,
        "path": path,
        "query_string": b"",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": ("10.0.0.1", 5000),
        "server": ("test", 80),
        "scheme": "http",
    }
    return Request(scope)


def _app(redis_factory, enabled: bool = True) -> FastAPI:
    app = FastAPI()
    app.add_middleware(RateLimitMiddleware, enabled=enabled, redis_factory=redis_factory)

    @app.get("/api/v1/posts")
    async def posts() -> dict[str, bool]:
        return {"ok": True}

    @app.get("/health")
    async def health() -> dict[str, bool]:
        return {"ok": True}

    return app


class TestClassify:
    def test_groups(self) -> None:
        assert classify(_request("POST", "/api/v1/auth/login"))[0] == "auth"
        assert classify(_request("GET", "/api/v1/posts"))[0] == "read"
        assert classify(_request("POST", "/api/v1/posts"))[0] == "write"


class TestIdentity:
    def test_bearer_subject(self) -> None:
        token = create_access_token("user-9")
        req = _request(headers={"Authorization": f"Bearer {token}"})
        assert identity(req, "read") == "user:user-9"

    def test_auth_group_is_always_by_ip(self) -> None:
        token = create_access_token("user-9")
        req = _request(headers={"Authorization": f"Bearer {token}"})
        assert identity(req, "auth") == "ip:10.0.0.1"

    def test_invalid_token_counts_by_forwarded_ip(self) -> None:
        req = _request(headers={"Authorization": "Bearer junk", "X-Forwarded-For": "1.2.3.4, 10.0.0.1"})
        assert identity(req, "write") == "ip:1.2.3.4"


class TestHit:
    async def test_window_expiry_set_once_and_limit_enforced(self) -> None:
        redis = FakeRedis()

        assert await hit(redis, "k", 2) == (True, 0)
        assert await hit(redis, "k", 2) == (True, 0)
        assert await hit(redis, "k", 2) == (False, 42)
        assert redis.expiries == {"k": WINDOW_SECONDS}


class TestMiddleware:
    async def test_rejects_over_limit_with_envelope(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(settings, "RATE_LIMIT_READ_PER_MIN", 1)
        redis = FakeRedis()

        async def factory() -> FakeRedis:
            return redis

        transport = httpx.ASGITransport(app=_app(factory))
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            assert (await client.get("/api/v1/posts")).status_code == 200
            resp = await client.get("/api/v1/posts")

        assert resp.status_code == 429
        assert resp.headers["Retry-After"] == "42"
        assert resp.json()["code"] == 9001

    async def test_redis_outage_fails_open(self) -> None:
        async def factory():
            raise RedisConnectionError("redis down")

        transport = httpx.ASGITransport(app=_app(factory))
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            resp = await client.get("/api/v1/posts")

        assert resp.status_code == 200

    async def test_health_is_exempt(self) -> None:
        async def factory():
            raise AssertionError("redis must not be consulted")

        transport = httpx.ASGITransport(app=_app(factory))
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            assert (await client.get("/health")).status_code == 200
