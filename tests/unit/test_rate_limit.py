"""Tests for the vote-casting rate limiter (fake Redis, no network)."""

from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from redis.exceptions import ConnectionError as RedisConnectionError

from src.cv_gateway.middleware.rate_limit import RateLimitMiddleware, is_vote_cast_path


def _make_app(redis: AsyncMock, limit: int = 2) -> FastAPI:
    app = FastAPI()

    async def _redis_factory():
        return redis

    app.add_middleware(
        RateLimitMiddleware, limit_per_minute=limit, redis_factory=_redis_factory, enabled=True
    )

    @app.post("/api/v1/contests/{contest_id}/votes/free")
    async def vote(contest_id: str) -> dict:
        return {"ok": True}

    @app.get("/api/v1/contests/{contest_id}/results/public")
    async def results(contest_id: str) -> dict:
        return {"ok": True}

    return app


def _counting_redis() -> AsyncMock:
    redis = AsyncMock()
    counts: dict[str, int] = {}

    async def incr(key: str) -> int:
        counts[key] = counts.get(key, 0) + 1
        return counts[key]

    redis.incr = AsyncMock(side_effect=incr)
    return redis


class TestIsVoteCastPath:
    @pytest.mark.parametrize(
        ("method", "path", "expected"),
        [
            ("POST", "/api/v1/contests/1/votes/free", True),
            ("POST", "/api/v1/contests/1/votes/paid/", True),
            ("GET", "/api/v1/contests/1/votes/free", False),
            ("POST", "/api/v1/vote-orders", False),
        ],
    )
    def test_matches_only_vote_posts(self, method: str, path: str, expected: bool) -> None:
        assert is_vote_cast_path(method, path) is expected


class TestRateLimitMiddleware:
    @pytest.mark.asyncio
    async def test_blocks_after_limit(self) -> None:
        redis = _counting_redis()
        transport = ASGITransport(app=_make_app(redis))
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            headers = {"X-Forwarded-For": "203.0.113.5"}
            first = await client.post("/api/v1/contests/1/votes/free", headers=headers)
            second = await client.post("/api/v1/contests/1/votes/free", headers=headers)
            third = await client.post("/api/v1/contests/1/votes/free", headers=headers)

        assert first.status_code == 200
        assert second.status_code == 200
        assert third.status_code == 429
        assert third.json()["code"] == 9001
        assert "Retry-After" in third.headers
        redis.expire.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_counts_each_ip_separately(self) -> None:
        transport = ASGITransport(app=_make_app(_counting_redis(), limit=1))
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            a = await client.post(
                "/api/v1/contests/1/votes/free", headers={"X-Forwarded-For": "203.0.113.1"}
            )
            b = await client.post(
                "/api/v1/contests/1/votes/free", headers={"X-Forwarded-For": "203.0.113.2"}
            )
        assert a.status_code == 200
        assert b.status_code == 200

    @pytest.mark.asyncio
    async def test_other_paths_not_counted(self) -> None:
        redis = _counting_redis()
        transport = ASGITransport(app=_make_app(redis, limit=1))
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            for _ in range(3):
                resp = await client.get("/api/v1/contests/1/results/public")
                assert resp.status_code == 200
        redis.incr.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_fails_open_when_redis_is_down(self) -> None:
        redis = AsyncMock()
        redis.incr = AsyncMock(side_effect=RedisConnectionError("down"))
        transport = ASGITransport(app=_make_app(redis, limit=1))
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            for _ in range(3):
                resp = await client.post("/api/v1/contests/1/votes/free")
                assert resp.status_code == 200
