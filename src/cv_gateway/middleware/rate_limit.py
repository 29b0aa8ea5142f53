"""Fixed-window rate limiting for vote-casting endpoints.

Key pattern: "ratelimit:vote:{client_ip}:{minute_window}", counted with
Redis INCR + EXPIRE. Only POSTs to .../votes/free and .../votes/paid are
limited. When Redis is unreachable the request is let through and a
warning is logged: voting must not depend on the limiter being up.
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
from src.cv_common.errors import RateLimitError
from src.cv_common.redis_client import get_redis
from src.cv_common.response import error_response
from src.cv_gateway.network import client_ip

logger = logging.getLogger(__name__)

_WINDOW_SECONDS = 60
_LIMITED_SUFFIXES = ("/votes/free", "/votes/paid")


def is_vote_cast_path(method: str, path: str) -> bool:
    return method == "POST" and path.rstrip("/").endswith(_LIMITED_SUFFIXES)


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app: ASGIApp,
        limit_per_minute: int | None = None,
        redis_factory: Callable[[], Awaitable[aioredis.Redis]] = get_redis,
        enabled: bool | None = None,
    ) -> None:
        super().__init__(app)
        self._limit = limit_per_minute or settings.VOTE_RATE_LIMIT_PER_MINUTE
        self._redis_factory = redis_factory
        self._enabled = settings.RATE_LIMIT_ENABLED if enabled is None else enabled

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if not self._enabled or not is_vote_cast_path(request.method, request.url.path):
            return await call_next(request)

        window = int(time.time()) // _WINDOW_SECONDS
        key = f"ratelimit:vote:{client_ip(request.headers)}:{window}"
        try:
            redis = await self._redis_factory()
            count = await redis.incr(key)
            if count == 1:
                await redis.expire(key, _WINDOW_SECONDS)
        except RedisError:
            logger.warning("Rate limiter unavailable, allowing %s", request.url.path, exc_info=True)
            return await call_next(request)

        if count > self._limit:
            err = RateLimitError()
            retry_after = _WINDOW_SECONDS - int(time.time()) % _WINDOW_SECONDS
            return JSONResponse(
                status_code=err.http_status,
                content=error_response(err.code, err.message).model_dump(),
                headers={"Retry-After": str(retry_after)},
            )
        return await call_next(request)
