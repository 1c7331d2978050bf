from __future__ import annotations

import json
import logging
import time
from typing import Any, Callable, Optional

from redis.asyncio import Redis
from redis.exceptions import RedisError

from ..domain.errors import PersistenceStaleError, PersistenceUnavailableError

logger = logging.getLogger(__name__)


class TimestampedStore:
    """
    Shared snapshot store on Redis.

    Each key holds `{"written_at": <epoch seconds>, "value": <payload>}` and is
    kept for `retention_seconds`. Reads older than `freshness_seconds` are
    reported stale; a missing key or an unreachable server is unavailable.
    """

    def __init__(
        self,
        redis: Optional[Redis],
        *,
        freshness_seconds: float,
        retention_seconds: int = 86400,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.redis = redis
        self.freshness_seconds = freshness_seconds
        self.retention_seconds = retention_seconds
        self._clock = clock

    @classmethod
    async def connect(cls, url: str, *, freshness_seconds: float, retention_seconds: int = 86400) -> "TimestampedStore":
        """Open a client and ping it. An unreachable server leaves the store detached."""
        redis: Optional[Redis] = Redis.from_url(url, encoding="utf-8", decode_responses=True)
        try:
            await redis.ping()
            logger.info("sync store connected to %s", url)
        except RedisError as exc:
            logger.error("sync store unreachable, running without it: %s", exc)
            await redis.aclose()
            redis = None
        return cls(redis, freshness_seconds=freshness_seconds, retention_seconds=retention_seconds)

    async def close(self) -> None:
        if self.redis is not None:
            await self.redis.aclose()

    async def put(self, key: str, value: Any) -> None:
        if self.redis is None:
            return
        record = json.dumps({"written_at": self._clock(), "value": value})
        try:
            await self.redis.setex(key, self.retention_seconds, record)
        except RedisError as exc:
            logger.error("sync store write failed for %r: %s", key, exc)

    async def get(self, key: str) -> Any:
        if self.redis is None:
            raise PersistenceUnavailableError("sync store is not connected")
        try:
            raw = await self.redis.get(key)
        except RedisError as exc:
            raise PersistenceUnavailableError(f"sync store read failed for {key!r}") from exc
        if raw is None:
            raise PersistenceUnavailableError(f"nothing stored under {key!r}")
        record = json.loads(raw)
        age = self._clock() - record["written_at"]
        if age > self.freshness_seconds:
            raise PersistenceStaleError(f"{key!r} is {age:.0f}s old")
        return record["value"]

    async def load(self, key: str, default: Any) -> Any:
        try:
            return await self.get(key)
        except PersistenceStaleError as exc:
            logger.warning("sync store stale, using default: %s", exc)
            return default
        except PersistenceUnavailableError:
            return default
