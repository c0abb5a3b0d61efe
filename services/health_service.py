"""
Health checks for MongoDB and Redis.

Rules:
- MongoDB failure → "unhealthy".
- Redis failure or absence → "degraded", since Redis only backs rate limiting.
"""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Any, Optional

import redis.asyncio as aioredis
from pymongo.asynchronous.database import AsyncDatabase

from shared.logging import get_logger

log = get_logger(__name__)


class HealthService:
    def __init__(
        self,
        db: AsyncDatabase,
        redis_client: Optional[aioredis.Redis],
        collection_name: str = "urls",
        started_at: Optional[float] = None,
        version: str = "1.0.0",
    ) -> None:
        self._db = db
        self._redis = redis_client
        self._collection_name = collection_name
        self._started_at = started_at if started_at is not None else time.monotonic()
        self._version = version

    async def ping(self) -> bool:
        try:
            await self._db.client.admin.command("ping")
            return True
        except Exception as e:
            log.error("mongodb_ping_failed", error=str(e), error_type=type(e).__name__)
            return False

    async def _check_redis(self) -> str:
        if self._redis is None:
            return "not_configured"
        try:
            await self._redis.ping()
            return "ok"
        except Exception as e:
            log.warning("redis_ping_failed", error=str(e))
            return "error"

    async def check(self) -> dict[str, Any]:
        checks: dict[str, str] = {}
        database: dict[str, Any] = {}
        details: dict[str, Any] = {}
        overall = "healthy"

        start = time.perf_counter()
        try:
            await self._db.client.admin.command("ping")
            checks["mongodb"] = "ok"
            database["status"] = "connected"
        except Exception as e:
            log.error("mongodb_ping_failed", error=str(e), error_type=type(e).__name__)
            checks["mongodb"] = "error"
            database["status"] = "error"
            database["error"] = "Database connection failed"
            overall = "unhealthy"
        database["responseTime"] = round((time.perf_counter() - start) * 1000, 2)

        if overall == "healthy":
            try:
                details["totalUrls"] = await self._db[
                    self._collection_name
                ].count_documents({})
            except Exception as e:
                log.warning("health_count_failed", error=str(e))

        checks["redis"] = await self._check_redis()
        if checks["redis"] != "ok" and overall == "healthy":
            overall = "degraded"

        return {
            "status": overall,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "uptime": round(time.monotonic() - self._started_at, 3),
            "version": self._version,
            "checks": checks,
            "database": database,
            "details": details,
        }
