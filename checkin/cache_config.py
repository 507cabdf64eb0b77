import asyncio
import inspect
from datetime import date
from typing import Protocol

import httpx
from redis.asyncio import Redis

from checkin.config import settings
from checkin.utils.logging import get_logger

logger = get_logger(__name__)


class CacheClient(Protocol):
    async def get(self, key: str) -> str | None: ...

    async def setex(self, key: str, ttl_seconds: int, value: str) -> None: ...

    async def delete(self, key: str) -> None: ...

    async def close(self) -> None: ...


def checkin_cache_key(attendee_id: str, service_date: date) -> str:
    return f"checkin:{attendee_id}:{service_date.isoformat()}"


class RedisTcpCache:
    def __init__(self, client: Redis):
        self.client = client

    async def get(self, key: str) -> str | None:
        return await self.client.get(key)

    async def setex(self, key: str, ttl_seconds: int, value: str) -> None:
        await self.client.setex(key, ttl_seconds, value)

    async def delete(self, key: str) -> None:
        await self.client.delete(key)

    async def close(self) -> None:
        close_result = self.client.aclose()
        if inspect.isawaitable(close_result):
            await close_result


class UpstashRestCache:
    def __init__(self, rest_url: str, token: str):
        self.client = httpx.AsyncClient(
            base_url=rest_url.rstrip("/"),
            headers={"Authorization": f"Bearer {token}"},
            timeout=5.0,
        )

    async def _run(self, *command: str) -> object | None:
        response = await self.client.post("/", json=list(command))
        response.raise_for_status()
        payload = response.json()
        if isinstance(payload, dict):
            if payload.get("error"):
                raise RuntimeError(str(payload["error"]))
            return payload.get("result")
        return None

    async def ping(self) -> None:
        result = await self._run("PING")
        if str(result).upper() != "PONG":
            raise RuntimeError("Upstash REST ping failed")

    async def get(self, key: str) -> str | None:
        result = await self._run("GET", key)
        if result is None:
            return None
        return str(result)

    async def setex(self, key: str, ttl_seconds: int, value: str) -> None:
        await self._run("SETEX", key, str(ttl_seconds), value)

    async def delete(self, key: str) -> None:
        await self._run("DEL", key)

    async def close(self) -> None:
        await self.client.aclose()


_cache_client: CacheClient | None = None
_cache_resolved = False
_cache_lock = asyncio.Lock()


async def _build_redis_cache() -> RedisTcpCache:
    redis = Redis.from_url(settings.REDIS_URL, decode_responses=True)
    try:
        await redis.ping()
        return RedisTcpCache(redis)
    except Exception:
        await redis.aclose()
        raise


async def _build_cache_client() -> CacheClient | None:
    backend = settings.CACHE_BACKEND
    if backend == "none":
        logger.info("Check-in marker cache disabled")
        return None

    if backend in {"auto", "upstash_rest"}:
        if settings.UPSTASH_REDIS_REST_URL and settings.UPSTASH_REDIS_REST_TOKEN:
            upstash_cache = UpstashRestCache(
                settings.UPSTASH_REDIS_REST_URL, settings.UPSTASH_REDIS_REST_TOKEN
            )
            try:
                await upstash_cache.ping()
                logger.info("Cache backend: Upstash REST")
                return upstash_cache
            except (httpx.HTTPError, RuntimeError) as error:
                await upstash_cache.close()
                logger.warning("Upstash REST unavailable: %s", error)
        elif backend == "upstash_rest":
            logger.warning(
                "Upstash REST selected but credentials are missing. "
                "Falling back to Redis TCP."
            )

    try:
        cache = await _build_redis_cache()
        logger.info("Cache backend: Redis TCP")
        return cache
    except Exception as error:
        # The marker only short-circuits duplicate check-ins; the database
        # constraint still guards them, so run without it.
        logger.warning("Redis unavailable, running without check-in marker: %s", error)
        return None


async def get_cache_client() -> CacheClient | None:
    global _cache_client, _cache_resolved
    if _cache_resolved:
        return _cache_client

    async with _cache_lock:
        if not _cache_resolved:
            _cache_client = await _build_cache_client()
            _cache_resolved = True
        return _cache_client


async def init_cache() -> None:
    await get_cache_client()


async def shutdown_cache() -> None:
    global _cache_client, _cache_resolved
    async with _cache_lock:
        if _cache_client is not None:
            await _cache_client.close()
        _cache_client = None
        _cache_resolved = False


async def get_cache():
    cache = await get_cache_client()
    yield cache
