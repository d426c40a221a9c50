from __future__ import annotations

from typing import Optional

from redis.asyncio import Redis

from magic_code.settings import get_settings

_client: Optional[Redis] = None


def get_redis(url: str | None = None) -> Redis:
    """
    Lazy shared Redis client, REDIS_URL from settings unless `url` is given.
    decode_responses=True so token payloads come back as str.
    """
    global _client
    if _client is None:
        _client = Redis.from_url(
            url or get_settings().redis_url, encoding="utf-8", decode_responses=True
        )
    return _client


async def close_redis() -> None:
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
