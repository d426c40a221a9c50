from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Callable

from redis.asyncio import Redis

from magic_code.domain.entities import Token
from magic_code.domain.ports.token_storage import AtomicTokenStoragePort

logger = logging.getLogger("magic_code.infrastructure.redis_cache.token_storage")


_LUA_CONSUME = """
-- KEYS[1]: token key
-- ARGV[1]: serialized token the caller validated
local cur = redis.call('GET', KEYS[1])
if not cur then
  return 0
end
if cur ~= ARGV[1] then
  return 0
end
redis.call('DEL', KEYS[1])
return 1
"""


def dump_token(token: Token) -> str:
    """
    Canonical JSON form. Must be stable across a load/dump round trip since
    consume() compares serialized values.
    """
    return json.dumps(
        {"expires_at": token.expires_at.isoformat(), "user": dict(token.user)},
        sort_keys=True,
        separators=(",", ":"),
        default=str,
    )


def load_token(raw: str) -> Token:
    data: dict[str, Any] = json.loads(raw)
    return Token(
        expires_at=datetime.fromisoformat(data["expires_at"]),
        user=data["user"],
    )


class RedisTokenStorage(AtomicTokenStoragePort):
    """
    Token store on Redis. The client must use decode_responses=True.

    Keys carry a PX TTL matching the token lifetime so Redis drops them on
    its own; the engine still checks expires_at on every verification.
    Pass the strategy's clock so the TTL is measured on the same time base
    as expires_at.
    """

    def __init__(
        self,
        redis: Redis,
        *,
        key_prefix: str = "mc:",
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._redis = redis
        self._prefix = key_prefix
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def _key(self, code: str) -> str:
        return f"{self._prefix}{code}"

    async def get(self, code: str) -> Token | None:
        raw = await self._redis.get(self._key(code))
        if raw is None:
            return None
        return load_token(raw)

    async def set(self, code: str, token: Token) -> None:
        remaining = token.expires_at - self._clock()
        ttl_ms = max(1, int(remaining.total_seconds() * 1000))
        await self._redis.set(self._key(code), dump_token(token), px=ttl_ms)

    async def delete(self, code: str) -> None:
        await self._redis.delete(self._key(code))

    async def consume(self, code: str, token: Token) -> bool:
        res = await self._redis.eval(_LUA_CONSUME, 1, self._key(code), dump_token(token))
        if int(res) != 1:
            logger.debug("token already consumed or replaced", extra={"key": self._key(code)})
            return False
        return True
