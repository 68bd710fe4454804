from __future__ import annotations

from redis.asyncio import Redis
from redis.exceptions import RedisError

import app.domain.services as domain_services
from app.domain.errors import StoreUnavailable
from app.domain.ports.challenge_store import ChallengeStorePort


_LUA_CONSUME = """
-- KEYS[1]: reset code key
-- ARGV[1]: submitted code
local key = KEYS[1]
local expected = ARGV[1]
local cur = redis.call('GET', key)
if not cur then
  return 0
end
if cur ~= expected then
  return 0
end
redis.call('DEL', key)
return 1
"""


class RedisChallengeStore(ChallengeStorePort):
    def __init__(
        self,
        redis: Redis,
        *,
        key_prefix: str = "RESET_CODE:",
        ttl_seconds: int = 600,
    ) -> None:
        self._redis = redis
        self._prefix = key_prefix
        self._ttl = ttl_seconds

    def _key(self, subject: str) -> str:
        return f"{self._prefix}{subject}"

    async def issue(self, subject: str) -> str:
        code = domain_services.generate_reset_code()
        await self.put(subject, code)
        return code

    async def put(self, subject: str, code: str) -> None:
        try:
            await self._redis.set(self._key(subject), code, ex=self._ttl)
        except RedisError as e:
            raise StoreUnavailable(f"challenge store unavailable: {e}") from e

    async def verify(self, subject: str, code: str) -> bool:
        try:
            stored = await self._redis.get(self._key(subject))
        except RedisError as e:
            raise StoreUnavailable(f"challenge store unavailable: {e}") from e
        if stored is None:
            return False
        return domain_services.secure_compare(stored, code)

    async def verify_and_consume(self, subject: str, code: str) -> bool:
        # atomic compare-and-delete
        try:
            res = await self._redis.eval(_LUA_CONSUME, 1, self._key(subject), code)
        except RedisError as e:
            raise StoreUnavailable(f"challenge store unavailable: {e}") from e
        return int(res) == 1

    async def consume(self, subject: str) -> None:
        try:
            await self._redis.delete(self._key(subject))
        except RedisError as e:
            raise StoreUnavailable(f"challenge store unavailable: {e}") from e
