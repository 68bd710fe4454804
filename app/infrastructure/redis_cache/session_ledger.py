from __future__ import annotations

from typing import Optional

from redis.asyncio import Redis
from redis.exceptions import RedisError

from app.domain.errors import StoreUnavailable
from app.domain.ports.session_ledger import SessionLedgerPort
from app.domain.services import secure_compare


class RedisSessionLedger(SessionLedgerPort):
    """
    One key per subject holding its current refresh token.
    SET overwrites, so a new login/refresh revokes the previous token.
    """

    def __init__(
        self,
        redis: Redis,
        *,
        key_prefix: str = "refresh_token:",
        ttl_seconds: int = 7 * 24 * 3600,
    ) -> None:
        self._redis = redis
        self._prefix = key_prefix
        self._ttl = ttl_seconds

    def _key(self, subject: str) -> str:
        return f"{self._prefix}{subject}"

    async def put(
        self, subject: str, refresh_token: str, ttl_seconds: int | None = None
    ) -> None:
        try:
            await self._redis.set(
                self._key(subject), refresh_token, ex=ttl_seconds or self._ttl
            )
        except RedisError as e:
            raise StoreUnavailable(f"session ledger unavailable: {e}") from e

    async def get(self, subject: str) -> Optional[str]:
        try:
            return await self._redis.get(self._key(subject))
        except RedisError as e:
            raise StoreUnavailable(f"session ledger unavailable: {e}") from e

    async def exists(self, subject: str) -> bool:
        try:
            return int(await self._redis.exists(self._key(subject))) == 1
        except RedisError as e:
            raise StoreUnavailable(f"session ledger unavailable: {e}") from e

    async def is_current(self, subject: str, refresh_token: str) -> bool:
        stored = await self.get(subject)
        if stored is None:
            return False
        return secure_compare(stored, refresh_token)

    async def delete(self, subject: str) -> None:
        try:
            await self._redis.delete(self._key(subject))
        except RedisError as e:
            raise StoreUnavailable(f"session ledger unavailable: {e}") from e
