from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

from psycopg_pool import AsyncConnectionPool

from app.domain.notifications import NOTIFICATION_TOPIC, NotificationRequest
from app.domain.ports.notification_port import NotificationPort

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    base: int = 2  # seconds
    max_delay: int = 300
    max_attempts: int = 10

    def compute_delay(self, attempts: int) -> int:
        # attempts already made; exponential backoff capped at max_delay
        return min(self.max_delay, self.base * (2**attempts))

    def exhausted(self, attempts: int) -> bool:
        return attempts >= self.max_attempts


class OutboxDispatcher:
    """
    Relays notification payloads written by the auth use cases to the
    external notification service.

    Rows are claimed with FOR UPDATE SKIP LOCKED so several workers can run.
    Failed rows go back to 'pending' with a backoff, or to 'failed' once the
    retry budget is spent.
    """

    def __init__(
        self,
        *,
        pool: AsyncConnectionPool,
        notifier: NotificationPort,
        batch_size: int = 10,
        poll_interval: float = 1.0,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self.pool = pool
        self.notifier = notifier
        self.batch_size = batch_size
        self.poll_interval = poll_interval
        self.retry_policy = retry_policy or RetryPolicy()

    async def run_forever(self) -> None:
        logger.info(
            "outbox dispatcher started",
            extra={"batch_size": self.batch_size, "poll_interval": self.poll_interval},
        )
        while True:
            if await self.process_once() == 0:
                await asyncio.sleep(self.poll_interval)

    async def process_once(self) -> int:
        """Claim one batch and dispatch it. Returns the number of rows claimed."""
        batch = await self._claim_due_batch(self.batch_size)
        for msg in batch:
            msg_id, topic, attempts = msg["id"], msg["topic"], msg["attempts"]
            try:
                await self._dispatch(msg_id, topic, msg["payload"])
            except Exception as e:  # noqa: BLE001
                new_attempts = attempts + 1
                if self.retry_policy.exhausted(new_attempts):
                    logger.error(
                        "dispatch failed permanently",
                        extra={"id": msg_id, "topic": topic, "attempts": new_attempts},
                    )
                    await self._mark_failed(msg_id, new_attempts, str(e))
                    continue
                delay = self.retry_policy.compute_delay(attempts)
                logger.warning(
                    "dispatch failed; scheduling retry",
                    extra={
                        "id": msg_id,
                        "topic": topic,
                        "attempts": new_attempts,
                        "retry_in_s": delay,
                    },
                )
                await self._reschedule(msg_id, new_attempts, delay, str(e))
            else:
                await self._mark_dispatched(msg_id)
        return len(batch)

    async def _dispatch(self, msg_id: Any, topic: str, payload: dict[str, Any]) -> None:
        if topic != NOTIFICATION_TOPIC:
            raise RuntimeError(f"unknown topic: {topic}")
        notification = NotificationRequest.from_payload(payload)
        await self.notifier.dispatch(notification, idempotency_key=f"outbox-{msg_id}")

    async def _execute(self, sql: str, params: tuple) -> list[tuple]:
        async with self.pool.connection() as conn:
            async with conn.transaction():
                async with conn.cursor() as cur:
                    await cur.execute(sql, params)
                    if cur.description is None:
                        return []
                    return await cur.fetchall()

    async def _claim_due_batch(self, limit: int) -> list[dict[str, Any]]:
        sql = """
        WITH claimed AS (
            SELECT id
            FROM outbox
            WHERE status = 'pending'
              AND COALESCE(next_attempt_at, NOW()) <= NOW()
            ORDER BY created_at
            FOR UPDATE SKIP LOCKED
            LIMIT %s
        )
        UPDATE outbox o
        SET status = 'processing', updated_at = NOW()
        FROM claimed c
        WHERE o.id = c.id
        RETURNING o.id, o.topic, o.payload, o.attempts
        """
        rows = await self._execute(sql, (limit,))
        return [
            {"id": r[0], "topic": r[1], "payload": r[2] or {}, "attempts": r[3] or 0}
            for r in rows
        ]

    async def _mark_dispatched(self, msg_id: Any) -> None:
        await self._execute(
            "UPDATE outbox SET status = 'dispatched', last_error = NULL, "
            "updated_at = NOW() WHERE id = %s",
            (msg_id,),
        )

    async def _reschedule(
        self, msg_id: Any, attempts: int, delay_seconds: int, error: str
    ) -> None:
        await self._execute(
            """
            UPDATE outbox
            SET status = 'pending',
                attempts = %s,
                last_error = %s,
                next_attempt_at = NOW() + make_interval(secs => %s),
                updated_at = NOW()
            WHERE id = %s
            """,
            (attempts, error[:1000], delay_seconds, msg_id),
        )

    async def _mark_failed(self, msg_id: Any, attempts: int, error: str) -> None:
        await self._execute(
            "UPDATE outbox SET status = 'failed', attempts = %s, last_error = %s, "
            "updated_at = NOW() WHERE id = %s",
            (attempts, error[:1000], msg_id),
        )
