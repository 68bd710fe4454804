from __future__ import annotations

import asyncio
import logging
import signal
from contextlib import suppress

from app.infrastructure.db.pool import close_pool, get_pool
from app.infrastructure.notifications.http_notification_adapter import (
    HttpNotificationAdapter,
)
from app.infrastructure.outbox.dispatcher import OutboxDispatcher
from app.logging import setup_logging
from app.settings import get_settings

logger = logging.getLogger(__name__)


async def _run() -> None:
    settings = get_settings()
    setup_logging(settings.log_level)

    pool = get_pool()
    await pool.open()
    logger.info("worker: pool opened")

    notifier = HttpNotificationAdapter(base_url=settings.notification_base_url)
    dispatcher = OutboxDispatcher(
        pool=pool,
        notifier=notifier,
        poll_interval=settings.outbox_poll_interval_ms / 1000,
    )

    stop = asyncio.Event()

    def _on_signal(*_: object) -> None:
        logger.info("worker: stop signal received")
        stop.set()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        with suppress(NotImplementedError):
            loop.add_signal_handler(sig, _on_signal)

    worker_task = asyncio.create_task(dispatcher.run_forever())
    try:
        await stop.wait()
    finally:
        worker_task.cancel()
        with suppress(asyncio.CancelledError):
            await worker_task
        await notifier.aclose()
        await close_pool()
        logger.info("worker: stopped cleanly")


def main() -> None:
    asyncio.run(_run())


if __name__ == "__main__":
    main()
