from __future__ import annotations

from typing import Protocol

from app.domain.notifications import NotificationRequest


class NotificationPort(Protocol):
    async def dispatch(
        self, notification: NotificationRequest, *, idempotency_key: str | None = None
    ) -> None:
        """Hand a notification to the external delivery service."""
