from __future__ import annotations

from typing import Dict, Optional

import httpx

from app.domain.notifications import NotificationRequest
from app.domain.ports.notification_port import NotificationPort


class HttpNotificationAdapter(NotificationPort):
    """Posts notification requests to the external notification service."""

    def __init__(
        self,
        base_url: str,
        *,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 5.0,
        path: str = "/api/v1/notifications/send",
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._path = path if path.startswith("/") else f"/{path}"
        self._owns_client: bool = client is None
        self._client: httpx.AsyncClient = client or httpx.AsyncClient(timeout=timeout)

    async def dispatch(
        self, notification: NotificationRequest, *, idempotency_key: str | None = None
    ) -> None:
        headers: Dict[str, str] = {}
        if idempotency_key:
            headers["Idempotency-Key"] = idempotency_key

        url = f"{self._base_url}{self._path}"
        try:
            resp = await self._client.post(
                url, json=notification.to_payload(), headers=headers
            )
        except httpx.HTTPError as e:
            raise RuntimeError(f"notification HTTP error: {e}") from e
        if not resp.is_success:
            raise RuntimeError(
                f"notification service responded {resp.status_code}: {resp.text[:200]}"
            )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
