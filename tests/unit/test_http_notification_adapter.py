import json

import httpx
import pytest

from app.domain.notifications import welcome_notification
from app.infrastructure.notifications.http_notification_adapter import (
    HttpNotificationAdapter,
)


def _adapter(handler):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpNotificationAdapter("http://notify.test/", client=client), client


async def test_posts_payload_with_idempotency_key():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(202)

    adapter, client = _adapter(handler)
    await adapter.dispatch(welcome_notification("a@test.com"), idempotency_key="outbox-7")
    await client.aclose()

    (req,) = seen
    assert req.method == "POST"
    assert str(req.url) == "http://notify.test/api/v1/notifications/send"
    assert req.headers["Idempotency-Key"] == "outbox-7"
    body = json.loads(req.content)
    assert body["notificationType"] == "WELCOME_EMAIL"
    assert body["recipientEmail"] == "a@test.com"


async def test_non_success_status_raises():
    adapter, client = _adapter(lambda request: httpx.Response(500, text="boom"))
    with pytest.raises(RuntimeError, match="500"):
        await adapter.dispatch(welcome_notification("a@test.com"))
    await client.aclose()


async def test_transport_error_raises():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    adapter, client = _adapter(handler)
    with pytest.raises(RuntimeError, match="HTTP error"):
        await adapter.dispatch(welcome_notification("a@test.com"))
    await client.aclose()


async def test_aclose_leaves_injected_client_open():
    adapter, client = _adapter(lambda request: httpx.Response(200))
    await adapter.aclose()
    assert not client.is_closed
    await client.aclose()
