from __future__ import annotations

import logging
from typing import Optional

from starlette.types import ASGIApp, Receive, Scope, Send

from app.application.request_gate import Authenticated, RequestGate

logger = logging.getLogger(__name__)


def _authorization_from_scope(scope: Scope) -> Optional[str]:
    for name, value in scope.get("headers") or []:
        if name.lower() == b"authorization":
            return value.decode("latin-1")
    return None


class RequestGateMiddleware:
    """
    Raw ASGI middleware running the RequestGate once per HTTP request.

    The outcome is stored on the request state (``request.state.auth``) for
    the duration of that request only; routes read it through the
    ``get_current_principal`` dependency. The gate itself never rejects.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        gate: RequestGate = scope["app"].state.request_gate
        path = scope.get("path") or ""
        result = await gate.authenticate(path, _authorization_from_scope(scope))
        if isinstance(result, Authenticated):
            logger.debug(
                "request authenticated",
                extra={"path": path, "user_id": result.principal.account_id},
            )
        else:
            logger.debug(
                "request unauthenticated", extra={"path": path, "reason": result.reason}
            )

        scope.setdefault("state", {})["auth"] = result
        await self.app(scope, receive, send)
