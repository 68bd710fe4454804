from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Literal, Optional, Union

from app.domain.entities import Principal
from app.domain.errors import StoreUnavailable
from app.domain.ports.session_ledger import SessionLedgerPort
from app.domain.ports.token_codec import TokenCodecPort
from app.domain.ports.unit_of_work import UnitOfWorkPort

logger = logging.getLogger(__name__)

GateReason = Literal[
    "public_path", "missing_token", "invalid_token", "unknown_subject", "error"
]


@dataclass(frozen=True)
class Authenticated:
    principal: Principal


@dataclass(frozen=True)
class Unauthenticated:
    reason: GateReason


GateResult = Union[Authenticated, Unauthenticated]


def extract_bearer(header: Optional[str]) -> Optional[str]:
    """Token from an 'Authorization: Bearer <token>' value, else None."""
    if not header:
        return None
    scheme, _, token = header.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    token = token.strip()
    return token or None


class RequestGate:
    """
    Establishes who is calling, once per request.

    The gate never rejects a request: it answers Authenticated or
    Unauthenticated(reason) and leaves the access decision to the route.
    Access tokens are self-sufficient; the session ledger is only consulted
    as a liveness hint, and an outage there is logged, not enforced.
    """

    def __init__(
        self,
        *,
        codec: TokenCodecPort,
        sessions: SessionLedgerPort,
        uow_factory: Callable[[], UnitOfWorkPort],
        public_paths: Iterable[str] = (),
        public_prefixes: Iterable[str] = (),
    ) -> None:
        self._codec = codec
        self._sessions = sessions
        self._uow_factory = uow_factory
        self._public_paths = frozenset(public_paths)
        self._public_prefixes = tuple(public_prefixes)

    def is_public(self, path: str) -> bool:
        return path in self._public_paths or path.startswith(self._public_prefixes)

    async def authenticate(self, path: str, authorization: Optional[str]) -> GateResult:
        if self.is_public(path):
            return Unauthenticated("public_path")
        try:
            return await self._authenticate(authorization)
        except Exception:  # noqa: BLE001
            logger.exception("cannot set user authentication", extra={"path": path})
            return Unauthenticated("error")

    async def _authenticate(self, authorization: Optional[str]) -> GateResult:
        token = extract_bearer(authorization)
        if token is None:
            return Unauthenticated("missing_token")

        subject = self._codec.verify(token, "access")
        if subject is None:
            return Unauthenticated("invalid_token")

        await self._check_liveness(subject)

        async with self._uow_factory() as transaction:
            account = await transaction.accounts.find_by_email(subject)
        if not account:
            return Unauthenticated("unknown_subject")

        return Authenticated(
            Principal(
                email=account.email,
                account_id=account.id,
                roles=frozenset({account.role}),
            )
        )

    async def _check_liveness(self, subject: str) -> None:
        try:
            alive = await self._sessions.exists(subject)
        except StoreUnavailable as e:
            logger.warning(
                "session ledger unreachable; proceeding with token-only authentication",
                extra={"subject": subject, "error": e.message},
            )
            return
        if not alive:
            logger.warning(
                "access token permitted despite missing session entry",
                extra={"subject": subject},
            )
