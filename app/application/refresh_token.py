import logging

from app.domain.entities import AuthResult
from app.domain.errors import InvalidRefreshToken, StoreUnavailable
from app.domain.ports.session_ledger import SessionLedgerPort
from app.domain.ports.token_codec import TokenCodecPort
from app.domain.ports.unit_of_work import UnitOfWorkPort

logger = logging.getLogger(__name__)


async def refresh_access_token(
    uow: UnitOfWorkPort,
    sessions: SessionLedgerPort,
    codec: TokenCodecPort,
    refresh_token: str,
) -> AuthResult:
    """
    Mint a new access token from a live refresh token.

    The refresh token must verify cryptographically AND be the one currently
    recorded in the session ledger. If the ledger cannot be reached liveness
    cannot be confirmed, so this fails closed.
    """
    subject = codec.verify(refresh_token, "refresh")
    if subject is None:
        raise InvalidRefreshToken()

    try:
        current = await sessions.is_current(subject, refresh_token)
    except StoreUnavailable:
        logger.warning("session ledger unreachable during refresh; denying")
        raise InvalidRefreshToken("refresh token could not be validated")
    if not current:
        raise InvalidRefreshToken("refresh token is not recognized")

    async with uow as transaction:
        account = await transaction.accounts.find_by_email(subject)
    if not account:
        raise InvalidRefreshToken()

    access_token = codec.issue_access(subject)
    # no rotation: the same refresh token is re-asserted with a fresh TTL
    try:
        await sessions.put(subject, refresh_token, codec.refresh_ttl_seconds)
    except StoreUnavailable:
        raise InvalidRefreshToken("refresh token could not be validated")

    return AuthResult(
        access_token=access_token,
        refresh_token=refresh_token,
        email=subject,
        user_id=account.id,
        role=account.role,
    )
