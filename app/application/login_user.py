import logging
from typing import Callable

from app.domain.entities import AuthResult
from app.domain.errors import FederatedAccountConflict, InvalidCredentials
from app.domain.ports.session_ledger import SessionLedgerPort
from app.domain.ports.token_codec import TokenCodecPort
from app.domain.ports.unit_of_work import UnitOfWorkPort
from app.domain.services import normalize_email

logger = logging.getLogger(__name__)


async def login_user(
    uow: UnitOfWorkPort,
    sessions: SessionLedgerPort,
    codec: TokenCodecPort,
    email: str,
    password: str,
    verify_password: Callable[[str, str], bool],
) -> AuthResult:
    normalized_email = normalize_email(email)

    async with uow as transaction:
        account = await transaction.accounts.find_by_email(normalized_email)
        # same error for unknown email and wrong password
        if not account or not verify_password(password, account.password_hash):
            raise InvalidCredentials()
        # the social link wins even over a stray password row
        if await transaction.accounts.find_federated_link_by_email(normalized_email):
            raise FederatedAccountConflict()

    access_token = codec.issue_access(account.email)
    refresh_token = codec.issue_refresh(account.email)
    # overwrites any previous session: one live refresh token per subject
    await sessions.put(account.email, refresh_token, codec.refresh_ttl_seconds)
    logger.info("login succeeded", extra={"user_id": account.id})

    return AuthResult(
        access_token=access_token,
        refresh_token=refresh_token,
        email=account.email,
        user_id=account.id,
        role=account.role,
    )
