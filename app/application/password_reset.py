import logging
from typing import Callable

import app.domain.services as domain_services
from app.domain.errors import (
    AccountNotFound,
    InvalidInput,
    InvalidResetCode,
    StoreUnavailable,
)
from app.domain.notifications import NOTIFICATION_TOPIC, password_reset_notification
from app.domain.ports.challenge_store import ChallengeStorePort
from app.domain.ports.session_ledger import SessionLedgerPort
from app.domain.ports.unit_of_work import UnitOfWorkPort

logger = logging.getLogger(__name__)


async def request_reset_code(
    uow: UnitOfWorkPort,
    challenges: ChallengeStorePort,
    email: str,
    code_ttl_seconds: int = 600,
) -> str:
    """
    Issue a one-time reset code and queue the notification carrying it.

    The outbox row holds the code in clear until the worker relays it. If the
    transaction does not commit the issued code is withdrawn, so no live code
    exists that nobody was told about.

    The code is also returned; only test/dev deployments hand it back to the
    caller.
    """
    normalized_email = domain_services.normalize_email(email)

    issued = False
    committed = False
    try:
        async with uow as transaction:
            if not await transaction.accounts.find_by_email(normalized_email):
                raise AccountNotFound()
            code = await challenges.issue(normalized_email)
            issued = True
            await transaction.outbox.enqueue(
                topic=NOTIFICATION_TOPIC,
                payload=password_reset_notification(
                    normalized_email, code, code_ttl_seconds
                ).to_payload(),
            )
            await transaction.commit()
            committed = True
    except Exception:
        if issued and not committed:
            await _withdraw_code(challenges, normalized_email)
        raise
    return code


async def reset_password(
    uow: UnitOfWorkPort,
    challenges: ChallengeStorePort,
    sessions: SessionLedgerPort,
    email: str,
    code: str,
    new_password: str,
    hash_password: Callable[..., str],
) -> None:
    """
    Redeem a reset code, replace the password and revoke the session,
    all-or-nothing.

    The account row is locked, the code is consumed with an atomic
    compare-and-delete and the session entry is dropped while the lock is
    held; the transaction commits last. If anything fails before the commit
    lands the password is unchanged and a consumed code is put back. A ledger
    outage therefore fails the reset rather than leaving the old refresh
    token live.
    """
    normalized_email = domain_services.normalize_email(email)

    if not await challenges.verify(normalized_email, code):
        raise InvalidResetCode()

    consumed = False
    committed = False
    try:
        async with uow as transaction:
            account = await transaction.accounts.find_by_email_for_update(
                normalized_email
            )
            if not account:
                raise InvalidInput("no account for this email")
            account.change_password(
                hash_password(new_password), domain_services.utcnow()
            )
            await transaction.accounts.save(account)

            # lost a race against a concurrent redemption of the same code
            if not await challenges.verify_and_consume(normalized_email, code):
                raise InvalidResetCode()
            consumed = True
            await sessions.delete(normalized_email)
            await transaction.commit()
            committed = True
    except Exception:
        if consumed and not committed:
            await _restore_code(challenges, normalized_email, code)
        raise

    logger.info("password reset", extra={"email": normalized_email})


async def _restore_code(
    challenges: ChallengeStorePort, email: str, code: str
) -> None:
    try:
        await challenges.put(email, code)
    except StoreUnavailable:
        logger.error("could not restore reset code after failed reset", exc_info=True)


async def _withdraw_code(challenges: ChallengeStorePort, email: str) -> None:
    try:
        await challenges.consume(email)
    except StoreUnavailable:
        logger.error("could not withdraw unsent reset code", exc_info=True)
