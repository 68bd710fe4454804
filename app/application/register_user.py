from typing import Callable

import app.domain.services as domain_services
from app.domain.entities import Account, Profile, Role
from app.domain.errors import AccountExists, FederatedAccountConflict
from app.domain.notifications import NOTIFICATION_TOPIC, welcome_notification
from app.domain.ports.unit_of_work import UnitOfWorkPort


async def register_user(
    uow: UnitOfWorkPort,
    email: str,
    password: str,
    hash_password: Callable[..., str],
    role: Role | None = None,
) -> Account:
    normalized_email = domain_services.normalize_email(email)
    now = domain_services.utcnow()

    async with uow as transaction:
        if await transaction.accounts.find_by_email(normalized_email):
            raise AccountExists()
        # a social identity owns this email; no shadow password account
        if await transaction.accounts.find_federated_link_by_email(normalized_email):
            raise FederatedAccountConflict()

        account = await transaction.accounts.create(
            Account(
                email=normalized_email,
                password_hash=hash_password(password),
                role=role or Role.USER,
                email_confirmed=False,
                created_at=now,
                updated_at=now,
            )
        )
        await transaction.accounts.create_profile(
            Profile(user_id=account.id, created_at=now, updated_at=now)
        )
        await transaction.outbox.enqueue(
            topic=NOTIFICATION_TOPIC,
            payload=welcome_notification(normalized_email).to_payload(),
        )
        await transaction.commit()
    return account
