import pytest

from app.application.register_user import register_user
from app.domain.entities import Role
from app.domain.errors import AccountExists, FederatedAccountConflict
from app.domain.notifications import NOTIFICATION_TOPIC


async def test_register_creates_account_profile_and_welcome(uow, repo, hash_password_stub):
    account = await register_user(
        uow=uow, email=" New@Test.com ", password="pw123", hash_password=hash_password_stub
    )

    assert account.email == "new@test.com"
    assert account.role is Role.USER
    assert account.email_confirmed is False
    stored = repo.accounts["new@test.com"]
    assert stored.password_hash == "hashed-pw123"
    assert account.id in repo.profiles
    assert uow.committed is True

    (topic, payload, _key), = uow.outbox.enqueues
    assert topic == NOTIFICATION_TOPIC
    assert payload["notificationType"] == "WELCOME_EMAIL"
    assert payload["recipientEmail"] == "new@test.com"


async def test_register_with_explicit_role(uow, hash_password_stub):
    account = await register_user(
        uow=uow, email="boss@test.com", password="pw123",
        hash_password=hash_password_stub, role=Role.ADMIN,
    )
    assert account.role is Role.ADMIN


async def test_register_duplicate_email_conflicts(uow, repo, seeded_account, hash_password_stub):
    with pytest.raises(AccountExists):
        await register_user(
            uow=uow, email="U@test.com", password="other", hash_password=hash_password_stub
        )
    assert repo.accounts["u@test.com"].password_hash == "hashed-pw123"
    assert uow.outbox.enqueues == []
    assert uow.rolled_back is True


async def test_register_federated_email_conflicts(uow, repo, hash_password_stub):
    repo.link("social@test.com", "github")
    with pytest.raises(FederatedAccountConflict):
        await register_user(
            uow=uow, email="social@test.com", password="pw123", hash_password=hash_password_stub
        )
    assert "social@test.com" not in repo.accounts
    assert uow.outbox.enqueues == []
