import pytest

from app.application.login_user import login_user
from app.domain.entities import Account, Role
from app.domain.errors import (
    FederatedAccountConflict,
    InvalidCredentials,
    StoreUnavailable,
)


async def _login(uow, sessions, codec, verify, email="u@test.com", password="pw123"):
    return await login_user(
        uow=uow, sessions=sessions, codec=codec,
        email=email, password=password, verify_password=verify,
    )


async def test_login_issues_tokens_and_records_session(
    uow, sessions, codec, seeded_account, verify_password_stub
):
    result = await _login(uow, sessions, codec, verify_password_stub, email=" U@Test.com")

    assert result.email == "u@test.com"
    assert result.user_id == seeded_account.id
    assert result.role is Role.USER
    assert codec.verify(result.access_token, "access") == "u@test.com"
    assert codec.verify(result.refresh_token, "refresh") == "u@test.com"
    assert sessions.store["u@test.com"] == result.refresh_token
    assert sessions.ttls["u@test.com"] == codec.refresh_ttl_seconds


async def test_second_login_supersedes_first(
    uow, sessions, codec, seeded_account, verify_password_stub
):
    first = await _login(uow, sessions, codec, verify_password_stub)
    second = await _login(uow, sessions, codec, verify_password_stub)

    assert first.refresh_token != second.refresh_token
    assert await sessions.is_current("u@test.com", second.refresh_token)
    assert not await sessions.is_current("u@test.com", first.refresh_token)


@pytest.mark.parametrize(
    "email,password",
    [("u@test.com", "wrong"), ("nobody@test.com", "pw123")],
)
async def test_bad_credentials_look_the_same(
    uow, sessions, codec, seeded_account, verify_password_stub, email, password
):
    with pytest.raises(InvalidCredentials) as exc_info:
        await _login(uow, sessions, codec, verify_password_stub, email=email, password=password)
    assert exc_info.value.message == "invalid credentials"
    assert sessions.store == {}


async def test_federated_account_cannot_password_login(
    uow, repo, sessions, codec, verify_password_stub
):
    repo.seed(Account(email="social@test.com", password_hash="hashed-pw123"))
    repo.link("social@test.com")

    with pytest.raises(FederatedAccountConflict):
        await _login(uow, sessions, codec, verify_password_stub, email="social@test.com")
    assert sessions.store == {}


async def test_login_fails_when_ledger_is_down(
    uow, sessions, codec, seeded_account, verify_password_stub
):
    sessions.down = True
    with pytest.raises(StoreUnavailable):
        await _login(uow, sessions, codec, verify_password_stub)
