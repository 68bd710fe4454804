import pytest

from app.domain.entities import Account, Role
from app.infrastructure.security.tokens import TokenCodec, TokenConfig
from tests.fakes import (
    TEST_SECRET,
    FakeAccountRepo,
    FakeChallengeStore,
    FakeObjectStorage,
    FakeSessionLedger,
    FakeUoW,
)


@pytest.fixture()
def repo():
    return FakeAccountRepo()


@pytest.fixture()
def uow(repo):
    return FakeUoW(repo)


@pytest.fixture()
def sessions():
    return FakeSessionLedger()


@pytest.fixture()
def challenges():
    return FakeChallengeStore()


@pytest.fixture()
def storage():
    return FakeObjectStorage()


@pytest.fixture()
def codec():
    return TokenCodec(
        TokenConfig(
            secret=TEST_SECRET, access_ttl_seconds=900, refresh_ttl_seconds=3600
        )
    )


@pytest.fixture()
def hash_password_stub():
    return lambda p: "hashed-" + p


@pytest.fixture()
def verify_password_stub():
    return lambda plain, hashed: hashed == "hashed-" + plain


@pytest.fixture()
def seeded_account(repo):
    return repo.seed(
        Account(email="u@test.com", password_hash="hashed-pw123", role=Role.USER)
    )


@pytest.fixture(autouse=True)
def patch_code(monkeypatch):
    """
    Make the reset code deterministic in all tests.
    You can override in a specific test by re-monkeypatching.
    """
    from app.domain import services as domain_services

    monkeypatch.setattr(domain_services, "generate_reset_code", lambda: "123456")
    yield
