import pytest
from fastapi.testclient import TestClient

from app.application.request_gate import RequestGate
from app.main import create_app
from app.presentation import dependencies as deps
from app.settings import get_settings


@pytest.fixture()
def app(uow, sessions, challenges, storage, codec, hash_password_stub, verify_password_stub):
    settings = get_settings()
    app = create_app()
    app.state.request_gate = RequestGate(
        codec=codec,
        sessions=sessions,
        uow_factory=lambda: uow,
        public_paths=settings.public_paths,
        public_prefixes=settings.public_path_prefixes,
    )
    app.dependency_overrides[deps.get_uow] = lambda: uow
    app.dependency_overrides[deps.get_sessions] = lambda: sessions
    app.dependency_overrides[deps.get_challenges] = lambda: challenges
    app.dependency_overrides[deps.get_codec] = lambda: codec
    app.dependency_overrides[deps.get_avatar_storage] = lambda: storage
    app.dependency_overrides[deps.get_hash_password] = lambda: hash_password_stub
    app.dependency_overrides[deps.get_verify_password] = lambda: verify_password_stub
    app.dependency_overrides[deps.get_expose_reset_code] = lambda: True
    yield app
    app.dependency_overrides.clear()


@pytest.fixture()
def client(app):
    # no context manager: the lifespan would open real Postgres/Redis pools
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture()
def auth_header(codec, seeded_account):
    return {"Authorization": f"Bearer {codec.issue_access(seeded_account.email)}"}
