from functools import lru_cache
from typing import Callable

from fastapi import HTTPException, Request, status

from app.application.request_gate import Authenticated, RequestGate
from app.domain.entities import Principal
from app.domain.ports.challenge_store import ChallengeStorePort
from app.domain.ports.object_storage import ObjectStoragePort
from app.domain.ports.session_ledger import SessionLedgerPort
from app.domain.ports.token_codec import TokenCodecPort
from app.domain.ports.unit_of_work import UnitOfWorkPort
from app.infrastructure.db.pool import get_pool
from app.infrastructure.db.uow import PgUnitOfWork
from app.infrastructure.redis_cache.challenge_store import RedisChallengeStore
from app.infrastructure.redis_cache.pool import get_redis
from app.infrastructure.redis_cache.session_ledger import RedisSessionLedger
from app.infrastructure.security.password import hash_password, verify_password
from app.infrastructure.security.tokens import TokenCodec, TokenConfig
from app.infrastructure.storage.s3_avatar_storage import S3AvatarStorage, get_s3_client
from app.settings import get_settings


def get_uow() -> UnitOfWorkPort:
    return PgUnitOfWork(get_pool())


def get_sessions() -> SessionLedgerPort:
    return RedisSessionLedger(
        get_redis(), ttl_seconds=get_settings().refresh_token_ttl_seconds
    )


def get_challenges() -> ChallengeStorePort:
    return RedisChallengeStore(
        get_redis(), ttl_seconds=get_settings().reset_code_ttl_seconds
    )


@lru_cache(maxsize=1)
def get_codec() -> TokenCodecPort:
    settings = get_settings()
    return TokenCodec(
        TokenConfig(
            secret=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            access_ttl_seconds=settings.access_token_ttl_seconds,
            refresh_ttl_seconds=settings.refresh_token_ttl_seconds,
        )
    )


def get_hash_password() -> Callable[..., str]:
    return hash_password


def get_verify_password() -> Callable[[str, str], bool]:
    return verify_password


def get_reset_code_ttl_seconds() -> int:
    return get_settings().reset_code_ttl_seconds


def get_expose_reset_code() -> bool:
    settings = get_settings()
    return settings.expose_reset_code or settings.app_env in ("dev", "test")


def get_avatar_storage() -> ObjectStoragePort:
    settings = get_settings()
    return S3AvatarStorage(
        get_s3_client(settings),
        bucket=settings.b2_bucket_name,
        public_cdn_base=settings.b2_public_cdn_base,
    )


def build_request_gate() -> RequestGate:
    settings = get_settings()
    return RequestGate(
        codec=get_codec(),
        sessions=get_sessions(),
        uow_factory=get_uow,
        public_paths=settings.public_paths,
        public_prefixes=settings.public_path_prefixes,
    )


def get_current_principal(request: Request) -> Principal:
    # Set by RequestGateMiddleware
    result = getattr(request.state, "auth", None)
    if not isinstance(result, Authenticated):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return result.principal
