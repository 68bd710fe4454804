from typing import Annotated, Callable

from fastapi import APIRouter, Depends, Response, status

from app.application.login_user import login_user
from app.application.logout_user import logout_user
from app.application.password_reset import request_reset_code, reset_password
from app.application.refresh_token import refresh_access_token
from app.application.register_user import register_user
from app.domain.entities import AuthResult, Principal
from app.domain.ports.challenge_store import ChallengeStorePort
from app.domain.ports.session_ledger import SessionLedgerPort
from app.domain.ports.token_codec import TokenCodecPort
from app.domain.ports.unit_of_work import UnitOfWorkPort
from app.presentation.dependencies import (
    get_challenges,
    get_codec,
    get_current_principal,
    get_expose_reset_code,
    get_hash_password,
    get_reset_code_ttl_seconds,
    get_sessions,
    get_uow,
    get_verify_password,
)
from app.schemas.requests import (
    ForgotPasswordIn,
    LoginIn,
    RefreshIn,
    RegisterIn,
    ResetPasswordIn,
)
from app.schemas.responses import AuthOut, OkOut, RegisteredOut, ResetCodeOut

router = APIRouter(prefix="/auth", tags=["Auth"])


def _auth_out(result: AuthResult) -> AuthOut:
    return AuthOut(
        access_token=result.access_token,
        refresh_token=result.refresh_token,
        email=result.email,
        user_id=result.user_id,
        role=result.role,
    )


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=RegisteredOut,
)
async def post_register(
    body: RegisterIn,
    uow: Annotated[UnitOfWorkPort, Depends(get_uow)],
    hash_password: Annotated[Callable[..., str], Depends(get_hash_password)],
):
    account = await register_user(
        uow=uow,
        email=body.email,
        password=body.password,
        hash_password=hash_password,
        role=body.role,
    )
    return RegisteredOut(email=account.email)


@router.post("/login", response_model=AuthOut)
async def post_login(
    body: LoginIn,
    uow: Annotated[UnitOfWorkPort, Depends(get_uow)],
    sessions: Annotated[SessionLedgerPort, Depends(get_sessions)],
    codec: Annotated[TokenCodecPort, Depends(get_codec)],
    verify_password: Annotated[Callable[[str, str], bool], Depends(get_verify_password)],
):
    result = await login_user(
        uow=uow,
        sessions=sessions,
        codec=codec,
        email=body.email,
        password=body.password,
        verify_password=verify_password,
    )
    return _auth_out(result)


@router.post("/refresh", response_model=AuthOut)
async def post_refresh(
    body: RefreshIn,
    uow: Annotated[UnitOfWorkPort, Depends(get_uow)],
    sessions: Annotated[SessionLedgerPort, Depends(get_sessions)],
    codec: Annotated[TokenCodecPort, Depends(get_codec)],
):
    result = await refresh_access_token(
        uow=uow, sessions=sessions, codec=codec, refresh_token=body.refresh_token
    )
    return _auth_out(result)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def post_logout(
    principal: Annotated[Principal, Depends(get_current_principal)],
    sessions: Annotated[SessionLedgerPort, Depends(get_sessions)],
):
    await logout_user(sessions, principal.email)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/forgot-password", response_model=ResetCodeOut)
async def post_forgot_password(
    body: ForgotPasswordIn,
    uow: Annotated[UnitOfWorkPort, Depends(get_uow)],
    challenges: Annotated[ChallengeStorePort, Depends(get_challenges)],
    code_ttl_seconds: Annotated[int, Depends(get_reset_code_ttl_seconds)],
    expose_code: Annotated[bool, Depends(get_expose_reset_code)],
):
    code = await request_reset_code(
        uow=uow,
        challenges=challenges,
        email=body.email,
        code_ttl_seconds=code_ttl_seconds,
    )
    return ResetCodeOut(code=code if expose_code else None)


@router.post("/reset-password", response_model=OkOut)
async def post_reset_password(
    body: ResetPasswordIn,
    uow: Annotated[UnitOfWorkPort, Depends(get_uow)],
    challenges: Annotated[ChallengeStorePort, Depends(get_challenges)],
    sessions: Annotated[SessionLedgerPort, Depends(get_sessions)],
    hash_password: Annotated[Callable[..., str], Depends(get_hash_password)],
):
    await reset_password(
        uow=uow,
        challenges=challenges,
        sessions=sessions,
        email=body.email,
        code=body.code,
        new_password=body.new_password,
        hash_password=hash_password,
    )
    return OkOut()
