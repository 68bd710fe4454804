from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from app.application.avatar import commit_avatar, create_upload_url, delete_avatar
from app.domain.entities import Principal
from app.domain.ports.object_storage import ObjectStoragePort
from app.domain.ports.unit_of_work import UnitOfWorkPort
from app.presentation.dependencies import (
    get_avatar_storage,
    get_current_principal,
    get_uow,
)
from app.schemas.requests import AvatarCommitIn, AvatarUploadUrlIn
from app.schemas.responses import MeOut, OkOut, UploadUrlOut

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/me", response_model=MeOut)
async def get_me(principal: Annotated[Principal, Depends(get_current_principal)]):
    return MeOut(
        id=principal.account_id,
        email=principal.email,
        roles=sorted(principal.roles, key=lambda r: r.value),
    )


@router.post("/me/avatar/upload-url", response_model=UploadUrlOut)
async def post_avatar_upload_url(
    body: AvatarUploadUrlIn,
    principal: Annotated[Principal, Depends(get_current_principal)],
    storage: Annotated[ObjectStoragePort, Depends(get_avatar_storage)],
):
    upload = await create_upload_url(
        storage=storage,
        user_id=principal.account_id,
        content_type=body.content_type,
        content_length=body.content_length,
    )
    return UploadUrlOut(
        put_url=upload.put_url, key=upload.key, public_url=upload.public_url
    )


@router.patch("/me/avatar/commit", response_model=OkOut)
async def patch_avatar_commit(
    body: AvatarCommitIn,
    principal: Annotated[Principal, Depends(get_current_principal)],
    uow: Annotated[UnitOfWorkPort, Depends(get_uow)],
    storage: Annotated[ObjectStoragePort, Depends(get_avatar_storage)],
):
    await commit_avatar(
        uow=uow,
        storage=storage,
        user_id=principal.account_id,
        key=body.key,
        etag=body.etag,
    )
    return OkOut()


@router.delete("/me/avatar", status_code=status.HTTP_204_NO_CONTENT)
async def delete_my_avatar(
    principal: Annotated[Principal, Depends(get_current_principal)],
    uow: Annotated[UnitOfWorkPort, Depends(get_uow)],
    storage: Annotated[ObjectStoragePort, Depends(get_avatar_storage)],
):
    await delete_avatar(uow=uow, storage=storage, user_id=principal.account_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
