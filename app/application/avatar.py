import logging
import uuid
from dataclasses import dataclass

from app.domain.errors import InvalidAvatarRequest, ProfileNotFound
from app.domain.ports.object_storage import ObjectStoragePort
from app.domain.ports.unit_of_work import UnitOfWorkPort
from app.domain.services import utcnow

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/webp": "webp",
}
MAX_AVATAR_BYTES = 5 * 1024 * 1024
PRESIGN_TTL_SECONDS = 10 * 60


@dataclass(frozen=True)
class UploadUrl:
    put_url: str
    key: str
    public_url: str


def avatar_prefix(user_id: str) -> str:
    return f"avatars/{user_id}/"


async def create_upload_url(
    storage: ObjectStoragePort,
    user_id: str,
    content_type: str,
    content_length: int,
) -> UploadUrl:
    extension = ALLOWED_CONTENT_TYPES.get(content_type)
    if extension is None:
        allowed = ", ".join(sorted(ALLOWED_CONTENT_TYPES))
        raise InvalidAvatarRequest(f"invalid content type; allowed: {allowed}")
    if content_length <= 0:
        raise InvalidAvatarRequest("file size must be positive")
    if content_length > MAX_AVATAR_BYTES:
        raise InvalidAvatarRequest("file size exceeds maximum limit of 5MB")

    key = f"{avatar_prefix(user_id)}{uuid.uuid4()}.{extension}"
    put_url = await storage.presign_put(key, content_type, PRESIGN_TTL_SECONDS)
    return UploadUrl(put_url=put_url, key=key, public_url=storage.public_url(key))


async def commit_avatar(
    uow: UnitOfWorkPort,
    storage: ObjectStoragePort,
    user_id: str,
    key: str,
    etag: str,
) -> None:
    if not key.startswith(avatar_prefix(user_id)):
        raise InvalidAvatarRequest("invalid avatar key for user")
    if not await storage.exists(key):
        raise InvalidAvatarRequest("avatar object not found")

    async with uow as transaction:
        profile = await transaction.accounts.find_profile_by_user_id(user_id)
        if not profile:
            raise ProfileNotFound()
        old_key = profile.avatar_key
        profile.set_avatar(key, storage.public_url(key), etag, utcnow())
        await transaction.accounts.save_profile(profile)
        await transaction.commit()

    if old_key and old_key != key:
        await _delete_quietly(storage, old_key)


async def delete_avatar(
    uow: UnitOfWorkPort, storage: ObjectStoragePort, user_id: str
) -> None:
    async with uow as transaction:
        profile = await transaction.accounts.find_profile_by_user_id(user_id)
        if not profile:
            raise ProfileNotFound()
        current_key = profile.avatar_key
        profile.clear_avatar(utcnow())
        await transaction.accounts.save_profile(profile)
        await transaction.commit()

    if current_key:
        await _delete_quietly(storage, current_key)


async def _delete_quietly(storage: ObjectStoragePort, key: str) -> None:
    """Storage cleanup never fails the caller's request."""
    try:
        await storage.delete(key)
    except Exception:  # noqa: BLE001
        logger.warning(
            "failed to delete avatar from storage", extra={"key": key}, exc_info=True
        )
    else:
        logger.info("deleted avatar from storage", extra={"key": key})
