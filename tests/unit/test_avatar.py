import pytest

from app.application.avatar import (
    MAX_AVATAR_BYTES,
    PRESIGN_TTL_SECONDS,
    commit_avatar,
    create_upload_url,
    delete_avatar,
)
from app.domain.errors import InvalidAvatarRequest, ProfileNotFound


@pytest.mark.parametrize(
    "content_type,ext", [("image/png", "png"), ("image/jpeg", "jpg"), ("image/webp", "webp")]
)
async def test_upload_url_scoped_to_user(storage, content_type, ext):
    upload = await create_upload_url(storage, "u1", content_type, 1024)

    assert upload.key.startswith("avatars/u1/")
    assert upload.key.endswith(f".{ext}")
    assert upload.public_url == f"https://cdn.test/{upload.key}"
    assert storage.presigned == [(upload.key, content_type, PRESIGN_TTL_SECONDS)]


@pytest.mark.parametrize(
    "content_type,length",
    [
        ("image/gif", 1024),
        ("application/pdf", 1024),
        ("image/png", 0),
        ("image/png", MAX_AVATAR_BYTES + 1),
    ],
)
async def test_upload_url_rejects_bad_requests(storage, content_type, length):
    with pytest.raises(InvalidAvatarRequest):
        await create_upload_url(storage, "u1", content_type, length)
    assert storage.presigned == []


async def test_commit_sets_avatar_and_deletes_previous(uow, repo, storage, seeded_account):
    uid = seeded_account.id
    storage.objects |= {f"avatars/{uid}/old.png", f"avatars/{uid}/new.png"}

    await commit_avatar(uow, storage, uid, f"avatars/{uid}/old.png", "e1")
    await commit_avatar(uow, storage, uid, f"avatars/{uid}/new.png", "e2")

    profile = repo.profiles[uid]
    assert profile.avatar_key == f"avatars/{uid}/new.png"
    assert profile.avatar_url == f"https://cdn.test/avatars/{uid}/new.png"
    assert profile.avatar_etag == "e2"
    assert storage.deleted == [f"avatars/{uid}/old.png"]


async def test_commit_rejects_foreign_key(uow, storage, seeded_account):
    storage.objects.add("avatars/someone-else/x.png")
    with pytest.raises(InvalidAvatarRequest):
        await commit_avatar(uow, storage, seeded_account.id, "avatars/someone-else/x.png", "e")


async def test_commit_rejects_missing_object(uow, storage, seeded_account):
    with pytest.raises(InvalidAvatarRequest):
        await commit_avatar(uow, storage, seeded_account.id, f"avatars/{seeded_account.id}/nope.png", "e")


async def test_commit_without_profile(uow, storage):
    storage.objects.add("avatars/u9/a.png")
    with pytest.raises(ProfileNotFound):
        await commit_avatar(uow, storage, "u9", "avatars/u9/a.png", "e")


async def test_storage_cleanup_failure_does_not_fail_commit(uow, repo, storage, seeded_account):
    uid = seeded_account.id
    storage.objects |= {f"avatars/{uid}/old.png", f"avatars/{uid}/new.png"}
    await commit_avatar(uow, storage, uid, f"avatars/{uid}/old.png", "e1")
    storage.delete_fails = True

    await commit_avatar(uow, storage, uid, f"avatars/{uid}/new.png", "e2")

    assert repo.profiles[uid].avatar_key == f"avatars/{uid}/new.png"


async def test_delete_avatar_clears_profile_and_object(uow, repo, storage, seeded_account):
    uid = seeded_account.id
    storage.objects.add(f"avatars/{uid}/a.png")
    await commit_avatar(uow, storage, uid, f"avatars/{uid}/a.png", "e")

    await delete_avatar(uow, storage, uid)

    assert repo.profiles[uid].avatar_key is None
    assert storage.deleted == [f"avatars/{uid}/a.png"]


async def test_delete_avatar_when_none_set(uow, storage, seeded_account):
    await delete_avatar(uow, storage, seeded_account.id)
    assert storage.deleted == []
