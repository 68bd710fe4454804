from datetime import datetime, timedelta, timezone

import jwt
import pytest

from app.infrastructure.security.tokens import TokenCodec, TokenConfig
from tests.fakes import TEST_SECRET


def _codec_at(when: datetime) -> TokenCodec:
    return TokenCodec(
        TokenConfig(secret=TEST_SECRET, access_ttl_seconds=60, refresh_ttl_seconds=600),
        clock=lambda: when,
    )


@pytest.mark.parametrize("subject", ["u@test.com", "a.b+tag@x.com", "ünï@exämple.org"])
def test_issue_verify_subject_of_round_trip(codec, subject):
    token = codec.issue_access(subject)
    assert codec.verify(token) == subject
    assert codec.subject_of(token) == subject


def test_expired_access_token_fails_verify():
    issued_long_ago = datetime.now(timezone.utc) - timedelta(hours=1)
    token = _codec_at(issued_long_ago).issue_access("u@test.com")

    assert _codec_at(datetime.now(timezone.utc)).verify(token) is None


def test_refresh_outlives_access():
    issued = datetime.now(timezone.utc) - timedelta(minutes=5)
    old_codec = _codec_at(issued)
    access = old_codec.issue_access("u@test.com")
    refresh = old_codec.issue_refresh("u@test.com")

    assert old_codec.verify(access) is None
    assert old_codec.verify(refresh) == "u@test.com"


def test_token_type_is_enforced_when_requested(codec):
    access = codec.issue_access("u@test.com")
    refresh = codec.issue_refresh("u@test.com")

    assert codec.verify(access, "access") == "u@test.com"
    assert codec.verify(refresh, "refresh") == "u@test.com"
    assert codec.verify(refresh, "access") is None
    assert codec.verify(access, "refresh") is None


def test_refresh_tokens_are_unique_per_issue(codec):
    assert codec.issue_refresh("u@test.com") != codec.issue_refresh("u@test.com")


@pytest.mark.parametrize("garbage", ["", "not-a-jwt", "a.b.c", "Bearer xyz"])
def test_garbage_fails_closed(codec, garbage):
    assert codec.verify(garbage) is None


def test_foreign_signature_fails(codec):
    forged = jwt.encode(
        {"sub": "admin@x.com", "iat": datetime.now(timezone.utc),
         "exp": datetime.now(timezone.utc) + timedelta(minutes=5)},
        "some-other-secret-of-sufficient-length",
        algorithm="HS256",
    )
    assert codec.verify(forged) is None


def test_tampered_payload_fails(codec):
    header, payload, signature = codec.issue_access("u@test.com").split(".")
    other_payload = codec.issue_access("admin@test.com").split(".")[1]
    assert codec.verify(f"{header}.{other_payload}.{signature}") is None


def test_token_without_subject_fails(codec):
    now = datetime.now(timezone.utc)
    token = jwt.encode(
        {"iat": now, "exp": now + timedelta(minutes=5)}, TEST_SECRET, algorithm="HS256"
    )
    assert codec.verify(token) is None


@pytest.mark.parametrize(
    "kwargs",
    [
        {"secret": ""},
        {"secret": TEST_SECRET, "access_ttl_seconds": 0},
        {"secret": TEST_SECRET, "refresh_ttl_seconds": -1},
        {"secret": TEST_SECRET, "access_ttl_seconds": 600, "refresh_ttl_seconds": 600},
    ],
)
def test_token_config_rejects_bad_values(kwargs):
    with pytest.raises(ValueError):
        TokenConfig(**kwargs)
