# app/domain/services.py
from __future__ import annotations

import hmac
import secrets
from datetime import datetime, timezone


def generate_reset_code() -> str:
    """Uniformly random 6-digit numeric code in 100000..999999."""
    return str(100_000 + secrets.randbelow(900_000))


def secure_compare(a: str, b: str) -> bool:
    """
    Constant-time comparison for secrets.
    Accepts strings; falls back to bytes if needed.
    """
    try:
        # hmac.compare_digest supports str if types match
        return hmac.compare_digest(a, b)
    except TypeError:
        return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


def normalize_email(email: str) -> str:
    """Emails are keyed trimmed and lower-cased everywhere."""
    return email.strip().lower()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
