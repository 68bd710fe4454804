from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import jwt

from app.domain.ports.token_codec import TokenCodecPort, TokenType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenConfig:
    """Immutable signing configuration, built once at process start."""

    secret: str
    algorithm: str = "HS256"
    access_ttl_seconds: int = 900
    refresh_ttl_seconds: int = 7 * 24 * 3600
    leeway_seconds: int = 0

    def __post_init__(self) -> None:
        if not self.secret:
            raise ValueError("token secret must not be empty")
        if self.access_ttl_seconds <= 0 or self.refresh_ttl_seconds <= 0:
            raise ValueError("token lifetimes must be positive")
        if self.access_ttl_seconds >= self.refresh_ttl_seconds:
            raise ValueError("access lifetime must be shorter than refresh lifetime")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenCodec(TokenCodecPort):
    """
    Issues and verifies signed bearer tokens (JWT).

    Claims: sub (email), iat, exp, jti (random, so two tokens issued in the
    same second differ) and typ ("access" | "refresh").
    """

    def __init__(
        self, config: TokenConfig, *, clock: Callable[[], datetime] = _utcnow
    ) -> None:
        self._config = config
        self._clock = clock

    @property
    def refresh_ttl_seconds(self) -> int:
        return self._config.refresh_ttl_seconds

    def issue_access(self, subject: str) -> str:
        return self._issue(subject, "access", self._config.access_ttl_seconds)

    def issue_refresh(self, subject: str) -> str:
        return self._issue(subject, "refresh", self._config.refresh_ttl_seconds)

    def _issue(self, subject: str, token_type: TokenType, ttl_seconds: int) -> str:
        now = self._clock()
        claims = {
            "sub": subject,
            "iat": now,
            "exp": now + timedelta(seconds=ttl_seconds),
            "jti": uuid.uuid4().hex,
            "typ": token_type,
        }
        return jwt.encode(claims, self._config.secret, algorithm=self._config.algorithm)

    def verify(self, token: str, token_type: TokenType | None = None) -> Optional[str]:
        """
        Return the subject if the token is authentic and unexpired, else None.
        Never raises.
        """
        try:
            claims = jwt.decode(
                token,
                self._config.secret,
                algorithms=[self._config.algorithm],
                leeway=self._config.leeway_seconds,
                options={"require": ["sub", "exp", "iat"]},
            )
        except jwt.ExpiredSignatureError:
            logger.debug("token expired")
            return None
        except jwt.InvalidTokenError as e:
            logger.debug("token rejected", extra={"reason": str(e)})
            return None
        except Exception:  # noqa: BLE001
            logger.debug("token could not be decoded", exc_info=True)
            return None

        if token_type is not None and claims.get("typ") != token_type:
            return None
        subject = claims.get("sub")
        if not isinstance(subject, str) or not subject:
            return None
        return subject

    def subject_of(self, token: str) -> str:
        """Read the subject without verifying. Callers must verify() first."""
        claims = jwt.decode(token, options={"verify_signature": False})
        return claims["sub"]
