from typing import Literal, Optional, Protocol

TokenType = Literal["access", "refresh"]


class TokenCodecPort(Protocol):
    refresh_ttl_seconds: int

    def issue_access(self, subject: str) -> str:
        """Short-lived signed token for per-request authentication."""

    def issue_refresh(self, subject: str) -> str:
        """Long-lived signed token used only to mint new access tokens."""

    def verify(self, token: str, token_type: TokenType | None = None) -> Optional[str]:
        """Subject if signature, expiry (and type) check out, else None."""

    def subject_of(self, token: str) -> str:
        """Subject of an already verified token."""
