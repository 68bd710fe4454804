from typing import Optional, Protocol


class SessionLedgerPort(Protocol):
    """
    Authoritative store of the single live refresh token per subject.
    Implementations raise StoreUnavailable when the backing store is down.
    """

    async def put(
        self, subject: str, refresh_token: str, ttl_seconds: int | None = None
    ) -> None:
        """Overwrite the subject's refresh token (revokes any previous one)."""

    async def get(self, subject: str) -> Optional[str]:
        """Return the stored refresh token, or None if absent/expired."""

    async def exists(self, subject: str) -> bool:
        """True if the subject has a live entry."""

    async def is_current(self, subject: str, refresh_token: str) -> bool:
        """True only if the stored token equals refresh_token exactly."""

    async def delete(self, subject: str) -> None:
        """Revoke the subject's session. Deleting an absent key is fine."""
