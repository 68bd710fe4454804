from __future__ import annotations

from typing import Protocol


class ObjectStoragePort(Protocol):
    async def presign_put(
        self, key: str, content_type: str, expires_in_seconds: int
    ) -> str:
        """Return a time-boxed URL the client can PUT the object to."""

    async def exists(self, key: str) -> bool:
        """True if an object is stored under key."""

    async def delete(self, key: str) -> None:
        """Remove the object under key."""

    def public_url(self, key: str) -> str:
        """Public (CDN) URL the object is served from."""
