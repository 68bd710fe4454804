from typing import Protocol


class ChallengeStorePort(Protocol):
    async def issue(self, subject: str) -> str:
        """Generate a fresh 6-digit code, replacing any previous one."""

    async def put(self, subject: str, code: str) -> None:
        """Store/replace the code with the store's TTL."""

    async def verify(self, subject: str, code: str) -> bool:
        """True if code matches the live one. Does not consume it."""

    async def verify_and_consume(self, subject: str, code: str) -> bool:
        """True if matches (and then delete it for single-use), else False."""

    async def consume(self, subject: str) -> None:
        """Delete any existing code."""
