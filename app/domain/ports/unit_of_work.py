from __future__ import annotations

from dataclasses import dataclass
from types import TracebackType
from typing import Protocol, Type

from app.domain.ports.account_repository import AccountRepositoryPort
from app.domain.ports.outbox_repository import OutboxRepositoryPort


@dataclass
class UnitOfWorkPort(Protocol):
    """
    Transaction boundary.

    Usage:
        async with uow as tx:
            account = await tx.accounts.create(Account(email=..., password_hash=...))
            await tx.outbox.enqueue(topic="notification.send", payload={...})
            await tx.commit()
    """

    accounts: AccountRepositoryPort
    outbox: OutboxRepositoryPort

    async def __aenter__(self) -> "UnitOfWorkPort":
        """Begin a new transaction. Code here runs before code in the context manager."""

    async def __aexit__(
        self,
        exc_type: Type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        """End the transaction. Rolls back unless commit() was called."""

    async def commit(self) -> None:
        """Commit the transaction."""

    async def rollback(self) -> None:
        """Rollback the transaction."""
