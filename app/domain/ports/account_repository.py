from __future__ import annotations

from typing import Optional, Protocol

from app.domain.entities import Account, FederatedIdentityLink, Profile


class AccountRepositoryPort(Protocol):
    async def find_by_email(self, email: str) -> Optional[Account]:
        """Exact match on the (already normalized) email. None if absent."""

    async def find_by_email_for_update(self, email: str) -> Optional[Account]:
        """
        Same as find_by_email but locks the row for the rest of the transaction.
        """

    async def create(self, account: Account) -> Account:
        """Insert a new account. Returns it with its generated id."""

    async def save(self, account: Account) -> Account:
        """Persist password hash, role, confirmation flag and updated_at."""

    async def find_federated_link_by_email(
        self, email: str
    ) -> Optional[FederatedIdentityLink]:
        """Return the social identity bound to this email, if any."""

    async def create_profile(self, profile: Profile) -> Profile:
        """Insert the (empty) profile that goes with a new account."""

    async def find_profile_by_user_id(self, user_id: str) -> Optional[Profile]:
        """Return the profile of an account, or None."""

    async def save_profile(self, profile: Profile) -> Profile:
        """Persist avatar fields and updated_at."""
