from __future__ import annotations

from typing import Optional

import psycopg

from app.domain.entities import Account, FederatedIdentityLink, Profile
from app.domain.ports.account_repository import AccountRepositoryPort

_ACCOUNT_COLUMNS = (
    "id, email, encrypted_password, role, email_confirmed, created_at, updated_at"
)
_PROFILE_COLUMNS = (
    "user_id, avatar_key, avatar_url, avatar_etag, avatar_updated_at, "
    "created_at, updated_at"
)


def _account_from_row(row) -> Account:
    id_, email, pwd_hash, role, confirmed, created_at, updated_at = row
    return Account(
        id=str(id_),
        email=str(email),
        password_hash=pwd_hash or "",
        role=role,
        email_confirmed=bool(confirmed),
        created_at=created_at,
        updated_at=updated_at,
    )


def _profile_from_row(row) -> Profile:
    user_id, key, url, etag, avatar_updated_at, created_at, updated_at = row
    return Profile(
        user_id=str(user_id),
        avatar_key=key,
        avatar_url=url,
        avatar_etag=etag,
        avatar_updated_at=avatar_updated_at,
        created_at=created_at,
        updated_at=updated_at,
    )


class PgAccountRepository(AccountRepositoryPort):
    """
    Postgres implementation of AccountRepositoryPort.

    NOTE:
    - This repo is constructed with an *active async connection* supplied by the UoW.
    - It does not commit; the UnitOfWork controls the transaction boundary.
    - Emails arrive already normalized; lookups are exact match.
    """

    def __init__(self, conn: psycopg.AsyncConnection) -> None:
        self._conn = conn

    async def _fetch_account(self, sql: str, email: str) -> Optional[Account]:
        async with self._conn.cursor() as cur:
            await cur.execute(sql, (email,))
            row = await cur.fetchone()
        return _account_from_row(row) if row else None

    async def find_by_email(self, email: str) -> Optional[Account]:
        sql = f"SELECT {_ACCOUNT_COLUMNS} FROM users WHERE email = %s"
        return await self._fetch_account(sql, email)

    async def find_by_email_for_update(self, email: str) -> Optional[Account]:
        sql = f"SELECT {_ACCOUNT_COLUMNS} FROM users WHERE email = %s FOR UPDATE"
        return await self._fetch_account(sql, email)

    async def create(self, account: Account) -> Account:
        sql = f"""
        INSERT INTO users (email, encrypted_password, role, email_confirmed,
                           created_at, updated_at)
        VALUES (%s, %s, %s, %s, %s, %s)
        RETURNING {_ACCOUNT_COLUMNS}
        """
        async with self._conn.cursor() as cur:
            await cur.execute(
                sql,
                (
                    account.email,
                    account.password_hash,
                    account.role.value,
                    account.email_confirmed,
                    account.created_at,
                    account.updated_at,
                ),
            )
            row = await cur.fetchone()
        if not row:
            raise RuntimeError("create account returned no row")
        return _account_from_row(row)

    async def save(self, account: Account) -> Account:
        sql = f"""
        UPDATE users
        SET encrypted_password = %s,
            role = %s,
            email_confirmed = %s,
            updated_at = %s
        WHERE id = %s
        RETURNING {_ACCOUNT_COLUMNS}
        """
        async with self._conn.cursor() as cur:
            await cur.execute(
                sql,
                (
                    account.password_hash,
                    account.role.value,
                    account.email_confirmed,
                    account.updated_at,
                    account.id,
                ),
            )
            row = await cur.fetchone()
        if not row:
            raise RuntimeError(f"account {account.id} vanished during save")
        return _account_from_row(row)

    async def find_federated_link_by_email(
        self, email: str
    ) -> Optional[FederatedIdentityLink]:
        sql = """
        SELECT email, provider, provider_user_id, user_id
        FROM user_identity_providers
        WHERE email = %s
        LIMIT 1
        """
        async with self._conn.cursor() as cur:
            await cur.execute(sql, (email,))
            row = await cur.fetchone()
        if not row:
            return None
        link_email, provider, provider_user_id, user_id = row
        return FederatedIdentityLink(
            email=str(link_email),
            provider=str(provider),
            provider_user_id=str(provider_user_id),
            user_id=str(user_id) if user_id else None,
        )

    async def create_profile(self, profile: Profile) -> Profile:
        sql = f"""
        INSERT INTO user_profiles (user_id, created_at, updated_at)
        VALUES (%s, %s, %s)
        RETURNING {_PROFILE_COLUMNS}
        """
        async with self._conn.cursor() as cur:
            await cur.execute(
                sql, (profile.user_id, profile.created_at, profile.updated_at)
            )
            row = await cur.fetchone()
        if not row:
            raise RuntimeError("create profile returned no row")
        return _profile_from_row(row)

    async def find_profile_by_user_id(self, user_id: str) -> Optional[Profile]:
        sql = f"SELECT {_PROFILE_COLUMNS} FROM user_profiles WHERE user_id = %s"
        async with self._conn.cursor() as cur:
            await cur.execute(sql, (user_id,))
            row = await cur.fetchone()
        return _profile_from_row(row) if row else None

    async def save_profile(self, profile: Profile) -> Profile:
        sql = f"""
        UPDATE user_profiles
        SET avatar_key = %s,
            avatar_url = %s,
            avatar_etag = %s,
            avatar_updated_at = %s,
            updated_at = %s
        WHERE user_id = %s
        RETURNING {_PROFILE_COLUMNS}
        """
        async with self._conn.cursor() as cur:
            await cur.execute(
                sql,
                (
                    profile.avatar_key,
                    profile.avatar_url,
                    profile.avatar_etag,
                    profile.avatar_updated_at,
                    profile.updated_at,
                    profile.user_id,
                ),
            )
            row = await cur.fetchone()
        if not row:
            raise RuntimeError(f"profile of {profile.user_id} vanished during save")
        return _profile_from_row(row)
