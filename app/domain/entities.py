from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class Role(str, Enum):
    USER = "USER"
    ADMIN = "ADMIN"


@dataclass
class Account:
    id: str | None = None
    email: str | None = None
    password_hash: str = ""
    role: Role = Role.USER
    email_confirmed: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self):
        if self.email:
            self.email = self.email.strip().lower()
            if not self.email:
                raise ValueError("email cannot be empty")
        else:
            raise ValueError("email is required")
        self.role = Role(self.role)

    def change_password(self, password_hash: str, when: datetime) -> None:
        self.password_hash = password_hash
        self.updated_at = when


@dataclass
class FederatedIdentityLink:
    email: str
    provider: str
    provider_user_id: str
    user_id: str | None = None


@dataclass
class Profile:
    user_id: str
    avatar_key: str | None = None
    avatar_url: str | None = None
    avatar_etag: str | None = None
    avatar_updated_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def set_avatar(self, key: str, url: str, etag: str, when: datetime) -> None:
        self.avatar_key = key
        self.avatar_url = url
        self.avatar_etag = etag
        self.avatar_updated_at = when
        self.updated_at = when

    def clear_avatar(self, when: datetime) -> None:
        self.avatar_key = None
        self.avatar_url = None
        self.avatar_etag = None
        self.avatar_updated_at = None
        self.updated_at = when


@dataclass(frozen=True)
class Principal:
    """The authenticated caller, scoped to a single request."""

    email: str
    account_id: str
    roles: frozenset[Role] = field(default_factory=frozenset)

    def has_role(self, role: Role) -> bool:
        return role in self.roles


@dataclass(frozen=True)
class AuthResult:
    access_token: str
    refresh_token: str
    email: str
    user_id: str
    role: Role
