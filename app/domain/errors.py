class DomainError(Exception):
    """Base class for all domain-level errors.

    Every error carries a stable ``kind`` (used by the HTTP layer to pick a
    status code) and a human-readable message safe to show to the caller.
    """

    kind: str = "error"
    default_message: str = "unexpected error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthorized(DomainError):
    """Bad credentials, or an invalid / expired / superseded token."""

    kind = "unauthorized"
    default_message = "unauthorized"


class Conflict(DomainError):
    """Duplicate registration or cross-mode identity collision."""

    kind = "conflict"
    default_message = "conflict"


class InvalidInput(DomainError):
    """The request was well-formed but its content is not acceptable."""

    kind = "invalid_input"
    default_message = "invalid input"


class NotFound(DomainError):
    """No record matches the lookup criteria."""

    kind = "not_found"
    default_message = "not found"


class StoreUnavailable(DomainError):
    """A backing store (cache, database) could not be reached in time."""

    kind = "unavailable"
    default_message = "backing store unavailable"


class InvalidCredentials(Unauthorized):
    default_message = "invalid credentials"


class InvalidRefreshToken(Unauthorized):
    default_message = "invalid refresh token"


class AccountExists(Conflict):
    default_message = "an account with this email already exists"


class FederatedAccountConflict(Conflict):
    """The email is bound to a social identity provider."""

    default_message = (
        "this email is registered via Google/Github login; use social auth to continue"
    )


class InvalidResetCode(InvalidInput):
    default_message = "invalid or expired reset code"


class InvalidAvatarRequest(InvalidInput):
    default_message = "invalid avatar request"


class AccountNotFound(NotFound):
    default_message = "no account with that email"


class ProfileNotFound(NotFound):
    default_message = "user profile not found"
