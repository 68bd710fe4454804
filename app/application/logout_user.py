from app.domain.ports.session_ledger import SessionLedgerPort
from app.domain.services import normalize_email


async def logout_user(sessions: SessionLedgerPort, email: str) -> None:
    """Revoke the caller's refresh token. Idempotent."""
    await sessions.delete(normalize_email(email))
