from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from app.domain.services import utcnow


class NotificationType(str, Enum):
    WELCOME_EMAIL = "WELCOME_EMAIL"
    PASSWORD_RESET = "PASSWORD_RESET"
    EMAIL_VERIFICATION = "EMAIL_VERIFICATION"
    ACCOUNT_UPDATE = "ACCOUNT_UPDATE"


# Outbox topic every notification payload is enqueued under.
NOTIFICATION_TOPIC = "notification.send"


@dataclass(frozen=True)
class NotificationRequest:
    notification_type: NotificationType
    recipient_email: str
    recipient_name: str
    timestamp: datetime
    template_data: dict[str, Any] = field(default_factory=dict)

    def to_payload(self) -> dict[str, Any]:
        return {
            "notificationType": self.notification_type.value,
            "recipientEmail": self.recipient_email,
            "recipientName": self.recipient_name,
            "timestamp": self.timestamp.isoformat(),
            "templateData": dict(self.template_data),
        }

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "NotificationRequest":
        return cls(
            notification_type=NotificationType(payload["notificationType"]),
            recipient_email=payload["recipientEmail"],
            recipient_name=payload.get("recipientName") or "",
            timestamp=datetime.fromisoformat(payload["timestamp"]),
            template_data=dict(payload.get("templateData") or {}),
        )


def _display_name(email: str) -> str:
    return email.split("@", 1)[0]


def welcome_notification(email: str) -> NotificationRequest:
    return NotificationRequest(
        notification_type=NotificationType.WELCOME_EMAIL,
        recipient_email=email,
        recipient_name=_display_name(email),
        timestamp=utcnow(),
        template_data={"email": email},
    )


def password_reset_notification(
    email: str, code: str, ttl_seconds: int
) -> NotificationRequest:
    return NotificationRequest(
        notification_type=NotificationType.PASSWORD_RESET,
        recipient_email=email,
        recipient_name=_display_name(email),
        timestamp=utcnow(),
        template_data={"resetCode": code, "expiresInMinutes": ttl_seconds // 60},
    )
