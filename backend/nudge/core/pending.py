"""Pending Notification — the record the state store owns for each (user, type).

Invariants:
    - Frozen: records are replaced or removed, never edited in place
    - expires_at is absolute epoch milliseconds
"""

from dataclasses import dataclass

from nudge.core.domain_types import EpochMs, MessageId, UserId
from nudge.core.notification_context import NotificationContext


@dataclass(frozen=True)
class PendingNotification:
    """An outstanding reminder awaiting confirmation or expiry."""

    user_id: UserId
    notification_type: str
    context: NotificationContext
    expires_at: EpochMs
    message_id: MessageId
    sent_at: EpochMs
    tier: int

    def is_expired(self, now_ms: EpochMs) -> bool:
        return self.expires_at <= now_ms

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "type": self.notification_type,
            "context": self.context.as_mapping(),
            "expires_at": self.expires_at,
            "message_id": self.message_id,
            "sent_at": self.sent_at,
            "tier": self.tier,
        }
