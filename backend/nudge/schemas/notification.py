"""Notification Schemas — Pydantic models for the HTTP boundary.

Invariants:
    - user_id and type are stripped, non-empty
    - Reply content is 1-2000 chars (Discord's message limit)
"""

from typing import Any

from pydantic import BaseModel, Field, field_validator

from nudge.core.pending import PendingNotification


class NotificationCreate(BaseModel):
    """Request to send one notification."""
    user_id: str = Field(min_length=1, max_length=64)
    type: str = Field(min_length=1, max_length=50)
    context: dict[str, Any] = Field(default_factory=dict)

    @field_validator("user_id", "type")
    @classmethod
    def strip_identifier(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be empty or whitespace")
        return v


class NotificationSent(BaseModel):
    user_id: str
    type: str
    message_id: str | None
    tier: int


class ReplyCreate(BaseModel):
    """Inbound free-text reply from a user."""
    content: str = Field(min_length=1, max_length=2000)


class ReplyResult(BaseModel):
    handled: bool
    types: list[str] = []
    error_code: str | None = None


class PendingNotificationResponse(BaseModel):
    user_id: str
    type: str
    context: dict[str, Any]
    expires_at: int
    sent_at: int
    message_id: str
    tier: int

    @classmethod
    def from_record(cls, record: PendingNotification) -> "PendingNotificationResponse":
        return cls(
            user_id=record.user_id,
            type=record.notification_type,
            context=record.context.as_mapping(),
            expires_at=record.expires_at,
            sent_at=record.sent_at,
            message_id=record.message_id,
            tier=record.tier,
        )
