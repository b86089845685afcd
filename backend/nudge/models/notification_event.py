"""NotificationEventLog ORM — audit trail of notification lifecycle events.

Invariants:
    - One row per sent / responded / expired / cleared event
    - Rows are append-only; pending state is never rebuilt from them

Design Decisions:
    - JSON payload column: context keys vary per notification type
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer, JSON, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from nudge.db.base import Base


class NotificationEventLog(Base):
    """Audit log entry for one notification lifecycle event."""
    __tablename__ = "notification_events"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4,
    )
    event: Mapped[str] = mapped_column(String(40), nullable=False, index=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    notification_type: Mapped[str] = mapped_column(String(50), nullable=False)
    tier: Mapped[int | None] = mapped_column(Integer, nullable=True)
    payload: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
