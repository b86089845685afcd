"""Event Log — SQLAlchemy-backed audit recorder for notification lifecycle events.

Invariants:
    - record() commits one row per call
    - list_recent() returns newest first, capped by limit
"""

from typing import Any

from sqlalchemy import select

from nudge.infrastructure.database import DatabaseSessionManager
from nudge.models.notification_event import NotificationEventLog


class SqlAlchemyEventRecorder:
    """Implements the EventRecorder protocol on top of DatabaseSessionManager."""

    def __init__(self, manager: DatabaseSessionManager):
        self._manager = manager

    async def record(
        self,
        event: str,
        user_id: str,
        notification_type: str,
        tier: int | None,
        payload: dict[str, Any],
    ) -> None:
        async with self._manager.session() as db:
            db.add(NotificationEventLog(
                event=event,
                user_id=user_id,
                notification_type=notification_type,
                tier=tier,
                payload=payload,
            ))
            await db.commit()

    async def list_recent(
        self,
        user_id: str | None = None,
        event: str | None = None,
        limit: int = 50,
    ) -> list[dict]:
        query = select(NotificationEventLog).order_by(
            NotificationEventLog.created_at.desc(),
        )
        if user_id:
            query = query.where(NotificationEventLog.user_id == user_id)
        if event:
            query = query.where(NotificationEventLog.event == event)
        async with self._manager.session() as db:
            result = await db.execute(query.limit(limit))
            rows = result.scalars().all()
        return [
            {
                "id": str(row.id),
                "event": row.event,
                "user_id": row.user_id,
                "type": row.notification_type,
                "tier": row.tier,
                "payload": row.payload,
                "created_at": row.created_at.isoformat(),
            }
            for row in rows
        ]
