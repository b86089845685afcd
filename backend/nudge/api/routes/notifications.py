"""Notification Routes — send, reply, inspect and clear pending notifications.

Invariants:
    - Routes are thin: every state change goes through NotificationAgent
    - A failed send re-raises the agent's NudgeError → global handler → status
    - An unmatched reply is 200 with handled=false (informational, not an error)
    - Static paths (/stats, /events, /sweep) are declared before /{user_id}
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from nudge.api.dependencies import get_agent, get_event_log
from nudge.infrastructure.event_log import SqlAlchemyEventRecorder
from nudge.schemas.notification import (
    NotificationCreate, NotificationSent, PendingNotificationResponse,
    ReplyCreate, ReplyResult,
)
from nudge.services.notification_agent import NotificationAgent

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/notifications", tags=["notifications"])


@router.post(
    "", response_model=NotificationSent, status_code=status.HTTP_201_CREATED,
)
async def send_notification(
    body: NotificationCreate, agent: NotificationAgent = Depends(get_agent),
):
    result = await agent.send_notification(body.user_id, body.type, body.context)
    if not result:
        if result.error is not None:
            raise result.error
        raise HTTPException(
            status.HTTP_409_CONFLICT, detail="Notification declined by extension step",
        )
    return NotificationSent(
        user_id=body.user_id,
        type=body.type,
        message_id=result.message_id,
        tier=agent.get_notification_tier(body.type),
    )


@router.get("/stats")
async def notification_stats(agent: NotificationAgent = Depends(get_agent)):
    """Aggregate counters for the dashboard."""
    return agent.stats()


@router.get("/events")
async def list_events(
    user_id: str | None = Query(None),
    event: str | None = Query(None),
    limit: int = Query(50, ge=1, le=500),
    event_log: SqlAlchemyEventRecorder | None = Depends(get_event_log),
):
    """Most recent audit log entries, newest first."""
    if event_log is None:
        raise HTTPException(
            status.HTTP_404_NOT_FOUND, detail="Audit log is disabled",
        )
    return {"events": await event_log.list_recent(user_id, event, limit)}


@router.post("/sweep")
async def sweep_expired(agent: NotificationAgent = Depends(get_agent)):
    """Run one expiration pass now."""
    expired = await agent.check_expirations()
    return {
        "expired": [
            {"user_id": r.user_id, "type": r.notification_type} for r in expired
        ],
    }


@router.get("/{user_id}", response_model=list[PendingNotificationResponse])
async def list_pending(user_id: str, agent: NotificationAgent = Depends(get_agent)):
    return [
        PendingNotificationResponse.from_record(r)
        for r in agent.pending_notifications(user_id)
    ]


@router.post("/{user_id}/responses", response_model=ReplyResult)
async def handle_reply(
    user_id: str, body: ReplyCreate, agent: NotificationAgent = Depends(get_agent),
):
    result = await agent.handle_response(user_id, body.content)
    return ReplyResult(
        handled=bool(result),
        types=list(result.notification_types),
        error_code=result.error_code,
    )


@router.delete("/{user_id}")
async def clear_all(user_id: str, agent: NotificationAgent = Depends(get_agent)):
    cleared = await agent.clear_all_notifications(user_id)
    return {"cleared": cleared}


@router.delete("/{user_id}/{notification_type}")
async def clear_one(
    user_id: str, notification_type: str, agent: NotificationAgent = Depends(get_agent),
):
    result = await agent.clear_notification(user_id, notification_type)
    if not result:
        raise result.error
    return {"cleared": 1}
