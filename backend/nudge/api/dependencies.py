"""API Dependencies — resolve process-wide objects built in the lifespan.

Invariants:
    - The agent is created once per process and stored on app.state
    - Tests override these dependencies instead of running the lifespan
"""

from fastapi import Request

from nudge.infrastructure.event_log import SqlAlchemyEventRecorder
from nudge.services.notification_agent import NotificationAgent


def get_agent(request: Request) -> NotificationAgent:
    agent = getattr(request.app.state, "agent", None)
    if agent is None:
        raise RuntimeError("Notification agent not initialized")
    return agent


def get_event_log(request: Request) -> SqlAlchemyEventRecorder | None:
    return getattr(request.app.state, "event_log", None)
