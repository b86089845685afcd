"""Notification Context — typed template context, one variant per notification type.

Invariants:
    - Known fields are typed per notification type; all of them are optional
    - Unknown keys (e.g. added by an extension step) pass through untouched
    - as_mapping() is the only view handed to template rendering

Design Decisions:
    - pydantic models with extra="allow" over open dicts: typed access for
      the wrappers, opaque pass-through for extensions
    - Numbers are coerced to str for identifier fields (queue ids arrive as ints)
"""

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

from nudge.core.domain_types import NotificationType
from nudge.core.errors import InvalidContextError


class NotificationContext(BaseModel):
    """Generic context — used for configured types without a dedicated variant."""

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    def as_mapping(self) -> dict[str, Any]:
        """Known and pass-through keys, None values dropped."""
        return self.model_dump(exclude_none=True)

    def get(self, key: str, default: Any = None) -> Any:
        return self.as_mapping().get(key, default)


class MatchQueueContext(NotificationContext):
    match_name: str | None = None
    queue_id: str | None = None


class PreGameContext(NotificationContext):
    match_name: str | None = None
    match_id: str | None = None


class RoleRetentionContext(NotificationContext):
    role_name: str | None = None
    days_remaining: int | None = None


CONTEXT_MODELS: dict[str, type[NotificationContext]] = {
    NotificationType.MATCH_QUEUE.value: MatchQueueContext,
    NotificationType.PRE_GAME.value: PreGameContext,
    NotificationType.ROLE_RETENTION.value: RoleRetentionContext,
}


def build_context(
    notification_type: str, values: Mapping[str, Any] | NotificationContext | None,
) -> NotificationContext:
    """Build the typed context variant for a notification type.

    Raises InvalidContextError when a known field has the wrong shape.
    """
    if isinstance(values, NotificationContext):
        values = values.as_mapping()
    model = CONTEXT_MODELS.get(notification_type, NotificationContext)
    try:
        return model.model_validate(dict(values or {}))
    except ValidationError as e:
        fields = ", ".join(
            ".".join(str(loc) for loc in err["loc"]) for err in e.errors()
        )
        raise InvalidContextError(notification_type, f"bad field(s): {fields}")
