"""Notification Agent — dispatch, response handling and expiry of pending notifications.

Invariants:
    - send: at most one outbound message and one state write, in that order;
      nothing is stored unless delivery succeeded
    - expires_at = commit time + timeout_seconds[type] * 1000
    - Operations return OperationResult; NudgeError never escapes them
    - The state store lock is never held across a messaging call
    - Extension steps, event listeners and the audit log are optional and
      isolated: their failures are logged as warnings only

Design Decisions:
    - Clock injected as a callable returning epoch ms (tests drive time)
    - Trigger checks run before any IO; the capacity slot is reserved in the
      store before delivery and released if delivery fails, so concurrent
      sends for one user never both deliver past max_pending_per_user
"""

import logging
import time
from collections.abc import Callable, Mapping
from typing import Any

from nudge.core.admission import require_trigger, resolve_tier
from nudge.core.boundary_protocols import EventRecorder, ExtensionRunner, MessagingClient
from nudge.core.domain_types import (
    ExtensionStep, MS_PER_SECOND, NotificationEvent, NotificationType,
)
from nudge.core.errors import (
    CapacityExceededError, ConfigurationMissingError, ErrorSeverity,
    NoMatchingPendingError, NudgeError, UserUnreachableError,
)
from nudge.core.match_response import match_reply, normalize_reply
from nudge.core.notification_config import NotificationConfig
from nudge.core.notification_context import NotificationContext, build_context
from nudge.core.notification_stats import NotificationMetrics, compute_notification_stats
from nudge.core.operation_result import OperationResult
from nudge.core.pending import PendingNotification
from nudge.core.render_template import render_template
from nudge.core.state_store import NotificationStateStore
from nudge.services.extension_bridge import ExtensionBridge
from nudge.services.notification_events import Listener, NotificationEventBus

logger = logging.getLogger(__name__)

_LOG_LEVELS = {
    ErrorSeverity.INFO: logging.INFO,
    ErrorSeverity.WARNING: logging.WARNING,
    ErrorSeverity.ERROR: logging.ERROR,
    ErrorSeverity.CRITICAL: logging.ERROR,
}

ContextInput = Mapping[str, Any] | NotificationContext | None


def current_time_ms() -> int:
    return int(time.time() * MS_PER_SECOND)


def _type_name(notification_type: str | NotificationType) -> str:
    if isinstance(notification_type, NotificationType):
        return notification_type.value
    return str(notification_type)


class NotificationAgent:
    """Owns the pending-notification state machine for one process."""

    def __init__(
        self,
        config: NotificationConfig,
        messaging: MessagingClient,
        store: NotificationStateStore | None = None,
        recorder: EventRecorder | None = None,
        clock: Callable[[], int] = current_time_ms,
    ):
        self._config = config
        self._messaging = messaging
        self._store = store if store is not None else NotificationStateStore()
        self._recorder = recorder
        self._clock = clock
        self._bridge = ExtensionBridge(None, config.extension_step_timeout_seconds)
        self._events = NotificationEventBus()
        self.metrics = NotificationMetrics()
        self._initialized = False

    @property
    def config(self) -> NotificationConfig:
        return self._config

    @property
    def store(self) -> NotificationStateStore:
        return self._store

    @property
    def initialized(self) -> bool:
        return self._initialized

    def initialize(self, extension_runner: ExtensionRunner | None = None) -> None:
        """Attach the (optional) extension runner. Safe to call again."""
        self._bridge = ExtensionBridge(
            extension_runner, self._config.extension_step_timeout_seconds,
        )
        self._initialized = True
        logger.info(
            "NotificationAgent initialized"
            + (" with extension runner" if extension_runner else ""),
        )

    def shutdown(self) -> None:
        """Drop every pending notification (no persistence)."""
        dropped = len(self._store)
        self._store.clear()
        logger.info(f"NotificationAgent shut down, dropped {dropped} pending notification(s)")

    def on(self, event: NotificationEvent, listener: Listener) -> None:
        self._events.on(event, listener)

    def off(self, event: NotificationEvent, listener: Listener) -> None:
        self._events.off(event, listener)

    def get_notification_tier(self, notification_type: str | NotificationType) -> int:
        return resolve_tier(self._config, _type_name(notification_type))

    # ─── Dispatch ────────────────────────────────────────────────

    async def send_notification(
        self,
        user_id: str,
        notification_type: str | NotificationType,
        context: ContextInput = None,
    ) -> OperationResult:
        """Render, deliver and track one notification."""
        type_name = _type_name(notification_type)
        try:
            return await self._dispatch(user_id, type_name, context)
        except NudgeError as e:
            self.metrics.record_failure(e.code)
            return self._fail(e, "Send", user_id, type_name)

    async def send_queue_keep_alive(
        self, user_id: str, match_name: str, queue_id: str,
    ) -> OperationResult:
        context = {"match_name": match_name, "queue_id": queue_id}
        result = await self._bridge.run(
            ExtensionStep.QUEUE_KEEP_ALIVE_PROCESSING.value,
            {"user_id": user_id, "context": dict(context)},
        )
        if result and result.get("handled"):
            logger.info(
                f"Queue keep-alive for {user_id} handled by extension step",
                extra={"user_id": user_id, "notification_type": NotificationType.MATCH_QUEUE.value},
            )
            return OperationResult(bool(result.get("success", True)))
        return await self.send_notification(user_id, NotificationType.MATCH_QUEUE, context)

    async def send_pre_game(
        self, user_id: str, match_name: str, match_id: str,
    ) -> OperationResult:
        return await self.send_notification(
            user_id, NotificationType.PRE_GAME,
            {"match_name": match_name, "match_id": match_id},
        )

    async def send_role_retention(
        self, user_id: str, role_name: str, days_remaining: int,
    ) -> OperationResult:
        return await self.send_notification(
            user_id, NotificationType.ROLE_RETENTION,
            {"role_name": role_name, "days_remaining": days_remaining},
        )

    async def _dispatch(
        self, user_id: str, notification_type: str, context: ContextInput,
    ) -> OperationResult:
        require_trigger(self._config, notification_type)

        if isinstance(context, NotificationContext):
            raw_context = context.as_mapping()
        else:
            raw_context = dict(context or {})

        pre = await self._bridge.run(
            ExtensionStep.PREPROCESS_NOTIFICATION.value,
            {"user_id": user_id, "type": notification_type, "context": dict(raw_context)},
        )
        if pre:
            if pre.get("handled"):
                logger.info(
                    f"Notification {notification_type} for {user_id} handled by preprocessor",
                    extra={"user_id": user_id, "notification_type": notification_type},
                )
                return OperationResult(bool(pre.get("success", True)))
            if isinstance(pre.get("context"), Mapping):
                raw_context = dict(pre["context"])

        typed_context = build_context(notification_type, raw_context)
        text = render_template(
            self._template_for(notification_type), typed_context.as_mapping(),
        )
        timeout_seconds = self._timeout_for(notification_type)

        # Slot held from here until commit; released if delivery fails
        self._store.reserve(
            user_id, notification_type,
            max_pending=self._config.max_pending_per_user,
            policy=self._config.capacity_policy,
        )
        committed = False
        try:
            message_id = await self._deliver(user_id, text)

            now = self._clock()
            record = PendingNotification(
                user_id=user_id,
                notification_type=notification_type,
                context=typed_context,
                expires_at=now + timeout_seconds * MS_PER_SECOND,
                message_id=message_id,
                sent_at=now,
                tier=self.get_notification_tier(notification_type),
            )
            try:
                evicted = self._store.put(
                    record,
                    max_pending=self._config.max_pending_per_user,
                    policy=self._config.capacity_policy,
                )
            except CapacityExceededError:
                logger.warning(
                    f"Message {message_id} delivered to {user_id} but not tracked: capacity reached",
                    extra={"user_id": user_id, "message_id": message_id},
                )
                raise
            committed = True
        finally:
            if not committed:
                self._store.release(user_id, notification_type)

        for old in evicted:
            await self._on_removed(old, "evicted")

        self.metrics.record_sent(record.tier)
        logger.info(
            f"Sent notification {notification_type} to {user_id}",
            extra={
                "user_id": user_id,
                "notification_type": notification_type,
                "message_id": message_id,
            },
        )
        await self._publish(NotificationEvent.SENT, record)
        return OperationResult.ok(
            message_id=message_id, notification_types=(notification_type,),
        )

    def _template_for(self, notification_type: str) -> str:
        template = self._config.dm_templates.get(notification_type)
        if not template:
            raise ConfigurationMissingError([f"dm_templates.{notification_type}"])
        return template

    def _timeout_for(self, notification_type: str) -> int:
        timeout_seconds = self._config.timeout_seconds.get(notification_type)
        if timeout_seconds is None:
            raise ConfigurationMissingError([f"timeout_seconds.{notification_type}"])
        return timeout_seconds

    async def _deliver(self, user_id: str, text: str) -> str:
        """Resolve the user and send the DM. Returns the message id."""
        try:
            user = await self._messaging.get_user(user_id)
        except Exception as e:
            raise UserUnreachableError(user_id, f"lookup failed: {e}")
        if user is None:
            raise UserUnreachableError(user_id, "user not found")
        try:
            sent = await user.send(text)
        except Exception as e:
            raise UserUnreachableError(user_id, f"send failed: {e}")
        return str(sent.id)

    # ─── Responses & clearing ────────────────────────────────────

    async def handle_response(self, user_id: str, text: str) -> OperationResult:
        """Resolve every pending notification whose keyword the reply carries."""
        pending = self._store.pending_for(user_id)
        matched = match_reply(
            text, [p.notification_type for p in pending], self._config.response_keywords,
        )
        resolved = []
        for notification_type in matched:
            record = self._store.pop(user_id, notification_type)
            # None when the sweeper removed it between scan and pop
            if record is not None:
                resolved.append(record)
        if not resolved:
            return self._fail(NoMatchingPendingError(user_id), "Response", user_id)

        now = self._clock()
        reply = normalize_reply(text)
        for record in resolved:
            self.metrics.record_response(now - record.sent_at)
            await self._publish(NotificationEvent.RESPONDED, record, {"response": reply})
            await self._bridge.run(
                ExtensionStep.POSTPROCESS_RESPONSE.value,
                {
                    "user_id": user_id,
                    "type": record.notification_type,
                    "context": record.context.as_mapping(),
                    "response": reply,
                },
            )
        logger.info(
            f"Handled notification response from {user_id}: {reply}",
            extra={"user_id": user_id},
        )
        return OperationResult.ok(
            notification_types=tuple(r.notification_type for r in resolved),
        )

    async def clear_notification(
        self, user_id: str, notification_type: str | NotificationType,
    ) -> OperationResult:
        type_name = _type_name(notification_type)
        record = self._store.pop(user_id, type_name)
        if record is None:
            return self._fail(NoMatchingPendingError(user_id), "Clear", user_id, type_name)
        await self._on_removed(record, "cleared")
        return OperationResult.ok(notification_types=(type_name,))

    async def clear_all_notifications(self, user_id: str) -> int:
        records = self._store.pop_user(user_id)
        for record in records:
            await self._on_removed(record, "cleared")
        return len(records)

    async def _on_removed(self, record: PendingNotification, reason: str) -> None:
        self.metrics.cleared += 1
        await self._publish(NotificationEvent.CLEARED, record, {"reason": reason})
        await self._bridge.run(
            ExtensionStep.NOTIFICATION_CLEARED.value,
            {
                "user_id": record.user_id,
                "type": record.notification_type,
                "context": record.context.as_mapping(),
                "reason": reason,
            },
        )
        logger.info(
            f"Cleared notification {record.notification_type} for {record.user_id} ({reason})",
            extra={"user_id": record.user_id, "notification_type": record.notification_type},
        )

    # ─── Expiry ──────────────────────────────────────────────────

    async def check_expirations(self) -> list[PendingNotification]:
        """Evict every record with expires_at <= now. Returns the evicted records."""
        now = self._clock()
        expired = self._store.pop_expired(now)
        if not expired:
            return []
        for record in expired:
            self.metrics.expired += 1
            logger.info(
                f"Notification {record.notification_type} expired for {record.user_id}",
                extra={"user_id": record.user_id, "notification_type": record.notification_type},
            )
            await self._publish(NotificationEvent.EXPIRED, record)
        await self._bridge.run(
            ExtensionStep.CHECK_EXPIRATIONS.value,
            {"now_ms": now, "expired": [r.to_dict() for r in expired]},
        )
        return expired

    # ─── Queries ─────────────────────────────────────────────────

    def pending_notifications(self, user_id: str) -> list[PendingNotification]:
        return self._store.pending_for(user_id)

    def stats(self) -> dict:
        return compute_notification_stats(self.metrics, len(self._store))

    # ─── Helpers ─────────────────────────────────────────────────

    async def _publish(
        self,
        event: NotificationEvent,
        record: PendingNotification,
        extra: dict[str, Any] | None = None,
    ) -> None:
        data = record.to_dict()
        data.update(extra or {})
        self._events.emit(event, data)
        if self._recorder is None:
            return
        try:
            await self._recorder.record(
                event.value, record.user_id, record.notification_type, record.tier, data,
            )
        except Exception as e:
            logger.warning(
                f"Audit log write for {event.value} failed: {e}",
                extra={"user_id": record.user_id, "notification_type": record.notification_type},
            )

    def _fail(
        self,
        error: NudgeError,
        operation: str,
        user_id: str,
        notification_type: str | None = None,
    ) -> OperationResult:
        error.context.user_id = error.context.user_id or user_id
        error.context.notification_type = error.context.notification_type or notification_type
        logger.log(
            _LOG_LEVELS[error.severity],
            f"{operation} failed: {error.message}",
            extra={
                "user_id": user_id,
                "notification_type": notification_type,
                "error_code": error.code,
            },
        )
        return OperationResult.failed(error)
