"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - UserId wraps the messaging platform's opaque user identifier (string)
    - EpochMs is always milliseconds since the Unix epoch
    - Notification types are plain strings at the boundary; NotificationType
      names the ones the agent ships wrappers for
    - Tiers: 0 = most urgent, increasing = more passive; FALLBACK_TIER for
      anything not configured

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

from enum import Enum, IntEnum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", str)
MessageId = NewType("MessageId", str)


# ─── Value Types ─────────────────────────────────────────────────

EpochMs = NewType("EpochMs", int)


# ─── Enums ───────────────────────────────────────────────────────

class NotificationType(str, Enum):
    """Notification types with dedicated convenience wrappers."""
    MATCH_QUEUE = "match_queue"
    PRE_GAME = "pre_game"
    ROLE_RETENTION = "role_retention"


class NotificationTier(IntEnum):
    """Escalation priority. Lower is more urgent / more intrusive."""
    CRITICAL = 0
    IMPORTANT = 1
    INFORMATIONAL = 2


class CapacityPolicy(str, Enum):
    """What happens when a user already holds max_pending_per_user notifications."""
    REJECT = "reject"
    EVICT_OLDEST = "evict_oldest"


class NotificationEvent(str, Enum):
    """Lifecycle events emitted by the agent and written to the audit log."""
    SENT = "notification:sent"
    RESPONDED = "notification:responded"
    EXPIRED = "notification:expired"
    CLEARED = "notification:cleared"


class ExtensionStep(str, Enum):
    """Optional extension step names consulted around core operations."""
    PREPROCESS_NOTIFICATION = "preprocess_notification"
    QUEUE_KEEP_ALIVE_PROCESSING = "queue_keep_alive_processing"
    POSTPROCESS_RESPONSE = "postprocess_response"
    NOTIFICATION_CLEARED = "notification_cleared"
    CHECK_EXPIRATIONS = "check_expirations"


# ─── Constants ───────────────────────────────────────────────────

FALLBACK_TIER = NotificationTier.INFORMATIONAL
MS_PER_SECOND = 1000
