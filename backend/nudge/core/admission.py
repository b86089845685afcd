"""Admission Policy — trigger switches, tier lookup and per-user capacity.

Invariants:
    - resolve_tier() returns FALLBACK_TIER (2) for any unconfigured type
    - Replacing an existing (user, type) never counts against capacity
    - evict_oldest never evicts the type being admitted
    - A type with a delivery in flight holds a slot and is never evicted
    - Pure functions: callers pass in whatever pending state they hold
"""

from collections.abc import Collection, Sequence
from dataclasses import dataclass, field

from nudge.core.domain_types import CapacityPolicy, FALLBACK_TIER
from nudge.core.errors import (
    ConfigurationMissingError, NotificationsDisabledError, TriggerDisabledError,
)
from nudge.core.notification_config import NotificationConfig, TriggerConfig
from nudge.core.pending import PendingNotification


@dataclass(frozen=True)
class AdmissionPlan:
    """Outcome of a capacity check for one incoming notification."""
    admit: bool
    replaces: bool = False
    evict: tuple[str, ...] = field(default_factory=tuple)


def resolve_tier(config: NotificationConfig, notification_type: str) -> int:
    trigger = config.triggers.get(notification_type)
    if trigger is None:
        return int(FALLBACK_TIER)
    return trigger.tier


def require_trigger(config: NotificationConfig, notification_type: str) -> TriggerConfig:
    """Return the enabled trigger for a type or raise the matching error."""
    if not config.enabled:
        raise NotificationsDisabledError()
    trigger = config.triggers.get(notification_type)
    if trigger is None:
        raise ConfigurationMissingError([f"triggers.{notification_type}"])
    if not trigger.enabled:
        raise TriggerDisabledError(notification_type)
    return trigger


def plan_admission(
    pending: Sequence[PendingNotification],
    notification_type: str,
    max_pending: int,
    policy: CapacityPolicy,
    in_flight: Collection[str] = (),
) -> AdmissionPlan:
    """Decide whether one more notification fits a user's pending set.

    in_flight holds types already admitted for this user whose delivery has not
    committed yet; they occupy a slot each and are never evicted.
    """
    held = {p.notification_type for p in pending} | set(in_flight)
    if notification_type in held:
        return AdmissionPlan(admit=True, replaces=True)
    overflow = len(held) + 1 - max_pending
    if overflow <= 0:
        return AdmissionPlan(admit=True)
    if policy is CapacityPolicy.REJECT:
        return AdmissionPlan(admit=False)
    evictable = sorted(
        (p for p in pending if p.notification_type not in in_flight),
        key=lambda p: p.sent_at,
    )
    if overflow > len(evictable):
        return AdmissionPlan(admit=False)
    return AdmissionPlan(
        admit=True,
        evict=tuple(p.notification_type for p in evictable[:overflow]),
    )
