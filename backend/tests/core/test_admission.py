"""Tests for admission policy — trigger checks, tier fallback, capacity plans."""

import pytest

from nudge.core.admission import plan_admission, require_trigger, resolve_tier
from nudge.core.domain_types import CapacityPolicy
from nudge.core.errors import (
    ConfigurationMissingError, NotificationsDisabledError, TriggerDisabledError,
)
from nudge.core.notification_config import NotificationConfig
from nudge.core.notification_context import NotificationContext
from nudge.core.pending import PendingNotification


def _pending(notification_type, sent_at):
    return PendingNotification(
        user_id="u1", notification_type=notification_type,
        context=NotificationContext(), expires_at=10_000,
        message_id="m", sent_at=sent_at, tier=0,
    )


CONFIG = NotificationConfig(
    triggers={"match_queue": {"tier": 0}, "role_retention": {"tier": 1}, "off": False},
)


def test_resolve_tier_configured():
    assert resolve_tier(CONFIG, "match_queue") == 0
    assert resolve_tier(CONFIG, "role_retention") == 1


def test_resolve_tier_unconfigured_falls_back_to_informational():
    assert resolve_tier(CONFIG, "nonexistent") == 2


def test_require_trigger_returns_enabled_trigger():
    assert require_trigger(CONFIG, "match_queue").tier == 0


def test_require_trigger_globally_disabled():
    config = NotificationConfig(enabled=False, triggers={"match_queue": True})
    with pytest.raises(NotificationsDisabledError):
        require_trigger(config, "match_queue")


def test_require_trigger_unknown_type_is_configuration_missing():
    with pytest.raises(ConfigurationMissingError) as exc:
        require_trigger(CONFIG, "nonexistent")
    assert exc.value.missing == ["triggers.nonexistent"]


def test_require_trigger_disabled_type():
    with pytest.raises(TriggerDisabledError) as exc:
        require_trigger(CONFIG, "off")
    assert exc.value.code == "TRIGGER_DISABLED"


def test_plan_admits_below_capacity():
    plan = plan_admission([_pending("a", 1)], "b", 2, CapacityPolicy.REJECT)
    assert plan.admit and not plan.replaces and plan.evict == ()


def test_plan_replacement_never_counts_against_capacity():
    plan = plan_admission([_pending("a", 1)], "a", 1, CapacityPolicy.REJECT)
    assert plan.admit and plan.replaces


def test_plan_rejects_at_capacity():
    plan = plan_admission([_pending("a", 1), _pending("b", 2)], "c", 2, CapacityPolicy.REJECT)
    assert not plan.admit


def test_plan_evict_oldest_picks_earliest_sent():
    pending = [_pending("b", 5), _pending("a", 1), _pending("c", 9)]
    plan = plan_admission(pending, "d", 3, CapacityPolicy.EVICT_OLDEST)
    assert plan.admit
    assert plan.evict == ("a",)


def test_plan_evict_oldest_evicts_enough_when_over_capacity():
    pending = [_pending("a", 1), _pending("b", 2), _pending("c", 3)]
    plan = plan_admission(pending, "d", 2, CapacityPolicy.EVICT_OLDEST)
    assert plan.evict == ("a", "b")


def test_plan_in_flight_type_holds_a_slot():
    plan = plan_admission([], "b", 1, CapacityPolicy.REJECT, in_flight={"a"})
    assert not plan.admit


def test_plan_same_type_in_flight_is_a_replacement():
    plan = plan_admission([], "a", 1, CapacityPolicy.REJECT, in_flight={"a"})
    assert plan.admit and plan.replaces


def test_plan_evict_oldest_skips_types_in_flight():
    pending = [_pending("a", 1), _pending("b", 2)]
    plan = plan_admission(pending, "c", 2, CapacityPolicy.EVICT_OLDEST, in_flight={"a"})
    assert plan.evict == ("b",)


def test_plan_evict_oldest_rejects_when_only_in_flight_slots_remain():
    plan = plan_admission([], "b", 1, CapacityPolicy.EVICT_OLDEST, in_flight={"a"})
    assert not plan.admit
