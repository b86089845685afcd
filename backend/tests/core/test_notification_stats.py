"""Tests for compute_notification_stats — pure dashboard aggregates, no IO."""

from nudge.core.notification_stats import NotificationMetrics, compute_notification_stats


def test_empty_metrics_give_zero_stats():
    stats = compute_notification_stats(NotificationMetrics(), pending=0)
    assert stats["total_sent"] == 0
    assert stats["success_rate"] == 0.0
    assert stats["tier_distribution"] == {"tier0": 0.0, "tier1": 0.0, "tier2": 0.0}
    assert stats["avg_response_time_seconds"] == 0.0
    assert stats["pending"] == 0


def test_success_rate_and_tier_distribution():
    metrics = NotificationMetrics()
    metrics.record_sent(0)
    metrics.record_sent(0)
    metrics.record_sent(1)
    metrics.record_failure("USER_UNREACHABLE")
    stats = compute_notification_stats(metrics, pending=3)
    assert stats["total_sent"] == 3
    assert stats["total_failed"] == 1
    assert stats["success_rate"] == 0.75
    assert stats["tier_distribution"] == {"tier0": 0.6667, "tier1": 0.3333, "tier2": 0.0}
    assert stats["failures_by_code"] == {"USER_UNREACHABLE": 1}


def test_average_response_time_in_seconds():
    metrics = NotificationMetrics()
    metrics.record_sent(0)
    metrics.record_sent(0)
    metrics.record_response(3000)
    metrics.record_response(1000)
    stats = compute_notification_stats(metrics, pending=0)
    assert stats["responded"] == 2
    assert stats["response_rate"] == 1.0
    assert stats["avg_response_time_seconds"] == 2.0


def test_negative_elapsed_time_counts_as_zero():
    metrics = NotificationMetrics()
    metrics.record_response(-500)
    assert metrics.response_time_total_ms == 0


def test_custom_tier_appears_in_distribution():
    metrics = NotificationMetrics()
    metrics.record_sent(0)
    metrics.record_sent(4)
    stats = compute_notification_stats(metrics, pending=0)
    assert stats["tier_distribution"] == {
        "tier0": 0.5, "tier1": 0.0, "tier2": 0.0, "tier4": 0.5,
    }
    assert list(stats["tier_distribution"]) == ["tier0", "tier1", "tier2", "tier4"]
