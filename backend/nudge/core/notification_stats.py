"""Notification Stats — running counters and the dashboard summary derived from them.

Invariants:
    - Counters only grow; they describe the process lifetime, not the store
    - compute_notification_stats() never raises — empty counters give zeros
    - Rates are fractions in [0, 1] rounded to 4 places
    - tier_distribution always lists tiers 0-2, plus any custom tier sent to
"""

from dataclasses import dataclass, field

from nudge.core.domain_types import MS_PER_SECOND, NotificationTier


@dataclass
class NotificationMetrics:
    """Process-lifetime counters, updated by the agent."""
    sent: int = 0
    failed: int = 0
    responded: int = 0
    expired: int = 0
    cleared: int = 0
    sent_by_tier: dict[int, int] = field(default_factory=dict)
    failures_by_code: dict[str, int] = field(default_factory=dict)
    response_time_total_ms: int = 0

    def record_sent(self, tier: int) -> None:
        self.sent += 1
        self.sent_by_tier[tier] = self.sent_by_tier.get(tier, 0) + 1

    def record_failure(self, code: str) -> None:
        self.failed += 1
        self.failures_by_code[code] = self.failures_by_code.get(code, 0) + 1

    def record_response(self, elapsed_ms: int) -> None:
        self.responded += 1
        self.response_time_total_ms += max(elapsed_ms, 0)


def _ratio(part: int, whole: int) -> float:
    return round(part / whole, 4) if whole else 0.0


def compute_notification_stats(metrics: NotificationMetrics, pending: int) -> dict:
    """Dashboard aggregates. Pure, no IO."""
    attempts = metrics.sent + metrics.failed
    tiers = sorted({int(t) for t in NotificationTier} | set(metrics.sent_by_tier))
    avg_response_ms = (
        metrics.response_time_total_ms / metrics.responded
        if metrics.responded else 0.0
    )
    return {
        "total_sent": metrics.sent,
        "total_failed": metrics.failed,
        "success_rate": _ratio(metrics.sent, attempts),
        "tier_distribution": {
            f"tier{tier}": _ratio(metrics.sent_by_tier.get(tier, 0), metrics.sent)
            for tier in tiers
        },
        "response_rate": _ratio(metrics.responded, metrics.sent),
        "expired": metrics.expired,
        "cleared": metrics.cleared,
        "responded": metrics.responded,
        "avg_response_time_seconds": round(avg_response_ms / MS_PER_SECOND, 2),
        "failures_by_code": dict(metrics.failures_by_code),
        "pending": pending,
    }
