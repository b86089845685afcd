"""Notification State Store — in-memory owner of every pending notification.

Invariants:
    - At most one record per (user_id, type); put() overwrites
    - A user key never maps to an empty dict (removed with its last record)
    - max_pending_per_user is enforced atomically inside reserve() and put();
      a reserved slot counts against capacity until put() or release()
    - In-flight reservations are not records: len(), reads and sweeps never
      see them
    - Every read/mutation runs under one re-entrant lock; no IO happens
      while the lock is held
    - Reads return records or shallow copies, never the internal dicts

Design Decisions:
    - Explicit object injected into the agent, not a module-level dict
    - threading.RLock over asyncio.Lock: critical sections are synchronous,
      so the same store is safe under an event loop or worker threads
"""

import threading

from nudge.core.admission import plan_admission
from nudge.core.domain_types import CapacityPolicy
from nudge.core.errors import CapacityExceededError
from nudge.core.pending import PendingNotification


class NotificationStateStore:
    """user_id -> notification_type -> PendingNotification."""

    def __init__(self):
        self._entries: dict[str, dict[str, PendingNotification]] = {}
        # user_id -> notification_type -> deliveries admitted but not yet committed
        self._in_flight: dict[str, dict[str, int]] = {}
        self._lock = threading.RLock()

    def reserve(
        self,
        user_id: str,
        notification_type: str,
        max_pending: int | None = None,
        policy: CapacityPolicy = CapacityPolicy.REJECT,
    ) -> None:
        """Claim a (user, type) slot before delivery starts.

        Raises CapacityExceededError (nothing claimed) when the user is full.
        Every successful reserve() ends in exactly one put() or release().
        """
        with self._lock:
            if max_pending is not None:
                plan = plan_admission(
                    list(self._entries.get(user_id, {}).values()),
                    notification_type, max_pending, policy,
                    in_flight=self._in_flight_types(user_id),
                )
                if not plan.admit:
                    raise CapacityExceededError(user_id, max_pending)
            slots = self._in_flight.setdefault(user_id, {})
            slots[notification_type] = slots.get(notification_type, 0) + 1

    def release(self, user_id: str, notification_type: str) -> None:
        """Give back a slot claimed by reserve(). Unknown slots are ignored."""
        with self._lock:
            slots = self._in_flight.get(user_id)
            if not slots or notification_type not in slots:
                return
            slots[notification_type] -= 1
            if slots[notification_type] <= 0:
                del slots[notification_type]
            if not slots:
                del self._in_flight[user_id]

    def put(
        self,
        record: PendingNotification,
        max_pending: int | None = None,
        policy: CapacityPolicy = CapacityPolicy.REJECT,
    ) -> list[PendingNotification]:
        """Write/overwrite a record. Returns records evicted to make room.

        Consumes the slot reserve() claimed for the record's (user, type), if
        any. Raises CapacityExceededError (nothing written, slot kept) when the
        user is full and the policy is REJECT.
        """
        with self._lock:
            user_entries = self._entries.get(record.user_id, {})
            evicted: list[PendingNotification] = []
            if max_pending is not None:
                plan = plan_admission(
                    list(user_entries.values()),
                    record.notification_type, max_pending, policy,
                    in_flight=self._in_flight_types(
                        record.user_id, excluding=record.notification_type,
                    ),
                )
                if not plan.admit:
                    raise CapacityExceededError(record.user_id, max_pending)
                evicted = [user_entries.pop(t) for t in plan.evict]
            user_entries[record.notification_type] = record
            self._entries[record.user_id] = user_entries
            self.release(record.user_id, record.notification_type)
            return evicted

    def in_flight(self, user_id: str) -> list[str]:
        """Types with a delivery admitted but not yet committed or released."""
        with self._lock:
            return sorted(self._in_flight.get(user_id, {}))

    def _in_flight_types(self, user_id: str, excluding: str | None = None) -> set[str]:
        """In-flight types, minus one claim on `excluding`. Caller holds the lock."""
        slots = dict(self._in_flight.get(user_id, {}))
        if excluding in slots:
            slots[excluding] -= 1
        return {t for t, n in slots.items() if n > 0}

    def get(self, user_id: str, notification_type: str) -> PendingNotification | None:
        with self._lock:
            return self._entries.get(user_id, {}).get(notification_type)

    def pop(self, user_id: str, notification_type: str) -> PendingNotification | None:
        """Remove one record; drops the user key when it was the last one."""
        with self._lock:
            user_entries = self._entries.get(user_id)
            if not user_entries:
                return None
            record = user_entries.pop(notification_type, None)
            if not user_entries:
                del self._entries[user_id]
            return record

    def pop_user(self, user_id: str) -> list[PendingNotification]:
        with self._lock:
            return list(self._entries.pop(user_id, {}).values())

    def pop_expired(self, now_ms: int) -> list[PendingNotification]:
        """Remove and return every record with expires_at <= now_ms."""
        with self._lock:
            expired = []
            for user_id in list(self._entries):
                user_entries = self._entries[user_id]
                for notification_type in list(user_entries):
                    if user_entries[notification_type].is_expired(now_ms):
                        expired.append(user_entries.pop(notification_type))
                if not user_entries:
                    del self._entries[user_id]
            return expired

    def pending_for(self, user_id: str) -> list[PendingNotification]:
        """A user's records, oldest sent first."""
        with self._lock:
            records = list(self._entries.get(user_id, {}).values())
        return sorted(records, key=lambda r: r.sent_at)

    def count(self, user_id: str) -> int:
        with self._lock:
            return len(self._entries.get(user_id, {}))

    def user_ids(self) -> list[str]:
        with self._lock:
            return list(self._entries)

    def snapshot(self) -> dict[str, dict[str, PendingNotification]]:
        with self._lock:
            return {u: dict(types) for u, types in self._entries.items()}

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._in_flight.clear()

    def __len__(self) -> int:
        with self._lock:
            return sum(len(types) for types in self._entries.values())

    def __contains__(self, user_id: object) -> bool:
        with self._lock:
            return user_id in self._entries
