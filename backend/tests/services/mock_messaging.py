"""Mock Messaging Client — in-memory stand-in for the Discord boundary.

Invariants:
    - FakeMessagingClient satisfies the MessagingClient protocol
    - Every DM / channel post is recorded in order on the client
    - Failures are opt-in per user (unknown, lookup error, send error)
      and per channel (send error)
    - User lookups can be slowed or held open to interleave concurrent calls

Design Decisions:
    - Flat mock classes (no inheritance): simple, explicit, easy to debug
    - FakeClock is a mutable callable: tests advance time explicitly
"""

import asyncio
import copy
from dataclasses import dataclass

from nudge.core.notification_config import NotificationConfig, load_notification_config


@dataclass(frozen=True)
class FakeMessage:
    id: str


class FakeUser:
    def __init__(self, client: "FakeMessagingClient", user_id: str):
        self._client = client
        self.id = user_id

    async def send(self, text: str) -> FakeMessage:
        if self.id in self._client.send_failures:
            raise RuntimeError("Cannot send messages to this user")
        self._client.dms.append((self.id, text))
        return self._client.next_message()


class FakeChannel:
    def __init__(self, client: "FakeMessagingClient", channel_id: str):
        self._client = client
        self.id = channel_id

    async def send(self, text: str) -> FakeMessage:
        if self.id in self._client.channel_failures:
            raise RuntimeError("missing permissions")
        self._client.channel_posts.append((self.id, text))
        return self._client.next_message()


class FakeMessagingClient:
    """Records outbound messages; users are reachable unless told otherwise."""

    def __init__(self):
        self.dms: list[tuple[str, str]] = []
        self.channel_posts: list[tuple[str, str]] = []
        self.unknown_users: set[str] = set()
        self.lookup_failures: set[str] = set()
        self.send_failures: set[str] = set()
        self.channels: set[str] = set()
        self.channel_failures: set[str] = set()
        # Lookups yield to the loop: sleep for lookup_delay, or wait on hold
        self.lookup_delay = 0.0
        self.hold: asyncio.Event | None = None
        self.lookup_started = asyncio.Event()
        self._next_id = 1000

    def next_message(self) -> FakeMessage:
        self._next_id += 1
        return FakeMessage(id=str(self._next_id))

    async def get_user(self, user_id: str) -> FakeUser | None:
        self.lookup_started.set()
        if self.hold is not None:
            await self.hold.wait()
        elif self.lookup_delay:
            await asyncio.sleep(self.lookup_delay)
        if user_id in self.lookup_failures:
            raise RuntimeError("gateway timeout")
        if user_id in self.unknown_users:
            return None
        return FakeUser(self, user_id)

    async def get_channel(self, channel_id: str) -> FakeChannel | None:
        if channel_id not in self.channels:
            return None
        return FakeChannel(self, channel_id)

    def dms_to(self, user_id: str) -> list[str]:
        return [text for uid, text in self.dms if uid == user_id]


class FakeClock:
    """Epoch-ms clock driven by the test."""

    def __init__(self, now_ms: int = 1_700_000_000_000):
        self.now_ms = now_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, seconds: float) -> None:
        self.now_ms += int(seconds * 1000)


class RecordingRunner:
    """ExtensionRunner that records calls and replays canned results per step."""

    def __init__(self, results: dict | None = None, steps: set[str] | None = None):
        self.results = dict(results or {})
        self.steps = set(steps) if steps is not None else set(self.results)
        self.calls: list[tuple[str, dict]] = []
        self.raise_on: set[str] = set()
        self.hang_on: set[str] = set()

    def has_step(self, name: str) -> bool:
        return name in self.steps

    async def exec_step(self, name: str, params: dict) -> dict:
        self.calls.append((name, params))
        if name in self.raise_on:
            raise RuntimeError(f"{name} blew up")
        if name in self.hang_on:
            await asyncio.sleep(10)
        return self.results.get(name, {"status": "ok"})

    def calls_for(self, name: str) -> list[dict]:
        return [params for step, params in self.calls if step == name]


class FakeRecorder:
    """EventRecorder that keeps rows in a list (or fails on demand)."""

    def __init__(self, fail: bool = False):
        self.rows: list[dict] = []
        self.fail = fail

    async def record(self, event, user_id, notification_type, tier, payload) -> None:
        if self.fail:
            raise RuntimeError("database is down")
        self.rows.append({
            "event": event, "user_id": user_id, "type": notification_type,
            "tier": tier, "payload": payload,
        })


# -- Policy --------------------------------------------------------------------

RAW_CONFIG = {
    "enabled": True,
    "triggers": {
        "match_queue": {"enabled": True, "tier": 0},
        "pre_game": {"enabled": True, "tier": 0},
        "role_retention": {"enabled": True, "tier": 1},
    },
    "timeout_seconds": {"match_queue": 300, "pre_game": 120, "role_retention": 86400},
    "dm_templates": {
        "match_queue": "Queue {match_name}: reply !ready",
        "pre_game": "Match {match_name} starts soon: reply !confirm",
        "role_retention": "Keep {role_name}? reply !active",
    },
    "response_keywords": {
        "match_queue": ["!ready"],
        "pre_game": ["!confirm"],
        "role_retention": ["!active"],
    },
}


def make_config(**overrides) -> NotificationConfig:
    """Shipped-like policy (tiers 0/0/1) with top-level overrides."""
    raw = copy.deepcopy(RAW_CONFIG)
    raw.update(overrides)
    return load_notification_config(raw)
