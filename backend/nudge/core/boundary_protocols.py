"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - Messaging, configuration, extension steps and the audit log are all
      reached through these Protocol types
    - Implementations provided by shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, test fakes need no base class
    - Async where implementations do IO; the pure core never awaits
"""

from collections.abc import Mapping
from typing import Any, Protocol


class SentMessage(Protocol):
    """Delivered message handle — only its id is kept."""
    id: str


class MessagingUser(Protocol):
    """A resolved user that can receive a direct message."""
    id: str

    async def send(self, text: str) -> SentMessage: ...


class MessagingChannel(Protocol):
    """A shared channel used for passive fallback notices."""
    id: str

    async def send(self, text: str) -> SentMessage: ...


class MessagingClient(Protocol):
    """Contract for the chat platform client — implemented by shell."""
    async def get_user(self, user_id: str) -> MessagingUser | None: ...
    async def get_channel(self, channel_id: str) -> MessagingChannel | None: ...


class ExtensionRunner(Protocol):
    """Contract for optional named pre/post-processing steps."""
    def has_step(self, name: str) -> bool: ...
    async def exec_step(self, name: str, params: dict[str, Any]) -> Mapping[str, Any]: ...


class ConfigProvider(Protocol):
    """Contract for startup configuration — read once."""
    config_path: str

    def get_config(self, namespace: str) -> dict[str, Any]: ...


class EventRecorder(Protocol):
    """Contract for the lifecycle audit log — implemented by shell."""
    async def record(
        self,
        event: str,
        user_id: str,
        notification_type: str,
        tier: int | None,
        payload: dict[str, Any],
    ) -> None: ...
