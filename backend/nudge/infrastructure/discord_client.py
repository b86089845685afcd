"""Discord Messaging Client — direct messages and channel posts over the Discord REST API.

Invariants:
    - 404 on user/channel lookup → None (caller decides what "unreachable" means)
    - Any other non-2xx response or transport failure → MessagingError
    - No retries: failures are reported to the caller as-is
    - DM channel ids are cached per user for the client's lifetime

Design Decisions:
    - httpx.AsyncClient with an injectable transport (tests use MockTransport)
    - User/Channel handles are thin objects bound to the client, matching the
      MessagingUser / MessagingChannel protocols
"""

import logging
from dataclasses import dataclass

import httpx

from nudge.core.errors import MessagingError

logger = logging.getLogger(__name__)

DEFAULT_API_BASE_URL = "https://discord.com/api/v10"
_USER_AGENT = "DiscordBot (https://github.com/nudge, 1.0)"


@dataclass(frozen=True)
class DiscordMessage:
    id: str
    channel_id: str


class DiscordUser:
    """Resolved Discord user; send() opens (or reuses) the DM channel."""

    def __init__(self, client: "DiscordMessagingClient", user_id: str, username: str | None):
        self._client = client
        self.id = user_id
        self.username = username

    async def send(self, text: str) -> DiscordMessage:
        channel_id = await self._client.open_dm_channel(self.id)
        return await self._client.post_message(channel_id, text)


class DiscordChannel:
    """Guild text channel used for passive notices."""

    def __init__(self, client: "DiscordMessagingClient", channel_id: str, name: str | None):
        self._client = client
        self.id = channel_id
        self.name = name

    async def send(self, text: str) -> DiscordMessage:
        return await self._client.post_message(self.id, text)


class DiscordMessagingClient:
    """Implements the MessagingClient protocol against Discord's REST API."""

    def __init__(
        self,
        bot_token: str,
        base_url: str = DEFAULT_API_BASE_URL,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._http = httpx.AsyncClient(
            base_url=base_url,
            headers={
                "Authorization": f"Bot {bot_token}",
                "User-Agent": _USER_AGENT,
            },
            timeout=timeout_seconds,
            transport=transport,
        )
        self._dm_channels: dict[str, str] = {}

    async def get_user(self, user_id: str) -> DiscordUser | None:
        data = await self._request("GET", f"/users/{user_id}", "get_user", allow_404=True)
        if data is None:
            logger.warning(f"User {user_id} not found", extra={"user_id": user_id})
            return None
        return DiscordUser(self, str(data["id"]), data.get("username"))

    async def get_channel(self, channel_id: str) -> DiscordChannel | None:
        data = await self._request("GET", f"/channels/{channel_id}", "get_channel", allow_404=True)
        if data is None:
            return None
        return DiscordChannel(self, str(data["id"]), data.get("name"))

    async def open_dm_channel(self, user_id: str) -> str:
        cached = self._dm_channels.get(user_id)
        if cached:
            return cached
        data = await self._request(
            "POST", "/users/@me/channels", "open_dm", json={"recipient_id": user_id},
        )
        channel_id = str(data["id"])
        self._dm_channels[user_id] = channel_id
        return channel_id

    async def post_message(self, channel_id: str, content: str) -> DiscordMessage:
        data = await self._request(
            "POST", f"/channels/{channel_id}/messages", "send_message",
            json={"content": content},
        )
        return DiscordMessage(id=str(data["id"]), channel_id=channel_id)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        operation: str,
        json: dict | None = None,
        allow_404: bool = False,
    ) -> dict | None:
        try:
            response = await self._http.request(method, path, json=json)
        except httpx.HTTPError as e:
            raise MessagingError(str(e) or type(e).__name__, operation)
        if allow_404 and response.status_code == 404:
            return None
        if response.is_error:
            raise MessagingError(
                f"HTTP {response.status_code}", operation, status_code=response.status_code,
            )
        return response.json()
