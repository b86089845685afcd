"""Built-in Extension Steps — handlers shipped with the service.

Invariants:
    - check_expirations posts one passive notice per expired record whose tier
      is <= fallback_notice_max_tier, in that tier's fallback channel
    - Records without a resolvable channel are skipped, never retried
    - A failed lookup or post affects only its own record; the rest still post
    - Steps are registered only when their configuration is present

Design Decisions:
    - Handlers split into a class holding config + messaging; registry built
      explicitly in build_default_registry (no auto-discovery)
"""

import logging
from typing import Any

from nudge.core.boundary_protocols import MessagingClient
from nudge.core.domain_types import ExtensionStep
from nudge.core.notification_config import NotificationConfig
from nudge.core.render_template import render_template
from nudge.services.step_registry import StepRegistry

logger = logging.getLogger(__name__)


class ExpiryFallbackNotices:
    """Posts a notice in a shared channel when an urgent notification expires."""

    def __init__(self, config: NotificationConfig, messaging: MessagingClient):
        self.config = config
        self.messaging = messaging

    async def check_expirations(self, params: dict[str, Any]) -> dict[str, Any]:
        posted = 0
        for record in params.get("expired", []):
            tier = record.get("tier")
            if tier is None or tier > self.config.fallback_notice_max_tier:
                continue
            channel_id = self.config.fallback_channel_for(tier)
            if not channel_id:
                continue
            try:
                channel = await self.messaging.get_channel(channel_id)
                if channel is None:
                    logger.warning(
                        f"Fallback channel {channel_id} not found",
                        extra={"step_name": ExtensionStep.CHECK_EXPIRATIONS.value},
                    )
                    continue
                values = {**record.get("context", {}), "user_id": record["user_id"], "type": record["type"]}
                await channel.send(render_template(self.config.expiry_notice_template, values))
            except Exception as e:
                logger.warning(
                    f"Expiry notice for {record.get('user_id')} in {channel_id} failed: {e}",
                    extra={
                        "step_name": ExtensionStep.CHECK_EXPIRATIONS.value,
                        "user_id": record.get("user_id"),
                    },
                )
                continue
            posted += 1
        return {"status": "ok", "handled": False, "notices_posted": posted}


def build_default_registry(
    config: NotificationConfig, messaging: MessagingClient,
) -> StepRegistry:
    """Registry with the built-in steps the configuration enables."""
    registry = StepRegistry()
    if config.fallback_channel_id or config.fallback_channel_tier_ids:
        notices = ExpiryFallbackNotices(config, messaging)
        registry.register(
            ExtensionStep.CHECK_EXPIRATIONS.value, notices.check_expirations,
        )
    return registry
