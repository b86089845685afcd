"""Notification Configuration — validated policy for the `notification` namespace.

Invariants:
    - Every configured trigger has a positive timeout and a DM template,
      otherwise loading raises ConfigurationMissingError
    - A response keyword belongs to exactly one type (case-insensitive),
      otherwise loading raises ConfigurationInvalidError
    - No keyword of one type appears inside a keyword of another type;
      replies match by containment, so such a pair would resolve both
    - The core never supplies a timeout or template of its own
    - A bare bool under triggers.<type> is shorthand for {enabled: <bool>}

Design Decisions:
    - pydantic models for shape/type validation, explicit completeness check
      afterwards so missing entries surface as CONFIGURATION_MISSING
"""

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from nudge.core.domain_types import CapacityPolicy, FALLBACK_TIER
from nudge.core.errors import ConfigurationInvalidError, ConfigurationMissingError


class TriggerConfig(BaseModel):
    """Per-type switch and escalation tier."""
    enabled: bool = True
    tier: int = Field(FALLBACK_TIER.value, ge=0)


class NotificationConfig(BaseModel):
    """Notification policy, loaded once at startup."""

    enabled: bool = True
    triggers: dict[str, TriggerConfig] = Field(default_factory=dict)
    timeout_seconds: dict[str, int] = Field(default_factory=dict)
    dm_templates: dict[str, str] = Field(default_factory=dict)
    response_keywords: dict[str, list[str]] = Field(default_factory=dict)

    fallback_channel_id: str | None = None
    fallback_channel_tier_ids: dict[int, str] = Field(default_factory=dict)
    fallback_notice_max_tier: int = Field(0, ge=0)
    expiry_notice_template: str = (
        "<@{user_id}> did not respond to the {type} notification in time."
    )

    max_pending_per_user: int = Field(5, ge=1)
    capacity_policy: CapacityPolicy = CapacityPolicy.REJECT
    extension_step_timeout_seconds: float = Field(5.0, gt=0)

    @field_validator("triggers", mode="before")
    @classmethod
    def expand_bool_triggers(cls, v: Any) -> Any:
        if isinstance(v, Mapping):
            return {
                name: {"enabled": t} if isinstance(t, bool) else t
                for name, t in v.items()
            }
        return v

    @field_validator("timeout_seconds")
    @classmethod
    def positive_timeouts(cls, v: dict[str, int]) -> dict[str, int]:
        bad = sorted(name for name, seconds in v.items() if seconds <= 0)
        if bad:
            raise ValueError(f"timeouts must be positive: {', '.join(bad)}")
        return v

    def fallback_channel_for(self, tier: int) -> str | None:
        """Tier-specific fallback channel, else the default one."""
        return self.fallback_channel_tier_ids.get(tier) or self.fallback_channel_id

    def keywords_for(self, notification_type: str) -> list[str]:
        return self.response_keywords.get(notification_type, [])


def find_missing_settings(config: NotificationConfig) -> list[str]:
    """List 'section.type' entries a configured trigger still needs. Pure."""
    missing = []
    for name in sorted(config.triggers):
        if name not in config.timeout_seconds:
            missing.append(f"timeout_seconds.{name}")
        if not config.dm_templates.get(name):
            missing.append(f"dm_templates.{name}")
    return missing


def find_shared_keywords(config: NotificationConfig) -> dict[str, list[str]]:
    """Keywords claimed by more than one type → the types claiming them. Pure."""
    owners: dict[str, list[str]] = {}
    for name, keywords in config.response_keywords.items():
        for keyword in {k.strip().lower() for k in keywords if k.strip()}:
            owners.setdefault(keyword, []).append(name)
    return {k: sorted(v) for k, v in owners.items() if len(v) > 1}


def find_overlapping_keywords(config: NotificationConfig) -> list[tuple[str, str, str, str]]:
    """(inner, inner_type, outer, outer_type) where one type's keyword sits inside
    another type's keyword. Any reply carrying `outer` also carries `inner`. Pure."""
    owned = sorted(
        (keyword, name)
        for name, keywords in config.response_keywords.items()
        for keyword in {k.strip().lower() for k in keywords if k.strip()}
    )
    overlaps = []
    for inner, inner_type in owned:
        for outer, outer_type in owned:
            if inner_type != outer_type and inner != outer and inner in outer:
                overlaps.append((inner, inner_type, outer, outer_type))
    return overlaps


def load_notification_config(raw: Mapping[str, Any] | None) -> NotificationConfig:
    """Validate a raw `notification` namespace. Fails loudly on any gap."""
    try:
        config = NotificationConfig.model_validate(dict(raw or {}))
    except ValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}"
            for err in e.errors()
        )
        raise ConfigurationInvalidError(details)

    missing = find_missing_settings(config)
    if missing:
        raise ConfigurationMissingError(missing)

    shared = find_shared_keywords(config)
    if shared:
        details = "; ".join(
            f"'{kw}' used by {', '.join(types)}" for kw, types in sorted(shared.items())
        )
        raise ConfigurationInvalidError(f"response keywords must be type-specific: {details}")

    overlaps = find_overlapping_keywords(config)
    if overlaps:
        details = "; ".join(
            f"'{inner}' ({inner_type}) is contained in '{outer}' ({outer_type})"
            for inner, inner_type, outer, outer_type in overlaps
        )
        raise ConfigurationInvalidError(f"response keywords must not overlap: {details}")
    return config
