"""Reply Matching — maps a free-text reply onto the pending types it confirms.

Invariants:
    - Matching is case-insensitive on the trimmed reply
    - A type matches when the reply equals or contains one of its own keywords
    - Only pending types are considered; keywords of other types never match
    - Result order follows the order of pending_types
"""

from collections.abc import Iterable, Mapping, Sequence


def normalize_reply(text: str | None) -> str:
    return (text or "").strip().lower()


def match_reply(
    text: str | None,
    pending_types: Iterable[str],
    response_keywords: Mapping[str, Sequence[str]],
) -> list[str]:
    """Return the pending types whose keyword appears in the reply. Pure."""
    reply = normalize_reply(text)
    if not reply:
        return []
    matched = []
    for notification_type in pending_types:
        for keyword in response_keywords.get(notification_type, ()):
            needle = normalize_reply(keyword)
            if needle and needle in reply:
                matched.append(notification_type)
                break
    return matched
