"""Template Rendering — {placeholder} substitution for direct-message text.

Invariants:
    - Placeholders resolve by exact key match against the context mapping
    - Unresolved placeholders are left verbatim (never an error)
    - No expressions, filters or escaping: substitution only
"""

import re
from collections.abc import Mapping
from typing import Any

_PLACEHOLDER = re.compile(r"\{([^{}]+)\}")


def render_template(template: str, values: Mapping[str, Any]) -> str:
    """Substitute {key} tokens from values. Pure."""

    def _substitute(match: re.Match) -> str:
        key = match.group(1)
        if key in values and values[key] is not None:
            return str(values[key])
        return match.group(0)

    return _PLACEHOLDER.sub(_substitute, template)
