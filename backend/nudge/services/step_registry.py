"""Step Registry — explicit routing from extension step name to handler.

Invariants:
    - Every step->handler mapping is visible — registered by name, no auto-discovery
    - Unknown steps return UNKNOWN_STEP error (never raises)
    - Handlers are async callables taking one params dict and returning a dict

Design Decisions:
    - Explicit dict over getattr: every mapping visible in one place
    - Re-registering a name replaces the handler and logs it
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

logger = logging.getLogger(__name__)

StepHandler = Callable[[dict[str, Any]], Awaitable[dict[str, Any]]]


class StepRegistry:
    """Routes step name -> handler. Implements the ExtensionRunner protocol."""

    def __init__(self, handlers: dict[str, StepHandler] | None = None):
        self._handlers: dict[str, StepHandler] = dict(handlers or {})

    def register(self, name: str, handler: StepHandler) -> None:
        if name in self._handlers:
            logger.info(f"Replacing extension step '{name}'", extra={"step_name": name})
        self._handlers[name] = handler

    def unregister(self, name: str) -> None:
        self._handlers.pop(name, None)

    def has_step(self, name: str) -> bool:
        return name in self._handlers

    @property
    def step_names(self) -> list[str]:
        return sorted(self._handlers)

    async def exec_step(self, name: str, params: dict[str, Any]) -> dict[str, Any]:
        """Route name to handler. Returns the handler's result dict."""
        handler = self._handlers.get(name)
        if not handler:
            return {
                "status": "error",
                "error_code": "UNKNOWN_STEP",
                "message": f"Step '{name}' is not registered.",
            }
        return await handler(params)
