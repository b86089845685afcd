"""Extension Bridge — optional, isolated calls into the extension runner.

Invariants:
    - No runner, or a runner without the step → None, core behaviour unchanged
    - A raising, timing-out, non-mapping or status=error step → warning + None
    - Never raises into the calling operation
"""

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

from nudge.core.boundary_protocols import ExtensionRunner

logger = logging.getLogger(__name__)


class ExtensionBridge:
    """Wraps an optional ExtensionRunner with failure isolation and a timeout."""

    def __init__(
        self, runner: ExtensionRunner | None = None, timeout_seconds: float = 5.0,
    ):
        self._runner = runner
        self._timeout_seconds = timeout_seconds

    @property
    def runner(self) -> ExtensionRunner | None:
        return self._runner

    def has_step(self, step_name: str) -> bool:
        if self._runner is None:
            return False
        try:
            return bool(self._runner.has_step(step_name))
        except Exception as e:
            logger.warning(
                f"Extension runner has_step('{step_name}') failed: {e}",
                extra={"step_name": step_name},
            )
            return False

    async def run(self, step_name: str, params: dict[str, Any]) -> dict[str, Any] | None:
        """Execute an optional step. Returns its result dict, or None when skipped."""
        if not self.has_step(step_name):
            return None
        try:
            result = await asyncio.wait_for(
                self._runner.exec_step(step_name, params),
                timeout=self._timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"Extension step '{step_name}' timed out after {self._timeout_seconds}s",
                extra={"step_name": step_name},
            )
            return None
        except Exception as e:
            logger.warning(
                f"Extension step '{step_name}' failed: {e}",
                extra={"step_name": step_name},
            )
            return None

        if not isinstance(result, Mapping):
            logger.warning(
                f"Extension step '{step_name}' returned {type(result).__name__}, expected a mapping",
                extra={"step_name": step_name},
            )
            return None
        if result.get("status") == "error":
            logger.warning(
                f"Extension step '{step_name}' reported an error: {result.get('message')}",
                extra={"step_name": step_name, "error_code": result.get("error_code")},
            )
            return None
        return dict(result)
