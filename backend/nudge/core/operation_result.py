"""Operation Result — success/failure signal returned by every agent operation.

Invariants:
    - Truthiness equals success
    - A failed result carries the NudgeError that caused it, except when an
      extension step took over the operation and reported failure itself
"""

from dataclasses import dataclass, field

from nudge.core.errors import NudgeError


@dataclass(frozen=True)
class OperationResult:
    success: bool
    error: NudgeError | None = None
    message_id: str | None = None
    notification_types: tuple[str, ...] = field(default_factory=tuple)

    def __bool__(self) -> bool:
        return self.success

    @property
    def error_code(self) -> str | None:
        return self.error.code if self.error else None

    @classmethod
    def ok(
        cls, message_id: str | None = None, notification_types: tuple[str, ...] = (),
    ) -> "OperationResult":
        return cls(True, message_id=message_id, notification_types=notification_types)

    @classmethod
    def failed(cls, error: NudgeError) -> "OperationResult":
        return cls(False, error=error)

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "error_code": self.error_code,
            "message_id": self.message_id,
            "types": list(self.notification_types),
        }
