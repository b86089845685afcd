"""Tests for OperationResult — truthiness and error propagation."""

from nudge.core.errors import NoMatchingPendingError
from nudge.core.operation_result import OperationResult


def test_ok_result_is_truthy():
    result = OperationResult.ok(message_id="m1", notification_types=("match_queue",))
    assert result
    assert result.error_code is None
    assert result.to_dict() == {
        "success": True, "error_code": None, "message_id": "m1", "types": ["match_queue"],
    }


def test_failed_result_is_falsy_and_carries_error():
    result = OperationResult.failed(NoMatchingPendingError("u1"))
    assert not result
    assert result.error_code == "NO_MATCHING_PENDING"
    assert result.error.http_status == 404
