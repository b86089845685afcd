"""Tests for ExtensionBridge — optional steps never break the caller."""

import logging

from nudge.services.extension_bridge import ExtensionBridge
from tests.services.mock_messaging import RecordingRunner


async def test_no_runner_is_noop():
    assert await ExtensionBridge().run("preprocess_notification", {}) is None


async def test_missing_step_is_not_called():
    runner = RecordingRunner(steps=set())
    assert await ExtensionBridge(runner).run("preprocess_notification", {}) is None
    assert runner.calls == []


async def test_result_returned_as_dict():
    runner = RecordingRunner({"preprocess_notification": {"status": "ok", "context": {"a": 1}}})
    result = await ExtensionBridge(runner).run("preprocess_notification", {"x": 1})
    assert result == {"status": "ok", "context": {"a": 1}}
    assert runner.calls == [("preprocess_notification", {"x": 1})]


async def test_exception_is_logged_and_ignored(caplog):
    runner = RecordingRunner(steps={"check_expirations"})
    runner.raise_on.add("check_expirations")

    with caplog.at_level(logging.WARNING, logger="nudge.services.extension_bridge"):
        result = await ExtensionBridge(runner).run("check_expirations", {})

    assert result is None
    assert "check_expirations" in caplog.text


async def test_timeout_is_treated_as_absence():
    runner = RecordingRunner(steps={"preprocess_notification"})
    runner.hang_on.add("preprocess_notification")
    bridge = ExtensionBridge(runner, timeout_seconds=0.05)
    assert await bridge.run("preprocess_notification", {}) is None


async def test_error_status_is_treated_as_absence():
    runner = RecordingRunner({"postprocess_response": {"status": "error", "message": "bad"}})
    assert await ExtensionBridge(runner).run("postprocess_response", {}) is None


async def test_non_mapping_result_is_treated_as_absence():
    runner = RecordingRunner({"postprocess_response": ["not", "a", "dict"]})
    assert await ExtensionBridge(runner).run("postprocess_response", {}) is None


async def test_failing_has_step_is_treated_as_absence():
    class BrokenRunner:
        def has_step(self, name):
            raise RuntimeError("registry offline")

        async def exec_step(self, name, params):
            return {"status": "ok"}

    bridge = ExtensionBridge(BrokenRunner())
    assert not bridge.has_step("preprocess_notification")
    assert await bridge.run("preprocess_notification", {}) is None
