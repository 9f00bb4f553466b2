from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

import pytest
import structlog

from devtest_scheduler.errors import ProviderError
from devtest_scheduler.models import InstanceStatus, InstanceTransition

INSTANCE_ID = "i-0abcdef1234567890"


class FakeComputeProvider:
    """Test double returning canned transitions or raising canned errors."""

    def __init__(
        self,
        *,
        previous_state: Optional[str] = None,
        error: Optional[BaseException] = None,
        status: Optional[InstanceStatus] = None,
    ) -> None:
        self.previous_state = previous_state
        self.error = error
        self.status = status
        self.calls: List[Tuple[str, str]] = []

    def _transition(self, op: str, instance_id: str, default_prev: str, current: str) -> InstanceTransition:
        self.calls.append((op, instance_id))
        if self.error is not None:
            raise self.error
        prev = self.previous_state or default_prev
        return InstanceTransition(instance_id=instance_id, previous_state=prev, current_state=current)

    def start(self, instance_id: str) -> InstanceTransition:
        return self._transition("start", instance_id, "stopped", "pending")

    def stop(self, instance_id: str) -> InstanceTransition:
        return self._transition("stop", instance_id, "running", "stopping")

    def describe(self, instance_id: str) -> InstanceStatus:
        self.calls.append(("describe", instance_id))
        if self.error is not None:
            raise self.error
        if self.status is not None:
            return self.status
        return InstanceStatus(instance_id=instance_id, state="stopped", tags={})


def provider_error(code: str, operation: str = "StartInstances", message: Optional[str] = None) -> ProviderError:
    text = message or f"An error occurred ({code}) when calling the {operation} operation: {code}"
    return ProviderError(code, text, operation=operation)


_ENV_VARS = (
    "AWS_REGION",
    "DEVTEST_INSTANCE_ID",
    "SCHEDULER_AWS_REGION",
    "SCHEDULER_CONNECT_TIMEOUT_SECONDS",
    "SCHEDULER_READ_TIMEOUT_SECONDS",
    "SCHEDULER_ALREADY_IN_STATE_CODES",
    "SCHEDULER_LOG_LEVEL",
    "SCHEDULER_LOG_JSON",
    "SCHEDULER_START_SCHEDULE",
    "SCHEDULER_STOP_SCHEDULE",
    "SCHEDULER_EXPECTED_TAGS",
    "SCHEDULER_MCP_TRANSPORT",
    "SCHEDULER_MCP_HOST",
    "SCHEDULER_MCP_PORT",
)


@pytest.fixture(autouse=True, scope="session")
def _structlog_to_stdlib():
    # Unconfigured structlog prints to stdout, which would mix with CLI output.
    structlog.configure(
        processors=[structlog.processors.add_log_level, structlog.processors.JSONRenderer()],
        wrapper_class=structlog.make_filtering_bound_logger(logging.INFO),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )
    yield
    structlog.reset_defaults()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # Keep tests from reconfiguring the root logger.
    monkeypatch.setattr("devtest_scheduler.cli.setup_logging", lambda *a, **k: None)
    monkeypatch.setattr("devtest_scheduler.handler.setup_logging", lambda *a, **k: None)
    monkeypatch.setattr("devtest_scheduler.mcp._RUNTIME", None)
    yield


@pytest.fixture
def fake_provider() -> FakeComputeProvider:
    return FakeComputeProvider()


@pytest.fixture
def tagged_status() -> InstanceStatus:
    tags: Dict[str, str] = {"Environment": "Development", "AutoSchedule": "True", "Name": "wp-devtest"}
    return InstanceStatus(instance_id=INSTANCE_ID, state="running", tags=tags)
