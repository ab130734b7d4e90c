"""The pytest configuration for Batch Operations MCP testing.

Provides isolated settings, a scratch directory for file operations and
executor/recorder doubles that make retry backoff instant and observable.
"""

import pytest

from batch_ops_mcp.batch import OperationExecutor
from batch_ops_mcp.config import reset_settings


class RecordingSleep:
    """Awaitable sleep replacement that records requested delays."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class ListRecorder:
    """EventRecorder that keeps events in memory."""

    def __init__(self):
        self.events: list[tuple[str, dict]] = []

    def record(self, event: str, **fields) -> None:
        self.events.append((event, fields))

    def names(self) -> list[str]:
        return [name for name, _ in self.events]


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Reset the settings singleton and keep metrics off for every test."""
    monkeypatch.setenv("MCP_METRICS_ENABLED", "false")
    for key in ("LOG_LEVEL", "BATCH_OPS_LOG_LEVEL", "RETRY_DELAY_MS"):
        monkeypatch.delenv(key, raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def workspace(tmp_path):
    """Scratch directory for file operations."""
    root = tmp_path / "workspace"
    root.mkdir()
    return root


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def fast_executor(recording_sleep):
    """Executor whose backoff waits return immediately."""
    return OperationExecutor(retry_delay_ms=1000, sleep=recording_sleep)


@pytest.fixture
def recorder():
    return ListRecorder()


# Custom markers for pytest
def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "integration: marks tests that call the MCP tools")
