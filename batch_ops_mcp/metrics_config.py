"""Batch Operations MCP Metrics Configuration.

Local metrics collection using OpenTelemetry with a Prometheus reader.
Metrics are opt-in and disabled in test/CI environments; every recording
function is a no-op until ``initialize_metrics`` has run.
"""

from __future__ import annotations

import os
import socket
import time
from typing import Any

from opentelemetry import metrics
from opentelemetry.exporter.prometheus import PrometheusMetricReader
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.resources import Resource
from prometheus_client import CONTENT_TYPE_LATEST
from prometheus_client import generate_latest

# =============================================================================
# SERVICE CONFIGURATION
# =============================================================================

SERVICE_NAME = os.getenv("OTEL_SERVICE_NAME", "mcp-batch-operations")
SERVICE_VERSION = os.getenv("OTEL_SERVICE_VERSION", "1.0.0")
DEPLOYMENT_ENVIRONMENT = os.getenv("DEPLOYMENT_ENVIRONMENT", "local")


def is_test_environment() -> bool:
    """Detect if running in test environment."""
    return "PYTEST_CURRENT_TEST" in os.environ or "CI" in os.environ or "GITHUB_ACTIONS" in os.environ


METRICS_ENABLED = os.getenv("MCP_METRICS_ENABLED", "false").lower() == "true"

# Metrics instances
meter = None
tool_calls_counter = None
operations_counter = None
prometheus_reader = None

# Global state
_active_operations: dict[str, float] = {}


def get_resource() -> Resource:
    """Create OpenTelemetry resource with service information."""
    return Resource.create(
        {
            "service.name": SERVICE_NAME,
            "service.version": SERVICE_VERSION,
            "deployment.environment": DEPLOYMENT_ENVIRONMENT,
            "host.name": socket.gethostname(),
        }
    )


def initialize_metrics(force: bool = False) -> bool:
    """Initialize metrics collection with a Prometheus reader.

    Returns:
        True when instruments were created
    """
    global meter, tool_calls_counter, operations_counter, prometheus_reader

    if meter is not None:
        return True
    if not force and (not METRICS_ENABLED or is_test_environment()):
        return False

    prometheus_reader = PrometheusMetricReader()
    meter_provider = MeterProvider(resource=get_resource(), metric_readers=[prometheus_reader])
    metrics.set_meter_provider(meter_provider)
    meter = metrics.get_meter(__name__)

    tool_calls_counter = meter.create_counter(
        name="mcp_tool_calls_total",
        description="Total number of MCP tool calls",
        unit="1",
    )
    operations_counter = meter.create_counter(
        name="batch_file_operations_total",
        description="File operations executed by batches, by kind and status",
        unit="1",
    )
    return True


def is_metrics_enabled() -> bool:
    """Check if metrics collection is active."""
    return meter is not None


def record_tool_call_start(tool_name: str, args: tuple, kwargs: dict) -> float | None:
    """Record start of tool call, return start time."""
    if not is_metrics_enabled():
        return None

    start_time = time.time()
    _active_operations[f"{tool_name}_{start_time}"] = start_time
    return start_time


def _record_tool_call_end(tool_name: str, start_time: float | None, status: str) -> None:
    if tool_calls_counter:
        tool_calls_counter.add(
            1, {"tool_name": tool_name, "status": status, "environment": DEPLOYMENT_ENVIRONMENT}
        )
    if start_time:
        _active_operations.pop(f"{tool_name}_{start_time}", None)


def record_tool_call_success(tool_name: str, start_time: float | None, result_size: int = 0):
    """Record successful tool call."""
    if not is_metrics_enabled():
        return
    _record_tool_call_end(tool_name, start_time, "success")


def record_tool_call_error(tool_name: str, start_time: float | None, error: Exception):
    """Record failed tool call."""
    if not is_metrics_enabled():
        return
    _record_tool_call_end(tool_name, start_time, "error")


def record_operation_outcome(kind: str, status: str) -> None:
    """Count one file operation outcome."""
    if not is_metrics_enabled() or operations_counter is None:
        return
    operations_counter.add(1, {"kind": kind, "status": status})


def get_metrics_export() -> tuple[str, str]:
    """Export metrics in Prometheus format."""
    if not is_metrics_enabled() or not prometheus_reader:
        return "# Metrics not available\n", "text/plain"
    return generate_latest().decode("utf-8"), CONTENT_TYPE_LATEST


def get_metrics_summary() -> dict[str, Any]:
    """Get metrics summary for debugging."""
    if not is_metrics_enabled():
        return {"status": "disabled"}

    return {
        "status": "active",
        "service_name": SERVICE_NAME,
        "service_version": SERVICE_VERSION,
        "environment": DEPLOYMENT_ENVIRONMENT,
        "active_operations": len(_active_operations),
        "prometheus_enabled": prometheus_reader is not None,
    }


def shutdown_metrics():
    """Shutdown metrics collection."""
    if prometheus_reader:
        prometheus_reader.shutdown()
