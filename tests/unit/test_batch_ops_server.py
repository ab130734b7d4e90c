"""Unit tests for the server module: metrics routes and startup."""

import json

import pytest

from batch_ops_mcp import batch_ops_server
from batch_ops_mcp import metrics_config


@pytest.fixture
def metrics_disabled(monkeypatch):
    monkeypatch.setattr(metrics_config, "meter", None)
    monkeypatch.setattr(metrics_config, "prometheus_reader", None)


class TestMetricsRoutes:
    """Test the /metrics and /metrics/summary routes."""

    def test_routes_are_mounted_on_sse_app(self):
        paths = {getattr(route, "path", None) for route in batch_ops_server.mcp_server.sse_app().routes}
        assert {"/metrics", "/metrics/summary"} <= paths

    @pytest.mark.asyncio
    async def test_metrics_when_disabled(self, metrics_disabled):
        response = await batch_ops_server.metrics_endpoint(None)

        assert response.status_code == 200
        assert response.body == b"# Metrics not available\n"

    @pytest.mark.asyncio
    async def test_metrics_export_failure_returns_500(self, monkeypatch):
        def broken_export():
            raise RuntimeError("collector exploded")

        monkeypatch.setattr(batch_ops_server, "get_metrics_export", broken_export)

        response = await batch_ops_server.metrics_endpoint(None)

        assert response.status_code == 500
        assert b"collector exploded" in response.body

    @pytest.mark.asyncio
    async def test_summary_when_disabled(self, metrics_disabled):
        response = await batch_ops_server.metrics_summary_endpoint(None)

        assert response.status_code == 200
        assert json.loads(response.body) == {"status": "disabled"}

    @pytest.mark.asyncio
    async def test_summary_when_active(self, metrics_disabled, monkeypatch):
        monkeypatch.setattr(metrics_config, "meter", object())

        payload = json.loads((await batch_ops_server.metrics_summary_endpoint(None)).body)

        assert payload["status"] == "active"
        assert payload["service_name"] == metrics_config.SERVICE_NAME


class TestMain:
    """Test server startup."""

    @pytest.fixture
    def quiet_startup(self, monkeypatch, mocker):
        monkeypatch.setattr("sys.argv", ["batch-ops-mcp"])
        monkeypatch.setattr(batch_ops_server, "setup_logging", lambda settings: None)
        shutdown = mocker.patch.object(batch_ops_server, "shutdown_metrics")
        run = mocker.patch.object(batch_ops_server.mcp_server, "run")
        return run, shutdown

    def test_runs_stdio_by_default(self, quiet_startup):
        run, shutdown = quiet_startup

        batch_ops_server.main()

        run.assert_called_once_with(transport="stdio")
        shutdown.assert_called_once()

    def test_metrics_failure_does_not_block_startup(self, quiet_startup, monkeypatch, mocker, capsys):
        run, _ = quiet_startup
        mock_log_error = mocker.patch("batch_ops_mcp.logger_config.log_structured_error")

        def broken_initialize(force=False):
            raise RuntimeError("no exporter")

        monkeypatch.setattr(batch_ops_server, "initialize_metrics", broken_initialize)

        batch_ops_server.main()

        run.assert_called_once_with(transport="stdio")
        assert "Metrics: disabled" in capsys.readouterr().err
        assert mock_log_error.call_args[1]["operation"] == "initialize_metrics"
