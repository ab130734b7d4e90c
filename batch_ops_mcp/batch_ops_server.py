"""MCP Server for batch file operations.

This module provides a FastMCP-based MCP server that executes batches of file
operations with bounded concurrency, grouping by operation type, retry with
backoff and partial-failure reporting. It also exposes lightweight code
analysis and transform tools.

When served over SSE, ``/metrics`` exposes Prometheus metrics and
``/metrics/summary`` a JSON status report.
"""

import argparse
import json
import sys

from dotenv import load_dotenv
from mcp.server import FastMCP
from starlette.requests import Request
from starlette.responses import Response

from .config import get_settings
from .logger_config import ErrorCategory
from .logger_config import batch_logger
from .logger_config import safe_operation
from .logger_config import setup_logging
from .metrics_config import get_metrics_export
from .metrics_config import get_metrics_summary
from .metrics_config import initialize_metrics
from .metrics_config import shutdown_metrics
from .tools import register_analysis_tools
from .tools import register_batch_tools

load_dotenv()

SERVER_NAME = "mcp-batch-operations"

mcp_server = FastMCP(
    name=SERVER_NAME,
    instructions="Execute multiple file operations in parallel with smart batching",
)

register_batch_tools(mcp_server)
register_analysis_tools(mcp_server)

__all__ = ["SERVER_NAME", "main", "mcp_server"]


# --- Metrics Endpoints ---


@mcp_server.custom_route("/metrics", methods=["GET"], name="metrics")
async def metrics_endpoint(request: Request) -> Response:
    """Prometheus metrics endpoint for monitoring tool usage and file operations."""
    try:
        metrics_data, content_type = get_metrics_export()
    except Exception as e:
        return Response(
            content=f"# Error generating metrics: {e}\n", status_code=500, media_type="text/plain"
        )
    return Response(content=metrics_data, status_code=200, media_type=content_type)


@mcp_server.custom_route("/metrics/summary", methods=["GET"], name="metrics_summary")
async def metrics_summary_endpoint(request: Request) -> Response:
    """JSON summary of the current metrics configuration and status."""
    return Response(
        content=json.dumps(get_metrics_summary(), indent=2),
        status_code=200,
        media_type="application/json",
    )


# --- Main Server Execution ---
def main():
    """Run the main entry point for the server with argument parsing."""
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Batch Operations MCP Server")
    parser.add_argument(
        "transport",
        choices=["sse", "stdio"],
        default="stdio",
        nargs="?",
        help="Transport: 'sse' for HTTP SSE or 'stdio' for standard I/O (default: stdio)",
    )
    parser.add_argument(
        "--host",
        default=settings.sse_host,
        help=f"Host to bind to for SSE transport (default: {settings.sse_host})",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=settings.sse_port,
        help=f"Port to bind to for SSE transport (default: {settings.sse_port})",
    )
    args = parser.parse_args()

    setup_logging(settings)
    # A broken metrics backend must not keep the server from starting
    _, metrics_active, _ = safe_operation(
        "initialize_metrics",
        initialize_metrics,
        force=settings.enable_metrics,
        error_category=ErrorCategory.WARNING,
    )

    # stdout carries the stdio protocol, so status goes to stderr
    print(f"Batch operations server starting. Tools exposed by '{mcp_server.name}'", file=sys.stderr)
    print(f"Logging to: {settings.log_file}", file=sys.stderr)
    print(f"Metrics: {'enabled' if metrics_active else 'disabled'}", file=sys.stderr)

    batch_logger.info("MCP Batch Operations Server started")
    try:
        if args.transport == "stdio":
            mcp_server.run(transport="stdio")
        else:
            print(f"MCP server running with HTTP SSE transport on {args.host}:{args.port}", file=sys.stderr)
            if metrics_active:
                print(f"Metrics available at http://{args.host}:{args.port}/metrics", file=sys.stderr)
            mcp_server.settings.host = args.host
            mcp_server.settings.port = args.port
            mcp_server.run(transport="sse")
    finally:
        shutdown_metrics()


if __name__ == "__main__":
    main()
