"""Batch file operation MCP tool.

This module provides the ``batch_file_operations`` tool, which validates a
batch request, runs it through the batch coordinator and returns the summary
as formatted JSON text.
"""

import json
from typing import Any

from ..batch import BatchCoordinator
from ..batch import parse_batch_request
from ..exceptions import ValidationError
from ..logger_config import ErrorCategory
from ..logger_config import log_mcp_call
from ..logger_config import log_structured_error
from ..models import BatchSummary


async def run_batch_file_operations(
    operations: Any,
    options: Any = None,
    coordinator: BatchCoordinator | None = None,
) -> BatchSummary:
    """Validate and execute a batch, returning the typed summary.

    Raises:
        ValidationError: If the request does not match the batch request shape
    """
    args: dict[str, Any] = {"operations": operations}
    if options is not None:
        args["options"] = options
    request = parse_batch_request(args)
    coordinator = coordinator or BatchCoordinator()
    return await coordinator.run(request)


def format_error(error: Exception) -> str:
    """Render an error as the text payload returned by tools."""
    message = getattr(error, "message", None) or str(error) or "Unknown error"
    return f"Error: {message}"


def register_batch_tools(mcp_server):
    """Register batch file operation tools with the MCP server."""

    # Arguments stay untyped so malformed requests reach parse_batch_request
    @mcp_server.tool()
    @log_mcp_call
    async def batch_file_operations(
        operations: Any,
        options: Any = None,
    ) -> str:
        r"""Execute multiple file operations in parallel with smart batching.

        Operations are grouped by type (in order of first appearance) and each
        group runs concurrently up to ``maxConcurrent`` operations at a time.
        Failed operations are retried with linear backoff and reported
        individually; the rest of the batch still runs unless ``stopOnError``.

        Parameters:
            operations (List[Dict]): Operations to execute. Each operation contains:
                - type (str): One of create, read, update, delete, copy, move
                - path (str): Target file path
                - content (str, optional): Payload for create/update
                - destination (str, optional): Required for copy/move
                - encoding (str, optional): utf8 (default) or base64

            options (Dict, optional): Execution options:
                - maxConcurrent (int): 1-100, default 10
                - timeoutMs (int): Per-attempt deadline, >= 1000, default 30000
                - stopOnError (bool): Stop scheduling after first failure, default false
                - retryAttempts (int): 0-3, default 1
                - groupByType (bool): Group operations by type, default true

        Returns:
            str: JSON summary with total, successful, failed, results and errors,
            or ``Error: <message>`` when the request is invalid. The summary also
            carries ``attempted`` (operations that actually ran), ``state``
            (``completed`` or ``stopped_early``) and ``executionTimeMs``.

        Example Usage:
            ```json
            {
                "name": "batch_file_operations",
                "arguments": {
                    "operations": [
                        {"type": "create", "path": "/tmp/a.txt", "content": "hi"},
                        {"type": "copy", "path": "/tmp/a.txt", "destination": "/tmp/b/a.txt"}
                    ],
                    "options": {"maxConcurrent": 5, "stopOnError": true}
                }
            }
            ```
        """
        try:
            summary = await run_batch_file_operations(operations, options)
        except ValidationError as e:
            log_structured_error(
                ErrorCategory.WARNING,
                f"Rejected batch request: {e.message}",
                context={"field": e.field},
                operation="batch_file_operations",
            )
            return format_error(e)
        except Exception as e:
            log_structured_error(
                ErrorCategory.ERROR,
                "Tool execution error: batch_file_operations",
                exception=e,
                operation="batch_file_operations",
            )
            return format_error(e)

        return json.dumps(summary.to_payload(), indent=2)

    return batch_file_operations
