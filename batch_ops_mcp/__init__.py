"""Batch Operations MCP server.

Executes batches of file operations (create, read, update, delete, copy,
move) with bounded concurrency, grouping by type, retry and partial-failure
reporting.
"""

__version__ = "1.0.0"
