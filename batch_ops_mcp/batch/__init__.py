"""Batch execution engine for file operations.

Key Components:
- parse_batch_request: Validates and defaults incoming requests
- group_operations: Orders operations into per-kind groups
- ConcurrencyLimiter: Caps in-flight operations across a whole run
- OperationExecutor: Performs one operation with retry and backoff
- BatchCoordinator: Runs the groups and aggregates a BatchSummary
"""

from .coordinator import BatchCoordinator
from .executor import OperationExecutor
from .grouping import group_operations
from .limiter import ConcurrencyLimiter
from .validation import parse_batch_options
from .validation import parse_batch_request

__all__ = [
    "BatchCoordinator",
    "ConcurrencyLimiter",
    "OperationExecutor",
    "group_operations",
    "parse_batch_options",
    "parse_batch_request",
]
