"""Single-operation executor with retry and linear backoff.

Each file operation is attempted up to ``retry_attempts + 1`` times. Between
attempts the executor waits ``retry_delay_ms * attempt_number`` so the default
schedule is 1s, 2s, 3s. Every attempt runs under the ``timeout_ms`` deadline.
All file-system calls go through aiofiles and are awaited.

A timeout cancels the awaiting coroutine, not the worker thread doing the
I/O, so the limiter slot can be released while that thread finishes. A
copy or move that times out is therefore failed without retrying, so a
second attempt never overlaps the first.
"""

import asyncio
import base64
import os
import shutil
from collections.abc import Awaitable
from collections.abc import Callable
from typing import assert_never

import aiofiles
import aiofiles.os

from ..config import get_settings
from ..exceptions import DestinationRequiredError
from ..exceptions import OperationError
from ..exceptions import OperationTimeoutError
from ..logger_config import batch_logger
from ..models import BatchOptions
from ..models import Encoding
from ..models import FileOperation
from ..models import OperationKind
from ..models import OperationReceipt
from ..models import ReadResult

SleepFunc = Callable[[float], Awaitable[None]]

# Not retried after a timeout, since the worker thread may still be copying
_UNCANCELLABLE_KINDS = frozenset({OperationKind.COPY, OperationKind.MOVE})


def _error_message(error: BaseException) -> str:
    message = str(error)
    return message or type(error).__name__


async def _ensure_parent_dir(path: str) -> None:
    parent = os.path.dirname(path)
    if parent:
        await aiofiles.os.makedirs(parent, exist_ok=True)


async def _write_content(path: str, content: str, encoding: Encoding, append: bool = False) -> None:
    if encoding == Encoding.BASE64:
        async with aiofiles.open(path, "ab" if append else "wb") as f:
            await f.write(base64.b64decode(content))
    else:
        async with aiofiles.open(path, "a" if append else "w", encoding="utf-8") as f:
            await f.write(content)


async def _read_content(path: str, encoding: Encoding) -> str:
    if encoding == Encoding.BASE64:
        async with aiofiles.open(path, "rb") as f:
            data = await f.read()
        return base64.b64encode(data).decode("ascii")
    async with aiofiles.open(path, "r", encoding="utf-8") as f:
        return await f.read()


def _require_destination(operation: FileOperation) -> str:
    if not operation.destination:
        raise DestinationRequiredError(operation.kind.value, path=operation.path)
    return operation.destination


class OperationExecutor:
    """Performs one file operation, retrying failed attempts with backoff."""

    def __init__(self, retry_delay_ms: int | None = None, sleep: SleepFunc = asyncio.sleep):
        """Initialize the executor.

        Args:
            retry_delay_ms: Base backoff unit; defaults to the configured value
            sleep: Awaitable sleep used between attempts (injectable for tests)
        """
        if retry_delay_ms is None:
            retry_delay_ms = get_settings().retry_delay_ms
        self.retry_delay_ms = retry_delay_ms
        self._sleep = sleep

    def backoff_seconds(self, attempt_index: int) -> float:
        """Delay before retrying after the 0-based ``attempt_index`` failed."""
        return self.retry_delay_ms * (attempt_index + 1) / 1000

    async def execute(
        self, operation: FileOperation, options: BatchOptions | None = None
    ) -> OperationReceipt | ReadResult:
        """Execute an operation, retrying on any failure except a copy/move timeout.

        Args:
            operation: The file operation to perform
            options: Resolved batch options (retry count and per-attempt timeout)

        Returns:
            OperationReceipt, or ReadResult for read operations

        Raises:
            OperationError: Carrying the last attempt's error message
        """
        options = options or BatchOptions()
        max_retries = options.retry_attempts
        last_error: Exception | None = None

        attempts = 0
        for attempt in range(max_retries + 1):
            attempts = attempt + 1
            try:
                return await self._attempt(operation, attempts, options.timeout_ms)
            except Exception as e:
                last_error = e
                if isinstance(e, OperationTimeoutError) and operation.kind in _UNCANCELLABLE_KINDS:
                    batch_logger.warning(
                        f"{operation.kind.value} {operation.path} timed out; not retrying"
                    )
                    break
                if attempt < max_retries:
                    delay = self.backoff_seconds(attempt)
                    batch_logger.warning(
                        f"Attempt {attempts} of {operation.kind.value} {operation.path} failed: "
                        f"{_error_message(e)}; retrying in {delay:.1f}s"
                    )
                    await self._sleep(delay)

        if isinstance(last_error, OperationError):
            last_error.attempts = attempts
            last_error.details["attempts"] = attempts
            raise last_error
        raise OperationError(
            _error_message(last_error),
            kind=operation.kind.value,
            path=operation.path,
            attempts=attempts,
        ) from last_error

    async def _attempt(
        self, operation: FileOperation, attempt: int, timeout_ms: int
    ) -> OperationReceipt | ReadResult:
        try:
            return await asyncio.wait_for(self._dispatch(operation, attempt), timeout=timeout_ms / 1000)
        except asyncio.TimeoutError as e:
            raise OperationTimeoutError(timeout_ms, kind=operation.kind.value, path=operation.path) from e

    async def _dispatch(self, operation: FileOperation, attempt: int) -> OperationReceipt | ReadResult:
        path = operation.path
        match operation.kind:
            case OperationKind.CREATE:
                await _ensure_parent_dir(path)
                await _write_content(path, operation.content or "", operation.encoding)
            case OperationKind.READ:
                content = await _read_content(path, operation.encoding)
                return ReadResult.model_validate(
                    {**operation.model_dump(), "content": content, "attempt": attempt}
                )
            case OperationKind.UPDATE:
                await _write_content(path, operation.content or "", operation.encoding, append=True)
            case OperationKind.DELETE:
                await aiofiles.os.remove(path)
            case OperationKind.COPY:
                destination = _require_destination(operation)
                await _ensure_parent_dir(destination)
                await asyncio.to_thread(shutil.copyfile, path, destination)
            case OperationKind.MOVE:
                destination = _require_destination(operation)
                await _ensure_parent_dir(destination)
                await aiofiles.os.rename(path, destination)
            case _:
                assert_never(operation.kind)

        return OperationReceipt(kind=operation.kind, path=path, attempt=attempt)
