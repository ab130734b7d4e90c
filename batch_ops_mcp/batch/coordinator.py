"""Batch coordinator: groups, limiter, executor and result aggregation."""

import asyncio
import time
from dataclasses import dataclass
from dataclasses import field

from ..exceptions import OperationError
from ..exceptions import StopOnErrorAbort
from ..logger_config import EventRecorder
from ..logger_config import LoggingEventRecorder
from ..logger_config import batch_logger
from ..metrics_config import record_operation_outcome
from ..models import BatchOptions
from ..models import BatchRequest
from ..models import BatchState
from ..models import BatchSummary
from ..models import FileOperation
from ..models import OperationFailure
from ..models import OperationOutcome
from ..models import OperationSuccess
from .executor import OperationExecutor
from .grouping import group_operations
from .limiter import ConcurrencyLimiter


@dataclass
class _RunState:
    """Mutable bookkeeping for one run."""

    successes: list[OperationSuccess] = field(default_factory=list)
    failures: list[OperationFailure] = field(default_factory=list)
    stop_requested: bool = False
    skipped: int = 0


class BatchCoordinator:
    """Runs a validated batch request and aggregates the outcomes.

    Groups run one after another; operations inside a group are dispatched
    concurrently through a single limiter shared by the whole run. With
    ``stop_on_error`` the first failure stops scheduling: queued operations of
    the current group are skipped, in-flight ones finish and are recorded, and
    later groups never start.
    """

    def __init__(
        self,
        executor: OperationExecutor | None = None,
        recorder: EventRecorder | None = None,
    ):
        self.executor = executor or OperationExecutor()
        self.recorder = recorder or LoggingEventRecorder()
        self.state = BatchState.PENDING

    async def run(self, request: BatchRequest) -> BatchSummary:
        """Execute every group of the request and return the summary."""
        if self.state != BatchState.PENDING:
            raise RuntimeError("A BatchCoordinator runs exactly one batch")

        options = request.options
        operations = request.operations
        start_time = time.time()

        self.state = BatchState.RUNNING
        self.recorder.record("batch_started", operation_count=len(operations))

        run_state = _RunState()
        limiter = ConcurrencyLimiter(options.max_concurrent)

        for group in group_operations(operations, options.group_by_type):
            if run_state.stop_requested:
                break
            await self._run_group(group, options, limiter, run_state)

        self.state = BatchState.STOPPED_EARLY if run_state.stop_requested else BatchState.COMPLETED

        summary = BatchSummary(
            total=len(operations),
            successful=len(run_state.successes),
            failed=len(run_state.failures),
            results=[success.result for success in run_state.successes],
            errors=run_state.failures,
            attempted=len(run_state.successes) + len(run_state.failures),
            state=self.state,
            execution_time_ms=(time.time() - start_time) * 1000,
        )
        self.recorder.record("batch_completed", summary=summary.to_payload())
        return summary

    async def _run_group(
        self,
        group: list[FileOperation],
        options: BatchOptions,
        limiter: ConcurrencyLimiter,
        run_state: _RunState,
    ) -> None:
        settled = await asyncio.gather(
            *(limiter.run(self._run_operation, op, options, run_state) for op in group),
            return_exceptions=True,
        )
        for outcome in settled:
            if isinstance(outcome, StopOnErrorAbort):
                run_state.skipped += 1
            elif isinstance(outcome, BaseException):
                raise outcome

        if run_state.skipped:
            batch_logger.info(f"Skipped {run_state.skipped} queued operation(s) after stopOnError")

    async def _run_operation(
        self, operation: FileOperation, options: BatchOptions, run_state: _RunState
    ) -> OperationOutcome:
        if run_state.stop_requested:
            raise StopOnErrorAbort()

        try:
            result = await self.executor.execute(operation, options)
        except Exception as e:
            message = e.message if isinstance(e, OperationError) else str(e) or type(e).__name__
            failure = OperationFailure(operation=operation, error=message)
            run_state.failures.append(failure)
            record_operation_outcome(operation.kind.value, "failed")
            if options.stop_on_error and not run_state.stop_requested:
                run_state.stop_requested = True
                batch_logger.warning(
                    f"stopOnError triggered by {operation.kind.value} {operation.path}: {message}"
                )
            return failure

        success = OperationSuccess(operation=operation, result=result)
        run_state.successes.append(success)
        record_operation_outcome(operation.kind.value, "success")
        return success
