"""Pydantic models for the Batch Operations MCP system.

This module contains the data models used throughout the batch engine:
the file operation variant, batch options and request, per-operation
outcomes, and the aggregated summary returned to callers.
"""

import datetime
from enum import Enum
from typing import Any
from typing import Literal

from pydantic import AliasChoices
from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic.alias_generators import to_camel

# === Operation Models ===


class OperationKind(str, Enum):
    """Kinds of file operation a batch can contain."""

    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    COPY = "copy"
    MOVE = "move"


class Encoding(str, Enum):
    """Content encodings accepted for file payloads."""

    UTF8 = "utf8"
    BASE64 = "base64"


class FileOperation(BaseModel):
    """A single file-system action requested by the caller.

    The kind is sent as ``type`` on the wire; ``kind`` is accepted as well.
    Copy and move operations need a destination, which is checked when the
    operation executes rather than here.
    """

    model_config = ConfigDict(populate_by_name=True)

    kind: OperationKind = Field(
        ...,
        validation_alias=AliasChoices("type", "kind"),
        serialization_alias="type",
        description="Operation kind",
    )
    path: str = Field(..., description="Target file path")
    content: str | None = Field(default=None, description="Payload for create/update")
    destination: str | None = Field(default=None, description="Destination for copy/move")
    encoding: Encoding = Field(default=Encoding.UTF8, description="Content encoding")


class BatchOptions(BaseModel):
    """Execution options for one batch run."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    max_concurrent: int = Field(default=10, ge=1, le=100, strict=True)
    timeout_ms: int = Field(default=30000, ge=1000, strict=True)
    stop_on_error: bool = Field(default=False, strict=True)
    retry_attempts: int = Field(default=1, ge=0, le=3, strict=True)
    group_by_type: bool = Field(default=True, strict=True)


class BatchRequest(BaseModel):
    """Validated batch request with every option populated."""

    operations: list[FileOperation]
    options: BatchOptions = Field(default_factory=BatchOptions)


# === Result Models ===


def _utc_timestamp() -> str:
    return datetime.datetime.now(datetime.timezone.utc).isoformat()


class OperationReceipt(BaseModel):
    """Success payload for every kind except read."""

    kind: OperationKind = Field(..., serialization_alias="type")
    path: str
    timestamp: str = Field(default_factory=_utc_timestamp)
    success: Literal[True] = True
    attempt: int


class ReadResult(FileOperation):
    """Success payload for read: the operation augmented with its content."""

    content: str
    attempt: int


class OperationSuccess(BaseModel):
    """Outcome record for an operation that succeeded."""

    operation: FileOperation
    result: OperationReceipt | ReadResult
    status: Literal["success"] = "success"


class OperationFailure(BaseModel):
    """Outcome record for an operation that failed after all attempts."""

    operation: FileOperation
    error: str
    status: Literal["failed"] = "failed"


OperationOutcome = OperationSuccess | OperationFailure


class BatchState(str, Enum):
    """Lifecycle states of a batch run."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    STOPPED_EARLY = "stopped_early"


class BatchSummary(BaseModel):
    """Aggregate report returned after a batch run completes or stops early."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total: int = Field(..., description="Number of operations in the request")
    successful: int = Field(default=0, description="Number of successful operations")
    failed: int = Field(default=0, description="Number of failed operations")
    results: list[OperationReceipt | ReadResult] = Field(
        default_factory=list, description="Payloads of successful operations"
    )
    errors: list[OperationFailure] = Field(default_factory=list, description="Failure records")
    attempted: int = Field(default=0, description="Operations that actually ran")
    state: BatchState = Field(default=BatchState.COMPLETED, description="Final coordinator state")
    execution_time_ms: float = Field(default=0.0, description="Total execution time")

    def to_payload(self) -> dict[str, Any]:
        """Render the summary with wire field names."""
        return self.model_dump(mode="json", by_alias=True)


# === Analysis Models ===


class AnalysisType(str, Enum):
    """Code analyses understood by batch_code_analysis."""

    COMPLEXITY = "complexity"
    DEPENDENCIES = "dependencies"
    TEST_COVERAGE = "test-coverage"
    LINTING = "linting"


class TransformationType(str, Enum):
    """Transformations understood by batch_transform."""

    FORMAT = "format"
    MINIFY = "minify"
    TRANSPILE = "transpile"
    COMPRESS = "compress"


class Transformation(BaseModel):
    """Requested transformation and its free-form options."""

    type: TransformationType
    options: dict[str, Any] = Field(default_factory=dict)


class AnalysisOptions(BaseModel):
    """Options for batch_code_analysis."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    max_concurrent: int = Field(default=5, ge=1, le=100, strict=True)
    include_metrics: bool = Field(default=False, strict=True)
