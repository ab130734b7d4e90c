"""Unit tests for the custom exception hierarchy."""

from __future__ import annotations

from batch_ops_mcp.exceptions import BatchOpsError
from batch_ops_mcp.exceptions import DestinationRequiredError
from batch_ops_mcp.exceptions import OperationError
from batch_ops_mcp.exceptions import OperationTimeoutError
from batch_ops_mcp.exceptions import StopOnErrorAbort
from batch_ops_mcp.exceptions import ValidationError


class TestBatchOpsError:
    """Tests for the base BatchOpsError class."""

    def test_basic_initialization(self):
        error = BatchOpsError("Something went wrong")

        assert str(error) == "Something went wrong"
        assert error.message == "Something went wrong"
        assert error.error_code == "UNKNOWN_ERROR"
        assert error.details == {}
        assert error.user_message == "Something went wrong"

    def test_to_dict_preserves_subclass_name(self):
        result = ValidationError("Invalid input", field="operations").to_dict()

        assert result["error_type"] == "ValidationError"
        assert result["error_code"] == "VALIDATION_ERROR"
        assert result["details"] == {"field": "operations"}


class TestOperationErrors:
    """Tests for operation-level errors."""

    def test_operation_error_details(self):
        error = OperationError("disk full", kind="create", path="/tmp/a", attempts=2)

        assert error.error_code == "OPERATION_FAILED"
        assert error.details == {"kind": "create", "path": "/tmp/a", "attempts": 2}
        assert isinstance(error, BatchOpsError)

    def test_destination_required(self):
        error = DestinationRequiredError("copy", path="/tmp/a")

        assert error.message == "Destination required for copy"
        assert error.error_code == "DESTINATION_REQUIRED"
        assert isinstance(error, OperationError)

    def test_timeout_error(self):
        error = OperationTimeoutError(1500, kind="read", path="/tmp/a")

        assert error.message == "Operation timed out after 1500 ms"
        assert error.details["timeout_ms"] == 1500
        assert error.details["path"] == "/tmp/a"

    def test_stop_on_error_abort(self):
        abort = StopOnErrorAbort()

        assert abort.message == "Batch stopped after failure"
        assert abort.error_code == "STOPPED_ON_ERROR"
        assert not isinstance(abort, OperationError)
