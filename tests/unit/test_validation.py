"""Unit tests for batch request models and validation."""

import pytest

from batch_ops_mcp.batch import parse_batch_options
from batch_ops_mcp.batch import parse_batch_request
from batch_ops_mcp.exceptions import ValidationError
from batch_ops_mcp.models import BatchOptions
from batch_ops_mcp.models import Encoding
from batch_ops_mcp.models import FileOperation
from batch_ops_mcp.models import OperationKind


class TestFileOperation:
    """Test the FileOperation model."""

    def test_accepts_wire_type_key(self):
        op = FileOperation.model_validate({"type": "create", "path": "/tmp/a.txt", "content": "hi"})
        assert op.kind == OperationKind.CREATE
        assert op.content == "hi"
        assert op.encoding == Encoding.UTF8

    def test_accepts_kind_key(self):
        op = FileOperation.model_validate({"kind": "move", "path": "a", "destination": "b"})
        assert op.kind == OperationKind.MOVE
        assert op.destination == "b"

    def test_copy_without_destination_parses(self):
        """Missing destination is an execution-time failure, not a parse failure."""
        op = FileOperation.model_validate({"type": "copy", "path": "a"})
        assert op.destination is None

    def test_serializes_kind_as_type(self):
        op = FileOperation(kind=OperationKind.READ, path="a")
        dumped = op.model_dump(mode="json", by_alias=True)
        assert dumped["type"] == "read"
        assert "kind" not in dumped


class TestBatchOptions:
    """Test option defaults and ranges."""

    def test_defaults(self):
        options = BatchOptions()
        assert options.max_concurrent == 10
        assert options.timeout_ms == 30000
        assert options.stop_on_error is False
        assert options.retry_attempts == 1
        assert options.group_by_type is True

    def test_camel_case_input(self):
        options = parse_batch_options({"maxConcurrent": 3, "stopOnError": True, "retryAttempts": 0})
        assert options.max_concurrent == 3
        assert options.stop_on_error is True
        assert options.retry_attempts == 0
        # Unspecified fields still get defaults
        assert options.group_by_type is True
        assert options.timeout_ms == 30000

    def test_none_gives_defaults(self):
        assert parse_batch_options(None) == BatchOptions()

    @pytest.mark.parametrize(
        "raw, field",
        [
            ({"maxConcurrent": 0}, "options.maxConcurrent"),
            ({"maxConcurrent": 101}, "options.maxConcurrent"),
            ({"timeoutMs": 999}, "options.timeoutMs"),
            ({"retryAttempts": 4}, "options.retryAttempts"),
            ({"retryAttempts": -1}, "options.retryAttempts"),
            ({"stopOnError": "maybe"}, "options.stopOnError"),
            # Wrong types are rejected, not coerced
            ({"stopOnError": "yes"}, "options.stopOnError"),
            ({"groupByType": 0}, "options.groupByType"),
            ({"maxConcurrent": "5"}, "options.maxConcurrent"),
            ({"maxConcurrent": True}, "options.maxConcurrent"),
            ({"timeoutMs": "30000"}, "options.timeoutMs"),
            ({"retryAttempts": 1.0}, "options.retryAttempts"),
        ],
    )
    def test_out_of_range_names_field(self, raw, field):
        with pytest.raises(ValidationError) as exc_info:
            parse_batch_options(raw)
        assert exc_info.value.field == field
        assert field in exc_info.value.message

    def test_options_must_be_object(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_batch_options(["not", "an", "object"])
        assert exc_info.value.field == "options"


class TestParseBatchRequest:
    """Test parse_batch_request."""

    def test_valid_request_is_fully_defaulted(self):
        request = parse_batch_request(
            {"operations": [{"type": "create", "path": "/tmp/a.txt"}, {"type": "delete", "path": "/tmp/b"}]}
        )
        assert len(request.operations) == 2
        assert request.options == BatchOptions()
        assert request.operations[0].encoding == Encoding.UTF8

    def test_options_merge_with_defaults(self):
        request = parse_batch_request(
            {"operations": [], "options": {"groupByType": False}}
        )
        assert request.options.group_by_type is False
        assert request.options.max_concurrent == 10

    def test_unknown_kind_names_field(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_batch_request({"operations": [{"type": "chmod", "path": "a"}]})
        assert exc_info.value.field.startswith("operations.0")
        assert exc_info.value.error_code == "VALIDATION_ERROR"

    def test_missing_path_names_field(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_batch_request({"operations": [{"type": "read"}]})
        assert exc_info.value.field == "operations.0.path"

    def test_missing_operations(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_batch_request({})
        assert exc_info.value.field == "operations"

    def test_unknown_encoding(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_batch_request({"operations": [{"type": "read", "path": "a", "encoding": "latin1"}]})
        assert exc_info.value.field == "operations.0.encoding"

    def test_non_mapping_input(self):
        with pytest.raises(ValidationError):
            parse_batch_request("operations")

    @pytest.mark.parametrize(
        "options, field",
        [
            ({"stopOnError": "yes"}, "options.stopOnError"),
            ({"maxConcurrent": "5"}, "options.maxConcurrent"),
            ({"groupByType": 0}, "options.groupByType"),
            ({"retryAttempts": 1.0}, "options.retryAttempts"),
        ],
    )
    def test_wrong_typed_options_are_rejected(self, options, field):
        with pytest.raises(ValidationError) as exc_info:
            parse_batch_request({"operations": [], "options": options})
        assert exc_info.value.field == field

    @pytest.mark.parametrize("operations", ["nope", {"type": "read"}, None])
    def test_operations_must_be_a_list(self, operations):
        with pytest.raises(ValidationError) as exc_info:
            parse_batch_request({"operations": operations})
        assert exc_info.value.field == "operations"
