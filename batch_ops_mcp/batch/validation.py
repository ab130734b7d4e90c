"""Request validation for batch file operations.

Parses raw tool arguments into a fully defaulted ``BatchRequest`` and turns
pydantic errors into a ``ValidationError`` that names the offending field.
"""

from typing import Any

from pydantic import ValidationError as PydanticValidationError

from ..exceptions import ValidationError
from ..models import BatchOptions
from ..models import BatchRequest


def _field_path(loc: tuple) -> str:
    return ".".join(str(part) for part in loc)


def _to_validation_error(exc: PydanticValidationError, prefix: str = "") -> ValidationError:
    """Convert the first pydantic error into our ValidationError."""
    first = exc.errors()[0]
    loc = tuple(first.get("loc", ()))
    field = _field_path(loc)
    if prefix:
        field = f"{prefix}.{field}" if field else prefix
    message = f"Invalid batch request: {field}: {first.get('msg', 'invalid value')}"
    return ValidationError(
        message,
        field=field or None,
        details={"error_count": exc.error_count()},
    )


def parse_batch_options(raw: dict[str, Any] | None) -> BatchOptions:
    """Validate batch options, applying per-field defaults."""
    if raw is None:
        return BatchOptions()
    if not isinstance(raw, dict):
        raise ValidationError("Invalid batch request: options: must be an object", field="options")
    try:
        return BatchOptions.model_validate(raw)
    except PydanticValidationError as e:
        raise _to_validation_error(e, prefix="options") from e


def parse_batch_request(args: Any) -> BatchRequest:
    """Validate raw tool arguments against the batch request shape.

    Args:
        args: Mapping with ``operations`` and optional ``options``

    Returns:
        BatchRequest with every optional field populated

    Raises:
        ValidationError: If any field is missing, mistyped or out of range
    """
    if not isinstance(args, dict):
        raise ValidationError("Invalid batch request: expected an object", field=None)

    options = parse_batch_options(args.get("options"))
    payload = {key: value for key, value in args.items() if key != "options"}
    try:
        request = BatchRequest.model_validate(payload)
    except PydanticValidationError as e:
        raise _to_validation_error(e) from e

    return request.model_copy(update={"options": options})
