"""Request/response payload validation shared by client and server dispatch."""

from __future__ import annotations

from typing import Any

from apicontract.catalog import OperationDefinition
from apicontract.errors import (
    RequestValidationError,
    ResponseValidationError,
    SchemaIssue,
    SchemaValidationError,
)
from apicontract.schema import Shape


UNEXPECTED_PAYLOAD = "unexpected_payload"


def _parse_payload(
    shape: Shape | None,
    value: Any,
    *,
    operation: str,
    error_cls: type[SchemaValidationError],
) -> Any:
    if shape is None:
        # No declared shape: only the empty payload is accepted.
        if value is None:
            return None
        raise error_cls(
            [SchemaIssue(path=(), message="Expected no payload", code=UNEXPECTED_PAYLOAD)],
            operation=operation,
        )
    try:
        return shape.parse(value)
    except SchemaValidationError as exc:
        raise error_cls(exc.issues, operation=operation) from exc


def validate_request(definition: OperationDefinition, value: Any) -> Any:
    """Parse an operation's input or raise :class:`RequestValidationError`."""
    return _parse_payload(
        definition.request,
        value,
        operation=definition.name,
        error_cls=RequestValidationError,
    )


def validate_response(definition: OperationDefinition, value: Any) -> Any:
    """Parse an operation's output or raise :class:`ResponseValidationError`."""
    return _parse_payload(
        definition.response,
        value,
        operation=definition.name,
        error_cls=ResponseValidationError,
    )
