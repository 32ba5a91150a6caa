import asyncio
import json

from apicontract.errors import (
    ErrorCategory,
    MissingImplementation,
    OperationNotFound,
    RequestValidationError,
    SchemaIssue,
    TransportError,
    classify_exception,
    sanitize_error_message,
    status_for_error,
)


def test_operation_not_found_is_key_error_with_plain_message():
    err = OperationNotFound("getUser")
    assert isinstance(err, KeyError)
    assert str(err) == "Operation getUser not found"
    assert err.to_dict()["category"] == "programming"


def test_validation_error_message_is_issue_json():
    err = RequestValidationError([SchemaIssue(path=("email",), message="bad", code="value_error")], operation="op")
    assert json.loads(str(err)) == [{"code": "value_error", "path": ["email"], "message": "bad"}]
    assert err.code == "REQUEST_VALIDATION_ERROR"
    assert err.details["operation"] == "op"


def test_missing_implementation_lists_operations_sorted():
    err = MissingImplementation(["b", "a"])
    assert err.operations == ["a", "b"]
    assert str(err) == "No implementation for operation(s): a, b"


def test_sanitize_error_message():
    assert "secret123" not in sanitize_error_message("failed token=secret123")
    assert "[REDACTED]" in sanitize_error_message("Authorization: Bearer abc.def")


def test_classify_exception():
    assert classify_exception(TransportError("x", status_code=502)) == ("TRANSPORT_ERROR", ErrorCategory.TRANSPORT)
    assert classify_exception(asyncio.TimeoutError()) == ("TIMEOUT", ErrorCategory.TIMEOUT)
    assert classify_exception(ValueError("x")) == ("INVALID_VALUE", ErrorCategory.VALIDATION)
    assert classify_exception(RuntimeError("x")) == ("INTERNAL_ERROR", ErrorCategory.FATAL)


def test_status_for_error():
    assert status_for_error(RequestValidationError([])) == 400
    assert status_for_error(OperationNotFound("x")) == 500
    assert status_for_error(FileNotFoundError("x")) == 404
    assert status_for_error(RuntimeError("x")) == 500
