"""
Exception hierarchy and error helpers for apicontract.

Provides:
- Error classes with machine-readable codes and categories
- Validation errors carrying structured schema issues
- Safe error message formatting (no credential leak into responses)
- Exception classification used by transport adapters
"""

from __future__ import annotations

import asyncio
import json
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Sequence


class ErrorCategory(Enum):
    """Error categories for classification."""
    PROGRAMMING = "programming"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    TRANSPORT = "transport"
    TIMEOUT = "timeout"
    FATAL = "fatal"


class ErrorStage(str, Enum):
    """Client-side pipeline stage an error was raised in."""
    REQUEST_VALIDATION = "request-validation"
    RESOLVER = "resolver"
    RESPONSE_VALIDATION = "response-validation"


class ApiContractError(Exception):
    """Base exception for all apicontract errors."""

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        category: ErrorCategory = ErrorCategory.FATAL,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.code,
            "message": self.message,
            "category": self.category.value,
            "details": self.details,
        }

    def __str__(self) -> str:
        return self.message


class OperationNotFound(ApiContractError, KeyError):
    """Operation name is not part of the catalog (a programming error)."""

    def __init__(self, operation: str):
        super().__init__(
            f"Operation {operation} not found",
            code="OPERATION_NOT_FOUND",
            category=ErrorCategory.PROGRAMMING,
            details={"operation": operation},
        )
        self.operation = operation

    # KeyError.__str__ would repr() the message
    __str__ = ApiContractError.__str__


class MissingImplementation(ApiContractError):
    """A catalog operation has no (or a mismatched) server route."""

    def __init__(self, operations: Sequence[str], message: str | None = None):
        names = sorted(operations)
        super().__init__(
            message or f"No implementation for operation(s): {', '.join(names)}",
            code="MISSING_IMPLEMENTATION",
            category=ErrorCategory.PROGRAMMING,
            details={"operations": names},
        )
        self.operations = names


class InvalidOperationDefinition(ApiContractError):
    """Operation definition or catalog construction is malformed."""

    def __init__(self, message: str, operation: str | None = None):
        details = {"operation": operation} if operation else {}
        super().__init__(
            message,
            code="INVALID_DEFINITION",
            category=ErrorCategory.PROGRAMMING,
            details=details,
        )


@dataclass(frozen=True, slots=True)
class SchemaIssue:
    """One structured validation failure reported by a shape."""

    path: tuple[str | int, ...]
    message: str
    code: str
    context: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "code": self.code,
            "path": list(self.path),
            "message": self.message,
        }
        if self.context:
            data.update(self.context)
        return data


def format_issues(issues: Sequence[SchemaIssue]) -> str:
    """Serialize issues the way they are displayed in error messages."""
    return json.dumps([issue.to_dict() for issue in issues], indent=2, default=str)


class SchemaValidationError(ApiContractError):
    """A value did not conform to its declared shape."""

    default_code = "SCHEMA_VALIDATION_ERROR"

    def __init__(self, issues: Sequence[SchemaIssue], operation: str | None = None):
        self.issues: tuple[SchemaIssue, ...] = tuple(issues)
        details: dict[str, Any] = {"issues": [issue.to_dict() for issue in self.issues]}
        if operation:
            details["operation"] = operation
        super().__init__(
            format_issues(self.issues),
            code=self.default_code,
            category=ErrorCategory.VALIDATION,
            details=details,
        )
        self.operation = operation


class RequestValidationError(SchemaValidationError):
    """Input did not match the operation's request shape."""

    default_code = "REQUEST_VALIDATION_ERROR"


class ResponseValidationError(SchemaValidationError):
    """Output did not match the operation's response shape."""

    default_code = "RESPONSE_VALIDATION_ERROR"


class TransportError(ApiContractError):
    """Remote call failed at the transport level."""

    def __init__(self, message: str, status_code: int | None = None, operation: str | None = None):
        super().__init__(
            message,
            code="TRANSPORT_ERROR",
            category=ErrorCategory.TRANSPORT,
            details={"status_code": status_code, "operation": operation},
        )
        self.status_code = status_code


class RequestCancelled(ApiContractError):
    """The caller's cancellation token fired before the call completed."""

    def __init__(self, operation: str):
        super().__init__(
            f"Request for {operation} was cancelled",
            code="CANCELLED",
            category=ErrorCategory.TRANSPORT,
            details={"operation": operation},
        )


class ListenerError(ApiContractError):
    """A non-isolated ``succeeded`` listener raised after the call had already succeeded.

    The operation itself completed: ``response`` holds its validated result and
    ``__cause__`` the listener's exception.
    """

    def __init__(self, operation: str, response: Any, topic: str = "succeeded"):
        super().__init__(
            f"Listener on {topic} failed after {operation} succeeded",
            code="LISTENER_ERROR",
            category=ErrorCategory.PROGRAMMING,
            details={"operation": operation, "topic": topic},
        )
        self.operation = operation
        self.response = response
        self.topic = topic


_SENSITIVE_PATTERNS = [
    re.compile(r"(api[_-]?key|token|secret|password|auth)[=:]\s*['\"]?([^\s'\"]+)['\"]?", re.IGNORECASE),
    re.compile(r"bearer\s+[a-zA-Z0-9\-._~+/]+=*", re.IGNORECASE),
    re.compile(r"sk-[a-zA-Z0-9]{20,}"),
]


def sanitize_error_message(message: str, replacement: str = "[REDACTED]") -> str:
    """Remove credentials from error messages."""
    sanitized = message
    for pattern in _SENSITIVE_PATTERNS:
        sanitized = pattern.sub(replacement, sanitized)
    return sanitized


def classify_exception(exc: BaseException) -> tuple[str, ErrorCategory]:
    """
    Classify an exception.

    Returns:
        Tuple of (error_code, category)
    """
    if isinstance(exc, ApiContractError):
        return exc.code, exc.category

    if isinstance(exc, asyncio.TimeoutError):
        return "TIMEOUT", ErrorCategory.TIMEOUT

    if isinstance(exc, ConnectionError):
        return "CONNECTION_ERROR", ErrorCategory.TRANSPORT

    if isinstance(exc, json.JSONDecodeError):
        return "JSON_PARSE_ERROR", ErrorCategory.VALIDATION

    if isinstance(exc, FileNotFoundError):
        return "FILE_NOT_FOUND", ErrorCategory.NOT_FOUND

    if isinstance(exc, ValueError):
        return "INVALID_VALUE", ErrorCategory.VALIDATION

    if isinstance(exc, KeyError):
        return "MISSING_KEY", ErrorCategory.VALIDATION

    if isinstance(exc, TypeError):
        return "TYPE_ERROR", ErrorCategory.VALIDATION

    return "INTERNAL_ERROR", ErrorCategory.FATAL


_CATEGORY_TO_STATUS = {
    ErrorCategory.VALIDATION: 400,
    ErrorCategory.NOT_FOUND: 404,
    ErrorCategory.TIMEOUT: 504,
    ErrorCategory.TRANSPORT: 502,
}


def status_for_error(exc: BaseException) -> int:
    """Map exception to an HTTP status code."""
    if isinstance(exc, ApiContractError) and exc.category is ErrorCategory.PROGRAMMING:
        return 500
    _code, category = classify_exception(exc)
    return _CATEGORY_TO_STATUS.get(category, 500)
