"""Client-side dispatch: validate, resolve, validate, notify."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping

from loguru import logger

from apicontract.catalog import OperationCatalog, OperationDefinition, ensure_catalog
from apicontract.errors import ErrorStage, ListenerError, RequestValidationError, ResponseValidationError
from apicontract.topic import FailureMessage, SuccessMessage, Topic
from apicontract.validation import validate_request, validate_response


@dataclass(frozen=True, slots=True)
class ResolverCall:
    """Everything a resolver needs to perform one remote call."""

    operation: str
    definition: OperationDefinition
    request: Any
    cancellation: Any = None


Resolver = Callable[[ResolverCall], Awaitable[Any]]


@dataclass(frozen=True, slots=True)
class ErrorContext:
    stage: ErrorStage
    operation: str


ErrorFormatter = Callable[[BaseException, ErrorContext], BaseException]


class ApiClient:
    """Calls catalog operations through an injected resolver.

    Each call runs four stages: request validation, the resolver, response
    validation and notification. ``succeeded`` receives one message per
    successful call; ``failed`` receives one per resolver failure. Validation
    failures are never published.
    """

    def __init__(
        self,
        catalog: OperationCatalog | Mapping[str, Any],
        *,
        resolver: Resolver,
        error_formatter: ErrorFormatter | None = None,
        isolate_listener_errors: bool = True,
    ):
        self.catalog = ensure_catalog(catalog)
        self._resolver = resolver
        self._error_formatter = error_formatter
        self.succeeded: Topic[SuccessMessage] = Topic("succeeded", isolate_errors=isolate_listener_errors)
        self.failed: Topic[FailureMessage] = Topic("failed", isolate_errors=isolate_listener_errors)

    @property
    def error_formatter(self) -> ErrorFormatter | None:
        return self._error_formatter

    def set_error_formatter(self, formatter: ErrorFormatter | None) -> None:
        """Replace (or clear with ``None``) the formatter used by later calls."""
        self._error_formatter = formatter

    def _format(self, error: BaseException, stage: ErrorStage, operation: str) -> BaseException:
        formatter = self._error_formatter
        if formatter is None:
            return error
        return formatter(error, ErrorContext(stage=stage, operation=operation))

    async def call(self, operation: str, request: Any = None, *, cancellation: Any = None) -> Any:
        """Execute ``operation`` end to end and return its validated response.

        Args:
            operation: Catalog name of the operation.
            request: Raw input; omit (or pass ``None``) for operations without a request shape.
            cancellation: Opaque token handed to the resolver untouched.

        Raises:
            OperationNotFound: ``operation`` is not in the catalog (never formatted).
            RequestValidationError: input rejected (or its formatted replacement).
            ResponseValidationError: resolver output rejected (or its formatted replacement).
            Exception: whatever the resolver raised (or its formatted replacement).
            ListenerError: a non-isolated ``succeeded`` listener raised; the call itself
                succeeded and the error carries its ``response``.
        """
        definition = self.catalog.resolve(operation)

        try:
            validated_request = validate_request(definition, request)
        except RequestValidationError as exc:
            formatted = self._format(exc, ErrorStage.REQUEST_VALIDATION, operation)
            if formatted is exc:
                raise
            raise formatted from exc

        try:
            raw_response = await self._resolver(
                ResolverCall(
                    operation=operation,
                    definition=definition,
                    request=validated_request,
                    cancellation=cancellation,
                )
            )
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.debug("Resolver for {} failed: {}", operation, exc)
            formatted = self._format(exc, ErrorStage.RESOLVER, operation)
            try:
                self.failed.publish(FailureMessage(operation=operation, request=validated_request, error=formatted))
            except Exception as listener_exc:
                # The caller still gets the formatted error subscribers saw.
                logger.opt(exception=listener_exc).error("Listener on failed raised for {}: {}", operation, listener_exc)
                formatted.add_note(f"failed listener raised {type(listener_exc).__name__}: {listener_exc}")
            if formatted is exc:
                raise
            raise formatted from exc

        try:
            response = validate_response(definition, raw_response)
        except ResponseValidationError as exc:
            formatted = self._format(exc, ErrorStage.RESPONSE_VALIDATION, operation)
            if formatted is exc:
                raise
            raise formatted from exc

        try:
            self.succeeded.publish(SuccessMessage(operation=operation, request=validated_request, response=response))
        except Exception as listener_exc:
            raise ListenerError(operation, response) from listener_exc
        return response
