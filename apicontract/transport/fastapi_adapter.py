"""Mount an implemented router onto a FastAPI application."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from loguru import logger

from apicontract.catalog import OperationDefinition
from apicontract.errors import classify_exception, sanitize_error_message, status_for_error
from apicontract.pipeline import maybe_await
from apicontract.router import ImplementedRouter
from apicontract.transport.metadata import http_metadata


@dataclass(frozen=True, slots=True)
class ErrorHandlerInput:
    """What an error handler gets to build the wire-level error response."""

    error: Exception
    request: Request
    operation: str


ErrorHandler = Callable[[ErrorHandlerInput], Awaitable[Response] | Response]
ContextFactory = Callable[[Request], Awaitable[Any] | Any]


def default_error_handler(failure: ErrorHandlerInput) -> Response:
    """Log the error and answer ``500 {"error": message}``."""
    code, _category = classify_exception(failure.error)
    logger.opt(exception=failure.error).error(
        "Operation {} failed with [{}]: {}", failure.operation, code, failure.error
    )
    return JSONResponse(status_code=500, content={"error": str(failure.error)})


def categorized_error_handler(failure: ErrorHandlerInput) -> Response:
    """Answer with a status derived from the error category and a sanitized body."""
    code, category = classify_exception(failure.error)
    status = status_for_error(failure.error)
    if status >= 500:
        logger.opt(exception=failure.error).error("Operation {} failed with [{}]", failure.operation, code)
    else:
        logger.info("Operation {} rejected with [{}] status={}", failure.operation, code, status)
    content: dict[str, Any] = {
        "error": sanitize_error_message(str(failure.error)),
        "code": code,
        "category": category.value,
    }
    issues = getattr(failure.error, "issues", None)
    if issues:
        content["issues"] = [issue.to_dict() for issue in issues]
    return JSONResponse(status_code=status, content=json.loads(json.dumps(content, default=str)))


async def read_json_body(request: Request) -> Any:
    """Return the decoded JSON body, or ``None`` for an empty body."""
    body = await request.body()
    if not body.strip():
        return None
    return json.loads(body)


def _make_endpoint(
    *,
    operation: str,
    definition: OperationDefinition,
    router: ImplementedRouter,
    make_context: ContextFactory,
    handle_error: ErrorHandler,
) -> Callable[[Request], Awaitable[Response]]:
    async def endpoint(request: Request) -> Response:
        try:
            data = await read_json_body(request)
            result = await router.dispatch(
                operation=operation,
                context=await maybe_await(make_context(request)),
                data=data,
            )
        except Exception as exc:
            return await maybe_await(handle_error(ErrorHandlerInput(error=exc, request=request, operation=operation)))
        if definition.response is None:
            return Response(status_code=200)
        return JSONResponse(status_code=200, content=definition.response.dump(result))

    endpoint.__name__ = f"operation_{operation}"
    return endpoint


def mount_fastapi_app(
    *,
    app: FastAPI,
    router: ImplementedRouter,
    make_context: ContextFactory,
    handle_error: ErrorHandler = default_error_handler,
) -> None:
    """Register one HTTP route per catalog operation using its ``method``/``path`` metadata."""
    for operation, definition in router.definitions.items():
        metadata = http_metadata(definition)
        app.add_api_route(
            metadata.path,
            _make_endpoint(
                operation=operation,
                definition=definition,
                router=router,
                make_context=make_context,
                handle_error=handle_error,
            ),
            methods=[metadata.method],
            name=operation,
        )
        logger.debug("Mounted operation {} at {} {}", operation, metadata.method, metadata.path)
