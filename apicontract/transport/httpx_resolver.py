"""HTTP resolver for :class:`~apicontract.client.ApiClient` built on httpx."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, TypeVar

import httpx
from loguru import logger

from apicontract.client import Resolver, ResolverCall
from apicontract.errors import RequestCancelled, TransportError
from apicontract.transport.metadata import http_metadata

T = TypeVar("T")


def _error_message(response: httpx.Response) -> str:
    message = f"API request failed with status {response.status_code}"
    try:
        body = response.json()
    except ValueError:
        return message
    if isinstance(body, dict) and isinstance(body.get("error"), str) and body["error"]:
        return body["error"]
    return message


async def _race_cancellation(awaitable: Awaitable[T], token: asyncio.Event, operation: str) -> T:
    """Await ``awaitable`` unless ``token`` is set first."""
    request_task = asyncio.ensure_future(awaitable)
    waiter = asyncio.ensure_future(token.wait())
    try:
        done, _pending = await asyncio.wait({request_task, waiter}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        for task in (request_task, waiter):
            if not task.done():
                task.cancel()
    if request_task in done:
        return request_task.result()
    raise RequestCancelled(operation)


def make_httpx_resolver(
    base_url: str,
    *,
    client: httpx.AsyncClient | None = None,
    timeout: float | None = None,
    headers: dict[str, str] | None = None,
) -> Resolver:
    """Create a resolver that sends each operation to ``base_url + metadata.path``.

    The request payload is sent as a JSON body with the operation's HTTP method.
    Non-2xx answers raise :class:`TransportError` carrying the body's ``error``
    field when present. An empty body resolves to ``None``. If the call's
    cancellation token is an :class:`asyncio.Event`, setting it aborts the
    in-flight request with :class:`RequestCancelled`.
    """
    base = base_url.rstrip("/")

    async def send(call: ResolverCall) -> httpx.Response:
        metadata = http_metadata(call.definition)
        payload: Any = None
        if call.definition.request is not None:
            payload = call.definition.request.dump(call.request)
        kwargs: dict[str, Any] = {"headers": {"Content-Type": "application/json", **(headers or {})}}
        if payload is not None:
            kwargs["json"] = payload
        url = f"{base}{metadata.path}"
        logger.debug("Sending {} {} for {}", metadata.method, url, call.operation)
        if client is not None:
            return await client.request(metadata.method, url, **kwargs)
        async with httpx.AsyncClient(timeout=timeout) as owned:
            return await owned.request(metadata.method, url, **kwargs)

    async def resolver(call: ResolverCall) -> Any:
        token = call.cancellation
        if isinstance(token, asyncio.Event):
            if token.is_set():
                raise RequestCancelled(call.operation)
            response = await _race_cancellation(send(call), token, call.operation)
        else:
            response = await send(call)

        if not response.is_success:
            raise TransportError(_error_message(response), status_code=response.status_code, operation=call.operation)
        if not response.content.strip():
            return None
        return response.json()

    return resolver
