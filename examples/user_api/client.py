"""HTTP client for the user service."""

from __future__ import annotations

import httpx

from apicontract import ApiClient
from apicontract.config.schema import ApiContractConfig
from apicontract.transport.httpx_resolver import make_httpx_resolver
from examples.user_api.definition import catalog


def build_api_client(
    base_url: str | None = None,
    *,
    http_client: httpx.AsyncClient | None = None,
    config: ApiContractConfig | None = None,
) -> ApiClient:
    """Client for the user service; unset options come from ``config`` (or defaults)."""
    config = config or ApiContractConfig()
    resolver = make_httpx_resolver(
        base_url or config.client.base_url,
        client=http_client,
        timeout=config.client.timeout_seconds,
    )
    return ApiClient(
        catalog,
        resolver=resolver,
        isolate_listener_errors=config.topics.isolate_listener_errors,
    )
