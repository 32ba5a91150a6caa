"""Transport bindings: FastAPI server adapter and httpx client resolver."""

from apicontract.transport.metadata import HttpMetadata, http_metadata

__all__ = ["HttpMetadata", "http_metadata"]
