"""HTTP routing metadata shared by the FastAPI adapter and the httpx resolver."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from apicontract.catalog import OperationDefinition
from apicontract.errors import InvalidOperationDefinition

HttpMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE"]


class HttpMetadata(BaseModel):
    """Where an operation lives on the wire."""

    model_config = ConfigDict(frozen=True)

    method: HttpMethod = "POST"
    path: str = Field(pattern=r"^/")


def http_metadata(definition: OperationDefinition) -> HttpMetadata:
    """Read HTTP metadata from ``definition`` or raise :class:`InvalidOperationDefinition`."""
    try:
        return HttpMetadata.model_validate(dict(definition.metadata))
    except PydanticValidationError as exc:
        raise InvalidOperationDefinition(
            f"Operation {definition.name} has no usable HTTP metadata: {exc}",
            operation=definition.name,
        ) from exc
