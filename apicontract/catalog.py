"""Operation definitions and the immutable operation catalog."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterator, Mapping

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from apicontract.errors import InvalidOperationDefinition, OperationNotFound
from apicontract.schema import Shape, as_shape


def _freeze_metadata(metadata: Mapping[str, Any] | None) -> Mapping[str, Any]:
    return MappingProxyType(dict(metadata or {}))


@dataclass(frozen=True, slots=True)
class OperationDefinition:
    """Request shape, response shape and transport metadata of one operation.

    ``request`` / ``response`` are ``None`` when the operation carries no payload
    in that direction.
    """

    name: str
    request: Shape | None
    response: Shape | None
    metadata: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))


@dataclass(frozen=True, slots=True)
class OperationDraft:
    """An operation declared without a name; the catalog key names it."""

    request: Shape | None
    response: Shape | None
    metadata: Mapping[str, Any]

    def bind(self, name: str) -> OperationDefinition:
        return OperationDefinition(
            name=name,
            request=self.request,
            response=self.response,
            metadata=self.metadata,
        )


class ApiSpec:
    """Declares operations that share one metadata layout.

    Usage:
        api = define_api(HttpMetadata)
        catalog = define_catalog(
            get_user=api.define_operation(request=GetUser, response=User | None, metadata={...}),
        )
    """

    def __init__(self, metadata_model: type[BaseModel] | None = None):
        self.metadata_model = metadata_model

    def define_operation(
        self,
        *,
        request: Any,
        response: Any,
        metadata: Mapping[str, Any] | BaseModel | None = None,
    ) -> OperationDraft:
        return OperationDraft(
            request=as_shape(request),
            response=as_shape(response),
            metadata=self._check_metadata(metadata),
        )

    def _check_metadata(self, metadata: Mapping[str, Any] | BaseModel | None) -> Mapping[str, Any]:
        if isinstance(metadata, BaseModel):
            metadata = metadata.model_dump()
        if self.metadata_model is None:
            return _freeze_metadata(metadata)
        try:
            model = self.metadata_model.model_validate(dict(metadata or {}))
        except PydanticValidationError as exc:
            raise InvalidOperationDefinition(f"Invalid operation metadata: {exc}") from exc
        return _freeze_metadata(model.model_dump())

    def catalog(
        self,
        operations: Mapping[str, OperationDefinition | OperationDraft] | None = None,
        /,
        **named: OperationDefinition | OperationDraft,
    ) -> OperationCatalog:
        return define_catalog(operations, **named)


def define_api(metadata_model: type[BaseModel] | None = None) -> ApiSpec:
    """Start an API declaration, optionally validating metadata with ``metadata_model``."""
    return ApiSpec(metadata_model)


class OperationCatalog(Mapping[str, OperationDefinition]):
    """Read-only mapping from operation name to :class:`OperationDefinition`."""

    __slots__ = ("_definitions",)

    def __init__(self, operations: Mapping[str, OperationDefinition | OperationDraft]):
        bound: dict[str, OperationDefinition] = {}
        for name, operation in operations.items():
            if not isinstance(name, str) or not name:
                raise InvalidOperationDefinition(f"Operation name must be a non-empty string: {name!r}")
            if isinstance(operation, OperationDraft):
                bound[name] = operation.bind(name)
            elif isinstance(operation, OperationDefinition):
                if operation.name != name:
                    raise InvalidOperationDefinition(
                        f"Operation registered as {name} is named {operation.name}",
                        operation=name,
                    )
                bound[name] = operation
            else:
                raise InvalidOperationDefinition(
                    f"Operation {name} must be declared with define_operation()",
                    operation=name,
                )
        self._definitions: Mapping[str, OperationDefinition] = MappingProxyType(bound)

    def resolve(self, name: str) -> OperationDefinition:
        """Return the definition for ``name`` or raise :class:`OperationNotFound`."""
        try:
            return self._definitions[name]
        except KeyError:
            raise OperationNotFound(name) from None

    def __getitem__(self, name: str) -> OperationDefinition:
        return self.resolve(name)

    def __iter__(self) -> Iterator[str]:
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    def names(self) -> list[str]:
        return list(self._definitions)

    def describe(self) -> list[dict[str, Any]]:
        """JSON-ready summary of every operation, in definition order."""
        return [
            {
                "name": definition.name,
                "metadata": dict(definition.metadata),
                "request": definition.request.json_schema() if definition.request else None,
                "response": definition.response.json_schema() if definition.response else None,
            }
            for definition in self._definitions.values()
        ]

    def __repr__(self) -> str:
        return f"OperationCatalog({', '.join(self._definitions)})"


def define_catalog(
    operations: Mapping[str, OperationDefinition | OperationDraft] | None = None,
    /,
    **named: OperationDefinition | OperationDraft,
) -> OperationCatalog:
    """Build a catalog from a mapping and/or keyword arguments."""
    merged: dict[str, OperationDefinition | OperationDraft] = dict(operations or {})
    duplicates = set(merged) & set(named)
    if duplicates:
        raise InvalidOperationDefinition(f"Duplicate operation name(s): {', '.join(sorted(duplicates))}")
    merged.update(named)
    return OperationCatalog(merged)


def ensure_catalog(catalog: OperationCatalog | Mapping[str, OperationDefinition | OperationDraft]) -> OperationCatalog:
    if isinstance(catalog, OperationCatalog):
        return catalog
    return OperationCatalog(catalog)
