"""Schema capability: validate raw values against declared shapes.

Shapes are backed by pydantic ``TypeAdapter`` so any type pydantic understands
(models, TypedDicts, unions, ``X | None``, annotated constraints) can be used as
a request or response shape. The rest of the package only relies on
:meth:`Shape.parse` returning a typed value or raising
:class:`~apicontract.errors.SchemaValidationError`.
"""

from __future__ import annotations

from typing import Any

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from apicontract.errors import SchemaIssue, SchemaValidationError


def issues_from_pydantic(exc: PydanticValidationError) -> list[SchemaIssue]:
    """Convert pydantic error details into ordered schema issues."""
    issues: list[SchemaIssue] = []
    for err in exc.errors(include_url=False):
        ctx = err.get("ctx") or {}
        issues.append(
            SchemaIssue(
                path=tuple(err.get("loc", ())),
                message=str(err.get("msg", "")),
                code=str(err.get("type", "invalid")),
                context={k: v if isinstance(v, (str, int, float, bool)) else str(v) for k, v in ctx.items()},
            )
        )
    return issues


class Shape:
    """Immutable validator for one declared type."""

    __slots__ = ("_type", "_adapter")

    def __init__(self, type_: Any):
        self._type = type_
        self._adapter: TypeAdapter[Any] = TypeAdapter(type_)

    @property
    def type(self) -> Any:
        return self._type

    def parse(self, value: Any) -> Any:
        """Validate ``value`` and return the typed result."""
        try:
            return self._adapter.validate_python(value)
        except PydanticValidationError as exc:
            raise SchemaValidationError(issues_from_pydantic(exc)) from exc

    def dump(self, value: Any) -> Any:
        """Return a JSON-compatible representation of a validated value."""
        return self._adapter.dump_python(value, mode="json")

    def json_schema(self) -> dict[str, Any]:
        return self._adapter.json_schema()

    def __setattr__(self, name: str, value: Any) -> None:
        if hasattr(self, "_adapter"):
            raise AttributeError("Shape is immutable")
        object.__setattr__(self, name, value)

    def __repr__(self) -> str:
        return f"Shape({getattr(self._type, '__name__', repr(self._type))})"


def as_shape(value: Any) -> Shape | None:
    """Wrap a raw type in a :class:`Shape`; ``None`` means "no payload"."""
    if value is None or isinstance(value, Shape):
        return value
    return Shape(value)
