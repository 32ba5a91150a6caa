"""Server-side routes: context-transform chains, handlers and catalog dispatch."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Mapping

from loguru import logger

from apicontract.catalog import OperationCatalog, OperationDefinition, ensure_catalog
from apicontract.errors import MissingImplementation, OperationNotFound
from apicontract.pipeline import ContextStep, maybe_await, run_context_steps
from apicontract.validation import validate_request, validate_response


@dataclass(frozen=True, slots=True)
class HandlerRequest:
    """Argument passed to a route's business handler."""

    data: Any
    context: Any
    definition: OperationDefinition


Handler = Callable[[HandlerRequest], Awaitable[Any] | Any]


class Route:
    """A route still accepting context steps (the building state)."""

    __slots__ = ("_definition", "_steps")

    def __init__(self, definition: OperationDefinition, steps: tuple[ContextStep, ...] = ()):
        self._definition = definition
        self._steps = steps

    @property
    def definition(self) -> OperationDefinition:
        return self._definition

    @property
    def operation(self) -> str:
        return self._definition.name

    @property
    def steps(self) -> tuple[ContextStep, ...]:
        return self._steps

    def update_context(self, step: ContextStep) -> Route:
        """Return a new route whose chain ends with ``step``; this route is unchanged."""
        return Route(self._definition, (*self._steps, step))

    def handle(self, handler: Handler) -> FinalizedRoute:
        """Attach the business handler and finalize the route."""
        return FinalizedRoute(self._definition, self._steps, handler)

    def __repr__(self) -> str:
        return f"Route({self.operation}, steps={len(self._steps)})"


class FinalizedRoute:
    """A route with its handler attached; no further steps can be added."""

    __slots__ = ("_definition", "_steps", "_handler")

    def __init__(self, definition: OperationDefinition, steps: tuple[ContextStep, ...], handler: Handler):
        self._definition = definition
        self._steps = steps
        self._handler = handler

    @property
    def definition(self) -> OperationDefinition:
        return self._definition

    @property
    def operation(self) -> str:
        return self._definition.name

    @property
    def steps(self) -> tuple[ContextStep, ...]:
        return self._steps

    async def handle(self, *, data: Any, context: Any) -> Any:
        """Run every context step from ``context``, then the handler."""
        final_context = await run_context_steps(self._steps, context)
        return await self.handle_direct(data=data, context=final_context)

    async def handle_direct(self, *, data: Any, context: Any) -> Any:
        """Invoke the handler with an already-final ``context``, skipping the steps."""
        return await maybe_await(
            self._handler(HandlerRequest(data=data, context=context, definition=self._definition))
        )

    def __repr__(self) -> str:
        return f"FinalizedRoute({self.operation}, steps={len(self._steps)})"


class ImplementedRouter:
    """Catalog-wide dispatcher compiled by :meth:`ApiRouter.implement`."""

    def __init__(self, catalog: OperationCatalog, routes: Mapping[str, FinalizedRoute]):
        self._catalog = catalog
        self._routes: Mapping[str, FinalizedRoute] = MappingProxyType(dict(routes))

    @property
    def definitions(self) -> OperationCatalog:
        return self._catalog

    @property
    def routes(self) -> Mapping[str, FinalizedRoute]:
        return self._routes

    async def dispatch(self, *, operation: str, context: Any, data: Any = None) -> Any:
        """Validate ``data``, run the route and return its validated response.

        Validation errors are raised unformatted.
        """
        definition = self._catalog.resolve(operation)
        route = self._routes[operation]
        request = validate_request(definition, data)
        logger.debug("Dispatching {}", operation)
        output = await route.handle(data=request, context=context)
        response = validate_response(definition, output)
        logger.debug("Dispatched {}", operation)
        return response


class ApiRouter:
    """Builds routes for the operations of one catalog."""

    def __init__(self, catalog: OperationCatalog | Mapping[str, Any]):
        self._catalog = ensure_catalog(catalog)

    @property
    def definitions(self) -> OperationCatalog:
        return self._catalog

    def operation(self, name: str) -> Route:
        """Start a route for ``name`` with an empty (identity) context chain."""
        return Route(self._catalog.resolve(name))

    def implement(
        self,
        routes: Mapping[str, FinalizedRoute] | None = None,
        /,
        **named: FinalizedRoute,
    ) -> ImplementedRouter:
        """Compile one finalized route per catalog operation into a dispatcher.

        Raises:
            MissingImplementation: an operation has no route, or a route is
                registered under another operation's name.
            OperationNotFound: a route is registered under an unknown name.
        """
        merged: dict[str, FinalizedRoute] = {**dict(routes or {}), **named}

        unknown = [name for name in merged if name not in self._catalog]
        if unknown:
            raise OperationNotFound(unknown[0])

        missing = [name for name in self._catalog if name not in merged]
        if missing:
            raise MissingImplementation(missing)

        for name, route in merged.items():
            if not isinstance(route, FinalizedRoute):
                raise MissingImplementation(
                    [name], f"Route for {name} has no handler; call .handle() before implement()"
                )
            if route.operation != name:
                raise MissingImplementation(
                    [name], f"Route registered as {name} was built for {route.operation}"
                )

        return ImplementedRouter(self._catalog, merged)


def define_router(catalog: OperationCatalog | Mapping[str, Any]) -> ApiRouter:
    """Create a route builder bound to ``catalog``."""
    return ApiRouter(catalog)
