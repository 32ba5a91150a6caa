import asyncio

import pytest
from pydantic import BaseModel

from apicontract import (
    FinalizedRoute,
    MissingImplementation,
    OperationNotFound,
    RequestValidationError,
    ResponseValidationError,
    Route,
    define_api,
    define_catalog,
    define_router,
)


class Echo(BaseModel):
    text: str


api = define_api()
CATALOG = define_catalog(
    echo=api.define_operation(request=Echo, response=Echo),
    health=api.define_operation(request=None, response=None),
)


def _router():
    return define_router(CATALOG)


def _implement(router, **overrides):
    routes = {
        "echo": router.operation("echo").handle(lambda req: {"text": req.data.text}),
        "health": router.operation("health").handle(lambda req: None),
    }
    routes.update(overrides)
    return router.implement(routes)


def test_operation_starts_building_route_with_empty_chain():
    route = _router().operation("echo")
    assert isinstance(route, Route)
    assert route.steps == ()
    assert route.definition is CATALOG["echo"]


def test_unknown_operation_raises():
    with pytest.raises(OperationNotFound):
        _router().operation("missing")


def test_update_context_returns_new_route_without_mutating_original():
    base = _router().operation("echo")
    step = lambda ctx: ctx  # noqa: E731
    extended = base.update_context(step)
    assert base.steps == ()
    assert extended.steps == (step,)
    assert extended is not base


def test_handle_finalizes_route():
    finalized = _router().operation("echo").handle(lambda req: req.data)
    assert isinstance(finalized, FinalizedRoute)
    assert not hasattr(finalized, "update_context")


@pytest.mark.asyncio
async def test_handle_runs_steps_in_order_then_handler():
    order = []

    async def add_user(ctx):
        order.append("user")
        return {**ctx, "user": "alice"}

    def add_role(ctx):
        order.append("role")
        return {**ctx, "role": "admin"}

    async def handler(req):
        order.append("handler")
        return {"text": f"{req.context['user']}:{req.context['role']}:{req.data.text}"}

    route = _router().operation("echo").update_context(add_user).update_context(add_role).handle(handler)
    result = await route.handle(data=Echo(text="hi"), context={"request_id": 1})
    assert result == {"text": "alice:admin:hi"}
    assert order == ["user", "role", "handler"]


@pytest.mark.asyncio
async def test_handle_direct_skips_context_steps():
    steps = []

    def step(ctx):
        steps.append(ctx)
        return "never"

    seen = []

    def handler(req):
        seen.append((req.data, req.context, req.definition.name))
        return {"text": req.data.text}

    route = _router().operation("echo").update_context(step).handle(handler)
    data = Echo(text="x")
    first = await route.handle_direct(data=data, context="final")
    second = await route.handle_direct(data=data, context="final")
    assert first == second == {"text": "x"}
    assert seen == [(data, "final", "echo"), (data, "final", "echo")]
    assert steps == []


@pytest.mark.asyncio
async def test_sibling_routes_from_same_base_do_not_share_steps():
    base = _router().operation("echo").update_context(lambda ctx: ctx + ["base"])
    left = base.update_context(lambda ctx: ctx + ["left"]).handle(lambda req: req.context)
    right = base.update_context(lambda ctx: ctx + ["right"]).handle(lambda req: req.context)
    assert await left.handle(data=None, context=[]) == ["base", "left"]
    assert await right.handle(data=None, context=[]) == ["base", "right"]


def test_implement_requires_every_operation():
    router = _router()
    with pytest.raises(MissingImplementation) as exc_info:
        router.implement(echo=router.operation("echo").handle(lambda req: req.data))
    assert exc_info.value.operations == ["health"]


def test_implement_rejects_unknown_operation():
    router = _router()
    with pytest.raises(OperationNotFound):
        _implement(router, extra=router.operation("echo").handle(lambda req: req.data))


def test_implement_rejects_route_built_for_other_operation():
    router = _router()
    with pytest.raises(MissingImplementation, match="built for echo"):
        _implement(router, health=router.operation("echo").handle(lambda req: None))


def test_implement_rejects_unfinalized_route():
    router = _router()
    with pytest.raises(MissingImplementation, match="has no handler"):
        _implement(router, health=router.operation("health"))


def test_implemented_router_exposes_definitions_and_routes():
    implemented = _implement(_router())
    assert implemented.definitions is CATALOG
    assert set(implemented.routes) == {"echo", "health"}


@pytest.mark.asyncio
async def test_dispatch_validates_request_and_response():
    implemented = _implement(_router())
    result = await implemented.dispatch(operation="echo", context=None, data={"text": "hello"})
    assert result == Echo(text="hello")


@pytest.mark.asyncio
async def test_dispatch_runs_context_chain_from_initial_context():
    router = _router()
    echo = router.operation("echo").update_context(lambda ctx: ctx.upper()).handle(
        lambda req: {"text": req.context + req.data.text}
    )
    implemented = _implement(router, echo=echo)
    result = await implemented.dispatch(operation="echo", context="pre-", data={"text": "x"})
    assert result == Echo(text="PRE-x")


@pytest.mark.asyncio
async def test_dispatch_invalid_request_never_reaches_handler():
    calls = []
    router = _router()
    echo = router.operation("echo").handle(lambda req: calls.append(req) or {"text": "x"})
    implemented = _implement(router, echo=echo)
    with pytest.raises(RequestValidationError):
        await implemented.dispatch(operation="echo", context=None, data={"text": 1})
    assert calls == []


@pytest.mark.asyncio
async def test_dispatch_invalid_response_raises():
    router = _router()
    implemented = _implement(router, echo=router.operation("echo").handle(lambda req: {"nope": 1}))
    with pytest.raises(ResponseValidationError):
        await implemented.dispatch(operation="echo", context=None, data={"text": "x"})


@pytest.mark.asyncio
async def test_dispatch_without_shapes_requires_empty_payloads():
    implemented = _implement(_router())
    assert await implemented.dispatch(operation="health", context=None) is None
    with pytest.raises(RequestValidationError):
        await implemented.dispatch(operation="health", context=None, data={"x": 1})

    router = _router()
    noisy = _implement(router, health=router.operation("health").handle(lambda req: "body"))
    with pytest.raises(ResponseValidationError):
        await noisy.dispatch(operation="health", context=None)


@pytest.mark.asyncio
async def test_dispatch_unknown_operation():
    implemented = _implement(_router())
    with pytest.raises(OperationNotFound):
        await implemented.dispatch(operation="nope", context=None)


@pytest.mark.asyncio
async def test_dispatch_handler_errors_propagate():
    router = _router()

    async def fail(req):
        raise ValueError("Invalid user ID")

    implemented = _implement(router, echo=router.operation("echo").handle(fail))
    with pytest.raises(ValueError, match="^Invalid user ID$"):
        await implemented.dispatch(operation="echo", context=None, data={"text": "x"})


@pytest.mark.asyncio
async def test_concurrent_dispatch_keeps_contexts_separate():
    router = _router()

    async def step(ctx):
        await asyncio.sleep(0)
        return {"id": ctx}

    echo = router.operation("echo").update_context(step).handle(lambda req: {"text": str(req.context["id"])})
    implemented = _implement(router, echo=echo)
    results = await asyncio.gather(
        *(implemented.dispatch(operation="echo", context=i, data={"text": ""}) for i in range(10))
    )
    assert [r.text for r in results] == [str(i) for i in range(10)]
