"""Utilities for sequential context-transform pipelines."""

from __future__ import annotations

import inspect
from typing import Any, Awaitable, Callable, Iterable, TypeVar

T = TypeVar("T")

ContextStep = Callable[[Any], Awaitable[Any] | Any]


async def maybe_await(value: Awaitable[T] | T) -> T:
    """Await ``value`` if it is awaitable, else return it unchanged."""
    if inspect.isawaitable(value):
        return await value
    return value


async def run_context_steps(steps: Iterable[ContextStep], initial: Any) -> Any:
    """Feed ``initial`` through every step in order and return the final context."""
    context = initial
    for step in steps:
        context = await maybe_await(step(context))
    return context
