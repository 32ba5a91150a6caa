"""Publish/subscribe topics reporting call outcomes."""

from __future__ import annotations

import asyncio
import inspect
from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

from loguru import logger

M = TypeVar("M")
Listener = Callable[[M], Any]


@dataclass(frozen=True, slots=True)
class SuccessMessage:
    """Published once per call whose response passed validation."""

    operation: str
    request: Any
    response: Any


@dataclass(frozen=True, slots=True)
class FailureMessage:
    """Published once per call whose resolver raised; ``error`` is the formatted error."""

    operation: str
    request: Any
    error: BaseException


class _Subscription:
    __slots__ = ("listener",)

    def __init__(self, listener: Listener):
        self.listener = listener


class Topic(Generic[M]):
    """Minimal synchronous pub/sub channel.

    Listeners are stored in a tuple that is replaced on every (un)subscribe, so
    a publish iterates a stable snapshot: listeners added during a publish are
    not notified by it and listeners removed during it are still notified.

    With ``isolate_errors`` (the default) a raising listener is logged and the
    remaining listeners are still notified. Without it, delivery still reaches
    every listener and the first listener exception is re-raised afterwards.
    """

    def __init__(self, name: str = "topic", *, isolate_errors: bool = True):
        self.name = name
        self.isolate_errors = isolate_errors
        self._subscriptions: tuple[_Subscription, ...] = ()
        self._pending: set[asyncio.Task[Any]] = set()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener``; returns a callable that removes it."""
        subscription = _Subscription(listener)
        self._subscriptions = (*self._subscriptions, subscription)

        def unsubscribe() -> None:
            self._subscriptions = tuple(s for s in self._subscriptions if s is not subscription)

        return unsubscribe

    def __len__(self) -> int:
        return len(self._subscriptions)

    def publish(self, message: M) -> None:
        """Invoke every listener in subscription order.

        Awaitables returned by listeners are scheduled on the running loop and
        not awaited.
        """
        first_error: BaseException | None = None
        for subscription in self._subscriptions:
            try:
                result = subscription.listener(message)
                if inspect.isawaitable(result):
                    self._schedule(result)
            except Exception as exc:
                first_error = self._listener_failed(exc, first_error)
        if first_error is not None:
            raise first_error

    async def publish_async(self, message: M) -> None:
        """Invoke every listener concurrently and await their results."""
        snapshot = self._subscriptions
        results = await asyncio.gather(
            *(self._invoke_async(s.listener, message) for s in snapshot),
            return_exceptions=True,
        )
        first_error: BaseException | None = None
        for result in results:
            if isinstance(result, asyncio.CancelledError):
                raise result
            if isinstance(result, Exception):
                first_error = self._listener_failed(result, first_error)
        if first_error is not None:
            raise first_error

    @staticmethod
    async def _invoke_async(listener: Listener, message: Any) -> Any:
        result = listener(message)
        if inspect.isawaitable(result):
            return await result
        return result

    def _listener_failed(self, exc: BaseException, first_error: BaseException | None) -> BaseException | None:
        if self.isolate_errors:
            logger.opt(exception=exc).error("Topic {} listener failed: {}", self.name, exc)
            return first_error
        return first_error or exc

    def _schedule(self, awaitable: Any) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            logger.warning("Topic {} listener returned an awaitable outside an event loop; dropped", self.name)
            return
        task = asyncio.ensure_future(awaitable, loop=loop)
        self._pending.add(task)
        task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task[Any]) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.opt(exception=exc).error("Topic {} async listener failed: {}", self.name, exc)
