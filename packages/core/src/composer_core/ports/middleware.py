"""Middleware shapes accepted by the composer."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import (
    Any,
    Protocol,
    TypeAlias,
    TypeVar,
    runtime_checkable,
)

C = TypeVar("C")

#: Continuation resuming the rest of the chain with an updated context.
#: The call itself is checked immediately; the returned awaitable must be
#: awaited (or returned) by the caller for the chain to progress.
NextFunction: TypeAlias = Callable[[C], Awaitable[Any]]

#: A unit of chain logic. May be ``async def`` or a plain function that
#: returns the continuation's awaitable.
MiddlewareFn: TypeAlias = Callable[[C, NextFunction[C]], Any]


@runtime_checkable
class MiddlewareObj(Protocol[C]):
    """Object form of a middleware.

    Anything exposing ``middleware()`` is accepted wherever a middleware
    callable is. :class:`~composer_core.composer.Composer` is the main
    implementation.
    """

    def middleware(self) -> MiddlewareFn[C]:
        """Return the callable form of this middleware."""
        ...


Middleware: TypeAlias = MiddlewareFn[C] | MiddlewareObj[C]
