"""run — drive one middleware against an initial context."""

from __future__ import annotations

import asyncio
from contextvars import ContextVar
from inspect import isawaitable
from typing import TYPE_CHECKING, Any, TypeVar

if TYPE_CHECKING:
    from .ports.middleware import MiddlewareFn

C = TypeVar("C")

#: Result future of the innermost ``run`` in progress. Continuations fired
#: after their step already returned report failures here.
_current_outcome: ContextVar[asyncio.Future[Any] | None] = ContextVar(
    "composer_current_outcome", default=None
)


def current_outcome() -> asyncio.Future[Any] | None:
    """Return the result future of the enclosing :func:`run`, if any."""
    return _current_outcome.get()


async def run(ctx: C, middleware: MiddlewareFn[C]) -> C:
    """Invoke *middleware* with *ctx* and return the context it finishes with.

    The continuation handed to *middleware* settles the result. Exceptions
    raised by the middleware (or anything downstream of it) propagate
    unchanged. If the middleware returns without ever calling its
    continuation, the chain was short-circuited and this coroutine stays
    pending.
    """
    loop = asyncio.get_running_loop()
    outcome: asyncio.Future[C] = loop.create_future()

    def resolve(final_ctx: C) -> asyncio.Future[C]:
        if not outcome.done():
            outcome.set_result(final_ctx)
        return outcome

    token = _current_outcome.set(outcome)
    try:
        result = middleware(ctx, resolve)
        if isawaitable(result):
            await result
    finally:
        _current_outcome.reset(token)
    return await outcome
