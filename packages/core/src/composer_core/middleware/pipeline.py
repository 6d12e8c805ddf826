"""concat / build_pipeline — sequence middleware into one."""

from __future__ import annotations

import asyncio
import logging
from inspect import isawaitable
from typing import TYPE_CHECKING, Any, TypeVar

from ..engine import current_outcome
from ..primitives.exceptions import ContinuationReusedError
from .flatten import flatten, pass_through

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from ..ports.middleware import Middleware, MiddlewareFn, NextFunction

logger = logging.getLogger(__name__)

C = TypeVar("C")


def _sequence(steps: Sequence[MiddlewareFn[C]]) -> MiddlewareFn[C]:
    """Run *steps* in order; every step but the last gets a guarded continuation.

    Equivalent to left-folding :func:`concat` over *steps*, but driven by
    index: calling a continuation starts the remaining steps in a task of
    their own, so stack depth stays flat however long the chain is.
    """
    last = len(steps) - 1

    async def drive(index: int, ctx: C, next_: NextFunction[C]) -> Any:
        step = steps[index]
        if index == last:
            result = step(ctx, next_)
            return await result if isawaitable(result) else result

        outcome = current_outcome()
        downstream: asyncio.Task[C] | None = None
        returned = False

        async def resume(new_ctx: C) -> C:
            await drive(index + 1, new_ctx, next_)
            return new_ctx

        def continuation(new_ctx: C) -> asyncio.Task[C]:
            nonlocal downstream
            if downstream is not None:
                raise ContinuationReusedError
            downstream = asyncio.get_running_loop().create_task(resume(new_ctx))
            if returned:
                downstream.add_done_callback(
                    lambda task: _report_late_failure(task, outcome)
                )
            return downstream

        try:
            result = step(ctx, continuation)
            if isawaitable(result):
                result = await result
        except BaseException:
            if downstream is not None:
                if downstream.done():
                    if not downstream.cancelled():
                        downstream.exception()
                else:
                    downstream.cancel()
            raise
        finally:
            returned = True
        if downstream is not None:
            await downstream
        return result

    def composed(ctx: C, next_: NextFunction[C]) -> Any:
        return drive(0, ctx, next_)

    return composed


def _report_late_failure(
    task: asyncio.Task[Any], outcome: asyncio.Future[Any] | None
) -> None:
    """Route errors of a continuation fired after its step returned."""
    if task.cancelled():
        return
    exc = task.exception()
    if exc is None:
        return
    if outcome is not None:
        if not outcome.done():
            outcome.set_exception(exc)
            return
        if not outcome.cancelled() and outcome.exception() is exc:
            return
    logger.error("Late continuation failed: %s", exc, exc_info=exc)


def concat(first: MiddlewareFn[C], second: MiddlewareFn[C]) -> MiddlewareFn[C]:
    """Run *first*, then *second* once *first* calls its continuation.

    Each invocation of the returned middleware owns its own guard, so
    concurrent invocations never see each other's state. Calling the
    continuation handed to *first* starts *second* right away and returns
    a task resolving to the context it was given; calling it a second time
    raises :class:`ContinuationReusedError` at that call site. If *first*
    returns without awaiting the task, it is awaited before the composed
    middleware settles.
    """
    return _sequence([first, second])


def build_pipeline(middlewares: Iterable[Middleware[C]]) -> MiddlewareFn[C]:
    """Flatten *middlewares* and sequence them as one middleware.

    Same as folding ``concat`` over the list followed by a pass-through
    step, so every given middleware sits behind a guarded continuation.
    An empty iterable yields the pass-through step.
    """
    flat = [flatten(mw) for mw in middlewares]
    if not flat:
        return pass_through
    return _sequence([*flat, pass_through])
