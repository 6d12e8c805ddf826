"""flatten — normalize either middleware shape to the callable form."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

from ..primitives.exceptions import InvalidMiddlewareError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ..ports.middleware import Middleware, MiddlewareFn, NextFunction

C = TypeVar("C")


def pass_through(ctx: C, next_: NextFunction[C]) -> Any:
    """Identity step: hand *ctx* to the continuation untouched."""
    return next_(ctx)


def flatten(middleware: Middleware[C]) -> MiddlewareFn[C]:
    """Return the callable form of *middleware*.

    Callables are returned as is. Objects exposing ``middleware()`` are
    asked for their callable on every call, so a
    :class:`~composer_core.composer.Composer` is always seen with its
    current stages.
    """
    if callable(middleware):
        return middleware
    accessor = getattr(middleware, "middleware", None)
    if callable(accessor):
        return accessor()
    raise InvalidMiddlewareError(middleware)


def as_sequence(
    middleware: Middleware[C] | Sequence[Middleware[C]],
) -> list[Middleware[C]]:
    """Accept one middleware or a list/tuple of them and return a list."""
    if isinstance(middleware, (list, tuple)):
        return list(middleware)
    return [middleware]  # type: ignore[list-item]


def deferred(middleware: Middleware[C]) -> MiddlewareFn[C]:
    """Like :func:`flatten`, but resolve the object form at call time.

    Middleware registered on a composer may keep growing after it was
    handed over (``composer.filter(p).use(step)``); the accessor is invoked
    per run so those later additions take effect.
    """
    if callable(middleware):
        return middleware
    if not callable(getattr(middleware, "middleware", None)):
        raise InvalidMiddlewareError(middleware)

    def step(ctx: C, next_: NextFunction[C]) -> Any:
        return flatten(middleware)(ctx, next_)

    return step
