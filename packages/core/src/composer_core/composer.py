"""Composer — builder that folds before/main/after stages into one chain."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Generic, TypeVar, overload

from .config import DEFAULT_CONFIG, ComposerConfig
from .engine import run
from .instrumentation import RunInfo, get_hook_registry
from .middleware.flatten import as_sequence, deferred, pass_through
from .middleware.pipeline import build_pipeline
from .utils import maybe_await

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

    from typing_extensions import TypeGuard

    from .instrumentation import RunKind
    from .ports.middleware import Middleware, MiddlewareFn, NextFunction

logger = logging.getLogger(__name__)

C = TypeVar("C")
D = TypeVar("D")


class Composer(Generic[C]):
    """Aggregates a before-stage, a main handler and an after-stage.

    Effective order on every run is: everything registered with
    :meth:`before` (in call order), then everything registered with
    :meth:`use` and the other main-stage combinators (in call order), then
    everything registered with :meth:`after` (in call order). Interleaving
    the calls does not change that order.

    Every combinator except :meth:`after` returns a child composer scoped
    to the middleware it just added. The parent looks the child up at run
    time, so middleware registered on the child later still runs::

        composer.filter(is_admin).use(audit, handle)

    Parameters
    ----------
    *middleware:
        Optional middleware to pre-seed the main handler with.
    config:
        Optional :class:`~composer_core.config.ComposerConfig`. Children
        inherit it.
    """

    def __init__(
        self,
        *middleware: Middleware[C],
        config: ComposerConfig | None = None,
    ) -> None:
        self._config = config if config is not None else DEFAULT_CONFIG
        self._before: list[MiddlewareFn[C]] = []
        self._handler: list[MiddlewareFn[C]] = [deferred(mw) for mw in middleware]
        self._after: list[MiddlewareFn[C]] = []

    @property
    def config(self) -> ComposerConfig:
        return self._config

    def __repr__(self) -> str:
        return f"Composer(name={self._config.name!r})"

    # ── Export / run ─────────────────────────────────────────────

    def middleware(self) -> MiddlewareFn[C]:
        """Return the current effective chain as a single middleware."""
        return build_pipeline([*self._before, *self._handler, *self._after])

    async def execute(self, ctx: C) -> C:
        """Run the whole chain once and return the final context.

        The first error raised anywhere in the chain propagates unchanged.
        """
        name = self._config.name
        logger.debug("Executing %s (context=%s)", name, type(ctx).__name__)
        try:
            result = await self._instrumented(
                "execute", ctx, lambda: run(ctx, self.middleware())
            )
        except Exception:
            logger.debug("%s failed", name, exc_info=True)
            raise
        logger.debug("%s finished", name)
        return result

    # ── Stages ───────────────────────────────────────────────────

    def use(self, *middleware: Middleware[C]) -> Composer[C]:
        """Append *middleware* to the main handler, in registration order.

        Returns a new composer of the given middleware.
        """
        tree = self._child(*middleware)
        self._handler.append(deferred(tree))
        return tree

    def before(self, *middleware: Middleware[C]) -> Composer[C]:
        """Register middleware to run ahead of the main handler.

        Runs after middleware previously registered with this method and
        before anything registered with :meth:`use`, whenever that happened.
        Returns a new composer of the given middleware.
        """
        tree = self._child(*middleware)
        self._before.append(deferred(tree))
        return tree

    def after(self, *middleware: Middleware[C]) -> None:
        """Register middleware to run once the main handler has passed on."""
        self._after.extend(deferred(mw) for mw in middleware)

    # ── Concurrency ──────────────────────────────────────────────

    def fork(self, *middleware: Middleware[C]) -> Composer[C]:
        """Run *middleware* concurrently with the rest of the chain.

        When the step is reached, the downstream continuation and a fresh
        run of the forked middleware start together against the same
        context. The step settles once both have settled and fails with the
        first error (downstream first, then the fork). Returns a new
        composer of the given middleware.
        """
        tree = self._child(*middleware)
        forked = deferred(tree)

        async def fork_step(ctx: C, next_: NextFunction[C]) -> Any:
            main = next_(ctx)
            side = self._instrumented("fork", ctx, lambda: run(ctx, forked))
            main_result, side_result = await asyncio.gather(
                main, side, return_exceptions=True
            )
            if isinstance(side_result, BaseException):
                logger.warning(
                    "Forked branch of %s failed: %s", self._config.name, side_result
                )
            if isinstance(main_result, BaseException):
                raise main_result
            if isinstance(side_result, BaseException):
                raise side_result
            return main_result

        self.use(fork_step)
        return tree

    # ── Dynamic dispatch ─────────────────────────────────────────

    def lazy(
        self,
        factory: Callable[[C], Any],
    ) -> Composer[C]:
        """Pick the middleware to run at run time.

        *factory* receives the context, may be async, and returns one
        middleware or a list/tuple of them. It is called once per run; the
        produced middleware runs to completion against the context and its
        result is handed downstream.

        ::

            def by_parity(ctx):
                return odd if ctx["n"] % 2 else even

            composer.lazy(by_parity)
        """

        async def lazy_step(ctx: C, next_: NextFunction[C]) -> Any:
            produced = await maybe_await(factory(ctx))
            chain = build_pipeline(as_sequence(produced))
            new_ctx = await self._instrumented("lazy", ctx, lambda: run(ctx, chain))
            return await next_(new_ctx)

        return self.use(lazy_step)

    def branch(
        self,
        predicate: Callable[[C], bool | Awaitable[bool]],
        if_true: Middleware[C] | Sequence[Middleware[C]],
        if_false: Middleware[C] | Sequence[Middleware[C]],
    ) -> Composer[C]:
        """Run *if_true* or *if_false* depending on *predicate*.

        The predicate is tested once per run and may be async. Either
        alternative may be a single middleware or a list of them.

        Built on :meth:`lazy`, so the composer returned is the child holding
        the selecting step, not either alternative. Register further
        middleware on the alternatives themselves (pass composers) to grow
        them later.
        """
        true_chain = [deferred(mw) for mw in as_sequence(if_true)]
        false_chain = [deferred(mw) for mw in as_sequence(if_false)]

        async def select(ctx: C) -> list[MiddlewareFn[C]]:
            return true_chain if await maybe_await(predicate(ctx)) else false_chain

        return self.lazy(select)

    @overload
    def filter(
        self,
        predicate: Callable[[C], TypeGuard[D]],
        *middleware: Middleware[D],
    ) -> Composer[D]: ...

    @overload
    def filter(
        self,
        predicate: Callable[[C], bool | Awaitable[bool]],
        *middleware: Middleware[C],
    ) -> Composer[C]: ...

    def filter(
        self,
        predicate: Callable[[C], Any],
        *middleware: Middleware[Any],
    ) -> Composer[Any]:
        """Run *middleware* only when *predicate* holds for the context.

        Otherwise the context passes through untouched. A predicate typed
        as ``TypeGuard[Narrower]`` narrows the returned composer to
        ``Composer[Narrower]``; runtime behavior is the same either way.
        Returns a new composer of the given middleware.
        """
        tree = self._child(*middleware)
        self.branch(predicate, tree, pass_through)
        return tree

    # ── Internals ────────────────────────────────────────────────

    def _child(self, *middleware: Middleware[Any]) -> Composer[Any]:
        return Composer(*middleware, config=self._config)

    async def _instrumented(
        self,
        kind: RunKind,
        ctx: C,
        thunk: Callable[[], Awaitable[C]],
    ) -> C:
        if not self._config.instrumented:
            return await thunk()
        info = RunInfo(kind, self._config, ctx)
        return await get_hook_registry().wrap(info, thunk)
