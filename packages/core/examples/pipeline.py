"""Example: timing a pipeline with before/after stages and a fork."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, replace

from composer_core import Composer, ComposerConfig, LoggingMiddleware

logger = logging.getLogger("examples.pipeline")


@dataclass(frozen=True)
class Context:
    start: float = 0.0
    message: str | None = None
    extra: str | None = None


def build_composer() -> Composer[Context]:
    composer: Composer[Context] = Composer(config=ComposerConfig(name="pipeline"))

    def stamp(ctx: Context, next_):
        return next_(replace(ctx, start=time.perf_counter()))

    def report(ctx: Context, next_):
        logger.info("Took %.0f ms", (time.perf_counter() - ctx.start) * 1000)
        return next_(ctx)

    def peek(ctx: Context, next_):
        logger.info("side branch saw %s", ctx)
        return next_(ctx)

    # Runs first and last no matter where it is registered.
    composer.before(stamp)
    composer.after(report)

    async def slow(ctx: Context, next_):
        await asyncio.sleep(1)
        return await next_(replace(ctx, message="hello"))

    composer.use(LoggingMiddleware(label="pipeline"))
    composer.fork(peek)
    composer.use(slow)
    composer.filter(lambda ctx: ctx.message == "hello").use(
        lambda ctx, next_: next_(replace(ctx, extra="world"))
    )
    return composer


async def main() -> None:
    logging.basicConfig(level=logging.INFO)
    result = await build_composer().execute(Context())
    print(result)


if __name__ == "__main__":
    asyncio.run(main())
