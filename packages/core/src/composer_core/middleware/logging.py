"""LoggingMiddleware — logs how long the rest of the chain takes."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..ports.middleware import NextFunction


class LoggingMiddleware:
    """Logs each run passing this point of a chain.

    At *level* it logs the run reaching the step and, once everything after
    it has settled, how long that took. The context itself is logged at
    DEBUG. Failures downstream are logged with their traceback and
    re-raised. Register it with ``before`` to time a whole composer::

        composer.before(LoggingMiddleware("checkout", level=logging.DEBUG))
    """

    def __init__(
        self,
        label: str | None = None,
        *,
        logger: logging.Logger | None = None,
        level: int = logging.INFO,
    ) -> None:
        self._label = label
        self._logger = logger or logging.getLogger("composer.middleware")
        self._level = level

    async def __call__(self, ctx: Any, next_: NextFunction[Any]) -> Any:
        """Log around the continuation and hand *ctx* on unchanged."""
        name = self._label or type(ctx).__name__
        log = self._logger
        log.log(self._level, "Handling %s", name)
        log.debug("%s context: %r", name, ctx)
        start = time.perf_counter()
        try:
            result = await next_(ctx)
        except Exception:
            elapsed = (time.perf_counter() - start) * 1000
            log.exception("%s failed after %.2fms", name, elapsed)
            raise
        elapsed = (time.perf_counter() - start) * 1000
        log.log(self._level, "%s completed in %.2fms", name, elapsed)
        return result
