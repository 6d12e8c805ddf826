import logging
from unittest.mock import AsyncMock

import pytest

from composer_core import Composer
from composer_core.middleware import LoggingMiddleware


class Request:
    pass


# --- LoggingMiddleware Tests ---


@pytest.mark.asyncio()
async def test_logging_middleware_logs_execution(caplog) -> None:
    caplog.set_level(logging.INFO)
    middleware = LoggingMiddleware()
    ctx = Request()
    next_fn = AsyncMock(return_value=ctx)

    result = await middleware(ctx, next_fn)

    assert result is ctx
    next_fn.assert_called_once_with(ctx)
    assert "Handling Request" in caplog.text
    assert "Request completed in" in caplog.text


@pytest.mark.asyncio()
async def test_logging_middleware_logs_exception(caplog) -> None:
    caplog.set_level(logging.INFO)
    middleware = LoggingMiddleware(label="checkout")
    next_fn = AsyncMock(side_effect=ValueError("boom"))

    with pytest.raises(ValueError, match="boom"):
        await middleware(Request(), next_fn)

    assert "Handling checkout" in caplog.text
    assert "checkout failed after" in caplog.text


@pytest.mark.asyncio()
async def test_logging_middleware_times_the_rest_of_the_chain(caplog) -> None:
    caplog.set_level(logging.INFO, logger="composer.middleware")
    composer: Composer[dict] = Composer()
    composer.before(LoggingMiddleware(label="pipeline"))
    composer.use(lambda ctx, next_: next_({**ctx, "handled": True}))

    result = await composer.execute({})

    assert result == {"handled": True}
    messages = [r.getMessage() for r in caplog.records]
    assert messages[0] == "Handling pipeline"
    assert messages[1].startswith("pipeline completed in")


@pytest.mark.asyncio()
async def test_logging_middleware_logs_context_at_debug(caplog) -> None:
    caplog.set_level(logging.DEBUG, logger="composer.middleware")
    middleware = LoggingMiddleware(label="orders")

    await middleware({"order": 7}, AsyncMock(return_value={"order": 7}))

    assert "orders context: {'order': 7}" in caplog.text


@pytest.mark.asyncio()
async def test_logging_middleware_uses_given_logger_and_level(caplog) -> None:
    caplog.set_level(logging.DEBUG, logger="app.pipeline")
    middleware = LoggingMiddleware(
        label="checkout", logger=logging.getLogger("app.pipeline"), level=logging.DEBUG
    )

    await middleware(Request(), AsyncMock())

    records = [r for r in caplog.records if r.name == "app.pipeline"]
    assert [r.levelno for r in records] == [logging.DEBUG] * 3
    assert records[0].getMessage() == "Handling checkout"
    assert records[2].getMessage().startswith("checkout completed in")
