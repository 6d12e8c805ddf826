"""Common utility functions and helpers."""

from __future__ import annotations

from inspect import isawaitable
from typing import Any


async def maybe_await(value: Any) -> Any:
    """Await *value* if it is awaitable, otherwise return it as is.

    Lets middleware, factories and predicates be plain functions or
    coroutines interchangeably.
    """
    if isawaitable(value):
        return await value
    return value
