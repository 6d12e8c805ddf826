"""Exceptions raised by composer-core itself.

Errors raised by user middleware are never wrapped: they reach the caller
of ``execute()`` with their identity intact.
"""

from __future__ import annotations


class ComposerError(Exception):
    """Root exception for composer-core."""


class ContinuationReusedError(ComposerError):
    """Raised when a continuation fires more than once for one invocation.

    Usage: a middleware called ``next`` twice. The error is raised at the
    second call site so the offending step shows up in the traceback.
    """

    def __init__(self, message: str = "next already called") -> None:
        super().__init__(message)


class InvalidMiddlewareError(ComposerError, TypeError):
    """Raised when a value is neither a callable nor exposes ``middleware()``."""

    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(
            f"Expected a middleware callable or an object with a middleware() "
            f"method, got {type(value).__name__}"
        )
