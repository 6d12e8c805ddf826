"""Primitives: exceptions."""

from __future__ import annotations

from .exceptions import (
    ComposerError,
    ContinuationReusedError,
    InvalidMiddlewareError,
)

__all__ = [
    "ComposerError",
    "ContinuationReusedError",
    "InvalidMiddlewareError",
]
