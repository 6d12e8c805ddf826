"""Middleware building blocks."""

from .flatten import as_sequence, deferred, flatten, pass_through
from .logging import LoggingMiddleware
from .pipeline import build_pipeline, concat

__all__ = [
    "LoggingMiddleware",
    "as_sequence",
    "build_pipeline",
    "concat",
    "deferred",
    "flatten",
    "pass_through",
]
