"""composer-core — middleware composition and execution engine.

Builds chains of async context-transforming steps with deterministic
before/main/after ordering, concurrent forks joined before their step
settles, and per-run dynamic selection (lazy/branch/filter).
Transport-agnostic: hosts own the context and call ``execute()``.
"""

from __future__ import annotations

from .composer import Composer
from .config import ComposerConfig
from .engine import run
from .instrumentation import (
    HookRegistration,
    HookRegistry,
    RunHook,
    RunInfo,
    get_hook_registry,
    set_hook_registry,
)
from .middleware import (
    LoggingMiddleware,
    build_pipeline,
    concat,
    flatten,
    pass_through,
)
from .ports import Middleware, MiddlewareFn, MiddlewareObj, NextFunction
from .primitives import (
    ComposerError,
    ContinuationReusedError,
    InvalidMiddlewareError,
)

__all__ = [
    "Composer",
    "ComposerConfig",
    "ComposerError",
    "ContinuationReusedError",
    "HookRegistration",
    "HookRegistry",
    "InvalidMiddlewareError",
    "LoggingMiddleware",
    "Middleware",
    "MiddlewareFn",
    "MiddlewareObj",
    "NextFunction",
    "RunHook",
    "RunInfo",
    "build_pipeline",
    "concat",
    "flatten",
    "get_hook_registry",
    "pass_through",
    "run",
    "set_hook_registry",
]
