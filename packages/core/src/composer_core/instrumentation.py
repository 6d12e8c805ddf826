"""Instrumentation hooks — observe composer runs for tracing, metrics, etc.

A hook wraps one *run*: a whole ``execute()``, one forked branch, or one
lazily selected sub-chain. It receives a :class:`RunInfo` describing the
run and a ``proceed`` callable, and must await ``proceed()`` exactly once::

    async def timing(info: RunInfo, proceed):
        start = time.perf_counter()
        try:
            return await proceed()
        finally:
            metrics.observe(info.operation, time.perf_counter() - start)

    get_hook_registry().register(timing, kinds={"execute"})
"""

from __future__ import annotations

import fnmatch
import functools
import logging
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Literal, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable

    from .config import ComposerConfig

logger = logging.getLogger(__name__)

RunKind = Literal["execute", "fork", "lazy"]


@dataclass(frozen=True)
class RunInfo:
    """What a hook is told about the run it wraps."""

    kind: RunKind
    config: ComposerConfig
    context: Any

    @property
    def composer(self) -> str:
        return self.config.name

    @property
    def operation(self) -> str:
        return f"composer.{self.kind}.{self.config.name}"


@runtime_checkable
class RunHook(Protocol):
    """Protocol for instrumentation hooks."""

    async def __call__(
        self,
        info: RunInfo,
        proceed: Callable[[], Awaitable[Any]],
    ) -> Any: ...


@dataclass
class HookRegistration:
    """A hook plus the runs it applies to.

    *kinds* limits the run kinds (empty means all). *composers* holds glob
    patterns matched against the composer name (empty means all).
    """

    hook: RunHook
    priority: int = 0
    kinds: frozenset[str] = field(default_factory=frozenset)
    composers: tuple[str, ...] = ()
    enabled: bool = True

    def applies_to(self, info: RunInfo) -> bool:
        if not self.enabled:
            return False
        if self.kinds and info.kind not in self.kinds:
            return False
        return not self.composers or any(
            fnmatch.fnmatchcase(info.composer, pattern) for pattern in self.composers
        )


class HookRegistry:
    """Ordered set of run hooks. Lower priority wraps outermost."""

    def __init__(self) -> None:
        self._registrations: list[HookRegistration] = []

    def register(
        self,
        hook: RunHook,
        *,
        priority: int = 0,
        kinds: Iterable[RunKind] = (),
        composers: Iterable[str] = (),
        enabled: bool = True,
    ) -> HookRegistration:
        registration = HookRegistration(
            hook,
            priority=priority,
            kinds=frozenset(kinds),
            composers=tuple(composers),
            enabled=enabled,
        )
        self._registrations.append(registration)
        self._registrations.sort(key=lambda r: r.priority)
        return registration

    def hooks_for(self, info: RunInfo) -> list[RunHook]:
        return [r.hook for r in self._registrations if r.applies_to(info)]

    async def wrap(self, info: RunInfo, proceed: Callable[[], Awaitable[Any]]) -> Any:
        """Run *proceed* inside every hook that applies to *info*."""
        call = proceed
        for hook in reversed(self.hooks_for(info)):
            call = functools.partial(hook, info, call)
        return await call()

    def clear(self) -> None:
        self._registrations.clear()


_registry: ContextVar[HookRegistry | None] = ContextVar(
    "composer_hook_registry", default=None
)


def get_hook_registry() -> HookRegistry:
    """Return the registry of the current context, creating it on first use.

    Registries are context-local, so registrations made in one test or task
    tree never reach another.
    """
    registry = _registry.get()
    if registry is None:
        registry = HookRegistry()
        _registry.set(registry)
        logger.debug("Created hook registry for current context")
    return registry


def set_hook_registry(registry: HookRegistry) -> None:
    """Install *registry* for the current context."""
    _registry.set(registry)
