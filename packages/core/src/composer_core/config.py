"""ComposerConfig — per-composer settings shared with its children."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class ComposerConfig(BaseModel):
    """Configuration for a composer tree."""

    model_config = ConfigDict(frozen=True)

    # Shows up in log lines and instrumentation operation names.
    name: str = "composer"

    # Route execute/fork/lazy runs through the hook registry.
    instrumented: bool = True


DEFAULT_CONFIG = ComposerConfig()
