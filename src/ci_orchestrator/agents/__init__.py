"""Built-in validation agents."""

from ci_orchestrator.agents.command import CommandAgent
from ci_orchestrator.agents.defaults import (
    DEFAULT_AGENTS,
    DEFAULT_MODULES,
    GLOBAL_AGENT,
    build_default_registry,
)

__all__ = [
    "CommandAgent",
    "DEFAULT_AGENTS",
    "DEFAULT_MODULES",
    "GLOBAL_AGENT",
    "build_default_registry",
]
