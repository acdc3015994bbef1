"""Exceptions raised by the orchestrator."""

from __future__ import annotations


class OrchestratorError(Exception):
    """Base class for orchestrator failures."""


class ConfigurationError(OrchestratorError):
    """An unknown agent, module or backend was requested."""


class UnknownAgentError(ConfigurationError):
    """Raised when an agent name is not present in the registry."""

    def __init__(self, name: str, known: list[str] | None = None) -> None:
        self.name = name
        self.known = known or []
        message = f"Unknown agent '{name}'"
        if self.known:
            message += f" (registered: {', '.join(self.known)})"
        super().__init__(message)


class UnknownModuleError(ConfigurationError):
    """Raised when a module name is not part of the module universe."""

    def __init__(self, name: str, known: list[str] | None = None) -> None:
        self.name = name
        self.known = known or []
        message = f"Unknown module '{name}'"
        if self.known:
            message += f" (known: {', '.join(self.known)})"
        super().__init__(message)


class MemoryStoreError(OrchestratorError):
    """The memory backend could not be read or written."""
