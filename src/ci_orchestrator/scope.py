"""Resolution of the modules x agents scope for a run."""

from __future__ import annotations

from ci_orchestrator.errors import ConfigurationError
from ci_orchestrator.execution.result import Scope
from ci_orchestrator.registry import AgentRegistry


def split_csv(value: str | None) -> list[str]:
    """Split a comma separated option, dropping blanks and duplicates."""
    if not value:
        return []
    names: list[str] = []
    for part in value.split(","):
        name = part.strip()
        if name and name not in names:
            names.append(name)
    return names


def resolve_scope(
    registry: AgentRegistry,
    modules: str | None = None,
    agents: str | None = None,
) -> Scope:
    """Resolve optional CSV module/agent lists against the registry.

    Omitted lists fall back to the registered universes. Unknown names raise
    a ConfigurationError before anything is executed.
    """
    module_names = split_csv(modules) if modules is not None else registry.module_names
    agent_names = split_csv(agents) if agents is not None else registry.agent_names

    if modules is not None and not module_names:
        raise ConfigurationError(f"Empty module list: {modules!r}")
    if agents is not None and not agent_names:
        raise ConfigurationError(f"Empty agent list: {agents!r}")

    if not module_names:
        raise ConfigurationError("No modules to validate")
    if not agent_names:
        raise ConfigurationError("No agents registered")

    registry.validate_modules(module_names)
    registry.validate_agents(agent_names)

    return Scope(modules=tuple(module_names), agents=tuple(agent_names))
