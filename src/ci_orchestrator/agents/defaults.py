"""Default agents and modules of the AeroSuite validation pipeline."""

from __future__ import annotations

from pathlib import Path

from ci_orchestrator.agents.command import CommandAgent
from ci_orchestrator.registry import AgentRegistry

DEFAULT_MODULES: tuple[str, ...] = (
    "suppliers",
    "customers",
    "inspections",
    "components",
    "dashboard",
    "reports",
)

# Declared order is the execution order when nothing failed last run.
DEFAULT_AGENT_COMMANDS: dict[str, str] = {
    "typescript": "npx tsc --noEmit",
    "lint": "npm run lint -- --quiet src/{module}",
    "testAutomation": "npm test -- --watchAll=false --testPathPattern={module}",
    "qa": "npx cypress run --spec cypress/e2e/{module}/**",
    "security": "npm run security-test -- --module={module}",
    "docker": "docker build --quiet -t aerosuite-{module}:ci .",
    "performance": "npm run perf -- --module={module}",
    "devOps": "docker compose config --quiet",
}

GLOBAL_AGENT = ("systems", "npm run build")

DEFAULT_AGENTS: tuple[str, ...] = tuple(DEFAULT_AGENT_COMMANDS)


def build_default_registry(
    project_root: str | Path | None = None,
    include_global: bool = True,
) -> AgentRegistry:
    """Registry with every default agent running under ``project_root``."""
    registry = AgentRegistry(modules=DEFAULT_MODULES)
    for name, command in DEFAULT_AGENT_COMMANDS.items():
        registry.register(name, CommandAgent(name, command, cwd=project_root))
    if include_global:
        name, command = GLOBAL_AGENT
        registry.set_global_agent(name, CommandAgent(name, command, cwd=project_root))
    return registry
