"""Validation orchestrator - runs CI validation agents across application modules."""

from ci_orchestrator.config import OrchestratorConfig
from ci_orchestrator.errors import (
    ConfigurationError,
    MemoryStoreError,
    OrchestratorError,
    UnknownAgentError,
    UnknownModuleError,
)
from ci_orchestrator.execution import AgentResult, ModuleResult, Scope
from ci_orchestrator.orchestrator import OrchestrationResult, Orchestrator
from ci_orchestrator.registry import AgentRegistry
from ci_orchestrator.scope import resolve_scope

__all__ = [
    "AgentRegistry",
    "AgentResult",
    "ConfigurationError",
    "MemoryStoreError",
    "ModuleResult",
    "OrchestrationResult",
    "Orchestrator",
    "OrchestratorConfig",
    "OrchestratorError",
    "Scope",
    "UnknownAgentError",
    "UnknownModuleError",
    "resolve_scope",
]
