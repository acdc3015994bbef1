"""Async agent execution components."""

from ci_orchestrator.execution.async_executor import AsyncAgentExecutor
from ci_orchestrator.execution.result import (
    AgentResult,
    AgentStatus,
    ExecutionResult,
    ModuleResult,
    Scope,
)

__all__ = [
    "AgentResult",
    "AgentStatus",
    "AsyncAgentExecutor",
    "ExecutionResult",
    "ModuleResult",
    "Scope",
]
