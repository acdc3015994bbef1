"""Data classes for validation agent results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

TIMEOUT_DETAILS = "timeout"


class AgentStatus(Enum):
    """Outcome of a single agent invocation."""

    PASSED = "passed"
    FAILED = "failed"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class AgentResult:
    """Result from running one validation agent.

    Attributes:
        passed: Whether the agent's check passed.
        details: Free-text detail reported by the agent.
        timed_out: True when the result was synthesized after a deadline expiry.
        execution_time_ms: Time taken to execute in milliseconds.
    """

    passed: bool
    details: str = ""
    timed_out: bool = False
    execution_time_ms: float = 0.0

    @classmethod
    def timeout(cls, execution_time_ms: float = 0.0) -> AgentResult:
        """Build the synthetic result used when an agent misses its deadline."""
        return cls(
            passed=False,
            details=TIMEOUT_DETAILS,
            timed_out=True,
            execution_time_ms=execution_time_ms,
        )

    @property
    def status(self) -> AgentStatus:
        if self.timed_out:
            return AgentStatus.TIMEOUT
        return AgentStatus.PASSED if self.passed else AgentStatus.FAILED

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "passed": self.passed,
            "details": self.details,
            "status": self.status.value,
            "execution_time_ms": self.execution_time_ms,
        }


@dataclass(frozen=True)
class ModuleResult:
    """Aggregated outcome of every agent run against one module.

    Attributes:
        module: Business module name.
        agent_order: Prioritized agent order used for this module.
        agent_results: Result per agent name (read-only view).
        best_agent: Agent chosen to represent the module.
        best_answer: Details of the best agent.
        failed_agents: Agents whose result did not pass, in prioritized order.
        reprioritized: Agents moved to the front because they failed last run.
    """

    module: str
    agent_order: tuple[str, ...]
    agent_results: Mapping[str, AgentResult]
    best_agent: str
    best_answer: str
    failed_agents: tuple[str, ...] = ()
    reprioritized: tuple[str, ...] = ()
    execution_time_ms: float = 0.0

    def __post_init__(self) -> None:
        if not isinstance(self.agent_results, MappingProxyType):
            object.__setattr__(
                self, "agent_results", MappingProxyType(dict(self.agent_results))
            )

    @property
    def all_passed(self) -> bool:
        return not self.failed_agents

    def issues(self) -> list[str]:
        """Format each failure as ``"<agent>: <details>"`` for escalation."""
        issues = []
        for name in self.failed_agents:
            result = self.agent_results.get(name)
            issues.append(f"{name}: {result.details if result else 'no result'}")
        return issues

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "module": self.module,
            "agent_order": list(self.agent_order),
            "agent_results": {
                name: self.agent_results[name].to_dict()
                for name in self.agent_order
                if name in self.agent_results
            },
            "best_agent": self.best_agent,
            "best_answer": self.best_answer,
            "failed_agents": list(self.failed_agents),
            "reprioritized": list(self.reprioritized),
            "execution_time_ms": self.execution_time_ms,
        }


@dataclass(frozen=True)
class Scope:
    """Resolved modules x agents for one orchestrator run."""

    modules: tuple[str, ...]
    agents: tuple[str, ...]

    def to_dict(self) -> dict[str, list[str]]:
        return {"modules": list(self.modules), "agents": list(self.agents)}


@dataclass
class ExecutionResult:
    """Results of running a batch of agents against one module.

    Attributes:
        module: Module the agents were run against.
        results: Result per agent, keyed in the order agents were requested.
        total_execution_time_ms: Wall-clock time for the whole batch.
    """

    module: str | None
    results: dict[str, AgentResult] = field(default_factory=dict)
    total_execution_time_ms: float = 0.0

