"""Main Orchestrator class - runs validation agents across modules."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Sequence

from ci_orchestrator.aggregator import aggregate
from ci_orchestrator.config import OrchestratorConfig
from ci_orchestrator.escalation import HumanReviewEscalator, create_escalator
from ci_orchestrator.execution import (
    AgentResult,
    AsyncAgentExecutor,
    ModuleResult,
    Scope,
)
from ci_orchestrator.memory import MemoryRecord, MemoryStore, create_store
from ci_orchestrator.prioritizer import prioritize_from_memory
from ci_orchestrator.registry import AgentRegistry
from ci_orchestrator.reporter import Reporter

logger = logging.getLogger(__name__)


@dataclass
class OrchestrationResult:
    """Outcome of one orchestrator run.

    Attributes:
        scope: Modules and agents that were validated.
        module_results: One result per module, in scope order.
        global_agent: Name of the global agent, if one ran.
        global_result: Result of the global agent, if one ran.
        exit_code: 0 when every module passed every agent, otherwise 1.
        escalated_modules: Modules handed to human review.
        execution_time_ms: Wall-clock time for the whole run.
    """

    scope: Scope
    module_results: list[ModuleResult]
    exit_code: int
    global_agent: str | None = None
    global_result: AgentResult | None = None
    escalated_modules: list[str] = field(default_factory=list)
    execution_time_ms: float = 0.0

    @property
    def passed(self) -> bool:
        return self.exit_code == 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "scope": self.scope.to_dict(),
            "passed": self.passed,
            "exit_code": self.exit_code,
            "global_agent": self.global_agent,
            "global_result": self.global_result.to_dict() if self.global_result else None,
            "modules": [r.to_dict() for r in self.module_results],
            "escalated_modules": self.escalated_modules,
            "execution_time_ms": self.execution_time_ms,
        }


class Orchestrator:
    """Coordinates validation agents over a set of modules.

    For each run the orchestrator:
    1. Runs the global agent once
    2. For each module, in order: loads memory, puts previously failed
       agents first, runs all agents in parallel and aggregates the results
    3. Saves the module's memory record and escalates any failures
    4. Decides the exit code once every module is done

    Example:
        >>> orchestrator = Orchestrator(registry=build_default_registry())
        >>> result = orchestrator.run(scope)
        >>> sys.exit(result.exit_code)
    """

    def __init__(
        self,
        registry: AgentRegistry,
        config: OrchestratorConfig | None = None,
        memory: MemoryStore | None = None,
        escalator: HumanReviewEscalator | None = None,
        reporter: Reporter | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            registry: Registry holding every agent that may be scheduled.
            config: Settings (default read from the environment).
            memory: Memory store (default built from ``config``).
            escalator: Human review hook (default built from ``config``).
            reporter: Console reporter.
        """
        self.registry = registry
        self.config = config or OrchestratorConfig.from_env()
        if memory is None:
            memory = create_store(
                self.config.memory_backend,
                memory_dir=self.config.memory_dir,
                bucket=self.config.memory_bucket,
            )
        if escalator is None:
            escalator = create_escalator(self.config.review_webhook_url)
        self._memory = memory
        self._escalator = escalator
        self._reporter = reporter if reporter is not None else Reporter()
        self._executor = AsyncAgentExecutor(
            registry=registry,
            timeout_seconds=self.config.deadline,
        )

    @property
    def memory(self) -> MemoryStore:
        return self._memory

    @property
    def context(self) -> str:
        return self.config.memory_context

    def run(self, scope: Scope) -> OrchestrationResult:
        """Validate every module in ``scope`` and return the run outcome."""
        return asyncio.run(self.run_async(scope))

    async def run_async(self, scope: Scope) -> OrchestrationResult:
        """Same as run() but for use in async contexts."""
        self.registry.validate_modules(scope.modules)
        self.registry.validate_agents(scope.agents)
        start_time = time.perf_counter()

        global_name: str | None = None
        global_result: AgentResult | None = None
        if self.config.run_global_agent and self.registry.global_agent_name:
            global_name = self.registry.global_agent_name
            global_result = await self._executor.execute_global()
            if global_result is not None:
                self._reporter.report_global(global_name, global_result)

        module_results: list[ModuleResult] = []
        escalated: list[str] = []
        for module in scope.modules:
            result = await self.process_module(module, scope.agents)
            module_results.append(result)
            if result.failed_agents:
                escalated.append(module)

        # Judged against every registered agent, not only the ones this run scheduled.
        exit_code = self._reporter.summarize(module_results, self.registry.agent_names)
        elapsed_ms = (time.perf_counter() - start_time) * 1000

        return OrchestrationResult(
            scope=scope,
            module_results=module_results,
            exit_code=exit_code,
            global_agent=global_name,
            global_result=global_result,
            escalated_modules=escalated,
            execution_time_ms=elapsed_ms,
        )

    async def process_module(self, module: str, agents: Sequence[str]) -> ModuleResult:
        """Run the full pipeline for one module."""
        logger.info("Validating module %s", module)
        previous = await self._memory.load(self.context, module)
        order, moved = prioritize_from_memory(agents, previous)

        execution = await self._executor.execute_module(module, order)
        result = aggregate(
            module,
            order,
            execution.results,
            reprioritized=moved,
            execution_time_ms=execution.total_execution_time_ms,
        )

        # Saved on every run so a module that recovered clears its history.
        record = MemoryRecord.from_module_result(result)
        await self._memory.save(self.context, module, record.to_json())

        self._reporter.report_module(result)

        if result.failed_agents:
            await self._escalate(module, result.issues())
        return result

    async def _escalate(self, module: str, issues: list[str]) -> None:
        try:
            await self._escalator.escalate(module, issues)
        except Exception:
            logger.exception("Human review escalation failed for %s", module)
