"""Async executor for running validation agents in parallel with deadlines."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
import time
from typing import TYPE_CHECKING, Awaitable, Sequence

from ci_orchestrator.execution.result import AgentResult, ExecutionResult

if TYPE_CHECKING:
    from ci_orchestrator.registry import AgentRegistry

logger = logging.getLogger(__name__)


class AsyncAgentExecutor:
    """Executes registered agents concurrently with a per-agent deadline.

    Every requested agent is started at once and the batch only returns after
    all of them have settled. An agent that misses its deadline resolves to a
    synthetic ``timeout`` result; any other exception propagates.

    Attributes:
        registry: Registry the agents are looked up in.
        timeout_seconds: Maximum time to wait for each agent (None disables).
    """

    def __init__(
        self,
        registry: AgentRegistry,
        timeout_seconds: float | None = 300.0,
    ) -> None:
        """Initialize the executor.

        Args:
            registry: Registry of available agents.
            timeout_seconds: Deadline for each agent invocation in seconds.
        """
        self.registry = registry
        self.timeout_seconds = timeout_seconds

    async def _with_deadline(
        self, coro: Awaitable[AgentResult], label: str
    ) -> AgentResult:
        start_time = time.perf_counter()
        try:
            async with asyncio.timeout(self.timeout_seconds) as deadline:
                result = await coro
        except TimeoutError:
            # A TimeoutError raised by the agent itself is a crash, not expiry.
            if not deadline.expired():
                raise
            elapsed_ms = (time.perf_counter() - start_time) * 1000
            logger.warning(
                "Agent %s timed out after %s seconds", label, self.timeout_seconds
            )
            return AgentResult.timeout(execution_time_ms=elapsed_ms)

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        if not isinstance(result, AgentResult):
            raise TypeError(
                f"Agent {label} returned {type(result).__name__}, expected AgentResult"
            )
        return dataclasses.replace(result, execution_time_ms=elapsed_ms)

    async def execute_agent(self, agent_name: str, module: str | None) -> AgentResult:
        """Execute a single agent against ``module``.

        Raises:
            UnknownAgentError: If the agent is not registered.
        """
        return await self._with_deadline(
            self.registry.invoke(agent_name, module), f"{agent_name}[{module}]"
        )

    async def execute_global(self) -> AgentResult | None:
        """Execute the registry's global agent once, if one is configured."""
        name = self.registry.global_agent_name
        if name is None:
            return None
        return await self._with_deadline(self.registry.invoke_global(), name)

    async def execute_module(
        self,
        module: str,
        agent_names: Sequence[str],
    ) -> ExecutionResult:
        """Execute every agent in ``agent_names`` against ``module`` in parallel.

        Args:
            module: Module to validate.
            agent_names: Prioritized agent order.

        Returns:
            ExecutionResult with results keyed in ``agent_names`` order.

        Raises:
            ValueError: If no agents are requested.
            UnknownAgentError: If any agent is not registered.
        """
        if not agent_names:
            raise ValueError("At least one agent must be specified to run")

        # Fail on unknown names before starting anything.
        self.registry.validate_agents(agent_names)

        start_time = time.perf_counter()
        tasks: list[asyncio.Task[AgentResult]] = [
            asyncio.create_task(self.execute_agent(name, module))
            for name in agent_names
        ]

        try:
            results = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            raise

        total_time_ms = (time.perf_counter() - start_time) * 1000
        logger.debug(
            "Module %s: %d agents settled in %.0fms", module, len(results), total_time_ms
        )

        return ExecutionResult(
            module=module,
            results=dict(zip(agent_names, results)),
            total_execution_time_ms=total_time_ms,
        )
