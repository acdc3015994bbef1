"""Registry mapping agent names to their async implementations."""

from __future__ import annotations

import logging
from typing import Awaitable, Iterable, Protocol

from ci_orchestrator.errors import UnknownAgentError, UnknownModuleError
from ci_orchestrator.execution.result import AgentResult

logger = logging.getLogger(__name__)


class Agent(Protocol):
    """Interface every validation agent implements.

    Agents report an expected check failure as ``AgentResult(passed=False)``
    and only raise for genuinely unexpected conditions.
    """

    def __call__(self, module: str | None = None) -> Awaitable[AgentResult]:
        ...


class AgentRegistry:
    """Closed, ordered mapping from agent name to implementation.

    Registration order is the declared agent order used whenever a caller
    does not restrict the agent scope. The global agent is kept apart from
    the per-module universe and is never part of module aggregation.
    """

    def __init__(
        self,
        modules: Iterable[str] = (),
        global_agent: tuple[str, Agent] | None = None,
    ) -> None:
        self._agents: dict[str, Agent] = {}
        self._modules: list[str] = []
        self._global_name: str | None = None
        self._global_agent: Agent | None = None

        for module in modules:
            self.add_module(module)
        if global_agent is not None:
            self.set_global_agent(*global_agent)

    def register(self, name: str, agent: Agent) -> None:
        """Register an agent under a unique name."""
        if not name:
            raise ValueError("Agent name must not be empty")
        if name in self._agents or name == self._global_name:
            raise ValueError(f"Agent '{name}' is already registered")
        self._agents[name] = agent

    def add_module(self, module: str) -> None:
        if module in self._modules:
            raise ValueError(f"Module '{module}' is already declared")
        self._modules.append(module)

    def set_global_agent(self, name: str, agent: Agent) -> None:
        """Designate the agent that runs once per orchestrator invocation."""
        if name in self._agents:
            raise ValueError(f"Agent '{name}' is already registered")
        self._global_name = name
        self._global_agent = agent

    @property
    def agent_names(self) -> list[str]:
        """All per-module agents in declared order."""
        return list(self._agents)

    @property
    def module_names(self) -> list[str]:
        return list(self._modules)

    @property
    def global_agent_name(self) -> str | None:
        return self._global_name

    def __contains__(self, name: object) -> bool:
        return name in self._agents

    def __len__(self) -> int:
        return len(self._agents)

    def get(self, name: str) -> Agent:
        """Return the agent registered as ``name``.

        Raises:
            UnknownAgentError: If no agent with that name is registered.
        """
        try:
            return self._agents[name]
        except KeyError:
            raise UnknownAgentError(name, self.agent_names) from None

    def validate_agents(self, names: Iterable[str]) -> None:
        for name in names:
            if name not in self._agents:
                raise UnknownAgentError(name, self.agent_names)

    def validate_modules(self, names: Iterable[str]) -> None:
        # An empty universe means modules are not constrained.
        if not self._modules:
            return
        for name in names:
            if name not in self._modules:
                raise UnknownModuleError(name, self.module_names)

    async def invoke(self, name: str, module: str | None = None) -> AgentResult:
        """Invoke agent ``name`` against ``module``."""
        agent = self.get(name)
        logger.debug("Invoking agent %s for module %s", name, module)
        return await agent(module)

    async def invoke_global(self) -> AgentResult | None:
        """Run the global agent, or return None when none is configured."""
        if self._global_agent is None:
            return None
        logger.debug("Invoking global agent %s", self._global_name)
        return await self._global_agent(None)
