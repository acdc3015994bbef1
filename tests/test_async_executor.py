"""Tests for the AsyncAgentExecutor."""

from __future__ import annotations

import asyncio
import time
from unittest.mock import patch

import pytest

from ci_orchestrator.errors import UnknownAgentError
from ci_orchestrator.execution.async_executor import AsyncAgentExecutor
from ci_orchestrator.execution.result import AgentResult, AgentStatus
from ci_orchestrator.registry import AgentRegistry


class MockAgent:
    """Mock agent for testing."""

    def __init__(
        self,
        passed: bool = True,
        details: str = "Mock details",
        delay: float = 0.0,
        raise_exception: Exception | None = None,
    ) -> None:
        self.passed = passed
        self.details = details
        self.delay = delay
        self.raise_exception = raise_exception
        self.call_count = 0
        self.last_module: str | None = None
        self.finished_at: float | None = None

    async def __call__(self, module: str | None = None) -> AgentResult:
        self.call_count += 1
        self.last_module = module

        if self.delay > 0:
            await asyncio.sleep(self.delay)

        self.finished_at = time.perf_counter()
        if self.raise_exception is not None:
            raise self.raise_exception

        return AgentResult(passed=self.passed, details=self.details)


def _executor(timeout: float | None = 5.0, **agents: MockAgent) -> AsyncAgentExecutor:
    registry = AgentRegistry()
    for name, agent in agents.items():
        registry.register(name, agent)
    return AsyncAgentExecutor(registry=registry, timeout_seconds=timeout)


class TestAsyncAgentExecutor:
    """Tests for AsyncAgentExecutor."""

    # -------------------------------------------------------------------------
    # Initialization tests
    # -------------------------------------------------------------------------

    def test_default_timeout(self) -> None:
        executor = AsyncAgentExecutor(registry=AgentRegistry())
        assert executor.timeout_seconds == 300.0

    # -------------------------------------------------------------------------
    # Single agent execution tests
    # -------------------------------------------------------------------------

    def test_execute_agent_success(self) -> None:
        """Execute one agent and record timing."""

        async def run_test() -> None:
            lint = MockAgent(details="No lint errors", delay=0.01)
            executor = _executor(lint=lint)

            result = await executor.execute_agent("lint", "suppliers")

            assert result.passed is True
            assert result.details == "No lint errors"
            assert result.status == AgentStatus.PASSED
            assert result.execution_time_ms > 0
            assert lint.last_module == "suppliers"

        asyncio.run(run_test())

    def test_execute_agent_reports_failure(self) -> None:
        async def run_test() -> None:
            executor = _executor(docker=MockAgent(passed=False, details="build failed"))
            result = await executor.execute_agent("docker", "customers")
            assert result.passed is False
            assert result.details == "build failed"

        asyncio.run(run_test())

    def test_execute_agent_goes_through_registry_invoke(self) -> None:
        async def run_test() -> None:
            executor = _executor(lint=MockAgent(details="clean"))
            registry = executor.registry
            with patch.object(registry, "invoke", wraps=registry.invoke) as invoke:
                result = await executor.execute_module("suppliers", ["lint"])
            invoke.assert_called_once_with("lint", "suppliers")
            assert result.results["lint"].details == "clean"

        asyncio.run(run_test())

    def test_unknown_agent_raises(self) -> None:
        async def run_test() -> None:
            executor = _executor(lint=MockAgent())
            with pytest.raises(UnknownAgentError):
                await executor.execute_agent("nope", "suppliers")

        asyncio.run(run_test())

    def test_non_result_return_raises(self) -> None:
        async def bad_agent(module: str | None = None) -> str:
            return "ok"

        async def run_test() -> None:
            registry = AgentRegistry()
            registry.register("bad", bad_agent)
            executor = AsyncAgentExecutor(registry=registry)
            with pytest.raises(TypeError, match="expected AgentResult"):
                await executor.execute_agent("bad", "m")

        asyncio.run(run_test())

    # -------------------------------------------------------------------------
    # Timeout handling tests
    # -------------------------------------------------------------------------

    def test_timeout_handling(self) -> None:
        """Agent that exceeds its deadline resolves to a timeout result."""

        async def run_test() -> None:
            executor = _executor(timeout=0.05, slow=MockAgent(delay=1.0))

            result = await executor.execute_agent("slow", "suppliers")

            assert result.passed is False
            assert result.details == "timeout"
            assert result.status == AgentStatus.TIMEOUT

        asyncio.run(run_test())

    def test_timeout_does_not_affect_other_agents(self) -> None:
        async def run_test() -> None:
            executor = _executor(
                timeout=0.05,
                slow=MockAgent(delay=1.0),
                fast=MockAgent(details="done"),
            )

            result = await executor.execute_module("suppliers", ["slow", "fast"])

            assert result.results["slow"].timed_out is True
            assert result.results["fast"].passed is True
            assert [n for n, r in result.results.items() if r.timed_out] == ["slow"]

        asyncio.run(run_test())

    def test_agent_raised_timeout_error_is_not_a_deadline_expiry(self) -> None:
        """A TimeoutError from inside the agent is a crash, not a timeout result."""

        async def run_test() -> None:
            executor = _executor(
                timeout=5.0,
                flaky=MockAgent(raise_exception=TimeoutError("socket read timed out")),
                ok=MockAgent(delay=0.01),
            )
            with pytest.raises(TimeoutError, match="socket read timed out"):
                await executor.execute_agent("flaky", "m")
            with pytest.raises(TimeoutError, match="socket read timed out"):
                await executor.execute_module("m", ["flaky", "ok"])

        asyncio.run(run_test())

    def test_no_deadline(self) -> None:
        async def run_test() -> None:
            executor = _executor(timeout=None, agent=MockAgent(delay=0.02))
            result = await executor.execute_agent("agent", "m")
            assert result.passed is True

        asyncio.run(run_test())

    # -------------------------------------------------------------------------
    # Parallel execution tests
    # -------------------------------------------------------------------------

    def test_waits_for_every_agent(self) -> None:
        """The batch only returns once the slowest agent has settled."""

        async def run_test() -> None:
            slow = MockAgent(delay=0.1, details="slow")
            fast = MockAgent(delay=0.01, details="fast")
            executor = _executor(A=slow, B=fast)

            start = time.perf_counter()
            result = await executor.execute_module("suppliers", ["A", "B"])
            elapsed = time.perf_counter() - start

            assert elapsed >= 0.1
            assert set(result.results) == {"A", "B"}
            assert fast.finished_at is not None and slow.finished_at is not None
            assert fast.finished_at < slow.finished_at
            assert result.total_execution_time_ms >= 100

        asyncio.run(run_test())

    def test_agents_run_concurrently(self) -> None:
        async def run_test() -> None:
            executor = _executor(
                a=MockAgent(delay=0.1), b=MockAgent(delay=0.1), c=MockAgent(delay=0.1)
            )
            start = time.perf_counter()
            await executor.execute_module("m", ["a", "b", "c"])
            assert time.perf_counter() - start < 0.25

        asyncio.run(run_test())

    def test_results_keyed_in_prioritized_order(self) -> None:
        async def run_test() -> None:
            executor = _executor(
                a=MockAgent(delay=0.03), b=MockAgent(delay=0.01), c=MockAgent()
            )
            result = await executor.execute_module("m", ["c", "a", "b"])
            assert list(result.results) == ["c", "a", "b"]

        asyncio.run(run_test())

    def test_failure_does_not_skip_other_agents(self) -> None:
        async def run_test() -> None:
            agents = {
                "lint": MockAgent(passed=False, details="bad"),
                "docker": MockAgent(delay=0.02),
                "qa": MockAgent(delay=0.01),
            }
            executor = _executor(**agents)
            result = await executor.execute_module("m", ["lint", "docker", "qa"])
            assert all(agent.call_count == 1 for agent in agents.values())
            assert [n for n, r in result.results.items() if not r.passed] == ["lint"]

        asyncio.run(run_test())

    def test_empty_agent_list_raises(self) -> None:
        async def run_test() -> None:
            with pytest.raises(ValueError, match="At least one agent"):
                await _executor().execute_module("m", [])

        asyncio.run(run_test())

    def test_unknown_agent_fails_before_running(self) -> None:
        async def run_test() -> None:
            lint = MockAgent()
            executor = _executor(lint=lint)
            with pytest.raises(UnknownAgentError):
                await executor.execute_module("m", ["lint", "typo"])
            assert lint.call_count == 0

        asyncio.run(run_test())

    # -------------------------------------------------------------------------
    # Error handling tests
    # -------------------------------------------------------------------------

    def test_agent_exception_propagates(self) -> None:
        """Unexpected agent errors are fatal, not folded into results."""

        async def run_test() -> None:
            executor = _executor(
                broken=MockAgent(raise_exception=RuntimeError("Connection failed")),
                ok=MockAgent(),
            )
            with pytest.raises(RuntimeError, match="Connection failed"):
                await executor.execute_module("m", ["broken", "ok"])

        asyncio.run(run_test())

    # -------------------------------------------------------------------------
    # Global agent tests
    # -------------------------------------------------------------------------

    def test_execute_global(self) -> None:
        async def run_test() -> None:
            registry = AgentRegistry()
            systems = MockAgent(details="build ok")
            registry.set_global_agent("systems", systems)
            executor = AsyncAgentExecutor(registry=registry)

            result = await executor.execute_global()

            assert result is not None and result.details == "build ok"
            assert systems.last_module is None

        asyncio.run(run_test())

    def test_execute_global_none(self) -> None:
        assert asyncio.run(_executor().execute_global()) is None
