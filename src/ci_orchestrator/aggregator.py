"""Best-answer selection over one module's agent results."""

from __future__ import annotations

from typing import Mapping, Sequence

from ci_orchestrator.execution.result import AgentResult, ModuleResult


def select_best(
    order: Sequence[str],
    results: Mapping[str, AgentResult],
) -> tuple[str, str]:
    """Pick the representative agent for a module.

    The first passing agent in ``order`` wins. When nothing passed, the agent
    with the longest details wins, the earliest one on a tie.
    """
    ranked = [name for name in order if name in results]
    if not ranked:
        raise ValueError("No agent results to aggregate")

    for name in ranked:
        if results[name].passed:
            return name, results[name].details

    best = ranked[0]
    for name in ranked[1:]:
        if len(results[name].details) > len(results[best].details):
            best = name
    return best, results[best].details


def failed_agents(
    order: Sequence[str],
    results: Mapping[str, AgentResult],
) -> list[str]:
    """Agents in ``order`` with a non-passing (or missing) result."""
    return [name for name in order if name not in results or not results[name].passed]


def aggregate(
    module: str,
    order: Sequence[str],
    results: Mapping[str, AgentResult],
    reprioritized: Sequence[str] = (),
    execution_time_ms: float = 0.0,
) -> ModuleResult:
    """Reduce one module's results to a ModuleResult."""
    best_agent, best_answer = select_best(order, results)
    return ModuleResult(
        module=module,
        agent_order=tuple(order),
        agent_results=dict(results),
        best_agent=best_agent,
        best_answer=best_answer,
        failed_agents=tuple(failed_agents(order, results)),
        reprioritized=tuple(reprioritized),
        execution_time_ms=execution_time_ms,
    )
