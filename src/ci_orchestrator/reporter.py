"""Console reporting and exit code decision."""

from __future__ import annotations

import logging
from typing import Sequence

import click

from ci_orchestrator.execution.result import AgentResult, ModuleResult

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_FAILURE = 1


def compute_exit_code(
    module_results: Sequence[ModuleResult],
    agent_universe: Sequence[str],
) -> int:
    """0 iff every module has a passing result for every declared agent."""
    for result in module_results:
        for agent in agent_universe:
            agent_result = result.agent_results.get(agent)
            if agent_result is None or not agent_result.passed:
                return EXIT_FAILURE
    return EXIT_SUCCESS


class Reporter:
    """Prints per-module outcomes and the final banner."""

    def __init__(self, echo_details: bool = True) -> None:
        self.echo_details = echo_details

    def report_global(self, name: str, result: AgentResult) -> None:
        status = "passed" if result.passed else "failed"
        logger.info("Global agent %s %s", name, status)
        click.secho(
            f"[global] {name}: {status.upper()}",
            fg="green" if result.passed else "red",
        )
        if self.echo_details and result.details:
            click.echo(result.details)

    def report_module(self, result: ModuleResult) -> None:
        if result.reprioritized:
            click.echo(
                f"[{result.module}] Prioritized previously failed: "
                + ", ".join(result.reprioritized)
            )
        for name in result.agent_order:
            agent_result = result.agent_results.get(name)
            if agent_result is None:
                continue
            mark = "✓" if agent_result.passed else "✗"
            click.secho(
                f"  {mark} {name} ({agent_result.status.value}, "
                f"{agent_result.execution_time_ms:.0f}ms)",
                fg="green" if agent_result.passed else "red",
            )
        click.echo(f"[{result.module}] Best agent: {result.best_agent}")
        if self.echo_details:
            click.echo(f"[{result.module}] Best answer: {result.best_answer}")

    def summarize(
        self,
        module_results: Sequence[ModuleResult],
        agent_universe: Sequence[str],
    ) -> int:
        """Print the cross-module summary and return the exit code."""
        click.echo("\n" + "=" * 60)
        click.echo("VALIDATION SUMMARY")
        click.echo("=" * 60)
        for result in module_results:
            if result.all_passed:
                click.secho(f"  {result.module}: all agents passed", fg="green")
            else:
                click.secho(
                    f"  {result.module}: failed ({', '.join(result.failed_agents)})",
                    fg="red",
                )
            click.echo(f"    best: {result.best_agent}")

        not_run = [
            agent
            for agent in agent_universe
            if any(agent not in result.agent_results for result in module_results)
        ]
        if not_run:
            click.secho(f"  not run, counted as failed: {', '.join(not_run)}", fg="yellow")

        exit_code = compute_exit_code(module_results, agent_universe)
        click.echo("=" * 60)
        if exit_code == EXIT_SUCCESS:
            click.secho("ALL MODULES PASSED", fg="green", bold=True)
        else:
            click.secho("VALIDATION FAILED", fg="red", bold=True)
        return exit_code
