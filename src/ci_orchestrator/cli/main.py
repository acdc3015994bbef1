"""CLI interface for the validation orchestrator.

Provides the per-CI-run ``run`` command plus inspection of agents and memory.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys

import click

from ci_orchestrator.agents import build_default_registry
from ci_orchestrator.config import OrchestratorConfig
from ci_orchestrator.errors import ConfigurationError
from ci_orchestrator.memory import create_store, parse_record
from ci_orchestrator.orchestrator import Orchestrator
from ci_orchestrator.reporter import EXIT_FAILURE
from ci_orchestrator.scope import resolve_scope

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@click.group()
def cli() -> None:
    """Validation Orchestrator - adaptive multi-agent CI checks."""


@cli.command()
@click.option(
    "--modules",
    "-m",
    default=None,
    help="Comma separated modules to validate. Default: all modules.",
)
@click.option(
    "--agents",
    "-a",
    default=None,
    help="Comma separated agents to run. Default: all agents.",
)
@click.option(
    "--timeout",
    type=float,
    default=None,
    help="Per-agent deadline in seconds (0 disables).",
)
@click.option(
    "--memory-backend",
    type=click.Choice(["file", "s3", "memory"], case_sensitive=False),
    default=None,
    help="Where failure history is kept.",
)
@click.option("--memory-dir", default=None, help="Directory for the file backend.")
@click.option("--bucket", default=None, help="Bucket for the S3 backend.")
@click.option("--webhook-url", default=None, help="Human review webhook URL.")
@click.option("--project-root", default=None, help="Directory agents run in.")
@click.option(
    "--no-global",
    is_flag=True,
    help="Skip the global agent.",
)
@click.option(
    "--json-output",
    "-j",
    is_flag=True,
    help="Also print the run result as JSON.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def run(
    modules: str | None,
    agents: str | None,
    timeout: float | None,
    memory_backend: str | None,
    memory_dir: str | None,
    bucket: str | None,
    webhook_url: str | None,
    project_root: str | None,
    no_global: bool,
    json_output: bool,
    verbose: bool,
) -> None:
    """Run validation agents across modules and exit with the verdict.

    Examples:
        ci-orchestrator run
        ci-orchestrator run --agents=docker,devOps,testAutomation,qa
        ci-orchestrator run -m suppliers,customers -j
    """
    _configure_logging(verbose)

    try:
        config = OrchestratorConfig.from_env().with_overrides(
            timeout_seconds=timeout,
            memory_backend=memory_backend,
            memory_dir=memory_dir,
            memory_bucket=bucket,
            review_webhook_url=webhook_url,
            project_root=project_root,
            run_global_agent=False if no_global else None,
        )
        registry = build_default_registry(
            project_root=config.project_root,
            include_global=config.run_global_agent,
        )
        scope = resolve_scope(registry, modules=modules, agents=agents)
        orchestrator = Orchestrator(registry=registry, config=config)
        result = orchestrator.run(scope)
    except ConfigurationError as e:
        logger.error("Configuration error: %s", e)
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_FAILURE)
    except Exception as e:
        logger.exception("Fatal error during orchestration")
        click.echo(f"Fatal error: {e}", err=True)
        sys.exit(EXIT_FAILURE)

    if json_output:
        click.echo(json.dumps(result.to_dict(), indent=2, default=str))
    sys.exit(result.exit_code)


@cli.command("agents")
def list_agents() -> None:
    """List registered agents, the global agent and known modules."""
    registry = build_default_registry()
    click.echo("Agents (declared order):")
    for name in registry.agent_names:
        click.echo(f"  - {name}")
    click.echo(f"Global agent: {registry.global_agent_name or 'none'}")
    click.echo("Modules:")
    for module in registry.module_names:
        click.echo(f"  - {module}")


@cli.command()
@click.argument("module")
@click.option(
    "--memory-backend",
    type=click.Choice(["file", "s3", "memory"], case_sensitive=False),
    default=None,
)
@click.option("--memory-dir", default=None)
@click.option("--bucket", default=None)
@click.option("--json-output", "-j", is_flag=True, help="Output as JSON.")
def memory(
    module: str,
    memory_backend: str | None,
    memory_dir: str | None,
    bucket: str | None,
    json_output: bool,
) -> None:
    """Show the stored failure history for MODULE."""
    config = OrchestratorConfig.from_env().with_overrides(
        memory_backend=memory_backend,
        memory_dir=memory_dir,
        memory_bucket=bucket,
    )
    try:
        store = create_store(
            config.memory_backend,
            memory_dir=config.memory_dir,
            bucket=config.memory_bucket,
        )
        content = asyncio.run(store.load(config.memory_context, module))
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_FAILURE)

    if content is None:
        click.echo(f"No memory recorded for {module}.")
        return

    record = parse_record(content, module=module)
    if json_output:
        click.echo(json.dumps(record.to_dict(), indent=2))
    else:
        click.echo(record.summary())


if __name__ == "__main__":
    cli()
