"""Agents that validate a module by running an external command."""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path

from ci_orchestrator.execution.result import AgentResult

logger = logging.getLogger(__name__)

_MAX_DETAIL_LINES = 20


def _tail(output: str, max_lines: int = _MAX_DETAIL_LINES) -> str:
    lines = [line for line in output.strip().splitlines() if line.strip()]
    if len(lines) > max_lines:
        skipped = len(lines) - max_lines
        lines = [f"... ({skipped} lines omitted)"] + lines[-max_lines:]
    return "\n".join(lines)


class CommandAgent:
    """Runs a shell command; exit status 0 means the check passed.

    The command may reference ``{module}``, which is substituted with the
    module under validation (an empty string for the global run).

    Attributes:
        name: Agent name used in logs.
        command: Shell command template.
        cwd: Working directory the command runs in.
    """

    def __init__(
        self,
        name: str,
        command: str,
        cwd: str | Path | None = None,
        env: dict[str, str] | None = None,
    ) -> None:
        self.name = name
        self.command = command
        self.cwd = Path(cwd or os.environ.get("ORCHESTRATOR_PROJECT_ROOT", "."))
        self.env = env

    def render(self, module: str | None) -> str:
        return self.command.format(module=module or "")

    async def __call__(self, module: str | None = None) -> AgentResult:
        command = self.render(module)
        env = {**os.environ, **(self.env or {})}
        if module:
            env["ORCHESTRATOR_MODULE"] = module

        logger.debug("[%s] running: %s (cwd=%s)", self.name, command, self.cwd)
        try:
            proc = await asyncio.create_subprocess_shell(
                command,
                cwd=self.cwd,
                env=env,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except (FileNotFoundError, NotADirectoryError, PermissionError) as e:
            return AgentResult(passed=False, details=f"{self.name}: cannot start '{command}': {e}")

        try:
            stdout, _ = await proc.communicate()
        except asyncio.CancelledError:
            # Deadline expired: do not leave the child running.
            if proc.returncode is None:
                proc.kill()
                await proc.wait()
            raise

        output = _tail(stdout.decode("utf-8", errors="replace"))
        if proc.returncode == 0:
            return AgentResult(passed=True, details=output or f"{self.name} passed")

        if proc.returncode == 127:
            output = output or "command not found"
        return AgentResult(
            passed=False,
            details=f"{self.name} failed (exit {proc.returncode})"
            + (f":\n{output}" if output else ""),
        )
