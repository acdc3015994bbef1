"""Tests for command-backed agents."""

from __future__ import annotations

import asyncio
from pathlib import Path

from ci_orchestrator.agents.command import CommandAgent, _tail


class TestCommandAgent:
    """Tests for CommandAgent."""

    def test_zero_exit_passes(self, tmp_path: Path) -> None:
        agent = CommandAgent("echo", "echo checked {module}", cwd=tmp_path)
        result = asyncio.run(agent("suppliers"))
        assert result.passed is True
        assert result.details == "checked suppliers"

    def test_nonzero_exit_fails(self, tmp_path: Path) -> None:
        agent = CommandAgent("lint", "echo 3 problems; exit 2", cwd=tmp_path)
        result = asyncio.run(agent("customers"))
        assert result.passed is False
        assert result.details.startswith("lint failed (exit 2)")
        assert "3 problems" in result.details

    def test_silent_success_has_default_details(self, tmp_path: Path) -> None:
        result = asyncio.run(CommandAgent("noop", "true", cwd=tmp_path)())
        assert result.passed is True
        assert result.details == "noop passed"

    def test_missing_command_is_failed_check(self, tmp_path: Path) -> None:
        agent = CommandAgent("ghost", "definitely-not-a-real-command-xyz", cwd=tmp_path)
        result = asyncio.run(agent("m"))
        assert result.passed is False
        assert "exit 127" in result.details

    def test_missing_directory_is_failed_check(self, tmp_path: Path) -> None:
        agent = CommandAgent("lint", "true", cwd=tmp_path / "missing")
        result = asyncio.run(agent("m"))
        assert result.passed is False
        assert "cannot start" in result.details

    def test_module_exported_to_env(self, tmp_path: Path) -> None:
        agent = CommandAgent("env", 'echo "$ORCHESTRATOR_MODULE"', cwd=tmp_path)
        assert asyncio.run(agent("reports")).details == "reports"

    def test_extra_env(self, tmp_path: Path) -> None:
        agent = CommandAgent("env", 'echo "$CI_FLAG"', cwd=tmp_path, env={"CI_FLAG": "on"})
        assert asyncio.run(agent("m")).details == "on"

    def test_global_render_has_empty_module(self) -> None:
        assert CommandAgent("g", "run {module}").render(None) == "run "

    def test_cancel_kills_process(self, tmp_path: Path) -> None:
        async def run_test() -> None:
            agent = CommandAgent("slow", "sleep 5", cwd=tmp_path)
            with_deadline = asyncio.wait_for(agent("m"), timeout=0.2)
            try:
                await with_deadline
            except asyncio.TimeoutError:
                return
            raise AssertionError("expected timeout")

        asyncio.run(run_test())


def test_tail_truncates() -> None:
    output = "\n".join(f"line {i}" for i in range(30))
    tail = _tail(output, max_lines=5)
    lines = tail.splitlines()
    assert lines[0] == "... (25 lines omitted)"
    assert lines[-1] == "line 29"
    assert len(lines) == 6
