"""Structured memory record persisted per (context, module).

A record remembers which agents failed the last time a module was validated
so the next run can put them first.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from ci_orchestrator.execution.result import ModuleResult

logger = logging.getLogger(__name__)

RECORD_VERSION = 1

# Older records were plain text with one line per failing agent.
_LEGACY_FAILURE_LINE = re.compile(r"^\s*Agent failed:\s*(\S+)\s*$", re.MULTILINE)


def _str_field(data: dict[str, Any], key: str) -> str:
    value = data.get(key, "")
    if not isinstance(value, str):
        raise ValueError(f"Memory record field {key!r} must be a string")
    return value


def _names_field(data: dict[str, Any], key: str) -> list[str]:
    value = data.get(key, [])
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"Memory record field {key!r} must be a list of names")
    return list(value)


@dataclass
class MemoryRecord:
    """Summary of a module's previous run.

    Attributes:
        module: Module the record belongs to.
        failed_agents: Agents that did not pass, in prioritized order.
        best_agent: Agent chosen as the module's best answer.
        best_answer: Details of the best agent.
        reprioritized: Agents that were moved to the front for that run.
        updated_at: ISO timestamp of when the record was written.
    """

    module: str
    failed_agents: list[str] = field(default_factory=list)
    best_agent: str = ""
    best_answer: str = ""
    reprioritized: list[str] = field(default_factory=list)
    updated_at: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    @classmethod
    def from_module_result(cls, result: ModuleResult) -> MemoryRecord:
        return cls(
            module=result.module,
            failed_agents=list(result.failed_agents),
            best_agent=result.best_agent,
            best_answer=result.best_answer,
            reprioritized=list(result.reprioritized),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "version": RECORD_VERSION,
            "module": self.module,
            "failed_agents": self.failed_agents,
            "best_agent": self.best_agent,
            "best_answer": self.best_answer,
            "reprioritized": self.reprioritized,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MemoryRecord:
        """Create from dictionary.

        Raises:
            ValueError: If a field has the wrong type.
        """
        return cls(
            module=_str_field(data, "module"),
            failed_agents=_names_field(data, "failed_agents"),
            best_agent=_str_field(data, "best_agent"),
            best_answer=_str_field(data, "best_answer"),
            reprioritized=_names_field(data, "reprioritized"),
            updated_at=_str_field(data, "updated_at"),
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2)

    @classmethod
    def from_json(cls, content: str) -> MemoryRecord:
        data = json.loads(content)
        if not isinstance(data, dict):
            raise ValueError("Memory record must be a JSON object")
        return cls.from_dict(data)

    def summary(self) -> str:
        """Human readable rendering, one line per failing agent."""
        lines = []
        if self.reprioritized:
            lines.append(f"Reprioritized agents: {', '.join(self.reprioritized)}")
        lines.append(f"Best agent: {self.best_agent}")
        lines.append(f"Best answer: {self.best_answer}")
        lines.extend(f"Agent failed: {name}" for name in self.failed_agents)
        return "\n".join(lines)


def parse_record(content: str, module: str = "") -> MemoryRecord:
    """Parse stored content, accepting both JSON and legacy text records."""
    # Anything that is not a well-formed JSON record is read as legacy text.
    try:
        return MemoryRecord.from_json(content)
    except ValueError as e:
        logger.debug("Reading memory for %r as legacy text: %s", module, e)

    failed: list[str] = []
    for name in _LEGACY_FAILURE_LINE.findall(content):
        if name not in failed:
            failed.append(name)
    return MemoryRecord(module=module, failed_agents=failed, updated_at="")


def parse_failed_agents(content: str) -> list[str]:
    """Return previously failed agents, de-duplicated, first appearance first."""
    failed: list[str] = []
    for name in parse_record(content).failed_agents:
        if name not in failed:
            failed.append(name)
    return failed
