"""Reorders agents so the ones that failed last run go first."""

from __future__ import annotations

import logging
from typing import Sequence

from ci_orchestrator.memory.record import parse_failed_agents

logger = logging.getLogger(__name__)


def prioritize(
    candidates: Sequence[str],
    previous_failures: Sequence[str] = (),
) -> tuple[list[str], list[str]]:
    """Move previously failed agents to the front of ``candidates``.

    Returns the new order and the agents that were moved. Failures that are
    not candidates in this run are ignored.
    """
    moved: list[str] = []
    for name in previous_failures:
        if name in candidates and name not in moved:
            moved.append(name)
    rest = [name for name in candidates if name not in moved]
    return moved + rest, moved


def prioritize_from_memory(
    candidates: Sequence[str],
    record: str | None,
) -> tuple[list[str], list[str]]:
    """Prioritize using a raw memory record; None keeps declared order."""
    if record is None:
        return list(candidates), []
    order, moved = prioritize(candidates, parse_failed_agents(record))
    if moved:
        logger.info("Reprioritized previously failed agents: %s", ", ".join(moved))
    return order, moved
