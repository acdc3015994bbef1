"""Cross-run memory of module validation outcomes."""

from ci_orchestrator.memory.record import (
    MemoryRecord,
    parse_failed_agents,
    parse_record,
)
from ci_orchestrator.memory.store import (
    FileMemoryStore,
    InMemoryStore,
    MemoryStore,
    S3MemoryStore,
    create_store,
)

__all__ = [
    "FileMemoryStore",
    "InMemoryStore",
    "MemoryRecord",
    "MemoryStore",
    "S3MemoryStore",
    "create_store",
    "parse_failed_agents",
    "parse_record",
]
