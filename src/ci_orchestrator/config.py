"""Environment-driven orchestrator settings."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Any

MEMORY_CONTEXT = "orchestrator"


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class OrchestratorConfig:
    """Settings for one orchestrator run.

    Attributes:
        timeout_seconds: Per-agent deadline (0 or less disables it).
        memory_backend: ``file``, ``s3`` or ``memory``.
        memory_dir: Directory for the file backend.
        memory_bucket: Bucket for the S3 backend.
        memory_context: Namespace records are stored under.
        review_webhook_url: Webhook for human review escalation, if any.
        project_root: Working directory for command agents.
        run_global_agent: Whether the global agent runs before the modules.
    """

    timeout_seconds: float = 300.0
    memory_backend: str = "file"
    memory_dir: str = ".orchestrator-memory"
    memory_bucket: str = "ci-orchestrator-memory"
    memory_context: str = MEMORY_CONTEXT
    review_webhook_url: str | None = None
    project_root: str = "."
    run_global_agent: bool = True

    @classmethod
    def from_env(cls) -> OrchestratorConfig:
        """Read settings from ``ORCHESTRATOR_*`` environment variables."""
        return cls(
            timeout_seconds=float(os.environ.get("ORCHESTRATOR_TIMEOUT_SECONDS", "300")),
            memory_backend=os.environ.get("ORCHESTRATOR_MEMORY_BACKEND", "file"),
            memory_dir=os.environ.get("ORCHESTRATOR_MEMORY_DIR", ".orchestrator-memory"),
            memory_bucket=os.environ.get(
                "ORCHESTRATOR_MEMORY_BUCKET", "ci-orchestrator-memory"
            ),
            review_webhook_url=os.environ.get("ORCHESTRATOR_REVIEW_WEBHOOK_URL") or None,
            project_root=os.environ.get("ORCHESTRATOR_PROJECT_ROOT", "."),
            run_global_agent=_env_bool("ORCHESTRATOR_GLOBAL_AGENT_ENABLED", True),
        )

    @property
    def deadline(self) -> float | None:
        return self.timeout_seconds if self.timeout_seconds > 0 else None

    def with_overrides(self, **overrides: Any) -> OrchestratorConfig:
        """Return a copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})
