"""Human review escalation hooks for modules with failing agents."""

from __future__ import annotations

import logging
import os
from typing import Any, Protocol

import httpx

logger = logging.getLogger(__name__)


class HumanReviewEscalator(Protocol):
    """Notification hook called once per module that has failing agents."""

    async def escalate(self, module: str, issues: list[str]) -> None:
        ...


class LoggingEscalator:
    """Records issues in the log for whoever reads the CI output."""

    async def escalate(self, module: str, issues: list[str]) -> None:
        logger.warning(
            "Human review requested for %s (%d issues):\n  %s",
            module,
            len(issues),
            "\n  ".join(issues),
        )


class WebhookEscalator:
    """Posts issues as JSON to a review webhook (ticketing, chat, ...)."""

    def __init__(
        self,
        url: str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._url = url or os.environ.get("ORCHESTRATOR_REVIEW_WEBHOOK_URL", "")
        if not self._url:
            raise ValueError("A webhook URL is required for webhook escalation")
        self._client = client
        self._timeout = timeout

    @property
    def url(self) -> str:
        return self._url

    def _payload(self, module: str, issues: list[str]) -> dict[str, Any]:
        return {
            "module": module,
            "issue_count": len(issues),
            "issues": issues,
            "text": f"Validation failures in {module}:\n" + "\n".join(issues),
        }

    async def escalate(self, module: str, issues: list[str]) -> None:
        payload = self._payload(module, issues)
        if self._client is not None:
            resp = await self._client.post(self._url, json=payload)
        else:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(self._url, json=payload)
        resp.raise_for_status()
        logger.info("Escalated %d issues for %s to review webhook", len(issues), module)


def create_escalator(webhook_url: str | None = None) -> HumanReviewEscalator:
    """Use the webhook when a URL is configured, logging otherwise."""
    url = webhook_url or os.environ.get("ORCHESTRATOR_REVIEW_WEBHOOK_URL")
    if url:
        return WebhookEscalator(url)
    return LoggingEscalator()
