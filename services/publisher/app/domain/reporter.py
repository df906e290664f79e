"""Deliver run outcomes to the caller's evaluation endpoint."""
from __future__ import annotations

import asyncio

import httpx
import structlog

from ..config import PublisherSettings, get_settings
from .resilience import Sleep, retry_with_backoff
from .types import Outcome

logger = structlog.get_logger(__name__)


class ResultReporter:
    def __init__(
        self,
        settings: PublisherSettings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._settings = settings or get_settings()
        self._transport = transport
        self._sleep = sleep

    async def report(self, outcome: Outcome, callback_url: str) -> bool:
        """POST ``outcome`` with exponential backoff; ``False`` once attempts run out."""
        tuning = self._settings.tuning
        payload = outcome.to_payload()

        async def _post() -> httpx.Response:
            async with httpx.AsyncClient(transport=self._transport) as client:
                return await client.post(
                    callback_url,
                    json=payload,
                    headers={"Content-Type": "application/json"},
                    timeout=30.0,
                )

        result = await retry_with_backoff(
            _post,
            max_attempts=tuning.report_max_attempts,
            initial_delay=tuning.report_initial_delay_s,
            multiplier=tuning.report_backoff_multiplier,
            is_success=lambda response: response.status_code == 200,
            sleep=self._sleep,
            label="report",
        )
        if result.succeeded:
            logger.info("report.delivered", task=outcome.task, round=outcome.round, attempts=result.attempts)
        else:
            logger.error("report.failed", task=outcome.task, round=outcome.round, callback_url=callback_url)
        return result.succeeded


__all__ = ["ResultReporter"]
