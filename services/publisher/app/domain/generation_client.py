"""Client for an OpenAI-compatible chat completion endpoint."""
from __future__ import annotations

import time
from typing import Any, Dict

import httpx
import structlog

from ..config import PublisherSettings, get_settings
from .errors import GenerationError

logger = structlog.get_logger(__name__)


class GenerationClient:
    """Single-shot prompt to text wrapper around ``/chat/completions``."""

    def __init__(
        self,
        settings: PublisherSettings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._transport = transport

    async def complete(self, prompt: str) -> str:
        settings = self._settings.generation
        if not settings.api_key:
            raise GenerationError("Generation service API key is not configured")
        url = settings.base_url.rstrip("/") + "/chat/completions"
        payload = {
            "model": settings.model,
            "messages": [{"role": "user", "content": prompt}],
        }
        headers = {
            "Authorization": f"Bearer {settings.api_key}",
            "Content-Type": "application/json",
        }

        start = time.perf_counter()
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.post(url, headers=headers, json=payload, timeout=settings.timeout_s)
        except httpx.HTTPError as exc:
            raise GenerationError(f"Generation request failed: {exc}") from exc
        latency_ms = int((time.perf_counter() - start) * 1000)
        logger.info("generation.call", model=settings.model, latency_ms=latency_ms, status_code=response.status_code)
        if response.status_code >= 400:
            raise GenerationError(f"Generation service returned HTTP {response.status_code}: {response.text[:800]}")

        try:
            data: Dict[str, Any] = response.json()
        except ValueError as exc:
            raise GenerationError("Generation service returned a non-JSON body") from exc
        choices = data.get("choices") or []
        message: Dict[str, Any] | None = choices[0].get("message") if choices else None
        content = message.get("content") if message else None
        if not isinstance(content, str):
            raise GenerationError("Generation response missing message content")
        return content


__all__ = ["GenerationClient"]
