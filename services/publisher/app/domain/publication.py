"""GitHub Pages activation and reachability checks."""
from __future__ import annotations

import httpx
import structlog

from ..config import PublisherSettings, get_settings
from .errors import RemoteStoreError
from .github_client import GitHubClient
from .types import ProjectRef

logger = structlog.get_logger(__name__)


class PublicationActivator:
    def __init__(self, client: GitHubClient, settings: PublisherSettings | None = None) -> None:
        self._client = client
        self._settings = settings or get_settings()

    async def activate(self, ref: ProjectRef) -> str:
        """Enable Pages for ``ref`` and return the URL it will be served from.

        Pages may already be enabled by an earlier run, so failures only log.
        """
        github = self._settings.github
        try:
            await self._client.enable_pages(ref, branch=github.pages_branch, path=github.pages_path)
            logger.info("pages.enabled", repo=ref.name)
        except RemoteStoreError as exc:
            logger.warning("pages.enable_failed", repo=ref.name, status_code=exc.status_code, error=str(exc))
        return ref.pages_url


class ReachabilityProbe:
    """``GET url`` and report whether it answered 200."""

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None, timeout: float = 10.0) -> None:
        self._transport = transport
        self._timeout = timeout

    async def __call__(self, url: str) -> bool:
        async with httpx.AsyncClient(transport=self._transport, follow_redirects=True) as client:
            response = await client.get(url, timeout=self._timeout)
        return response.status_code == 200


__all__ = ["PublicationActivator", "ReachabilityProbe"]
