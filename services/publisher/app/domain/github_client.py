"""Thin async wrapper over the GitHub REST endpoints used for publishing."""
from __future__ import annotations

import base64
from typing import Any
from urllib.parse import quote

import httpx
import structlog

from ..config import PublisherSettings, get_settings
from .errors import ConflictError, NotFoundError, RemoteStoreError
from .types import ProjectRef

logger = structlog.get_logger(__name__)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:800]
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.text[:800]


def _json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        request = response.request
        raise RemoteStoreError(
            f"{request.method} {request.url.path} returned non-JSON body",
            status_code=response.status_code,
        ) from exc


class GitHubClient:
    """Repository, contents, Pages and commits calls against one account.

    Every call opens its own HTTP client, so one instance can be shared by
    concurrent pipeline runs.
    """

    def __init__(
        self,
        settings: PublisherSettings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._transport = transport

    @property
    def owner(self) -> str:
        return self._settings.github.owner

    def _headers(self) -> dict[str, str]:
        settings = self._settings.github
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": settings.api_version,
            "User-Agent": "publisher",
        }
        if settings.token:
            headers["Authorization"] = f"Bearer {settings.token}"
        return headers

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        settings = self._settings.github
        try:
            async with httpx.AsyncClient(
                base_url=settings.api_url,
                headers=self._headers(),
                timeout=settings.timeout_s,
                transport=self._transport,
            ) as client:
                response = await client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise RemoteStoreError(f"{method} {path} failed: {exc}") from exc
        logger.debug("github.call", method=method, path=path, status_code=response.status_code)
        if response.status_code < 400:
            return response
        message = _error_message(response)
        if response.status_code == 404:
            raise NotFoundError(message, status_code=404)
        if response.status_code == 409 or (response.status_code == 422 and "sha" in message.lower()):
            raise ConflictError(message, status_code=response.status_code)
        raise RemoteStoreError(f"{method} {path} returned {response.status_code}: {message}", status_code=response.status_code)

    @staticmethod
    def _contents_path(ref: ProjectRef, file_path: str) -> str:
        return f"/repos/{ref.owner}/{ref.name}/contents/{quote(file_path, safe='/')}"

    async def get_repository(self, ref: ProjectRef) -> dict[str, Any]:
        response = await self._request("GET", f"/repos/{ref.owner}/{ref.name}")
        return _json(response)

    async def create_repository(self, ref: ProjectRef, description: str, homepage: str) -> dict[str, Any]:
        response = await self._request(
            "POST",
            "/user/repos",
            json={
                "name": ref.name,
                "private": False,
                "has_pages": True,
                "description": description,
                "homepage": homepage,
            },
        )
        return _json(response)

    async def get_file(self, ref: ProjectRef, file_path: str) -> dict[str, Any] | None:
        """Return the contents entry for ``file_path`` or ``None`` when absent."""
        try:
            response = await self._request("GET", self._contents_path(ref, file_path))
        except NotFoundError:
            return None
        data = _json(response)
        if isinstance(data, list):
            # A directory listing; there is no file at this path.
            return None
        return data

    async def put_file(
        self,
        ref: ProjectRef,
        file_path: str,
        content: str,
        message: str,
        sha: str | None = None,
    ) -> dict[str, Any]:
        body: dict[str, Any] = {
            "message": message,
            "content": base64.b64encode(content.encode("utf-8")).decode("ascii"),
        }
        if sha:
            body["sha"] = sha
        response = await self._request("PUT", self._contents_path(ref, file_path), json=body)
        return _json(response)

    async def enable_pages(self, ref: ProjectRef, branch: str, path: str) -> dict[str, Any]:
        response = await self._request(
            "POST",
            f"/repos/{ref.owner}/{ref.name}/pages",
            json={"source": {"branch": branch, "path": path}},
        )
        if not response.content:
            return {}
        return _json(response)

    async def latest_commit_sha(self, ref: ProjectRef) -> str | None:
        response = await self._request("GET", f"/repos/{ref.owner}/{ref.name}/commits", params={"per_page": 1})
        commits = _json(response)
        if isinstance(commits, list) and commits:
            return commits[0].get("sha")
        return None


__all__ = ["GitHubClient"]
