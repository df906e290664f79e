"""Create-or-update synchronization of an artifact into a GitHub repository."""
from __future__ import annotations

import hashlib

import structlog

from .errors import NotFoundError, RemoteStoreError
from .github_client import GitHubClient
from .types import Artifact, FileSyncResult, GeneratedFile, ProjectRef, StepStatus, SyncAction, SyncResult

logger = structlog.get_logger(__name__)

UNKNOWN_REVISION = "unknown"


def git_blob_sha(content: str) -> str:
    """SHA GitHub reports for a file holding ``content``."""
    data = content.encode("utf-8")
    return hashlib.sha1(b"blob %d\0" % len(data) + data).hexdigest()


class RepoSynchronizer:
    """Make the remote repository hold the artifact's files.

    The repository is looked up before it is created, and a file is only
    written when its remote blob differs, so re-running with the same project
    reference and artifact is a no-op.
    """

    def __init__(self, client: GitHubClient) -> None:
        self._client = client

    async def sync(self, ref: ProjectRef, artifact: Artifact, description: str = "") -> SyncResult:
        await self._resolve_repository(ref, description)
        results = [await self._sync_file(ref, item) for item in artifact]
        revision = await self._latest_revision(ref)
        written = sum(1 for r in results if r.status is StepStatus.ok and r.action is not SyncAction.unchanged)
        logger.info(
            "sync.completed",
            repo=ref.name,
            files=len(results),
            written=written,
            skipped=len([r for r in results if r.status is not StepStatus.ok]),
            revision=revision,
        )
        return SyncResult(project_url=ref.repo_url, latest_revision=revision, files=results)

    async def _resolve_repository(self, ref: ProjectRef, description: str) -> None:
        try:
            await self._client.get_repository(ref)
            logger.info("sync.repo.exists", repo=ref.name)
            return
        except NotFoundError:
            pass
        logger.info("sync.repo.creating", repo=ref.name)
        await self._client.create_repository(ref, description=description, homepage=ref.pages_url)

    async def _sync_file(self, ref: ProjectRef, item: GeneratedFile) -> FileSyncResult:
        sha: str | None = None
        try:
            existing = await self._client.get_file(ref, item.path)
        except RemoteStoreError as exc:
            # Unknown state; attempt a creation and let the store reject it if needed.
            logger.warning("sync.file.lookup_failed", repo=ref.name, path=item.path, error=str(exc))
            existing = None
        if existing is not None:
            sha = existing.get("sha")
            if sha and sha == git_blob_sha(item.content):
                logger.info("sync.file.unchanged", repo=ref.name, path=item.path)
                return FileSyncResult(path=item.path, action=SyncAction.unchanged)

        action = SyncAction.update if sha else SyncAction.create
        message = f"Update {item.path}" if sha else f"Add {item.path}"
        try:
            await self._client.put_file(ref, item.path, item.content, message=message, sha=sha)
        except RemoteStoreError as exc:
            logger.warning(
                "sync.file.skipped",
                repo=ref.name,
                path=item.path,
                action=action.value,
                status_code=exc.status_code,
                error=str(exc),
            )
            return FileSyncResult(path=item.path, action=action, status=StepStatus.recoverable, error=str(exc))
        logger.info("sync.file.written", repo=ref.name, path=item.path, action=action.value)
        return FileSyncResult(path=item.path, action=action)

    async def _latest_revision(self, ref: ProjectRef) -> str:
        try:
            sha = await self._client.latest_commit_sha(ref)
        except RemoteStoreError as exc:
            logger.warning("sync.revision.unavailable", repo=ref.name, error=str(exc))
            return UNKNOWN_REVISION
        return sha or UNKNOWN_REVISION


__all__ = ["RepoSynchronizer", "git_blob_sha", "UNKNOWN_REVISION"]
