import hashlib
import os

os.environ.setdefault("PUBLISHER_SECURITY__SHARED_SECRET", "test-secret")
os.environ.setdefault("PUBLISHER_GITHUB__OWNER", "octo")
os.environ.setdefault("PUBLISHER_GENERATION__API_KEY", "test-key")

import pytest  # noqa: E402

from services.publisher.app.config import GitHubSettings, PipelineTuning, PublisherSettings  # noqa: E402
from services.publisher.app.domain.errors import ConflictError, NotFoundError, RemoteStoreError  # noqa: E402
from services.publisher.app.domain.synchronizer import git_blob_sha  # noqa: E402


class FakeGitHub:
    """In-memory stand-in for GitHubClient with GitHub's sha semantics."""

    def __init__(self, owner: str = "octo") -> None:
        self.owner = owner
        self.repos: dict[str, dict] = {}
        self.created: list[str] = []
        self.writes: list[tuple[str, str, str | None]] = []
        self.pages_calls: list[tuple[str, str, str]] = []
        self.fail_writes: set[str] = set()
        self.fail_repo_lookup: Exception | None = None
        self.fail_pages: Exception | None = None

    def files(self, name: str) -> dict[str, str]:
        return {path: entry["content"] for path, entry in self.repos[name]["files"].items()}

    async def get_repository(self, ref):
        if self.fail_repo_lookup is not None:
            raise self.fail_repo_lookup
        if ref.name not in self.repos:
            raise NotFoundError("Not Found", status_code=404)
        return {"name": ref.name, "html_url": ref.repo_url}

    async def create_repository(self, ref, description, homepage):
        self.created.append(ref.name)
        self.repos[ref.name] = {"files": {}, "commits": [], "description": description, "homepage": homepage}
        return {"name": ref.name}

    async def get_file(self, ref, file_path):
        entry = self.repos[ref.name]["files"].get(file_path)
        if entry is None:
            return None
        return {"path": file_path, "sha": entry["sha"]}

    async def put_file(self, ref, file_path, content, message, sha=None):
        if file_path in self.fail_writes:
            raise RemoteStoreError("boom", status_code=500)
        repo = self.repos[ref.name]
        current = repo["files"].get(file_path)
        if current is not None and current["sha"] != sha:
            raise ConflictError(f"{file_path} does not match {sha}", status_code=409)
        self.writes.append((file_path, message, sha))
        repo["files"][file_path] = {"content": content, "sha": git_blob_sha(content)}
        commit = hashlib.sha1(f"{ref.name}:{len(repo['commits'])}:{file_path}".encode()).hexdigest()
        repo["commits"].append(commit)
        return {"commit": {"sha": commit}}

    async def enable_pages(self, ref, branch, path):
        self.pages_calls.append((ref.name, branch, path))
        if self.fail_pages is not None:
            raise self.fail_pages
        return {"html_url": ref.pages_url}

    async def latest_commit_sha(self, ref):
        commits = self.repos[ref.name]["commits"]
        return commits[-1] if commits else None


class FakeGenerator:
    def __init__(self, *responses) -> None:
        self.responses = list(responses)
        self.prompts: list[str] = []

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def settings() -> PublisherSettings:
    return PublisherSettings(
        github=GitHubSettings(owner="octo", token="gh-token", api_url="https://api.github.test"),
        tuning=PipelineTuning(),
    )


@pytest.fixture
def fake_github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()
