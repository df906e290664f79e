"""Domain-level dataclasses for publishing generated projects."""
from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator

_UNSAFE_REF_CHARS = re.compile(r"[^a-z0-9-]")


@dataclass(frozen=True)
class Attachment:
    name: str
    url: str


@dataclass(frozen=True)
class Task:
    """One accepted generation request."""

    brief: str
    email: str
    task: str
    round: int
    nonce: str
    evaluation_url: str
    attachments: tuple[Attachment, ...] = ()
    checks: tuple[str, ...] = ()


@dataclass(frozen=True)
class GeneratedFile:
    path: str
    content: str


class Artifact:
    """Ordered set of files keyed by path.

    Adding a file whose path is already present replaces its content in place,
    so insertion order (and therefore commit order) is that of first appearance.
    """

    def __init__(self, files: Iterable[GeneratedFile] = ()) -> None:
        self._files: dict[str, GeneratedFile] = {}
        for item in files:
            self.add(item)

    def add(self, item: GeneratedFile) -> None:
        self._files[item.path] = item

    def paths(self) -> list[str]:
        return list(self._files)

    def get(self, path: str) -> GeneratedFile | None:
        return self._files.get(path)

    def __iter__(self) -> Iterator[GeneratedFile]:
        return iter(list(self._files.values()))

    def __len__(self) -> int:
        return len(self._files)

    def __contains__(self, path: object) -> bool:
        return path in self._files


@dataclass(frozen=True)
class ProjectRef:
    owner: str
    name: str

    @classmethod
    def for_task(cls, owner: str, task: Task) -> "ProjectRef":
        return cls(owner=owner, name=project_name(task.task, task.nonce))

    @property
    def repo_url(self) -> str:
        return f"https://github.com/{self.owner}/{self.name}"

    @property
    def pages_url(self) -> str:
        return f"https://{self.owner}.github.io/{self.name}/"


def project_name(task_id: str, nonce: str) -> str:
    return _UNSAFE_REF_CHARS.sub("-", f"{task_id}-{nonce}".lower())


class StepStatus(enum.Enum):
    ok = "ok"
    recoverable = "recoverable"
    unrecoverable = "unrecoverable"


class SyncAction(enum.Enum):
    create = "create"
    update = "update"
    unchanged = "unchanged"


@dataclass
class FileSyncResult:
    path: str
    action: SyncAction
    status: StepStatus = StepStatus.ok
    error: str | None = None


@dataclass
class SyncResult:
    project_url: str
    latest_revision: str
    files: list[FileSyncResult] = field(default_factory=list)

    @property
    def skipped(self) -> list[str]:
        return [item.path for item in self.files if item.status is not StepStatus.ok]


@dataclass(frozen=True)
class Outcome:
    email: str
    task: str
    round: int
    nonce: str
    repo_url: str
    commit_sha: str
    pages_url: str
    status: str | None = None
    error: str | None = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "email": self.email,
            "task": self.task,
            "round": self.round,
            "nonce": self.nonce,
            "repo_url": self.repo_url,
            "commit_sha": self.commit_sha,
            "pages_url": self.pages_url,
        }
        if self.status is not None:
            payload["status"] = self.status
        if self.error is not None:
            payload["error"] = self.error
        return payload


class PipelineState(enum.Enum):
    accepted = "ACCEPTED"
    generating = "GENERATING"
    parsed = "PARSED"
    documenting = "DOCUMENTING"
    assembled = "ASSEMBLED"
    syncing = "SYNCING"
    activating = "ACTIVATING"
    polling = "POLLING"
    reporting = "REPORTING"
    done = "DONE"
    failed = "FAILED"


@dataclass
class PipelineRun:
    task: Task
    state: PipelineState = PipelineState.accepted
    history: list[PipelineState] = field(default_factory=lambda: [PipelineState.accepted])
    artifact: Artifact | None = None
    sync: SyncResult | None = None
    pages_ready: bool = False
    reported: bool = False
    outcome: Outcome | None = None
    error: str | None = None


@dataclass
class RetryResult:
    succeeded: bool
    attempts: int
    result: Any = None


@dataclass
class PollResult:
    ready: bool
    probes: int


__all__ = [
    "Artifact",
    "Attachment",
    "FileSyncResult",
    "GeneratedFile",
    "Outcome",
    "PipelineRun",
    "PipelineState",
    "PollResult",
    "ProjectRef",
    "RetryResult",
    "StepStatus",
    "SyncAction",
    "SyncResult",
    "Task",
    "project_name",
]
