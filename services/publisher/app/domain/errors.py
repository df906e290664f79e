"""Exception hierarchy for the publisher service."""
from __future__ import annotations


class PublisherError(RuntimeError):
    """Base class for faults raised inside a pipeline run."""


class GenerationError(PublisherError):
    """The generation service failed or returned an unusable response."""


class RemoteStoreError(PublisherError):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(RemoteStoreError):
    pass


class ConflictError(RemoteStoreError):
    """A write carried a stale or missing revision token."""


class RunTimeoutError(PublisherError):
    pass


__all__ = [
    "ConflictError",
    "GenerationError",
    "NotFoundError",
    "PublisherError",
    "RemoteStoreError",
    "RunTimeoutError",
]
