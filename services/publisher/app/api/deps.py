"""FastAPI dependency helpers."""
from __future__ import annotations

from ..config import get_settings
from ..domain.dispatcher import TaskDispatcher
from ..domain.generation_client import GenerationClient
from ..domain.github_client import GitHubClient
from ..domain.pipeline import TaskPipeline

_dispatcher: TaskDispatcher | None = None


def get_dispatcher() -> TaskDispatcher:
    """Return the process-wide dispatcher, building its clients on first use."""
    global _dispatcher
    if _dispatcher is None:
        settings = get_settings()
        pipeline = TaskPipeline(
            generator=GenerationClient(settings),
            github=GitHubClient(settings),
            settings=settings,
        )
        _dispatcher = TaskDispatcher(pipeline)
    return _dispatcher


__all__ = ["get_dispatcher"]
