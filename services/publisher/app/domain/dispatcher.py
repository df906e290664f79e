"""Detached execution of accepted tasks."""
from __future__ import annotations

import asyncio

import structlog

from .pipeline import TaskPipeline
from .types import PipelineRun, Task

logger = structlog.get_logger(__name__)


class TaskDispatcher:
    """Run each submitted task as its own asyncio task, outliving the request."""

    def __init__(self, pipeline: TaskPipeline) -> None:
        self._pipeline = pipeline
        self._in_flight: set[asyncio.Task[PipelineRun]] = set()

    @property
    def in_flight(self) -> int:
        return len(self._in_flight)

    def submit(self, task: Task) -> asyncio.Task[PipelineRun]:
        job = asyncio.create_task(self._pipeline.run(task), name=f"pipeline:{task.task}:{task.round}")
        self._in_flight.add(job)
        job.add_done_callback(self._finished)
        logger.info("dispatcher.submitted", task=task.task, round=task.round, in_flight=len(self._in_flight))
        return job

    def _finished(self, job: asyncio.Task[PipelineRun]) -> None:
        self._in_flight.discard(job)
        if job.cancelled():
            logger.warning("dispatcher.cancelled", name=job.get_name())
            return
        exc = job.exception()
        if exc is not None:
            logger.error("dispatcher.crashed", name=job.get_name(), error=str(exc))
            return
        run = job.result()
        logger.info("dispatcher.finished", task=run.task.task, round=run.task.round, state=run.state.value)

    async def drain(self) -> list[PipelineRun]:
        """Wait for every in-flight run to finish."""
        if not self._in_flight:
            return []
        results = await asyncio.gather(*list(self._in_flight), return_exceptions=True)
        return [item for item in results if isinstance(item, PipelineRun)]


__all__ = ["TaskDispatcher"]
