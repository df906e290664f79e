"""Task pipeline orchestration."""
from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Awaitable, Callable

import structlog
from opentelemetry import trace

from ..config import PublisherSettings, get_settings
from .errors import RunTimeoutError
from .generation_client import GenerationClient
from .github_client import GitHubClient
from .parser import parse_generated_files
from .prompts import build_app_prompt, build_license, build_readme_prompt, fallback_index
from .publication import PublicationActivator, ReachabilityProbe
from .reporter import ResultReporter
from .resilience import Sleep, poll_until_ready
from .synchronizer import RepoSynchronizer
from .types import Artifact, GeneratedFile, Outcome, PipelineRun, PipelineState, ProjectRef, Task

logger = structlog.get_logger(__name__)
tracer = trace.get_tracer(__name__)

README_PATH = "README.md"
LICENSE_PATH = "LICENSE"


class TaskPipeline:
    """Generate, publish and report one task.

    ``run`` never raises. Generation faults, repository resolution faults and
    the per-run deadline end the run in ``FAILED``; every other fault is
    logged and the run moves on to the next state.
    """

    def __init__(
        self,
        generator: GenerationClient,
        github: GitHubClient,
        settings: PublisherSettings | None = None,
        reporter: ResultReporter | None = None,
        probe: Callable[[str], Awaitable[bool]] | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._settings = settings or get_settings()
        self._generator = generator
        self._github = github
        self._synchronizer = RepoSynchronizer(github)
        self._activator = PublicationActivator(github, self._settings)
        self._reporter = reporter or ResultReporter(self._settings, sleep=sleep)
        self._probe = probe or ReachabilityProbe()
        self._sleep = sleep

    async def run(self, task: Task) -> PipelineRun:
        run = PipelineRun(task=task)
        log = logger.bind(task=task.task, round=task.round, nonce=task.nonce)
        tuning = self._settings.tuning
        with tracer.start_as_current_span("pipeline.run") as span:
            span.set_attribute("publisher.task", task.task)
            span.set_attribute("publisher.round", task.round)
            try:
                await asyncio.wait_for(self._execute(run, log), timeout=tuning.run_timeout_s)
            except asyncio.TimeoutError:
                self._fail(run, log, RunTimeoutError(f"Run exceeded {tuning.run_timeout_s}s"))
            except Exception as exc:
                self._fail(run, log, exc)
            span.set_attribute("publisher.state", run.state.value)
        if run.state is PipelineState.failed and tuning.report_failures:
            await self._report_failure(run)
        return run

    def _advance(self, run: PipelineRun, log: structlog.typing.FilteringBoundLogger, state: PipelineState) -> None:
        run.state = state
        run.history.append(state)
        trace.get_current_span().add_event("pipeline.state", {"state": state.value})
        log.info("pipeline.state", state=state.value)

    def _fail(self, run: PipelineRun, log: structlog.typing.FilteringBoundLogger, exc: BaseException) -> None:
        run.error = f"{type(exc).__name__}: {exc}"
        failed_in = run.state.value
        run.state = PipelineState.failed
        run.history.append(PipelineState.failed)
        log.error("pipeline.failed", failed_in=failed_in, error=run.error, exc_info=exc)

    async def _execute(self, run: PipelineRun, log: structlog.typing.FilteringBoundLogger) -> None:
        task = run.task
        tuning = self._settings.tuning

        self._advance(run, log, PipelineState.generating)
        raw_output = await self._generator.complete(build_app_prompt(task))
        files = parse_generated_files(raw_output)
        if not files:
            log.warning("pipeline.no_files_parsed", output_chars=len(raw_output))
            files = [fallback_index(raw_output)]
        self._advance(run, log, PipelineState.parsed)

        self._advance(run, log, PipelineState.documenting)
        artifact = Artifact(files)
        readme = await self._generator.complete(build_readme_prompt(task, artifact.paths()))
        artifact.add(GeneratedFile(path=README_PATH, content=readme))
        owner = self._settings.github.owner
        artifact.add(GeneratedFile(path=LICENSE_PATH, content=build_license(owner, datetime.now(timezone.utc).year)))
        run.artifact = artifact
        self._advance(run, log, PipelineState.assembled)

        self._advance(run, log, PipelineState.syncing)
        ref = ProjectRef.for_task(owner, task)
        run.sync = await self._synchronizer.sync(ref, artifact, description=f"Auto-generated repo for {task.task}")

        self._advance(run, log, PipelineState.activating)
        pages_url = await self._activator.activate(ref)

        self._advance(run, log, PipelineState.polling)
        poll = await poll_until_ready(
            lambda: self._probe(pages_url),
            max_duration=tuning.poll_max_duration_s,
            interval=tuning.poll_interval_s,
            sleep=self._sleep,
            label="pages",
        )
        run.pages_ready = poll.ready

        self._advance(run, log, PipelineState.reporting)
        run.outcome = Outcome(
            email=task.email,
            task=task.task,
            round=task.round,
            nonce=task.nonce,
            repo_url=run.sync.project_url,
            commit_sha=run.sync.latest_revision,
            pages_url=pages_url,
        )
        run.reported = await self._reporter.report(run.outcome, task.evaluation_url)

        self._advance(run, log, PipelineState.done)

    async def _report_failure(self, run: PipelineRun) -> None:
        task = run.task
        run.outcome = Outcome(
            email=task.email,
            task=task.task,
            round=task.round,
            nonce=task.nonce,
            repo_url="",
            commit_sha="",
            pages_url="",
            status="failed",
            error=run.error,
        )
        run.reported = await self._reporter.report(run.outcome, task.evaluation_url)


__all__ = ["TaskPipeline", "README_PATH", "LICENSE_PATH"]
