"""Bounded retry and polling helpers.

Neither helper raises on behalf of the wrapped callable: failures are logged
and folded into the returned result so callers can decide how to proceed.
"""
from __future__ import annotations

import asyncio
import math
from typing import Any, Awaitable, Callable, TypeVar

import structlog

from .types import PollResult, RetryResult

logger = structlog.get_logger(__name__)

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[Any]]


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    *,
    max_attempts: int,
    initial_delay: float,
    multiplier: float,
    is_success: Callable[[T], bool] = lambda _: True,
    sleep: Sleep = asyncio.sleep,
    label: str = "operation",
) -> RetryResult:
    result: Any = None
    for attempt in range(1, max_attempts + 1):
        try:
            result = await operation()
        except Exception as exc:
            logger.warning("retry.attempt_failed", label=label, attempt=attempt, error=str(exc))
        else:
            if is_success(result):
                return RetryResult(succeeded=True, attempts=attempt, result=result)
            logger.warning("retry.attempt_rejected", label=label, attempt=attempt)
        if attempt < max_attempts:
            delay = initial_delay * multiplier ** (attempt - 1)
            logger.info("retry.waiting", label=label, attempt=attempt, delay_s=delay)
            await sleep(delay)
    logger.error("retry.exhausted", label=label, attempts=max_attempts)
    return RetryResult(succeeded=False, attempts=max_attempts, result=result)


async def poll_until_ready(
    check: Callable[[], Awaitable[bool]],
    *,
    max_duration: float,
    interval: float,
    sleep: Sleep = asyncio.sleep,
    label: str = "probe",
) -> PollResult:
    # Stop once checks * interval reaches max_duration; the epsilon absorbs float error.
    max_probes = max(1, math.ceil(max_duration / interval - 1e-9))
    for probe in range(1, max_probes + 1):
        try:
            ready = bool(await check())
        except Exception as exc:
            logger.debug("poll.probe_failed", label=label, probe=probe, error=str(exc))
            ready = False
        if ready:
            logger.info("poll.ready", label=label, probes=probe)
            return PollResult(ready=True, probes=probe)
        if probe < max_probes:
            await sleep(interval)
    logger.warning("poll.timed_out", label=label, probes=max_probes, max_duration_s=max_duration)
    return PollResult(ready=False, probes=max_probes)


__all__ = ["poll_until_ready", "retry_with_backoff"]
