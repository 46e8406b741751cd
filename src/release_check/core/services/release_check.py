"""Release check orchestration: fan-out, compare, fan-in.

`dispatch` starts one `compare` task per instance; every task writes exactly
one `CheckResult` into a shared `ResultStream`. A supervisor task joins all of
them and closes the stream, which is what ends the `aggregate` drain loop.
Results arrive in completion order, not submission order.
"""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, Sequence

from release_check.adapters.status_api import SalesforceStatusFetcher
from release_check.core.config import CheckConfig
from release_check.core.domain.models import CheckOutcome, CheckResult, CheckSummary
from release_check.core.errors import StatusFetchError
from release_check.core.interfaces.fetcher import StatusFetcher

log = logging.getLogger(__name__)

_CLOSED = object()


class ResultStream:
    """Bounded, single-pass stream of results with many writers and one reader."""

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        # One extra slot so close() never waits for the reader.
        self._queue: asyncio.Queue[object] = asyncio.Queue(maxsize=capacity + 1)
        self._closed = False
        self._consumed = False
        self._supervisor: asyncio.Task[None] | None = None

    @property
    def closed(self) -> bool:
        return self._closed

    async def put(self, result: CheckResult) -> None:
        if self._closed:
            raise RuntimeError("result stream is closed")
        await self._queue.put(result)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_CLOSED)

    def __aiter__(self) -> AsyncIterator[CheckResult]:
        if self._consumed:
            raise RuntimeError("result stream can only be drained once")
        self._consumed = True
        return self._drain()

    async def _drain(self) -> AsyncIterator[CheckResult]:
        while True:
            item = await self._queue.get()
            if item is _CLOSED:
                return
            yield item  # type: ignore[misc]


async def compare(
    instance: str,
    expected: str,
    fetcher: StatusFetcher,
    stream: ResultStream,
    *,
    semaphore: asyncio.Semaphore | None = None,
) -> None:
    """Check one instance and write exactly one result into `stream`."""

    try:
        if semaphore is None:
            actual = await fetcher.fetch(instance)
        else:
            async with semaphore:
                actual = await fetcher.fetch(instance)
    except StatusFetchError as exc:
        result = CheckResult.failed(instance=instance, expected=expected, reason=str(exc))
    except Exception as exc:
        reason = str(exc) or exc.__class__.__name__
        result = CheckResult.failed(instance=instance, expected=expected, reason=reason)
    else:
        result = CheckResult.from_version(instance=instance, expected=expected, actual=actual)

    await stream.put(result)


async def _close_when_done(tasks: Sequence[asyncio.Task[None]], stream: ResultStream) -> None:
    try:
        await asyncio.gather(*tasks, return_exceptions=True)
    finally:
        stream.close()


def dispatch(
    instances: Sequence[str],
    expected: str,
    fetcher: StatusFetcher,
    *,
    max_concurrency: int | None = None,
) -> ResultStream:
    """Start one comparison per instance and return the stream they write to.

    Must be called from a running event loop. The stream is closed by a
    supervisor task once every comparison has finished.
    """

    if not instances:
        raise ValueError("at least one instance is required")

    stream = ResultStream(capacity=len(instances))
    semaphore = asyncio.Semaphore(max_concurrency) if max_concurrency else None

    tasks = [
        asyncio.create_task(
            compare(instance, expected, fetcher, stream, semaphore=semaphore),
            name=f"compare-{instance}",
        )
        for instance in instances
    ]
    stream._supervisor = asyncio.create_task(
        _close_when_done(tasks, stream),
        name="close-results",
    )
    return stream


async def collect(stream: ResultStream, *, fail_on_error: bool = False) -> CheckSummary:
    """Drain `stream`, log every result and build the run summary."""

    counts = {outcome: 0 for outcome in CheckOutcome}
    async for result in stream:
        log.debug(result.message)
        counts[result.outcome] += 1

    healthy = counts[CheckOutcome.MISMATCHED] == 0
    if fail_on_error and counts[CheckOutcome.FETCH_FAILED]:
        healthy = False

    return CheckSummary(
        total=sum(counts.values()),
        matched=counts[CheckOutcome.MATCHED],
        mismatched=counts[CheckOutcome.MISMATCHED],
        failed=counts[CheckOutcome.FETCH_FAILED],
        healthy=healthy,
    )


async def aggregate(stream: ResultStream, *, fail_on_error: bool = False) -> bool:
    """Return True when no result flips the verdict.

    Mismatches always do. Fetch failures only do with `fail_on_error`.
    """

    summary = await collect(stream, fail_on_error=fail_on_error)
    return summary.healthy


async def _check_with(fetcher: StatusFetcher, config: CheckConfig) -> CheckSummary:
    settings = config.settings
    log.debug(
        "Checking %d instance(s) against release %s",
        len(config.instances),
        config.expected_version,
    )
    stream = dispatch(
        config.instances,
        config.expected_version,
        fetcher,
        max_concurrency=settings.max_concurrency,
    )
    return await collect(stream, fail_on_error=settings.fail_on_error)


async def run_check(config: CheckConfig, *, fetcher: StatusFetcher | None = None) -> CheckSummary:
    """Run one full check cycle for `config`.

    When no fetcher is given, a `SalesforceStatusFetcher` is opened for the
    duration of the run.
    """

    if fetcher is not None:
        return await _check_with(fetcher, config)

    async with SalesforceStatusFetcher(config.settings) as owned:
        return await _check_with(owned, config)
