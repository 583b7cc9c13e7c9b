"""Fixed-interval polling loop shared by every provider family."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Mapping, Protocol

from mediagen.errors import PollTransportError
from mediagen.models import (
    CanonicalStatus,
    FailureKind,
    GenerationTask,
    PollEvent,
    PollPolicy,
)
from mediagen.providers.base import ProviderAdapter

logger = logging.getLogger(__name__)

EventCallback = Callable[[PollEvent], None]
Sleep = Callable[[float], Awaitable[Any]]


class StatusFetcher(Protocol):
    async def fetch_status(self, adapter: ProviderAdapter, remote_task_id: str) -> Mapping[str, Any]:
        ...


async def poll(
    task: GenerationTask,
    adapter: ProviderAdapter,
    client: StatusFetcher,
    policy: PollPolicy,
    *,
    on_event: EventCallback | None = None,
    sleep: Sleep = asyncio.sleep,
) -> GenerationTask:
    """Poll a submitted task until it is terminal and return it.

    Each cycle sleeps ``policy.interval``, fetches status once and runs the
    adapter's normalizer. Every cycle counts toward ``task.attempts``,
    including cycles whose request failed at the transport level; those
    are treated as still in flight. The loop makes at most
    ``policy.max_attempts`` status calls.
    """
    if task.remote_task_id is None:
        raise ValueError(f"Task {task.id} has no remote task id to poll")

    while not task.is_terminal:
        await sleep(policy.interval)
        attempt = task.record_attempt()
        transient_error = None

        try:
            payload = await client.fetch_status(adapter, task.remote_task_id)
        except PollTransportError as exc:
            transient_error = str(exc)
            logger.warning(
                "Task %s (%s): status request failed on attempt %d/%d: %s",
                task.id, adapter.family, attempt, policy.max_attempts, exc,
            )
            status = CanonicalStatus.PENDING
        else:
            normalized = adapter.normalize(payload)
            status = normalized.canonical_status
            logger.debug(
                "Task %s (%s): attempt %d/%d status=%s",
                task.id, adapter.family, attempt, policy.max_attempts, status.value,
            )
            if status is CanonicalStatus.SUCCEEDED:
                result_url = adapter.extract(payload)
                if result_url:
                    task.succeed(result_url)
                else:
                    task.fail(
                        f"{adapter.family} reported success but no result URL was found",
                        FailureKind.RESULT_URL_MISSING,
                    )
            elif status is CanonicalStatus.FAILED:
                task.fail(normalized.error_detail or f"{adapter.family} reported failure")

        if not task.is_terminal:
            task.mark_progress(status)
            if attempt >= policy.max_attempts:
                task.time_out(f"exceeded {policy.max_attempts} attempts")

        if on_event is not None:
            on_event(PollEvent(
                task_id=task.id,
                family=adapter.family,
                remote_task_id=task.remote_task_id,
                attempt=attempt,
                max_attempts=policy.max_attempts,
                canonical_status=task.canonical_status,
                transient_error=transient_error,
            ))

    if task.is_success:
        logger.info("Task %s succeeded after %d attempts: %s", task.id, task.attempts, task.result_url)
    else:
        logger.info(
            "Task %s ended %s after %d attempts: %s",
            task.id, task.canonical_status.value, task.attempts, task.error_detail,
        )
    return task
