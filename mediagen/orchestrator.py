"""Single entry point: submit a generation request and poll it to completion.

The orchestrator owns no state shared between calls. Each ``run`` creates
its own ``GenerationTask`` and polling loop, so many generations can be
awaited concurrently on one event loop::

    async with Orchestrator.from_settings(load_settings()) as orchestrator:
        image, video = await asyncio.gather(
            orchestrator.generate(MediaKind.IMAGE, "flux-kontext-pro", UserInput("a fox")),
            orchestrator.generate(MediaKind.VIDEO, "veo3_fast", UserInput("a fox running")),
        )
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Any, Mapping

from mediagen.client import ProviderClient
from mediagen.config import Settings
from mediagen.errors import PollTimeout, ProviderFailure, ResultUrlMissing, SubmissionError
from mediagen.models import (
    DEFAULT_POLL_POLICIES,
    FailureKind,
    GenerationTask,
    MediaKind,
    NormalizedStatus,
    PollPolicy,
    UserInput,
)
from mediagen.polling import EventCallback, Sleep, poll
from mediagen.registry import DEFAULT_REGISTRY, AdapterRegistry

logger = logging.getLogger(__name__)


class Orchestrator:
    """Routes requests to provider adapters and drives them to a terminal state."""

    def __init__(
        self,
        client: ProviderClient,
        registry: AdapterRegistry = DEFAULT_REGISTRY,
        policies: Mapping[MediaKind, PollPolicy] | None = None,
        on_event: EventCallback | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.client = client
        self.registry = registry
        self.policies = dict(DEFAULT_POLL_POLICIES)
        if policies:
            self.policies.update(policies)
        self.on_event = on_event
        self._sleep = sleep

    @classmethod
    def from_settings(cls, settings: Settings, dry_run: bool = False, **kwargs: Any) -> Orchestrator:
        """Build an orchestrator with its own client from parsed settings."""
        client = ProviderClient(settings, dry_run=dry_run)
        return cls(client, policies=settings.polling, **kwargs)

    async def __aenter__(self) -> Orchestrator:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.client.close()

    async def run(
        self,
        media_kind: MediaKind | str,
        model_id: str,
        user_input: UserInput,
        task_id: str | None = None,
    ) -> GenerationTask:
        """Submit one request and poll it until terminal.

        Returns the terminal task whatever its outcome.

        Raises:
            UnknownModel: No adapter claims the model. Nothing is sent.
            SubmissionError: The provider rejected the request, or its
                response carried neither a task id nor a result.
            DryRunInterrupt: The client is in dry-run mode.
        """
        adapter = self.registry.resolve(media_kind, model_id)
        kind = MediaKind(media_kind)
        task = GenerationTask(
            id=task_id or uuid.uuid4().hex[:12],
            media_kind=kind,
            provider_family=adapter.family,
            model_id=model_id,
        )

        try:
            payload = adapter.build_submission_payload(model_id, user_input)
        except ValueError as exc:
            raise SubmissionError(f"{adapter.family}: bad payload for {model_id}: {exc}") from exc
        logger.info("Task %s: submitting %s model %s via %s", task.id, kind.value, model_id, adapter.family)
        response = await self.client.submit(adapter, payload)

        error = adapter.submission_error(response)
        if error:
            raise SubmissionError(f"{adapter.family}: {error}", body=response)

        if adapter.immediate_result is not None:
            result_url = adapter.immediate_result(response)
            if result_url:
                task.succeed(result_url)
                logger.info("Task %s succeeded at submission: %s", task.id, result_url)
                return task

        remote_task_id = adapter.parse_task_id(response)
        if not remote_task_id:
            raise SubmissionError(f"{adapter.family}: no task id in response: {response}", body=response)
        task.assign_remote_id(remote_task_id)
        logger.info("Task %s: remote task id %s", task.id, remote_task_id)

        return await poll(
            task,
            adapter,
            self.client,
            self.policies[kind],
            on_event=self.on_event,
            sleep=self._sleep,
        )

    async def generate(
        self,
        media_kind: MediaKind | str,
        model_id: str,
        user_input: UserInput,
        task_id: str | None = None,
    ) -> str:
        """Run a generation and return the artifact URL.

        Raises:
            UnknownModel, SubmissionError: As for ``run``.
            ProviderFailure: The provider reported the job failed.
            ResultUrlMissing: The provider reported success without a URL.
            PollTimeout: The attempt budget ran out.
        """
        task = await self.run(media_kind, model_id, user_input, task_id=task_id)
        if task.is_success:
            return task.result_url
        if task.failure_kind is FailureKind.TIMEOUT:
            raise PollTimeout(task)
        if task.failure_kind is FailureKind.RESULT_URL_MISSING:
            raise ResultUrlMissing(task)
        raise ProviderFailure(task)

    async def check_status(self, family: str, remote_task_id: str) -> tuple[NormalizedStatus, str | None]:
        """Fetch and normalize the status of an existing remote task once."""
        adapter = self.registry.family(family)
        payload = await self.client.fetch_status(adapter, remote_task_id)
        normalized = adapter.normalize(payload)
        return normalized, adapter.extract(payload)
