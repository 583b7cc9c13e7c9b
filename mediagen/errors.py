"""Exceptions raised by the generation orchestrator."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from mediagen.models import GenerationTask


class GenerationError(Exception):
    """Base class for every terminal generation outcome other than success."""


class UnknownModel(GenerationError):
    """No registered adapter claims the requested (media kind, model) pair."""

    def __init__(self, media_kind: str, model_id: str):
        self.media_kind = media_kind
        self.model_id = model_id
        super().__init__(f"No provider registered for {media_kind} model {model_id!r}")


class SubmissionError(GenerationError):
    """The provider rejected the initial request. Never retried."""

    def __init__(self, message: str, status_code: int | None = None, body: Any = None):
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class _TaskOutcomeError(GenerationError):
    def __init__(self, task: GenerationTask):
        self.task = task
        super().__init__(task.error_detail or task.canonical_status.value)


class ProviderFailure(_TaskOutcomeError):
    """The provider explicitly reported that the job failed."""


class ResultUrlMissing(_TaskOutcomeError):
    """The provider reported success but no known path held a result URL."""


class PollTimeout(_TaskOutcomeError):
    """The attempt budget ran out while the job was still in flight."""


class PollTransportError(Exception):
    """A single status request failed at the transport level.

    Only raised by the HTTP client and only caught by the polling loop,
    which counts it as an ordinary in-flight cycle.
    """

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class DownloadError(Exception):
    """Fetching a finished artifact failed. The generation itself succeeded."""

    def __init__(self, url: str, message: str):
        self.url = url
        super().__init__(message)


class DryRunInterrupt(Exception):
    """Raised instead of making the submission HTTP call in dry-run mode."""

    def __init__(self, method: str, url: str, body: Any):
        self.method = method
        self.url = url
        self.body = body
        super().__init__(f"Dry run: {method} {url}")
