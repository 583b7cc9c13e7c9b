"""Data models for generation tasks and their canonical lifecycle."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class MediaKind(str, Enum):
    """Kind of artifact a generation request produces."""

    IMAGE = "image"
    VIDEO = "video"
    MUSIC = "music"
    SPEECH = "speech"
    SLIDES = "slides"


class CanonicalStatus(str, Enum):
    """Provider-independent task status."""

    SUBMITTED = "SUBMITTED"
    PENDING = "PENDING"
    RUNNING = "RUNNING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    TIMED_OUT = "TIMED_OUT"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL


_TERMINAL = frozenset({CanonicalStatus.SUCCEEDED, CanonicalStatus.FAILED, CanonicalStatus.TIMED_OUT})
_IN_FLIGHT = frozenset({CanonicalStatus.PENDING, CanonicalStatus.RUNNING})


class FailureKind(str, Enum):
    """Why a task ended without an artifact."""

    PROVIDER = "provider"
    RESULT_URL_MISSING = "result_url_missing"
    TIMEOUT = "timeout"


class TaskStateError(RuntimeError):
    """Raised on a lifecycle transition the task model does not allow."""


@dataclass
class UserInput:
    """A provider-agnostic generation request.

    Attributes:
        prompt: Free-text prompt (or the text to speak / the slide topic).
        aspect_ratio: Output aspect ratio such as "16:9".
        duration: Clip length in seconds.
        quality: Quality tier or resolution hint ("720p", "2K", "pro").
        style: Style or genre description.
        negative_prompt: Things to avoid.
        title: Title for music tracks and presentations.
        instrumental: Music without vocals.
        voice: Voice identifier for speech and avatar video.
        image_urls: Reference or source images.
        extra: Provider field overrides, merged last into the request body.
    """
    prompt: str
    aspect_ratio: str | None = None
    duration: int | None = None
    quality: str | None = None
    style: str | None = None
    negative_prompt: str | None = None
    title: str | None = None
    instrumental: bool = False
    voice: str | None = None
    image_urls: list[str] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class NormalizedStatus:
    """Result of running a provider normalizer over one status payload.

    Attributes:
        canonical_status: PENDING, RUNNING, SUCCEEDED or FAILED.
        raw_success_signal: The provider value that counted as success, if any.
        raw_failure_signal: The provider value that counted as failure, if any.
        error_detail: Provider error message, when one was present.
    """
    canonical_status: CanonicalStatus
    raw_success_signal: Any = None
    raw_failure_signal: Any = None
    error_detail: str | None = None


@dataclass(frozen=True)
class PollPolicy:
    """Fixed-interval polling budget."""
    interval: float
    max_attempts: int

    def __post_init__(self) -> None:
        if self.interval < 0:
            raise ValueError(f"Poll interval must be >= 0, got {self.interval}")
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")


DEFAULT_POLL_POLICIES: dict[MediaKind, PollPolicy] = {
    MediaKind.IMAGE: PollPolicy(interval=2.0, max_attempts=60),
    MediaKind.VIDEO: PollPolicy(interval=5.0, max_attempts=120),
    MediaKind.MUSIC: PollPolicy(interval=5.0, max_attempts=120),
    MediaKind.SPEECH: PollPolicy(interval=2.0, max_attempts=60),
    MediaKind.SLIDES: PollPolicy(interval=5.0, max_attempts=60),
}


@dataclass(frozen=True)
class PollEvent:
    """Emitted once per poll cycle for an external observer."""
    task_id: str
    family: str
    remote_task_id: str
    attempt: int
    max_attempts: int
    canonical_status: CanonicalStatus
    transient_error: str | None = None


@dataclass
class GenerationTask:
    """One request/response cycle with a provider.

    Lifecycle transitions go through the methods below so that status only
    moves forward, ``remote_task_id`` is assigned once, and exactly one of
    ``result_url`` / ``error_detail`` is set when the task turns terminal.

    Attributes:
        id: Caller-side correlation id (not the provider's task id).
        media_kind: Kind of artifact requested.
        provider_family: Adapter family handling this task.
        model_id: Caller-visible model name.
        remote_task_id: Provider task id, set once submission succeeds.
        canonical_status: Current canonical status.
        attempts: Poll cycles performed.
        result_url: Artifact URL, only when SUCCEEDED.
        error_detail: Failure cause, only when FAILED or TIMED_OUT.
        failure_kind: Classifies a FAILED/TIMED_OUT outcome.
    """
    id: str
    media_kind: MediaKind
    provider_family: str
    model_id: str
    remote_task_id: str | None = None
    canonical_status: CanonicalStatus = CanonicalStatus.SUBMITTED
    attempts: int = 0
    result_url: str | None = None
    error_detail: str | None = None
    failure_kind: FailureKind | None = None

    @property
    def is_terminal(self) -> bool:
        return self.canonical_status.is_terminal

    @property
    def is_success(self) -> bool:
        return self.canonical_status is CanonicalStatus.SUCCEEDED

    def assign_remote_id(self, remote_task_id: str) -> None:
        if not remote_task_id:
            raise TaskStateError(f"Task {self.id}: empty remote task id")
        if self.remote_task_id is not None and self.remote_task_id != remote_task_id:
            raise TaskStateError(
                f"Task {self.id}: remote id already set to {self.remote_task_id!r}"
            )
        self.remote_task_id = remote_task_id

    def record_attempt(self) -> int:
        self._ensure_open()
        self.attempts += 1
        return self.attempts

    def mark_progress(self, status: CanonicalStatus) -> None:
        """Move to PENDING or RUNNING (the two are interchangeable)."""
        if status not in _IN_FLIGHT:
            raise TaskStateError(f"Task {self.id}: {status.value} is not an in-flight status")
        self._ensure_open()
        self.canonical_status = status

    def succeed(self, result_url: str) -> None:
        if not result_url:
            raise TaskStateError(f"Task {self.id}: empty result url")
        self._ensure_open()
        self.canonical_status = CanonicalStatus.SUCCEEDED
        self.result_url = result_url

    def fail(self, detail: str, kind: FailureKind = FailureKind.PROVIDER) -> None:
        if kind is FailureKind.TIMEOUT:
            raise TaskStateError("Use time_out() for attempt budget exhaustion")
        self._ensure_open()
        self.canonical_status = CanonicalStatus.FAILED
        self.error_detail = detail
        self.failure_kind = kind

    def time_out(self, detail: str) -> None:
        self._ensure_open()
        self.canonical_status = CanonicalStatus.TIMED_OUT
        self.error_detail = detail
        self.failure_kind = FailureKind.TIMEOUT

    def _ensure_open(self) -> None:
        if self.is_terminal:
            raise TaskStateError(
                f"Task {self.id} is already {self.canonical_status.value}"
            )
