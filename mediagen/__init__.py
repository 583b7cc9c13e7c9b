"""Unified async client for asynchronous media-generation providers."""

from mediagen.client import ProviderClient
from mediagen.config import Settings, load_settings
from mediagen.errors import (
    DownloadError,
    DryRunInterrupt,
    GenerationError,
    PollTimeout,
    ProviderFailure,
    ResultUrlMissing,
    SubmissionError,
    UnknownModel,
)
from mediagen.models import (
    CanonicalStatus,
    FailureKind,
    GenerationTask,
    MediaKind,
    NormalizedStatus,
    PollEvent,
    PollPolicy,
    UserInput,
)
from mediagen.orchestrator import Orchestrator
from mediagen.registry import DEFAULT_REGISTRY, AdapterRegistry

__all__ = [
    "AdapterRegistry",
    "CanonicalStatus",
    "DEFAULT_REGISTRY",
    "DownloadError",
    "DryRunInterrupt",
    "FailureKind",
    "GenerationError",
    "GenerationTask",
    "MediaKind",
    "NormalizedStatus",
    "Orchestrator",
    "PollEvent",
    "PollPolicy",
    "PollTimeout",
    "ProviderClient",
    "ProviderFailure",
    "ResultUrlMissing",
    "Settings",
    "SubmissionError",
    "UnknownModel",
    "UserInput",
    "load_settings",
]
