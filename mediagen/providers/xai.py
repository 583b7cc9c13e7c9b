"""xAI Grok Imagine video generation (``xai-style``).

The status endpoint has no explicit success state: a finished job simply
carries ``video.url``. Failures come as ``status`` failed/error or an
``error`` field.
"""

from __future__ import annotations

from typing import Any, Mapping

from mediagen.models import MediaKind, NormalizedStatus, UserInput
from mediagen.paths import first_url
from mediagen.providers.base import (
    ProviderAdapter,
    apply_options,
    error_message,
    error_signal,
    first_signal,
    matching,
    merge_extra,
    path_status,
    state_text,
    verdict,
)

FAMILY = "xai-style"

_FAILURE_STATES = ("FAILED", "ERROR")
_RUNNING_STATES = ("PROCESSING", "IN_PROGRESS", "RUNNING")

RESULT_PATHS = (
    ("video", "url"),
    ("url",),
)


def build_payload(model_id: str, user_input: UserInput) -> dict:
    body: dict[str, Any] = {
        "model": model_id,
        "prompt": user_input.prompt,
        "duration": 6,
        "resolution": "720p",
    }
    apply_options(body, user_input, {"duration": "duration", "quality": "resolution"})
    if user_input.image_urls:
        body["image_url"] = user_input.image_urls[0]
    return merge_extra(body, user_input)


def parse_task_id(payload: Mapping[str, Any]) -> str | None:
    request_id = payload.get("request_id") or payload.get("id")
    return str(request_id) if request_id else None


def submission_error(payload: Mapping[str, Any]) -> str | None:
    return error_message(payload.get("error"))


def normalize(payload: Mapping[str, Any]) -> NormalizedStatus:
    state = state_text(payload.get("status"))
    error = error_signal(payload.get("error"))
    return verdict(
        succeeded=first_url(payload, RESULT_PATHS[:1]),
        failed=first_signal(matching(state, _FAILURE_STATES), error),
        running=state in _RUNNING_STATES,
        error_detail=error_message(payload.get("error")),
    )


def extract(payload: Mapping[str, Any]) -> str | None:
    return first_url(payload, RESULT_PATHS)


ADAPTER = ProviderAdapter(
    family=FAMILY,
    service="xai",
    models={MediaKind.VIDEO: ("grok-imagine-video",)},
    submit_path="/videos/generations",
    build_payload=build_payload,
    status_request=path_status("/videos/{task_id}"),
    normalize=normalize,
    extract=extract,
    parse_task_id=parse_task_id,
    submission_error=submission_error,
)
