"""Pixazo Flux Schnell image generation (``pixazo-style``).

``getData`` either answers with the image straight away (``output``) or
with a ``job_set_id`` to poll through ``getGenerationResults`` (POST).
"""

from __future__ import annotations

from typing import Any, Mapping

from mediagen.models import MediaKind, NormalizedStatus, UserInput
from mediagen.paths import first_url
from mediagen.providers.base import (
    ProviderAdapter,
    body_status,
    error_message,
    first_signal,
    matching,
    merge_extra,
    state_text,
    verdict,
)

FAMILY = "pixazo-style"

_SIZES = {
    "1:1": (1024, 1024),
    "16:9": (1344, 768),
    "9:16": (768, 1344),
    "4:3": (1152, 896),
    "3:4": (896, 1152),
}

_SUCCESS_STATES = ("COMPLETED", "SUCCESS")
_FAILURE_STATES = ("FAILED", "ERROR")
_RUNNING_STATES = ("PROCESSING", "RUNNING")

RESULT_PATHS = (
    ("output",),
    ("images", 0),
    ("data", "output"),
)


def build_payload(model_id: str, user_input: UserInput) -> dict:
    width, height = _SIZES.get(user_input.aspect_ratio or "1:1", _SIZES["1:1"])
    body: dict[str, Any] = {
        "prompt": user_input.prompt,
        "num_steps": 4,
        "height": height,
        "width": width,
    }
    return merge_extra(body, user_input)


def parse_task_id(payload: Mapping[str, Any]) -> str | None:
    job_set_id = payload.get("job_set_id")
    return str(job_set_id) if job_set_id else None


def submission_error(payload: Mapping[str, Any]) -> str | None:
    return error_message(payload.get("error"))


def immediate_result(payload: Mapping[str, Any]) -> str | None:
    return first_url(payload, RESULT_PATHS[:1])


def normalize(payload: Mapping[str, Any]) -> NormalizedStatus:
    state = state_text(payload.get("status"))
    return verdict(
        succeeded=first_signal(matching(state, _SUCCESS_STATES), payload.get("output")),
        failed=first_signal(matching(state, _FAILURE_STATES), payload.get("error")),
        running=state in _RUNNING_STATES,
        error_detail=error_message(payload.get("error"), payload.get("message")),
    )


def extract(payload: Mapping[str, Any]) -> str | None:
    return first_url(payload, RESULT_PATHS)


ADAPTER = ProviderAdapter(
    family=FAMILY,
    service="pixazo",
    models={MediaKind.IMAGE: ("flux-1-schnell",)},
    submit_path="/getData",
    build_payload=build_payload,
    status_request=body_status("/getGenerationResults", key="job_set_id"),
    normalize=normalize,
    extract=extract,
    parse_task_id=parse_task_id,
    submission_error=submission_error,
    immediate_result=immediate_result,
)
