"""Presenton slide-deck generation (``presenton-style``)."""

from __future__ import annotations

from typing import Any, Mapping

from mediagen.models import MediaKind, NormalizedStatus, UserInput
from mediagen.paths import first_present, first_url, section
from mediagen.providers.base import (
    ProviderAdapter,
    error_message,
    first_signal,
    matching,
    merge_extra,
    path_status,
    state_text,
    verdict,
)

FAMILY = "presenton-style"

_TEMPLATES = {
    "presenton": "general",
    "presenton-business": "business",
    "presenton-education": "education",
    "presenton-creative": "creative",
    "presenton-minimal": "minimal",
}

_SUCCESS_STATES = ("COMPLETED", "SUCCESS")
_FAILURE_STATES = ("ERROR", "FAILED")
_RUNNING_STATES = ("PROCESSING", "GENERATING")

RESULT_PATHS = (
    ("data", "path"),
    ("path",),
    ("data", "presentation", "path"),
)


def build_payload(model_id: str, user_input: UserInput) -> dict:
    n_slides = user_input.extra.get("n_slides", 5)
    body: dict[str, Any] = {
        "content": user_input.prompt,
        "n_slides": n_slides,
        "language": "English",
        "template": _TEMPLATES[model_id],
        "export_as": "pptx",
    }
    if user_input.style:
        body["instructions"] = user_input.style
    return merge_extra(body, user_input)


def parse_task_id(payload: Mapping[str, Any]) -> str | None:
    task_id = payload.get("id") or payload.get("task_id")
    return str(task_id) if task_id else None


def submission_error(payload: Mapping[str, Any]) -> str | None:
    if state_text(payload.get("status")) in _FAILURE_STATES:
        return error_message(payload.get("message"), payload.get("error")) or "presentation rejected"
    return None


def normalize(payload: Mapping[str, Any]) -> NormalizedStatus:
    state = state_text(payload.get("status"))
    error = section(payload, "error") or payload.get("error")
    return verdict(
        succeeded=first_signal(matching(state, _SUCCESS_STATES), first_present(payload, RESULT_PATHS[:1])),
        failed=first_signal(matching(state, _FAILURE_STATES), error),
        running=state in _RUNNING_STATES,
        error_detail=error_message(error, payload.get("message") if state in _FAILURE_STATES else None),
    )


def extract(payload: Mapping[str, Any]) -> str | None:
    return first_url(payload, RESULT_PATHS)


ADAPTER = ProviderAdapter(
    family=FAMILY,
    service="presenton",
    models={MediaKind.SLIDES: tuple(_TEMPLATES)},
    submit_path="/ppt/presentation/generate/async",
    build_payload=build_payload,
    status_request=path_status("/ppt/presentation/status/{task_id}"),
    normalize=normalize,
    extract=extract,
    parse_task_id=parse_task_id,
    submission_error=submission_error,
)
