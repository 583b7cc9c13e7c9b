"""MiniMax Hailuo video generation (``hailuo-style``).

Every response carries ``base_resp.status_code`` (0 = ok). A finished job
reports a ``file_id``; the download URL is either included under ``file``
or built from the files endpoint.
"""

from __future__ import annotations

from typing import Any, Mapping

from mediagen.models import MediaKind, NormalizedStatus, UserInput
from mediagen.paths import first_url, lookup
from mediagen.providers.base import (
    ProviderAdapter,
    apply_options,
    error_message,
    first_signal,
    matching,
    merge_extra,
    query_status,
    state_text,
    verdict,
)

FAMILY = "hailuo-style"

FILES_ENDPOINT = "https://api.minimaxi.chat/v1/files/retrieve"

_MODELS = ("MiniMax-Hailuo-2.3", "MiniMax-Hailuo-02", "T2V-01-Director", "T2V-01")

_SUCCESS_STATES = ("SUCCESS",)
_FAILURE_STATES = ("FAIL", "FAILED")
_RUNNING_STATES = ("PROCESSING", "PREPARING")

RESULT_PATHS = (
    ("file", "download_url"),
    ("download_url",),
    ("video_url",),
)


def _base_error(payload: Mapping[str, Any]) -> str | None:
    code = lookup(payload, ("base_resp", "status_code"))
    if code is None or str(code) == "0":
        return None
    message = lookup(payload, ("base_resp", "status_msg")) or "unknown error"
    return f"{message} (status_code={code})"


def build_payload(model_id: str, user_input: UserInput) -> dict:
    body: dict[str, Any] = {
        "model": model_id,
        "prompt": user_input.prompt,
        "prompt_optimizer": True,
        "fast_pretreatment": False,
        "duration": 6,
        "resolution": "768P",
    }
    apply_options(body, user_input, {"duration": "duration", "quality": "resolution"})
    if user_input.image_urls:
        body["first_frame_image"] = user_input.image_urls[0]
    return merge_extra(body, user_input)


def parse_task_id(payload: Mapping[str, Any]) -> str | None:
    task_id = payload.get("task_id")
    return str(task_id) if task_id else None


def normalize(payload: Mapping[str, Any]) -> NormalizedStatus:
    state = state_text(payload.get("status"))
    base_error = _base_error(payload)
    return verdict(
        succeeded=first_signal(matching(state, _SUCCESS_STATES), payload.get("file_id")),
        failed=first_signal(base_error, matching(state, _FAILURE_STATES)),
        running=state in _RUNNING_STATES,
        error_detail=first_signal(base_error, error_message(payload.get("error_message"))),
    )


def extract(payload: Mapping[str, Any]) -> str | None:
    url = first_url(payload, RESULT_PATHS)
    if url:
        return url
    file_id = payload.get("file_id")
    if file_id:
        return f"{FILES_ENDPOINT}?file_id={file_id}"
    return None


ADAPTER = ProviderAdapter(
    family=FAMILY,
    service="minimax",
    models={MediaKind.VIDEO: _MODELS},
    submit_path="/video_generation",
    build_payload=build_payload,
    status_request=query_status("/query/video_generation", key="task_id"),
    normalize=normalize,
    extract=extract,
    parse_task_id=parse_task_id,
    submission_error=_base_error,
)
