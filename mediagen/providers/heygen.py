"""HeyGen avatar video generation (``heygen-style``).

The prompt is the script the avatar speaks.
"""

from __future__ import annotations

from typing import Any, Mapping

from mediagen.models import MediaKind, NormalizedStatus, UserInput
from mediagen.paths import first_url, lookup, section
from mediagen.providers.base import (
    ProviderAdapter,
    error_message,
    error_signal,
    first_signal,
    matching,
    query_status,
    state_text,
    verdict,
)

FAMILY = "heygen-style"

DEFAULT_AVATAR = "Daisy-inskirt-20220818"
DEFAULT_VOICE = "2d5b0e6cf36f460aa7fc47e3eee4ba54"

_DIMENSIONS = {
    "16:9": {"width": 1280, "height": 720},
    "9:16": {"width": 720, "height": 1280},
    "1:1": {"width": 720, "height": 720},
}

_SUCCESS_STATES = ("COMPLETED",)
_FAILURE_STATES = ("FAILED",)
_RUNNING_STATES = ("PROCESSING",)

RESULT_PATHS = (
    ("data", "video_url"),
    ("data", "video_url_caption"),
)


def build_payload(model_id: str, user_input: UserInput) -> dict:
    extra = dict(user_input.extra)
    avatar_id = extra.pop("avatar_id", DEFAULT_AVATAR)
    return {
        "video_inputs": [
            {
                "character": {"type": "avatar", "avatar_id": avatar_id, "avatar_style": "normal"},
                "voice": {
                    "type": "text",
                    "input_text": user_input.prompt,
                    "voice_id": user_input.voice or DEFAULT_VOICE,
                },
            }
        ],
        "dimension": _DIMENSIONS.get(user_input.aspect_ratio or "16:9", _DIMENSIONS["16:9"]),
        **extra,
    }


def parse_task_id(payload: Mapping[str, Any]) -> str | None:
    video_id = lookup(payload, ("data", "video_id"))
    return str(video_id) if video_id else None


def submission_error(payload: Mapping[str, Any]) -> str | None:
    return error_message(payload.get("error"))


def normalize(payload: Mapping[str, Any]) -> NormalizedStatus:
    data = section(payload)
    state = state_text(data.get("status"))
    error = error_signal(data.get("error"))
    return verdict(
        succeeded=first_signal(matching(state, _SUCCESS_STATES), data.get("video_url")),
        failed=first_signal(matching(state, _FAILURE_STATES), error),
        running=state in _RUNNING_STATES,
        error_detail=error_message(data.get("error"), payload.get("message") if error else None),
    )


def extract(payload: Mapping[str, Any]) -> str | None:
    return first_url(payload, RESULT_PATHS)


ADAPTER = ProviderAdapter(
    family=FAMILY,
    service="heygen",
    models={MediaKind.VIDEO: ("heygen-avatar",)},
    submit_path="/v2/video/generate",
    build_payload=build_payload,
    status_request=query_status("/v1/video_status.get", key="video_id"),
    normalize=normalize,
    extract=extract,
    parse_task_id=parse_task_id,
    submission_error=submission_error,
)
