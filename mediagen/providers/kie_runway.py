"""KIE.ai Runway video generation (``runway-style``).

Runway polls a ``record-detail`` endpoint (not ``record-info``). The state
string is one of wait, queueing, generating, success, fail, and the video
sits in ``data.videoInfo.videoUrl``.
"""

from __future__ import annotations

from typing import Any, Mapping

from mediagen.models import MediaKind, NormalizedStatus, UserInput
from mediagen.paths import first_present, first_url, section
from mediagen.providers.base import (
    ProviderAdapter,
    apply_options,
    error_message,
    error_signal,
    first_signal,
    matching,
    merge_extra,
    query_status,
    state_text,
    verdict,
)

FAMILY = "runway-style"

_SUCCESS_STATES = ("SUCCESS", "COMPLETED")
_FAILURE_STATES = ("FAIL", "FAILED", "ERROR")
_RUNNING_STATES = ("GENERATING",)

RESULT_PATHS = (
    ("data", "videoInfo", "videoUrl"),
    ("data", "videoUrl"),
    ("data", "video_url"),
    ("data", "info", "resultUrls", 0),
    ("data", "resultUrls", 0),
)


def build_payload(model_id: str, user_input: UserInput) -> dict:
    body: dict[str, Any] = {
        "prompt": user_input.prompt,
        "duration": 5,
        "quality": "720p",
        "aspectRatio": "16:9",
        "waterMark": "",
    }
    apply_options(body, user_input, {
        "duration": "duration",
        "quality": "quality",
        "aspect_ratio": "aspectRatio",
    })
    if user_input.image_urls:
        body["imageUrl"] = user_input.image_urls[0]
    return merge_extra(body, user_input)


def normalize(payload: Mapping[str, Any]) -> NormalizedStatus:
    data = section(payload)
    state = state_text(
        first_signal(data.get("state"), data.get("status"), payload.get("state"), payload.get("status"))
    )
    return verdict(
        succeeded=first_signal(matching(state, _SUCCESS_STATES), first_present(payload, RESULT_PATHS[:1])),
        failed=first_signal(matching(state, _FAILURE_STATES), error_signal(data.get("failMsg"), data.get("failCode"))),
        running=state in _RUNNING_STATES,
        error_detail=error_message(
            data.get("failMsg"), data.get("error"), payload.get("msg") if state in _FAILURE_STATES else None
        ),
    )


def extract(payload: Mapping[str, Any]) -> str | None:
    return first_url(payload, RESULT_PATHS)


ADAPTER = ProviderAdapter(
    family=FAMILY,
    service="kie",
    models={MediaKind.VIDEO: ("runway", "runway-gen3", "runway-gen3-turbo")},
    submit_path="/api/v1/runway/generate",
    build_payload=build_payload,
    status_request=query_status("/api/v1/runway/record-detail"),
    normalize=normalize,
    extract=extract,
)
