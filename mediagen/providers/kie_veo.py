"""KIE.ai Google Veo 3 video generation (``veo-style``)."""

from __future__ import annotations

from typing import Any, Mapping

from mediagen.models import MediaKind, NormalizedStatus, UserInput
from mediagen.paths import first_present, first_url, section
from mediagen.providers.base import (
    ProviderAdapter,
    apply_options,
    as_flag,
    error_message,
    error_signal,
    first_signal,
    matching,
    merge_extra,
    query_status,
    state_text,
    verdict,
)

FAMILY = "veo-style"

_MODEL_MAP = {
    "veo3_fast": "veo3_fast",
    "veo3": "veo3",
}

_SUCCESS_STATES = ("SUCCESS", "COMPLETED", "DONE")

RESULT_PATHS = (
    ("data", "response", "resultUrls", 0),
    ("data", "info", "resultUrls", 0),
    ("data", "resultUrls", 0),
    ("data", "resultVideoUrl"),
    ("data", "videoUrl"),
    ("data", "video_url"),
    ("data", "url"),
    ("data", "output"),
    ("resultUrls", 0),
    ("videoUrl",),
    ("url",),
)


def build_payload(model_id: str, user_input: UserInput) -> dict:
    body: dict[str, Any] = {
        "prompt": user_input.prompt,
        "model": _MODEL_MAP[model_id],
        "generationType": "TEXT_2_VIDEO",
        "aspectRatio": "16:9",
        "enableTranslation": True,
    }
    apply_options(body, user_input, {"aspect_ratio": "aspectRatio"})
    if user_input.image_urls:
        body["generationType"] = "FIRST_AND_LAST_FRAMES_2_VIDEO"
        body["imageUrls"] = list(user_input.image_urls[:2])
    return merge_extra(body, user_input)


def normalize(payload: Mapping[str, Any]) -> NormalizedStatus:
    data = section(payload)
    flag = as_flag(data.get("successFlag"))
    raw_status = first_signal(data.get("status"), payload.get("status"), data.get("state"))
    status_flag = as_flag(raw_status)
    state = state_text(raw_status)
    failed_state = state if ("FAIL" in state or "ERROR" in state) else None
    failure = error_signal(data.get("errorMessage"), data.get("errorCode"))
    return verdict(
        succeeded=first_signal(
            matching(flag, (1,)),
            matching(status_flag, (1,)),
            matching(state, _SUCCESS_STATES),
            first_present(payload, RESULT_PATHS[:2]),
        ),
        failed=first_signal(
            matching(flag, (2, 3)), matching(status_flag, (2, 3)), failed_state, failure
        ),
        running=flag == 0,
        error_detail=error_message(
            data.get("errorMessage"), data.get("error"), payload.get("error"),
            data.get("message"), data.get("errorCode"),
        ),
    )


def extract(payload: Mapping[str, Any]) -> str | None:
    return first_url(payload, RESULT_PATHS)


ADAPTER = ProviderAdapter(
    family=FAMILY,
    service="kie",
    models={MediaKind.VIDEO: tuple(_MODEL_MAP)},
    submit_path="/api/v1/veo/generate",
    build_payload=build_payload,
    status_request=query_status("/api/v1/veo/record-info"),
    normalize=normalize,
    extract=extract,
)
