"""KIE.ai Midjourney image generation (``mj-style``)."""

from __future__ import annotations

from typing import Any, Mapping

from mediagen.models import MediaKind, NormalizedStatus, UserInput
from mediagen.paths import PARSE_JSON, first_present, first_url, section
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
    verdict,
)

FAMILY = "mj-style"

_VERSIONS = {
    "midjourney/v6": "6.1",
    "midjourney/v7": "7",
}

RESULT_PATHS = (
    ("data", "resultInfoJson", PARSE_JSON, "resultUrls", 0, "resultUrl"),
    ("data", "resultInfoJson", PARSE_JSON, "resultUrls", 0),
    ("data", "response", "resultUrls", 0),
    ("data", "resultUrls", 0),
)


def build_payload(model_id: str, user_input: UserInput) -> dict:
    body: dict[str, Any] = {
        "taskType": "mj_img2img" if user_input.image_urls else "mj_txt2img",
        "prompt": user_input.prompt,
        "speed": "fast",
        "aspectRatio": "1:1",
        "version": _VERSIONS[model_id],
    }
    apply_options(body, user_input, {"aspect_ratio": "aspectRatio", "quality": "speed"})
    if user_input.image_urls:
        body["fileUrls"] = list(user_input.image_urls)
    return merge_extra(body, user_input)


def normalize(payload: Mapping[str, Any]) -> NormalizedStatus:
    data = section(payload)
    flag = as_flag(data.get("successFlag"))
    return verdict(
        succeeded=first_signal(matching(flag, (1,)), first_present(payload, RESULT_PATHS[:1])),
        failed=first_signal(matching(flag, (2, 3)), error_signal(data.get("errorMessage"), data.get("errorCode"))),
        running=flag == 0,
        error_detail=error_message(data.get("errorMessage"), data.get("errorCode")),
    )


def extract(payload: Mapping[str, Any]) -> str | None:
    return first_url(payload, RESULT_PATHS)


ADAPTER = ProviderAdapter(
    family=FAMILY,
    service="kie",
    models={MediaKind.IMAGE: tuple(_VERSIONS)},
    submit_path="/api/v1/mj/generate",
    build_payload=build_payload,
    status_request=query_status("/api/v1/mj/record-info"),
    normalize=normalize,
    extract=extract,
)
