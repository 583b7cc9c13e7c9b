"""KIE.ai GPT-4o image generation (``gpt4o-style``)."""

from __future__ import annotations

from typing import Any, Mapping

from mediagen.models import MediaKind, NormalizedStatus, UserInput
from mediagen.paths import first_present, first_url, section
from mediagen.providers.base import (
    ProviderAdapter,
    apply_options,
    as_flag,
    error_message,
    first_signal,
    matching,
    merge_extra,
    query_status,
    state_text,
    verdict,
)

FAMILY = "gpt4o-style"

_SUCCESS_STATES = ("SUCCESS", "COMPLETED", "DONE")
_RUNNING_STATES = ("GENERATING", "PROCESSING")

RESULT_PATHS = (
    ("data", "response", "resultUrls", 0),
    ("data", "info", "result_urls", 0),
    ("data", "info", "resultUrls", 0),
    ("data", "resultImageUrl"),
    ("data", "result", "url"),
    ("data", "imageUrls", 0),
    ("data", "imageUrl"),
    ("data", "url"),
    ("resultImageUrl",),
    ("imageUrl",),
    ("url",),
)


def build_payload(model_id: str, user_input: UserInput) -> dict:
    body: dict[str, Any] = {
        "prompt": user_input.prompt,
        "size": "1:1",
        "nVariants": 1,
        "isEnhance": False,
        "enableFallback": True,
        "fallbackModel": "FLUX_MAX",
    }
    apply_options(body, user_input, {"aspect_ratio": "size"})
    if user_input.image_urls:
        body["filesUrl"] = list(user_input.image_urls)
    return merge_extra(body, user_input)


def normalize(payload: Mapping[str, Any]) -> NormalizedStatus:
    data = section(payload)
    flag = as_flag(data.get("successFlag"))
    raw_status = first_signal(data.get("status"), payload.get("status"))
    status_flag = as_flag(raw_status)
    state = state_text(raw_status)
    failed_state = state if ("FAIL" in state or "ERROR" in state) else None
    return verdict(
        succeeded=first_signal(
            matching(flag, (1,)),
            matching(status_flag, (1,)),
            matching(state, _SUCCESS_STATES),
            first_present(payload, RESULT_PATHS[:3]),
        ),
        failed=first_signal(
            matching(flag, (2, 3)),
            matching(status_flag, (2, 3)),
            failed_state,
            data.get("errorMessage"),
        ),
        running=flag == 0 or state in _RUNNING_STATES,
        error_detail=error_message(
            data.get("errorMessage"), data.get("error"), payload.get("error"), failed_state
        ),
    )


def extract(payload: Mapping[str, Any]) -> str | None:
    return first_url(payload, RESULT_PATHS)


ADAPTER = ProviderAdapter(
    family=FAMILY,
    service="kie",
    models={MediaKind.IMAGE: ("4o-image", "gpt-image-1")},
    submit_path="/api/v1/gpt4o-image/generate",
    build_payload=build_payload,
    status_request=query_status("/api/v1/gpt4o-image/record-info"),
    normalize=normalize,
    extract=extract,
)
