"""KIE.ai Flux Kontext image generation (``flux-style``).

Status payloads carry ``successFlag`` (0 generating, 1 success,
2 create failed, 3 generate failed) and put the image under
``data.response.resultImageUrl``; older responses use ``data.info``.
"""

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
    verdict,
)

FAMILY = "flux-style"

# Caller-facing ids -> models the endpoint actually serves.
_MODEL_MAP = {
    "flux-kontext": "flux-kontext-pro",
    "flux-kontext-pro": "flux-kontext-pro",
    "flux-kontext-max": "flux-kontext-max",
    "flux-pro": "flux-kontext-pro",
    "flux-dev": "flux-kontext-pro",
    "flux-max": "flux-kontext-max",
    "sdxl": "flux-kontext-pro",
}

RESULT_PATHS = (
    ("data", "response", "resultImageUrl"),
    ("data", "info", "resultImageUrl"),
    ("data", "resultImageUrl"),
    ("data", "result", "url"),
    ("data", "imageUrls", 0),
    ("data", "imageUrl"),
    ("data", "url"),
    ("data", "output"),
)


def build_payload(model_id: str, user_input: UserInput) -> dict:
    body: dict[str, Any] = {
        "prompt": user_input.prompt,
        "model": _MODEL_MAP[model_id],
        "aspectRatio": "1:1",
        "outputFormat": "jpeg",
        "enableTranslation": True,
        "promptUpsampling": False,
        "safetyTolerance": 2,
    }
    apply_options(body, user_input, {"aspect_ratio": "aspectRatio"})
    if user_input.image_urls:
        # Image-to-image edit
        body["inputImage"] = user_input.image_urls[0]
    return merge_extra(body, user_input)


def normalize(payload: Mapping[str, Any]) -> NormalizedStatus:
    data = section(payload)
    flag = as_flag(data.get("successFlag"))
    failure = error_signal(data.get("errorMessage"), data.get("errorCode"))
    return verdict(
        succeeded=first_signal(matching(flag, (1,)), first_present(payload, RESULT_PATHS[:3])),
        failed=first_signal(matching(flag, (2, 3)), failure),
        running=flag == 0,
        error_detail=error_message(data.get("errorMessage"), data.get("errorCode")),
    )


def extract(payload: Mapping[str, Any]) -> str | None:
    return first_url(payload, RESULT_PATHS)


ADAPTER = ProviderAdapter(
    family=FAMILY,
    service="kie",
    models={MediaKind.IMAGE: tuple(_MODEL_MAP)},
    submit_path="/api/v1/flux/kontext/generate",
    build_payload=build_payload,
    status_request=query_status("/api/v1/flux/kontext/record-info"),
    normalize=normalize,
    extract=extract,
)
