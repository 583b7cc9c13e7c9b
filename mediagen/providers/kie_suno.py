"""KIE.ai Suno music generation (``suno-style``).

TEXT_SUCCESS and FIRST_SUCCESS are intermediate states (lyrics ready,
first of two tracks streaming); only SUCCESS means the job is done.
"""

from __future__ import annotations

from typing import Any, Mapping

from mediagen.models import MediaKind, NormalizedStatus, UserInput
from mediagen.paths import first_present, first_url, section
from mediagen.providers.base import (
    ProviderAdapter,
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

FAMILY = "suno-style"

# The API requires a callback even when the caller polls.
DEFAULT_CALLBACK_URL = "https://example.com/callback"

_MODEL_MAP = {
    "suno-v5": "V5",
    "suno-v4.5": "V4_5",
    "suno-v4": "V4",
    "suno-v3.5": "V3_5",
}

_SUCCESS_STATES = ("SUCCESS", "COMPLETE", "COMPLETED")
_FAILURE_STATES = (
    "FAILED",
    "ERROR",
    "CREATE_TASK_FAILED",
    "GENERATE_AUDIO_FAILED",
    "CALLBACK_EXCEPTION",
    "SENSITIVE_WORD_ERROR",
)
_RUNNING_STATES = ("TEXT_SUCCESS", "FIRST_SUCCESS", "PROCESSING")

RESULT_PATHS = (
    ("data", "response", "sunoData", 0, "audioUrl"),
    ("data", "response", "sunoData", 0, "sourceAudioUrl"),
    ("data", "response", "sunoData", 0, "streamAudioUrl"),
    ("data", "response", "audioUrls", 0),
    ("data", "response", "audioUrl"),
    ("data", "audioUrls", 0),
    ("data", "audioUrl"),
    ("data", "audio_url"),
    ("audioUrl",),
    ("audio_url",),
    ("url",),
)

_RESULT_PRESENCE = (
    ("data", "response", "audioUrls", 0),
    ("data", "audioUrls", 0),
)


def build_payload(model_id: str, user_input: UserInput) -> dict:
    custom = bool(user_input.style or user_input.title)
    body: dict[str, Any] = {
        "prompt": user_input.prompt,
        "customMode": custom,
        "instrumental": user_input.instrumental,
        "model": _MODEL_MAP[model_id],
        "callBackUrl": DEFAULT_CALLBACK_URL,
    }
    if custom:
        if user_input.style:
            body["style"] = user_input.style
        if user_input.title:
            body["title"] = user_input.title
    if user_input.negative_prompt:
        body["negativeTags"] = user_input.negative_prompt
    return merge_extra(body, user_input)


def immediate_result(payload: Mapping[str, Any]) -> str | None:
    """Some deployments answer with the audio directly instead of a task."""
    return first_url(payload, (("data", "audioUrl"), ("audioUrl",), ("url",)))


def normalize(payload: Mapping[str, Any]) -> NormalizedStatus:
    data = section(payload)
    flag = as_flag(data.get("successFlag"))
    raw_status = first_signal(data.get("status"), payload.get("status"))
    status_flag = as_flag(raw_status)
    state = state_text(raw_status)
    failure = error_signal(data.get("errorMessage"), data.get("errorCode"))
    return verdict(
        succeeded=first_signal(
            matching(flag, (1,)),
            matching(status_flag, (1,)),
            matching(state, _SUCCESS_STATES),
            first_present(payload, _RESULT_PRESENCE),
        ),
        failed=first_signal(
            matching(flag, (2, 3)), matching(status_flag, (2, 3)), matching(state, _FAILURE_STATES), failure
        ),
        running=state in _RUNNING_STATES,
        error_detail=error_message(
            data.get("errorMessage"), data.get("error"), payload.get("error"),
            state if state in _FAILURE_STATES else None,
        ),
    )


def extract(payload: Mapping[str, Any]) -> str | None:
    return first_url(payload, RESULT_PATHS)


ADAPTER = ProviderAdapter(
    family=FAMILY,
    service="kie",
    models={MediaKind.MUSIC: tuple(_MODEL_MAP)},
    submit_path="/api/v1/generate",
    build_payload=build_payload,
    status_request=query_status("/api/v1/generate/record-info"),
    normalize=normalize,
    extract=extract,
    immediate_result=immediate_result,
)
