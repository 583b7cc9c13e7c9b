"""KIE.ai unified jobs API (``jobs-generic``).

One ``/api/v1/jobs/createTask`` endpoint fronts many third-party models
(Google, ByteDance, Kling, Wan, Sora, Grok, ElevenLabs ...). The body is
``{"model": <api model>, "input": {...}}`` where the input fields differ
per model, so each model carries its own input template. Status lives in
``data.state`` and the result is a JSON-encoded string in
``data.resultJson``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from mediagen.models import MediaKind, NormalizedStatus, UserInput
from mediagen.paths import PARSE_JSON, first_present, first_url, section
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

FAMILY = "jobs-generic"


@dataclass(frozen=True)
class JobModel:
    """Input template for one model behind the jobs API.

    Attributes:
        media_kind: Kind of artifact the model produces.
        defaults: Provider input fields sent when the caller sets nothing.
        api_model: Model name sent to the API, when it differs from the id.
        prompt_field: Input field receiving ``UserInput.prompt``.
        option_fields: ``UserInput`` attribute -> input field, applied only
            when the caller sets the option.
        task_type: Optional top-level ``task_type``.
    """
    media_kind: MediaKind
    defaults: dict[str, Any] = field(default_factory=dict)
    api_model: str | None = None
    prompt_field: str | None = "prompt"
    option_fields: dict[str, str] = field(default_factory=dict)
    task_type: str | None = None


_IMAGE_OPTIONS = {"aspect_ratio": "aspect_ratio"}
_VIDEO_OPTIONS = {"aspect_ratio": "aspect_ratio", "duration": "duration"}
_SPEECH_OPTIONS = {"voice": "voice"}

MODELS: dict[str, JobModel] = {
    # Image
    "google/nano-banana": JobModel(
        MediaKind.IMAGE, {"aspect_ratio": "1:1", "output_format": "png"}, option_fields=_IMAGE_OPTIONS,
    ),
    "google/imagen4-ultra": JobModel(
        MediaKind.IMAGE, {"aspect_ratio": "1:1", "output_format": "png"}, option_fields=_IMAGE_OPTIONS,
    ),
    "nano-banana-pro": JobModel(
        MediaKind.IMAGE,
        {"aspect_ratio": "1:1", "resolution": "2K", "output_format": "png"},
        option_fields={"aspect_ratio": "aspect_ratio", "quality": "resolution"},
    ),
    "seedream/4.5-text-to-image": JobModel(
        MediaKind.IMAGE,
        {"aspect_ratio": "1:1", "quality": "basic"},
        option_fields={"aspect_ratio": "aspect_ratio", "quality": "quality"},
    ),
    "bytedance/seedream-v4-text-to-image": JobModel(
        MediaKind.IMAGE,
        {"image_size": "square_hd", "image_resolution": "2K", "max_images": 1},
        option_fields={"quality": "image_resolution"},
    ),
    "grok-imagine/text-to-image": JobModel(
        MediaKind.IMAGE, {"aspect_ratio": "3:2"}, option_fields=_IMAGE_OPTIONS,
    ),
    "recraft/remove-background": JobModel(MediaKind.IMAGE, prompt_field=None),
    "kling-3.0/image": JobModel(
        MediaKind.IMAGE,
        {"negative_prompt": "", "aspect_ratio": "16:9"},
        option_fields={"aspect_ratio": "aspect_ratio", "negative_prompt": "negative_prompt"},
        task_type="image_generation",
    ),
    # Video
    "sora-2-text-to-video": JobModel(
        MediaKind.VIDEO, {"aspect_ratio": "landscape", "n_frames": "10", "remove_watermark": True},
    ),
    "wan/2-5-text-to-video": JobModel(
        MediaKind.VIDEO,
        {"duration": "5", "resolution": "1080p", "multi_shots": False},
        option_fields={"duration": "duration", "quality": "resolution"},
    ),
    "wan/2-6-text-to-video": JobModel(
        MediaKind.VIDEO,
        {"duration": "5", "resolution": "1080p", "multi_shots": False},
        option_fields={"duration": "duration", "quality": "resolution"},
    ),
    "kling-2.6/text-to-video": JobModel(
        MediaKind.VIDEO,
        {"sound": False, "aspect_ratio": "16:9", "duration": "5"},
        option_fields=_VIDEO_OPTIONS,
    ),
    "kling/v2-5-turbo-text-to-video-pro": JobModel(
        MediaKind.VIDEO,
        {
            "duration": "5",
            "aspect_ratio": "16:9",
            "negative_prompt": "blur, distort, low quality",
            "cfg_scale": 0.5,
        },
        option_fields={**_VIDEO_OPTIONS, "negative_prompt": "negative_prompt"},
    ),
    "kling-3.0/video": JobModel(
        MediaKind.VIDEO,
        {"sound": True, "duration": "5", "aspect_ratio": "16:9", "mode": "pro", "multi_shots": False},
        option_fields={**_VIDEO_OPTIONS, "quality": "mode"},
    ),
    "bytedance/seedance-1.5-pro": JobModel(
        MediaKind.VIDEO,
        {
            "aspect_ratio": "16:9",
            "resolution": "720p",
            "duration": "8",
            "fixed_lens": False,
            "generate_audio": False,
        },
        option_fields={**_VIDEO_OPTIONS, "quality": "resolution"},
    ),
    "grok-imagine/text-to-video": JobModel(
        MediaKind.VIDEO, {"aspect_ratio": "3:2", "mode": "normal"}, option_fields={"aspect_ratio": "aspect_ratio"},
    ),
    # Speech
    "elevenlabs/text-to-speech-multilingual-v2": JobModel(
        MediaKind.SPEECH,
        {"voice": "Rachel", "stability": 0.5, "similarity_boost": 0.75},
        prompt_field="text",
        option_fields=_SPEECH_OPTIONS,
    ),
    "elevenlabs/text-to-speech-turbo-2-5": JobModel(
        MediaKind.SPEECH,
        {"voice": "Rachel", "stability": 0.5, "similarity_boost": 0.75},
        prompt_field="text",
        option_fields=_SPEECH_OPTIONS,
    ),
}

# Sora takes orientation words instead of ratios.
_SORA_ORIENTATION = {"16:9": "landscape", "9:16": "portrait", "landscape": "landscape", "portrait": "portrait"}

_SUCCESS_STATES = ("SUCCESS", "COMPLETED", "DONE")
_FAILURE_STATES = ("FAIL", "FAILED")
_RUNNING_STATES = ("GENERATING", "PROCESSING")

RESULT_PATHS = (
    ("data", "resultJson", PARSE_JSON, "resultUrls", 0),
    ("data", "resultJson", PARSE_JSON, "resultWaterMarkUrls", 0),
    ("data", "resultJson", PARSE_JSON, "imageUrls", 0),
    ("data", "resultJson", PARSE_JSON, "videoUrl"),
    ("data", "resultJson", PARSE_JSON, "imageUrl"),
    ("data", "resultJson", PARSE_JSON, "url"),
    ("data", "response", "resultUrls", 0),
    ("data", "response", "resultWaterMarkUrls", 0),
    ("data", "response", "videoUrl"),
    ("data", "resultUrls", 0),
    ("data", "videoUrl"),
    ("data", "imageUrl"),
    ("data", "url"),
)

# Fields whose presence alone means the job produced something.
_RESULT_PRESENCE = (
    ("data", "resultJson", PARSE_JSON),
    ("data", "response", "resultUrls", 0),
    ("data", "resultUrls", 0),
)


def build_payload(model_id: str, user_input: UserInput) -> dict:
    spec = MODELS[model_id]
    model_input: dict[str, Any] = dict(spec.defaults)
    if spec.prompt_field:
        model_input[spec.prompt_field] = user_input.prompt
    for attribute, target in spec.option_fields.items():
        value = getattr(user_input, attribute)
        if value is None or value == "":
            continue
        if target == "duration":
            value = str(value)
        model_input[target] = value

    if model_id.startswith("sora-") and user_input.aspect_ratio:
        model_input["aspect_ratio"] = _SORA_ORIENTATION.get(user_input.aspect_ratio, "landscape")
    if model_id == "recraft/remove-background":
        if not user_input.image_urls:
            raise ValueError("recraft/remove-background needs a source image url")
        model_input["image"] = user_input.image_urls[0]
    elif user_input.image_urls:
        model_input["image_urls"] = list(user_input.image_urls)
    model_input.update(user_input.extra)

    body: dict[str, Any] = {"model": spec.api_model or model_id, "input": model_input}
    if spec.task_type:
        body["task_type"] = spec.task_type
    return body


def normalize(payload: Mapping[str, Any]) -> NormalizedStatus:
    data = section(payload)
    state = state_text(
        first_signal(data.get("state"), data.get("status"), payload.get("state"), payload.get("status"))
    )
    failed_state = state if (state in _FAILURE_STATES or "ERROR" in state) else None
    failure = error_signal(data.get("failMsg"), data.get("failCode"), data.get("errorMessage"))
    return verdict(
        succeeded=first_signal(matching(state, _SUCCESS_STATES), first_present(payload, _RESULT_PRESENCE)),
        failed=first_signal(failed_state, failure),
        running=state in _RUNNING_STATES,
        error_detail=error_message(
            data.get("failMsg"), data.get("errorMessage"), data.get("error"), data.get("failCode")
        ),
    )


def extract(payload: Mapping[str, Any]) -> str | None:
    return first_url(payload, RESULT_PATHS)


ADAPTER = ProviderAdapter(
    family=FAMILY,
    service="kie",
    models={
        kind: tuple(model_id for model_id, spec in MODELS.items() if spec.media_kind is kind)
        for kind in (MediaKind.IMAGE, MediaKind.VIDEO, MediaKind.SPEECH)
    },
    submit_path="/api/v1/jobs/createTask",
    build_payload=build_payload,
    status_request=query_status("/api/v1/jobs/recordInfo"),
    normalize=normalize,
    extract=extract,
)
