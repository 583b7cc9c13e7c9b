"""Provider adapter definition and the signal helpers shared by families.

An adapter is static configuration: which service it talks to, which
models it claims, how to build the submission body, how to ask for
status, and the normalizer/extractor pair for its status payloads.
Normalizers and extractors are plain functions of the decoded JSON.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Mapping, Sequence

from mediagen.models import CanonicalStatus, MediaKind, NormalizedStatus, UserInput
from mediagen.paths import is_present, section

PayloadBuilder = Callable[[str, UserInput], dict]
Normalizer = Callable[[Mapping[str, Any]], NormalizedStatus]
Extractor = Callable[[Mapping[str, Any]], "str | None"]
TaskIdParser = Callable[[Mapping[str, Any]], "str | None"]
SubmissionCheck = Callable[[Mapping[str, Any]], "str | None"]


@dataclass(frozen=True)
class StatusRequest:
    """How to ask a provider for the state of one remote task."""
    method: str
    path: str
    params: dict[str, str] | None = None
    json: dict[str, Any] | None = None


StatusRequestBuilder = Callable[[str], StatusRequest]


def query_status(path: str, key: str = "taskId") -> StatusRequestBuilder:
    """GET ``path?<key>=<remote id>``."""
    def build(remote_task_id: str) -> StatusRequest:
        return StatusRequest("GET", path, params={key: remote_task_id})
    return build


def path_status(template: str) -> StatusRequestBuilder:
    """GET a path with the remote id substituted for ``{task_id}``."""
    def build(remote_task_id: str) -> StatusRequest:
        return StatusRequest("GET", template.format(task_id=remote_task_id))
    return build


def body_status(path: str, key: str) -> StatusRequestBuilder:
    """POST ``{<key>: <remote id>}`` to ``path``."""
    def build(remote_task_id: str) -> StatusRequest:
        return StatusRequest("POST", path, json={key: remote_task_id})
    return build


# ----------------------------------------------------------------------
# Submission response helpers
# ----------------------------------------------------------------------

def kie_task_id(payload: Mapping[str, Any]) -> str | None:
    """Find the task id in a ``{"code": 200, "data": {"taskId": ...}}`` envelope."""
    inner = section(payload)
    for source in (inner, payload):
        for key in ("taskId", "task_id", "id"):
            value = source.get(key)
            if is_present(value):
                return str(value)
    return None


def kie_envelope_error(payload: Mapping[str, Any]) -> str | None:
    """Return an error message when the envelope ``code`` is not 200."""
    code = payload.get("code")
    if code is not None and str(code) != "200":
        message = payload.get("msg") or payload.get("message") or payload.get("error") or payload
        return f"API error (code={code}): {message}"
    return None


# ----------------------------------------------------------------------
# Normalizer helpers
# ----------------------------------------------------------------------

def as_flag(value: Any) -> int | None:
    """Coerce a numeric status flag (``1`` or ``"1"``) to int."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    return None


def state_text(value: Any) -> str:
    """Upper-cased status string, or "" when absent."""
    if value is None or isinstance(value, (Mapping, list)):
        return ""
    return str(value).strip().upper()


def error_signal(*values: Any) -> Any:
    """First populated error field, ignoring zero codes that mean "no error"."""
    for value in values:
        if isinstance(value, Mapping):
            value = value.get("message") or value.get("detail") or value.get("code")
        if value in (0, "0"):
            continue
        if is_present(value):
            return value
    return None


def error_message(*values: Any) -> str | None:
    """Human-readable text for the first populated error field."""
    signal = error_signal(*values)
    return None if signal is None else str(signal)


def first_signal(*candidates: Any) -> Any:
    """First candidate that counts as present."""
    for candidate in candidates:
        if is_present(candidate):
            return candidate
    return None


def verdict(
    *,
    succeeded: Any = None,
    failed: Any = None,
    running: bool = False,
    error_detail: str | None = None,
) -> NormalizedStatus:
    """Collapse success/failure evidence into a canonical status.

    Failure evidence wins over success evidence. Any single success signal
    is enough. Without either the job is still in flight.
    """
    if is_present(failed):
        return NormalizedStatus(
            CanonicalStatus.FAILED,
            raw_success_signal=succeeded if is_present(succeeded) else None,
            raw_failure_signal=failed,
            error_detail=error_detail,
        )
    if is_present(succeeded):
        return NormalizedStatus(CanonicalStatus.SUCCEEDED, raw_success_signal=succeeded)
    return NormalizedStatus(CanonicalStatus.RUNNING if running else CanonicalStatus.PENDING)


def matching(value: Any, accepted: Sequence[Any]) -> Any:
    """Return ``value`` when it is one of ``accepted``, else None."""
    return value if value is not None and value in accepted else None


# ----------------------------------------------------------------------
# Payload builder helpers
# ----------------------------------------------------------------------

def apply_options(body: dict, user_input: UserInput, fields: Mapping[str, str]) -> dict:
    """Copy set ``UserInput`` attributes into ``body`` under provider names.

    ``fields`` maps a ``UserInput`` attribute to the provider's field name.
    Unset (None/empty) options leave the provider default in place.
    """
    for attribute, target in fields.items():
        value = getattr(user_input, attribute)
        if value is None or value == [] or value == "":
            continue
        body[target] = value
    return body


def merge_extra(body: dict, user_input: UserInput) -> dict:
    body.update(user_input.extra)
    return body


# ----------------------------------------------------------------------
# Adapter
# ----------------------------------------------------------------------

@dataclass(frozen=True)
class ProviderAdapter:
    """Static configuration for one provider family.

    Attributes:
        family: Family name, the registry key.
        service: Config section holding the base URL and credentials.
        models: Model ids claimed by this family, per media kind.
        submit_path: Path of the submission endpoint (POST).
        build_payload: (model_id, user_input) -> request body.
        status_request: remote id -> StatusRequest.
        normalize: Status payload -> NormalizedStatus.
        extract: Status payload -> artifact URL or None.
        parse_task_id: Submission response -> remote id or None.
        submission_error: Submission response -> error message or None.
        immediate_result: Submission response -> artifact URL, for providers
            that sometimes answer synchronously.
    """
    family: str
    service: str
    models: Mapping[MediaKind, Sequence[str]]
    submit_path: str
    build_payload: PayloadBuilder
    status_request: StatusRequestBuilder
    normalize: Normalizer
    extract: Extractor
    parse_task_id: TaskIdParser = kie_task_id
    submission_error: SubmissionCheck = kie_envelope_error
    immediate_result: Extractor | None = field(default=None)

    def claims(self, media_kind: MediaKind, model_id: str) -> bool:
        return model_id in self.models.get(media_kind, ())

    def model_ids(self) -> Iterator[tuple[MediaKind, str]]:
        for media_kind, model_ids in self.models.items():
            for model_id in model_ids:
                yield media_kind, model_id

    def build_submission_payload(self, model_id: str, user_input: UserInput) -> dict:
        return self.build_payload(model_id, user_input)
