from __future__ import annotations

import dataclasses
import json
from typing import Any, Mapping

import httpx
import pytest

from mediagen.config import DEFAULT_SERVICES, Settings
from mediagen.models import GenerationTask, MediaKind
from mediagen.providers.base import ProviderAdapter


class StubStatusClient:
    """Replays a fixed sequence of status responses.

    Items are payload dicts, or exceptions to raise for that cycle.
    """

    def __init__(self, responses: list[Any]) -> None:
        self.responses = list(responses)
        self.calls: list[tuple[str, str]] = []

    async def fetch_status(self, adapter: ProviderAdapter, remote_task_id: str) -> Mapping[str, Any]:
        self.calls.append((adapter.family, remote_task_id))
        if not self.responses:
            raise AssertionError("status polled more times than scripted")
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


class RecordingSleep:
    """Stand-in for asyncio.sleep that returns immediately."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class ScriptedProvider:
    """Serves httpx requests from per-path queues and records them."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], list[httpx.Response]] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, path: str, *responses: Any) -> None:
        queue = self.routes.setdefault((method, path), [])
        for response in responses:
            if isinstance(response, httpx.Response):
                queue.append(response)
            else:
                queue.append(httpx.Response(200, json=response))

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self.routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, json={"error": f"no route for {request.method} {request.url.path}"})
        return queue.pop(0)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def bodies(self, path: str) -> list[dict]:
        return [json.loads(r.content) for r in self.requests if r.url.path == path and r.content]


def make_task(
    media_kind: MediaKind = MediaKind.IMAGE,
    family: str = "flux-style",
    model_id: str = "flux-kontext-pro",
    remote_task_id: str | None = "abc123",
) -> GenerationTask:
    return GenerationTask(
        id="task-1",
        media_kind=media_kind,
        provider_family=family,
        model_id=model_id,
        remote_task_id=remote_task_id,
    )


@pytest.fixture
def settings() -> Settings:
    services = {
        name: dataclasses.replace(service, api_key=f"test-{name}-key")
        for name, service in DEFAULT_SERVICES.items()
    }
    return Settings(services=services)


@pytest.fixture
def no_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def provider() -> ScriptedProvider:
    return ScriptedProvider()

