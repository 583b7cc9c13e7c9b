import dataclasses

import httpx
import pytest

from mediagen.client import ProviderClient
from mediagen.config import Settings
from mediagen.errors import DownloadError, PollTransportError, SubmissionError
from mediagen.providers import heygen, kie_flux, xai


def transport_for(handler):
    return httpx.MockTransport(handler)


@pytest.mark.asyncio
async def test_status_network_error_is_transient(settings):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with ProviderClient(settings, transport=transport_for(handler)) as client:
        with pytest.raises(PollTransportError, match="ConnectError"):
            await client.fetch_status(kie_flux.ADAPTER, "abc")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(503, json={"code": 503}),
        httpx.Response(200, text=""),
        httpx.Response(200, json=["not", "an", "object"]),
    ],
)
async def test_unusable_status_responses_are_transient(settings, response):
    async with ProviderClient(settings, transport=transport_for(lambda request: response)) as client:
        with pytest.raises(PollTransportError):
            await client.fetch_status(xai.ADAPTER, "r1")


@pytest.mark.asyncio
async def test_heygen_uses_api_key_header_and_query(settings):
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"code": 100, "data": {"status": "processing"}})

    async with ProviderClient(settings, transport=transport_for(handler)) as client:
        payload = await client.fetch_status(heygen.ADAPTER, "vid-1")

    assert payload["data"]["status"] == "processing"
    assert seen[0].url.path == "/v1/video_status.get"
    assert seen[0].url.params["video_id"] == "vid-1"
    assert seen[0].headers["X-Api-Key"] == "test-heygen-key"


@pytest.mark.asyncio
async def test_submit_timeout(settings):
    def handler(request):
        raise httpx.ReadTimeout("too slow", request=request)

    async with ProviderClient(settings, transport=transport_for(handler)) as client:
        with pytest.raises(SubmissionError, match="timeout"):
            await client.submit(kie_flux.ADAPTER, {"prompt": "x"})


@pytest.mark.asyncio
async def test_missing_key_only_matters_for_the_service_used(monkeypatch, settings):
    monkeypatch.delenv("XAI_API_KEY", raising=False)
    services = dict(settings.services)
    services["xai"] = dataclasses.replace(services["xai"], api_key="YOUR_XAI_API_KEY")
    partial = Settings(services=services)

    def handler(request):
        return httpx.Response(200, json={"code": 200, "data": {"successFlag": 0}})

    async with ProviderClient(partial, transport=transport_for(handler)) as client:
        await client.fetch_status(kie_flux.ADAPTER, "abc")
        with pytest.raises(ValueError, match="XAI_API_KEY"):
            await client.fetch_status(xai.ADAPTER, "r1")


@pytest.mark.asyncio
async def test_download_file(tmp_path, settings):
    def handler(request):
        assert request.url == "https://cdn.example.com/a.png"
        return httpx.Response(200, content=b"\x89PNG" + b"0" * 20000)

    target = tmp_path / "nested" / "a.png"
    async with ProviderClient(settings, transport=transport_for(handler)) as client:
        result = await client.download_file("https://cdn.example.com/a.png", target)

    assert result == target
    assert target.read_bytes().startswith(b"\x89PNG")
    assert target.stat().st_size == 20004


@pytest.mark.asyncio
async def test_download_failure(tmp_path, settings):
    transport = transport_for(lambda request: httpx.Response(404))

    async with ProviderClient(settings, transport=transport) as client:
        with pytest.raises(DownloadError, match="Download failed") as info:
            await client.download_file("https://cdn.example.com/gone.png", tmp_path / "gone.png")

    assert not isinstance(info.value, SubmissionError)
    assert info.value.url == "https://cdn.example.com/gone.png"
