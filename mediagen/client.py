"""Async HTTP transport shared by every provider family.

One ``httpx.AsyncClient`` is opened per upstream service on first use,
with that service's base URL and auth header. Submission failures raise
``SubmissionError``; status failures raise ``PollTransportError`` so the
polling loop can count them and carry on.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Mapping

import httpx

from mediagen.config import Settings
from mediagen.errors import DownloadError, DryRunInterrupt, PollTransportError, SubmissionError
from mediagen.providers.base import ProviderAdapter

logger = logging.getLogger(__name__)

_DOWNLOAD_TIMEOUT = 300.0
_BODY_PREVIEW = 500


class ProviderClient:
    """Async client for provider submission and status endpoints.

    Usage::

        async with ProviderClient(settings) as client:
            data = await client.submit(adapter, payload)
            status = await client.fetch_status(adapter, "task-123")
    """

    def __init__(
        self,
        settings: Settings,
        dry_run: bool = False,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings
        self.dry_run = dry_run
        self._transport = transport
        self._clients: dict[str, httpx.AsyncClient] = {}

    async def __aenter__(self) -> ProviderClient:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def close(self) -> None:
        clients, self._clients = self._clients, {}
        for client in clients.values():
            await client.aclose()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _client_for(self, service: str) -> httpx.AsyncClient:
        client = self._clients.get(service)
        if client is None:
            config = self.settings.service(service)
            client = httpx.AsyncClient(
                base_url=config.base_url,
                headers={**config.auth_headers(), "Content-Type": "application/json"},
                timeout=httpx.Timeout(self.settings.timeout, connect=10.0),
                transport=self._transport,
            )
            self._clients[service] = client
        return client

    @staticmethod
    def _decode(response: httpx.Response) -> Mapping[str, Any] | None:
        try:
            data = response.json()
        except ValueError:
            return None
        return data if isinstance(data, Mapping) else None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def submit(self, adapter: ProviderAdapter, payload: dict) -> Mapping[str, Any]:
        """POST a submission body and return the decoded JSON object."""
        if self.dry_run:
            base_url = self.settings.service(adapter.service).base_url
            raise DryRunInterrupt("POST", f"{base_url}{adapter.submit_path}", payload)

        client = self._client_for(adapter.service)
        logger.debug(
            "POST %s%s %s", client.base_url, adapter.submit_path,
            json.dumps(payload, ensure_ascii=False)[:_BODY_PREVIEW],
        )
        try:
            response = await client.post(adapter.submit_path, json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise SubmissionError(
                f"HTTP {exc.response.status_code}: {exc.response.text[:_BODY_PREVIEW]}",
                status_code=exc.response.status_code,
                body=exc.response.text,
            ) from exc
        except httpx.TimeoutException as exc:
            raise SubmissionError(f"Request timeout: {exc}") from exc
        except httpx.HTTPError as exc:
            raise SubmissionError(f"Request failed: {exc}") from exc

        data = self._decode(response)
        if data is None:
            raise SubmissionError(
                f"Malformed submission response: {response.text[:_BODY_PREVIEW]}",
                status_code=response.status_code,
                body=response.text,
            )
        return data

    async def fetch_status(self, adapter: ProviderAdapter, remote_task_id: str) -> Mapping[str, Any]:
        """Request the status of one remote task and return the decoded JSON object."""
        request = adapter.status_request(remote_task_id)
        client = self._client_for(adapter.service)
        try:
            response = await client.request(
                request.method, request.path, params=request.params, json=request.json
            )
        except httpx.HTTPError as exc:
            raise PollTransportError(f"{type(exc).__name__}: {exc}") from exc

        if response.is_error:
            raise PollTransportError(f"HTTP {response.status_code}", status_code=response.status_code)
        data = self._decode(response)
        if data is None:
            raise PollTransportError(
                f"Unparseable status body: {response.text[:_BODY_PREVIEW]!r}",
                status_code=response.status_code,
            )
        return data

    async def download_file(self, url: str, output_path: str | Path) -> Path:
        """Download a file from a URL to a local path."""
        output = Path(output_path)
        output.parent.mkdir(parents=True, exist_ok=True)

        logger.info("Downloading %s -> %s", url, output)
        try:
            async with httpx.AsyncClient(
                timeout=_DOWNLOAD_TIMEOUT, transport=self._transport, follow_redirects=True,
            ) as dl_client:
                async with dl_client.stream("GET", url) as response:
                    response.raise_for_status()
                    with open(output, "wb") as f:
                        async for chunk in response.aiter_bytes(chunk_size=8192):
                            f.write(chunk)
        except httpx.HTTPError as exc:
            raise DownloadError(url, f"Download failed for {url}: {exc}") from exc

        logger.info("Downloaded: %s (%.1f KB)", output, output.stat().st_size / 1024)
        return output
