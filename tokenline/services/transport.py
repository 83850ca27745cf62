"""HTTP transport adapter on top of httpx."""
from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Dict, Optional

import httpx

from ..errors import TransportError, http_error_for
from ..models import TransportResponse
from ..utils.json import safe_parse_json

_NOT_JSON = object()


def _decode_body(response: httpx.Response) -> Any:
    text = response.text
    if not text:
        return None
    parsed = safe_parse_json(text, default=_NOT_JSON)
    return text if parsed is _NOT_JSON else parsed


class HTTPXTransport:
    """
    Network primitive backed by httpx.AsyncClient.

    Implements ITransport protocol.
    """

    def __init__(
        self,
        timeout: float = 60,
        not_found_message: str = "Not found",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._timeout = timeout
        self._not_found_message = not_found_message
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        self._client = httpx.AsyncClient(timeout=self._timeout, transport=self._transport)
        return self

    async def __aexit__(self, *args):
        if self._client:
            await self._client.aclose()
            self._client = None

    def _require_client(self) -> httpx.AsyncClient:
        if not self._client:
            raise RuntimeError("HTTPXTransport not initialized. Use 'async with' context.")
        return self._client

    async def request_once(
        self,
        url: str,
        method: str,
        headers: Dict[str, str],
        json_body: Optional[Any] = None,
    ) -> TransportResponse:
        client = self._require_client()
        kwargs: Dict[str, Any] = {"headers": {"Accept": "application/json", **headers}}
        if json_body is not None:
            kwargs["json"] = json_body

        try:
            response = await client.request(method, url, **kwargs)
        except httpx.RequestError as exc:
            raise TransportError(f"{method} {url} failed: {exc}") from exc

        return TransportResponse(status_code=response.status_code, body=_decode_body(response))

    async def upload_once(
        self,
        url: str,
        file_path: str,
        headers: Dict[str, str],
        field_name: str,
    ) -> str:
        client = self._require_client()
        path = Path(file_path)
        try:
            # Read off the event loop
            content = await asyncio.to_thread(path.read_bytes)
        except OSError as exc:
            raise TransportError(f"Cannot read {path}: {exc}") from exc

        try:
            response = await client.post(
                url,
                headers=headers,
                files={field_name: (path.name, content)},
            )
        except httpx.RequestError as exc:
            raise TransportError(f"Upload of {path.name} failed: {exc}") from exc

        if response.status_code < 200 or response.status_code >= 300:
            raise http_error_for(
                response.status_code,
                _decode_body(response),
                self._not_found_message,
            )
        return response.text
