"""
Transport Module.

The fetch orchestrator talks to the network through a *transport*: an async
callable `(url, init) -> response`. Any callable honoring this contract can be
set as `ClientConfig.transport` (tests use an in-memory one); by default
requests go through `HttpxTransport`, backed by `httpx.AsyncClient`.

A response exposes `ok`, `status` and an awaitable `json()`.
"""

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Optional, Protocol

import httpx

from ..enum import HttpMethod


@dataclass
class RequestInit:
    """
    Request parameters handed to the transport.

    Attributes:
        method (HttpMethod): The HTTP method.
        headers (Dict[str, str]): Request headers (content type, authorization).
        body (Optional[str]): JSON text of the serialized entity (mutating methods only).
        timeout (Optional[float]): Seconds granted to the request.
    """

    method: HttpMethod
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[str] = None
    timeout: Optional[float] = None


class TransportResponse(Protocol):
    ok: bool
    status: int

    async def json(self) -> Any: ...


Transport = Callable[[str, RequestInit], Awaitable[TransportResponse]]


class HttpxResponse:
    """Adapts an `httpx.Response` to the transport response contract."""

    def __init__(self, response: httpx.Response):
        self._response = response

    @property
    def ok(self) -> bool:
        return self._response.is_success

    @property
    def status(self) -> int:
        return self._response.status_code

    async def json(self) -> Any:
        # No content (e.g. 204)
        if not self._response.content:
            return None
        return self._response.json()

    def __repr__(self) -> str:
        return f"HttpxResponse(status={self.status})"


class HttpxTransport:
    """
    Default transport sending requests with `httpx.AsyncClient`.

    Args:
        client: A shared client. When omitted, a short-lived client is opened
            for each request with `client_options`.
        **client_options: Keyword arguments of `httpx.AsyncClient`.
    """

    def __init__(self, client: Optional[httpx.AsyncClient] = None, **client_options: Any):
        self._client = client
        self._client_options = client_options

    async def __call__(self, url: str, init: RequestInit) -> HttpxResponse:
        if self._client is not None:
            return await self._send(self._client, url, init)
        async with httpx.AsyncClient(**self._client_options) as client:
            return await self._send(client, url, init)

    async def _send(
        self, client: httpx.AsyncClient, url: str, init: RequestInit
    ) -> HttpxResponse:
        response = await client.request(
            init.method.value,
            url,
            headers=init.headers,
            content=init.body,
            timeout=init.timeout,
        )
        return HttpxResponse(response)

    async def aclose(self) -> None:
        """Closes the shared client, if any."""
        if self._client is not None:
            await self._client.aclose()
