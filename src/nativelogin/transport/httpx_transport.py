"""httpx-backed transport for Headless Identity API requests."""

from __future__ import annotations

import logging

import httpx

from nativelogin.models.errors import TransportError
from nativelogin.models.requests import HttpRequest
from nativelogin.models.responses import HttpResponse
from nativelogin.transport.base import HttpTransport

logger = logging.getLogger(__name__)


class HttpxTransport(HttpTransport):
    """Sends requests with a shared ``httpx.AsyncClient``.

    Non-2xx responses are raised as TransportError with the status code and
    body attached, so the login manager sees one failure shape for network
    errors and server rejections.
    """

    def __init__(self, timeout: float = 30.0):
        """Initialize the transport.

        Args:
            timeout: HTTP request timeout in seconds
        """
        self.timeout = timeout
        self._http_client = httpx.AsyncClient(timeout=timeout)

    async def send(self, request: HttpRequest) -> HttpResponse:
        headers = {
            "Accept": "application/json",
            **request.headers,
            "Content-Type": request.content_type,
        }

        logger.debug(f"Sending {request.method} {request.url}")

        try:
            response = await self._http_client.request(
                request.method,
                request.url,
                content=request.body.encode("utf-8"),
                headers=headers,
            )
        except httpx.HTTPError as e:
            raise TransportError(
                f"HTTP error during {request.method} {request.url}: {e}"
            ) from e

        logger.debug(f"Received {response.status_code} from {request.url}")

        if not response.is_success:
            raise TransportError(
                f"{request.method} {request.url} failed with status "
                f"{response.status_code}",
                status_code=response.status_code,
                body=response.content,
            )

        return HttpResponse(
            status_code=response.status_code,
            content=response.content,
            headers=dict(response.headers),
        )

    async def close(self) -> None:
        """Close the HTTP client and clean up resources."""
        await self._http_client.aclose()
