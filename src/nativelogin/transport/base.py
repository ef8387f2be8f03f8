from __future__ import annotations

from abc import ABC, abstractmethod
from types import TracebackType
from typing import Any, Protocol, Self

from nativelogin.models.requests import HttpRequest
from nativelogin.models.responses import HttpResponse, TokenPayload


class HttpTransport(ABC):
    """Abstract HTTP transport for Headless Identity API requests.

    Sends one request per login step. Timeouts and retry policy belong to
    the transport. Implementations must be safe for concurrent, independent
    calls from several login attempts.
    """

    @abstractmethod
    async def send(self, request: HttpRequest) -> HttpResponse:
        """Send a request and return the server's 2xx response.

        Args:
            request: The request to send

        Raises:
            TransportError: On network failure or a non-2xx response
        """

    @abstractmethod
    async def close(self) -> None:
        """Release connections held by the transport."""

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()
        return None


class SessionSink(Protocol):
    """Receives the token payload of a successful login.

    Called exactly once per successful attempt. The return value is
    ignored; awaitable results are awaited.
    """

    def create_session(self, token_payload: TokenPayload, context: Any) -> Any:
        ...
