import json
from typing import Any

from nativelogin.config import NativeLoginConfig
from nativelogin.models.errors import TransportError
from nativelogin.models.requests import HttpRequest
from nativelogin.models.responses import HttpResponse, TokenPayload
from nativelogin.transport.base import HttpTransport

AUTHORIZATION_BODY = {
    "sfdc_community_url": "https://community.example.com/portal",
    "sfdc_community_id": "0DBxx0000000001",
    "code": "auth-code-123",
}

TOKEN_BODY = {
    "access_token": "access-token-xyz",
    "refresh_token": "refresh-token-abc",
    "instance_url": "https://community.example.com",
    "id": "https://login.example.com/id/00Dxx/005xx",
    "token_type": "Bearer",
}


def make_config() -> NativeLoginConfig:
    return NativeLoginConfig(
        client_id="client-456",
        redirect_uri="https://myapp.com/callback",
        login_url="https://login.example.com",
    )


def json_response(body: Any, status_code: int = 200) -> HttpResponse:
    return HttpResponse(
        status_code=status_code,
        content=json.dumps(body).encode("utf-8"),
        headers={"Content-Type": "application/json"},
    )


class MockTransport(HttpTransport):
    """Mock transport replaying queued responses or errors in order."""

    def __init__(self, *outcomes: HttpResponse | Exception):
        self.outcomes = list(outcomes)
        self.sent_requests: list[HttpRequest] = []
        self.closed = False

    async def send(self, request: HttpRequest) -> HttpResponse:
        self.sent_requests.append(request)
        if not self.outcomes:
            raise TransportError("No response queued")
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    async def close(self) -> None:
        self.closed = True


class RecordingSessionSink:
    """Synchronous session sink recording every call."""

    def __init__(self):
        self.sessions: list[tuple[TokenPayload, Any]] = []

    def create_session(self, token_payload: TokenPayload, context: Any) -> None:
        self.sessions.append((token_payload, context))
