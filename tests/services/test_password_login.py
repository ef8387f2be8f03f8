"""Tests for the username/password native login flow.

High-impact tests covering the complete password flow:
- Fail-fast credential validation without network calls
- Authorization request followed by token exchange on the community URL
- Mapping of authorization, decoding and token failures to login results
- Session creation and cancellation behavior
"""

import asyncio
import base64
import hashlib
from unittest.mock import AsyncMock
from urllib.parse import parse_qs

import pytest

from nativelogin.models.errors import TransportError
from nativelogin.models.responses import HttpResponse
from nativelogin.models.results import NativeLoginResult
from nativelogin.services.login import NativeLoginManager
from tests.services.conftest import (
    AUTHORIZATION_BODY,
    TOKEN_BODY,
    MockTransport,
    RecordingSessionSink,
    json_response,
    make_config,
)


def _form(body: str) -> dict[str, str]:
    return {key: values[0] for key, values in parse_qs(body).items()}


class TestCredentialValidation:
    """Invalid credential shapes never reach the transport."""

    def setup_method(self):
        # Arrange
        self.transport = MockTransport()
        self.manager = NativeLoginManager(make_config(), transport=self.transport)

    @pytest.mark.parametrize(
        ("username", "password", "expected"),
        [
            ("", "", NativeLoginResult.INVALID_USERNAME),
            ("test@c", "", NativeLoginResult.INVALID_USERNAME),
            ("test@c.co", "", NativeLoginResult.INVALID_PASSWORD),
            ("test@c.co   ", "", NativeLoginResult.INVALID_PASSWORD),
            ("bpage@salesforce.com", "", NativeLoginResult.INVALID_PASSWORD),
            ("bpage@salesforce.com", "test123", NativeLoginResult.INVALID_PASSWORD),
            ("bpage@salesforce.com", "123456789", NativeLoginResult.INVALID_PASSWORD),
            ("bpage@salesforce.com", "abcdefghi", NativeLoginResult.INVALID_PASSWORD),
            ("bpage@salesforce.com", "  test123  ", NativeLoginResult.INVALID_PASSWORD),
        ],
    )
    async def test_invalid_shapes_fail_fast(self, username, password, expected):
        # Act
        result = await self.manager.login(username, password)

        # Assert
        assert result is expected
        assert self.transport.sent_requests == []

    async def test_valid_shapes_reach_the_authorization_endpoint(self):
        # Arrange
        self.transport.outcomes = [TransportError("rejected", status_code=400)]

        # Act
        result = await self.manager.login("bpage@salesforce.com", "mypass12")

        # Assert
        assert result is NativeLoginResult.INVALID_CREDENTIALS
        assert len(self.transport.sent_requests) == 1

    async def test_password_containing_username_reaches_authorization(self):
        # Arrange
        self.transport.outcomes = [TransportError("rejected", status_code=400)]

        # Act
        result = await self.manager.login("user@name.com", "passuser@name.com1word")

        # Assert
        assert result is not NativeLoginResult.INVALID_PASSWORD
        assert len(self.transport.sent_requests) == 1
        assert self.transport.sent_requests[0].path == "/services/oauth2/authorize"


class TestSuccessfulLogin:
    def setup_method(self):
        # Arrange
        self.transport = MockTransport(
            json_response(AUTHORIZATION_BODY), json_response(TOKEN_BODY)
        )
        self.session_sink = RecordingSessionSink()
        self.manager = NativeLoginManager(
            make_config(),
            transport=self.transport,
            session_sink=self.session_sink,
            context="scene-1",
        )

    async def test_login_exchanges_code_and_creates_session(self):
        # Act
        result = await self.manager.login(" bpage@salesforce.com ", " mypass12 ")

        # Assert
        assert result is NativeLoginResult.SUCCESS
        authorization_request, token_request = self.transport.sent_requests

        # Authorization request carries trimmed credentials and the challenge
        encoded = authorization_request.headers["Authorization"].split(" ", 1)[1]
        decoded = base64.urlsafe_b64decode(encoded + "=" * (-len(encoded) % 4))
        assert decoded == b"bpage@salesforce.com:mypass12"
        challenge = _form(authorization_request.body)["code_challenge"]

        # Token request goes to the community URL with the matching verifier
        assert token_request.url == (
            "https://community.example.com/portal/services/oauth2/token"
        )
        token_form = _form(token_request.body)
        assert token_form["code"] == "auth-code-123"
        verifier = token_form["code_verifier"]
        assert verifier not in authorization_request.body
        expected_challenge = (
            base64.urlsafe_b64encode(hashlib.sha256(verifier.encode()).digest())
            .decode("ascii")
            .rstrip("=")
        )
        assert challenge == expected_challenge

        # Session sink invoked exactly once with the verbatim payload
        assert len(self.session_sink.sessions) == 1
        payload, context = self.session_sink.sessions[0]
        assert payload.as_dict() == TOKEN_BODY
        assert context == "scene-1"

    async def test_each_attempt_uses_a_fresh_verifier(self):
        # Arrange
        self.transport.outcomes.extend(
            [json_response(AUTHORIZATION_BODY), json_response(TOKEN_BODY)]
        )

        # Act
        await self.manager.login("bpage@salesforce.com", "mypass12")
        await self.manager.login("bpage@salesforce.com", "mypass12")

        # Assert
        first_token, second_token = self.transport.sent_requests[1::2]
        assert (
            _form(first_token.body)["code_verifier"]
            != _form(second_token.body)["code_verifier"]
        )

    async def test_async_session_sink_is_awaited(self):
        # Arrange
        session_sink = AsyncMock()
        manager = NativeLoginManager(
            make_config(), transport=self.transport, session_sink=session_sink
        )

        # Act
        result = await manager.login("bpage@salesforce.com", "mypass12")

        # Assert
        assert result is NativeLoginResult.SUCCESS
        session_sink.create_session.assert_awaited_once()


class TestLoginFailures:
    def setup_method(self):
        self.session_sink = RecordingSessionSink()

    def _manager(self, *outcomes):
        self.transport = MockTransport(*outcomes)
        return NativeLoginManager(
            make_config(), transport=self.transport, session_sink=self.session_sink
        )

    async def test_authorization_rejection_is_invalid_credentials(self):
        # Arrange
        manager = self._manager(
            TransportError(
                "failed with status 401",
                status_code=401,
                body=b'{"error": "invalid_grant"}',
            )
        )

        # Act
        result = await manager.login("bpage@salesforce.com", "mypass12")

        # Assert
        assert result is NativeLoginResult.INVALID_CREDENTIALS
        assert len(self.transport.sent_requests) == 1
        assert self.session_sink.sessions == []

    async def test_network_failure_during_authorization_is_invalid_credentials(self):
        manager = self._manager(TransportError("connection reset"))

        result = await manager.login("bpage@salesforce.com", "mypass12")

        assert result is NativeLoginResult.INVALID_CREDENTIALS

    async def test_malformed_authorization_response_is_unknown_error(self):
        # Arrange
        manager = self._manager(HttpResponse(status_code=200, content=b"not json"))

        # Act
        result = await manager.login("bpage@salesforce.com", "mypass12")

        # Assert - decode failures are never reported as credential errors
        assert result is NativeLoginResult.UNKNOWN_ERROR
        assert len(self.transport.sent_requests) == 1

    async def test_authorization_response_missing_code_is_unknown_error(self):
        body = {k: v for k, v in AUTHORIZATION_BODY.items() if k != "code"}
        manager = self._manager(json_response(body))

        result = await manager.login("bpage@salesforce.com", "mypass12")

        assert result is NativeLoginResult.UNKNOWN_ERROR

    async def test_token_exchange_failure_is_unknown_error(self):
        # Arrange
        manager = self._manager(
            json_response(AUTHORIZATION_BODY),
            TransportError("failed with status 400", status_code=400, body=b"{}"),
        )

        # Act
        result = await manager.login("bpage@salesforce.com", "mypass12")

        # Assert
        assert result is NativeLoginResult.UNKNOWN_ERROR
        assert len(self.transport.sent_requests) == 2
        assert self.session_sink.sessions == []

    async def test_empty_token_response_is_unknown_error(self):
        manager = self._manager(
            json_response(AUTHORIZATION_BODY), HttpResponse(status_code=200)
        )

        result = await manager.login("bpage@salesforce.com", "mypass12")

        assert result is NativeLoginResult.UNKNOWN_ERROR
        assert self.session_sink.sessions == []

    async def test_failing_session_sink_is_unknown_error(self):
        # Arrange
        session_sink = AsyncMock()
        session_sink.create_session.side_effect = RuntimeError("store unavailable")
        manager = NativeLoginManager(
            make_config(),
            transport=MockTransport(
                json_response(AUTHORIZATION_BODY), json_response(TOKEN_BODY)
            ),
            session_sink=session_sink,
        )

        # Act
        result = await manager.login("bpage@salesforce.com", "mypass12")

        # Assert
        assert result is NativeLoginResult.UNKNOWN_ERROR

    async def test_unexpected_transport_exception_is_unknown_error(self):
        manager = self._manager(RuntimeError("transport bug"))

        result = await manager.login("bpage@salesforce.com", "mypass12")

        assert result is NativeLoginResult.UNKNOWN_ERROR


class TestCancellation:
    async def test_cancelled_attempt_never_creates_session(self):
        # Arrange
        release = asyncio.Event()
        session_sink = RecordingSessionSink()

        class SlowTransport(MockTransport):
            async def send(self, request):
                await release.wait()
                return await super().send(request)

        transport = SlowTransport(
            json_response(AUTHORIZATION_BODY), json_response(TOKEN_BODY)
        )
        manager = NativeLoginManager(
            make_config(), transport=transport, session_sink=session_sink
        )

        # Act
        task = asyncio.create_task(manager.login("bpage@salesforce.com", "mypass12"))
        await asyncio.sleep(0)
        task.cancel()
        release.set()

        # Assert
        with pytest.raises(asyncio.CancelledError):
            await task
        assert session_sink.sessions == []
        assert transport.sent_requests == []


class TestTransportOwnership:
    async def test_injected_transport_is_not_closed(self):
        transport = MockTransport()

        async with NativeLoginManager(make_config(), transport=transport):
            pass

        assert transport.closed is False

    async def test_default_transport_is_closed(self, monkeypatch):
        # Arrange
        created: list[MockTransport] = []

        def fake_httpx_transport(timeout: float) -> MockTransport:
            created.append(MockTransport())
            return created[-1]

        monkeypatch.setattr(
            "nativelogin.services.login.HttpxTransport", fake_httpx_transport
        )
        manager = NativeLoginManager(make_config())

        # Act
        await manager.close()

        # Assert
        assert len(created) == 1
        assert created[0].closed is True
