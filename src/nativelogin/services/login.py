"""Headless native login orchestration.

Coordinates credential validation, PKCE, the authorization request and the
token exchange for both the username/password flow and the passwordless
one-time-passcode flow. Every public entry point returns a NativeLoginResult;
internal failures are logged and downgraded at this boundary.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import uuid
from collections.abc import Awaitable, Callable
from types import TracebackType
from typing import Any, Self, TypeVar

from nativelogin.config import NativeLoginConfig
from nativelogin.models.errors import (
    AuthenticationRejectedError,
    DecodingError,
    InvalidParameterError,
    NativeLoginError,
    TokenExchangeError,
    TransportError,
)
from nativelogin.models.requests import HttpRequest, recaptcha_mode
from nativelogin.models.responses import HttpResponse, TokenPayload
from nativelogin.models.results import (
    LoginState,
    NativeLoginResult,
    OtpRequestResult,
    OtpVerificationMethod,
)
from nativelogin.models.security import Credentials, PKCEParameters
from nativelogin.primitives.pkce import PKCEGenerator
from nativelogin.primitives.validation import validate_password, validate_username
from nativelogin.services.decoder import ResponseDecoder
from nativelogin.services.request_builder import RequestBuilder
from nativelogin.transport.base import HttpTransport, SessionSink
from nativelogin.transport.httpx_transport import HttpxTransport

logger = logging.getLogger(__name__)

ResultT = TypeVar("ResultT")


class LoginAttempt:
    """State of a single login attempt.

    Each attempt owns its PKCE parameters; nothing is shared between
    attempts.
    """

    def __init__(self, flow: str):
        self.flow = flow
        self.attempt_id = uuid.uuid4().hex[:8]
        self.state = LoginState.IDLE
        self.result: NativeLoginResult | None = None

    def transition(self, state: LoginState) -> None:
        if self.state.is_terminal:
            raise RuntimeError(
                f"Attempt {self.attempt_id} already ended in {self.state.value}"
            )
        logger.debug(
            f"[{self.flow} {self.attempt_id}] {self.state.value} -> {state.value}"
        )
        self.state = state

    def finish(self, result: NativeLoginResult) -> NativeLoginResult:
        self.transition(
            LoginState.SUCCESS
            if result is NativeLoginResult.SUCCESS
            else LoginState.FAILED
        )
        self.result = result
        return result


class NativeLoginManager:
    """Logs users in through the Headless Identity API without a web view.

    Supports two flows that share the same authorization-code tail:
    - Username/password: login()
    - Passwordless OTP: submit_otp_request() then
      submit_passwordless_authorization_request()

    The HTTP transport and session sink are injected collaborators. When no
    transport is given, an HttpxTransport is created and closed by close().
    """

    def __init__(
        self,
        config: NativeLoginConfig,
        transport: HttpTransport | None = None,
        session_sink: SessionSink | None = None,
        pkce: PKCEGenerator | None = None,
        context: Any = None,
    ):
        """Initialize the login manager.

        Args:
            config: Connected app settings and login host
            transport: HTTP transport, defaults to an HttpxTransport
            session_sink: Receives the token payload of successful logins
            pkce: PKCE generator, defaults to one sized from the config
            context: Opaque value passed to the session sink
        """
        self.config = config
        self.session_sink = session_sink
        self.context = context

        self._owns_transport = transport is None
        self._transport = transport or HttpxTransport(timeout=config.timeout)
        self._pkce = pkce or PKCEGenerator(byte_length=config.code_verifier_byte_length)
        self._requests = RequestBuilder(config)
        self._decoder = ResponseDecoder()

    async def login(self, username: str, password: str) -> NativeLoginResult:
        """Log in with a username and password.

        Surrounding whitespace is trimmed from both values. Invalid shapes
        fail fast without any network call.

        Returns:
            NativeLoginResult: SUCCESS once the session sink has received
            the token payload, otherwise the failure kind
        """
        attempt = LoginAttempt("password")

        async def run() -> NativeLoginResult:
            attempt.transition(LoginState.VALIDATING)
            trimmed_username = username.strip()
            trimmed_password = password.strip()

            if not validate_username(trimmed_username):
                return attempt.finish(NativeLoginResult.INVALID_USERNAME)
            if not validate_password(trimmed_password):
                return attempt.finish(NativeLoginResult.INVALID_PASSWORD)

            try:
                pkce_params = self._pkce.generate_parameters()
                request = self._requests.build_authorization_request(
                    Credentials(username=trimmed_username, password=trimmed_password),
                    pkce_params.code_challenge,
                )
            except NativeLoginError as e:
                logger.error(f"Failed to prepare authorization request: {e}")
                return attempt.finish(NativeLoginResult.UNKNOWN_ERROR)

            return await self._authorize_and_create_session(
                attempt, request, pkce_params
            )

        return await self._run(attempt, run, NativeLoginResult.UNKNOWN_ERROR)

    async def submit_otp_request(
        self,
        username: str,
        recaptcha_token: str,
        *,
        recaptcha_site_key: str | None = None,
        google_cloud_project_id: str | None = None,
        is_recaptcha_enterprise: bool = False,
        verification_method: OtpVerificationMethod = OtpVerificationMethod.EMAIL,
    ) -> OtpRequestResult:
        """Request a one-time passcode for passwordless login.

        Args:
            username: The user's username, trimmed before validation
            recaptcha_token: Token from the reCAPTCHA (Enterprise) SDK
            recaptcha_site_key: reCAPTCHA key id, required for enterprise
            google_cloud_project_id: Google Cloud project id, required for
                enterprise
            is_recaptcha_enterprise: Send a reCAPTCHA Enterprise event
                instead of a plain token
            verification_method: Channel the OTP is delivered through

        Returns:
            OtpRequestResult: SUCCESS with the OTP identifier, or the failure
            kind without one

        Raises:
            InvalidParameterError: If enterprise reCAPTCHA is requested
                without a site key or project id (no request is sent)
        """
        attempt = LoginAttempt("otp-request")

        async def run() -> OtpRequestResult:
            attempt.transition(LoginState.VALIDATING)
            trimmed_username = username.strip()
            if not validate_username(trimmed_username):
                return OtpRequestResult(
                    attempt.finish(NativeLoginResult.INVALID_USERNAME)
                )

            recaptcha = recaptcha_mode(
                recaptcha_token,
                site_key=recaptcha_site_key,
                project_id=google_cloud_project_id,
                is_enterprise=is_recaptcha_enterprise,
            )
            request = self._requests.build_otp_request(
                trimmed_username, recaptcha, verification_method
            )

            attempt.transition(LoginState.REQUESTING_OTP)
            try:
                response = await self._transport.send(request)
                otp_response = self._decoder.decode_otp_response(response)
            except TransportError as e:
                logger.error(f"OTP request failure: {e}")
                return OtpRequestResult(attempt.finish(NativeLoginResult.UNKNOWN_ERROR))
            except DecodingError as e:
                logger.error(f"OTP response could not be decoded: {e}")
                return OtpRequestResult(attempt.finish(NativeLoginResult.UNKNOWN_ERROR))

            logger.info(f"OTP requested via {verification_method.value}")
            return OtpRequestResult(
                attempt.finish(NativeLoginResult.SUCCESS),
                otp_identifier=otp_response.identifier,
            )

        return await self._run(
            attempt, run, OtpRequestResult(NativeLoginResult.UNKNOWN_ERROR)
        )

    async def submit_passwordless_authorization_request(
        self,
        otp: str,
        otp_identifier: str,
        verification_method: OtpVerificationMethod = OtpVerificationMethod.EMAIL,
    ) -> NativeLoginResult:
        """Complete passwordless login with the OTP the user received.

        A fresh verifier and challenge are generated for this request; the
        OTP request itself never used PKCE.

        Args:
            otp: The one-time passcode, trimmed before use
            otp_identifier: Identifier from a successful submit_otp_request()
            verification_method: Channel the OTP was delivered through

        Returns:
            NativeLoginResult: SUCCESS once the session sink has received
            the token payload, otherwise the failure kind
        """
        attempt = LoginAttempt("passwordless")

        async def run() -> NativeLoginResult:
            try:
                pkce_params = self._pkce.generate_parameters()
                request = self._requests.build_passwordless_authorization_request(
                    otp_identifier,
                    otp.strip(),
                    verification_method,
                    pkce_params.code_challenge,
                )
            except NativeLoginError as e:
                logger.error(f"Failed to prepare passwordless authorization: {e}")
                return attempt.finish(NativeLoginResult.UNKNOWN_ERROR)

            return await self._authorize_and_create_session(
                attempt, request, pkce_params
            )

        return await self._run(attempt, run, NativeLoginResult.UNKNOWN_ERROR)

    async def _run(
        self,
        attempt: LoginAttempt,
        steps: Callable[[], Awaitable[ResultT]],
        unknown_error: ResultT,
    ) -> ResultT:
        """Run an attempt's steps, downgrading unexpected failures.

        InvalidParameterError and cancellation propagate to the caller.
        """
        try:
            return await steps()
        except asyncio.CancelledError:
            # Abandoned by the caller, later responses are ignored
            attempt.state = LoginState.CANCELLED
            logger.info(f"[{attempt.flow} {attempt.attempt_id}] attempt cancelled")
            raise
        except InvalidParameterError as e:
            attempt.state = LoginState.FAILED
            logger.error(f"[{attempt.flow} {attempt.attempt_id}] {e}")
            raise
        except Exception:
            logger.exception(
                f"[{attempt.flow} {attempt.attempt_id}] unexpected login failure"
            )
            attempt.state = LoginState.FAILED
            attempt.result = NativeLoginResult.UNKNOWN_ERROR
            return unknown_error

    async def _authorize_and_create_session(
        self,
        attempt: LoginAttempt,
        authorization_request: HttpRequest,
        pkce_params: PKCEParameters,
    ) -> NativeLoginResult:
        """Send an authorization request, exchange the code and create the session.

        Authorization endpoint rejections map to INVALID_CREDENTIALS; every
        later failure, including undecodable responses, maps to
        UNKNOWN_ERROR.
        """
        attempt.transition(LoginState.AWAITING_AUTHORIZATION)
        try:
            authorization_response = await self._authorize(authorization_request)
        except AuthenticationRejectedError as e:
            logger.warning(f"Authentication error: {e}")
            return attempt.finish(NativeLoginResult.INVALID_CREDENTIALS)

        try:
            authorization = self._decoder.decode_authorization_response(
                authorization_response
            )
            attempt.transition(LoginState.AWAITING_TOKEN_EXCHANGE)
            token_payload = await self._exchange_code(
                authorization.community_url,
                self._requests.build_token_request(
                    authorization, pkce_params.code_verifier
                ),
            )
        except (DecodingError, TokenExchangeError) as e:
            logger.error(f"Login failed after authorization: {e}")
            return attempt.finish(NativeLoginResult.UNKNOWN_ERROR)

        try:
            await self._create_session(token_payload)
        except Exception:
            logger.exception("Session sink failed to create the user session")
            return attempt.finish(NativeLoginResult.UNKNOWN_ERROR)

        logger.info(f"[{attempt.flow} {attempt.attempt_id}] login successful")
        return attempt.finish(NativeLoginResult.SUCCESS)

    async def _authorize(self, request: HttpRequest) -> HttpResponse:
        try:
            return await self._transport.send(request)
        except TransportError as e:
            detail = self._decoder.describe_error(e.body)
            raise AuthenticationRejectedError(f"{e} ({detail})") from e

    async def _exchange_code(
        self, community_url: str, token_request: HttpRequest
    ) -> TokenPayload:
        logger.debug(f"Exchanging authorization code at {community_url}")
        try:
            response = await self._transport.send(token_request)
            return self._decoder.decode_token_payload(response)
        except TransportError as e:
            detail = self._decoder.describe_error(e.body)
            raise TokenExchangeError(f"Token exchange failed: {e} ({detail})") from e
        except DecodingError as e:
            raise TokenExchangeError(f"Invalid token response: {e}") from e

    async def _create_session(self, token_payload: TokenPayload) -> None:
        if self.session_sink is None:
            logger.warning("No session sink configured, token payload discarded")
            return

        result = self.session_sink.create_session(token_payload, self.context)
        if inspect.isawaitable(result):
            await result

    async def close(self) -> None:
        """Close the transport if this manager created it."""
        if self._owns_transport:
            await self._transport.close()

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
