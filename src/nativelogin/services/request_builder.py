"""Request construction for the Headless Identity API.

Builds the named-user authorization, passwordless OTP initialization,
passwordless authorization and token exchange requests. None of them carry
an existing session token.
"""

from __future__ import annotations

import logging

from nativelogin.config import NativeLoginConfig
from nativelogin.constants import (
    AUTHORIZATION_HEADER,
    AUTHORIZATION_TYPE_BASIC,
    AUTHORIZE_PATH,
    FORM_CONTENT_TYPE,
    JSON_CONTENT_TYPE,
    PASSWORDLESS_LOGIN_INIT_PATH,
    REQUEST_TYPE_HEADER,
    REQUEST_TYPE_NAMED_USER,
    REQUEST_TYPE_PASSWORDLESS_LOGIN,
    TOKEN_PATH,
    VERIFICATION_TYPE_HEADER,
)
from nativelogin.models.requests import (
    AuthorizationRequestBody,
    HttpRequest,
    OtpRequestBody,
    RecaptchaMode,
    TokenRequest,
)
from nativelogin.models.responses import AuthorizationResponse
from nativelogin.models.results import OtpVerificationMethod
from nativelogin.models.security import Credentials, colon_concatenated_b64

logger = logging.getLogger(__name__)


class RequestBuilder:
    """Assembles Headless Identity API requests for one connected app.

    Form values are percent-encoded. Credential and OTP values only ever
    appear in the Basic authorization header.
    """

    def __init__(self, config: NativeLoginConfig):
        self.config = config

    def build_authorization_request(
        self, credentials: Credentials, code_challenge: str
    ) -> HttpRequest:
        """Build the named-user (username/password) authorization request.

        Args:
            credentials: Trimmed and validated username/password
            code_challenge: S256 challenge of this attempt's verifier

        Raises:
            EncodingError: If the credentials cannot be encoded
        """
        headers = {
            REQUEST_TYPE_HEADER: REQUEST_TYPE_NAMED_USER,
            AUTHORIZATION_HEADER: credentials.to_basic_authorization(),
        }
        logger.debug(
            f"Built named-user authorization request for client {self.config.client_id}"
        )
        return self._authorization_request(headers, code_challenge)

    def build_otp_request(
        self,
        username: str,
        recaptcha: RecaptchaMode,
        verification_method: OtpVerificationMethod,
    ) -> HttpRequest:
        """Build the passwordless login initialization request.

        The JSON body carries either a reCAPTCHA token or a reCAPTCHA
        Enterprise event, never both.
        """
        body = OtpRequestBody.create(
            username=username,
            recaptcha=recaptcha,
            verification_method=verification_method.value,
        )
        logger.debug(
            f"Built OTP request with {type(recaptcha).__name__} "
            f"via {verification_method.value}"
        )
        return HttpRequest(
            method="POST",
            base_url=self.config.login_url,
            path=PASSWORDLESS_LOGIN_INIT_PATH,
            body=body.to_json(),
            content_type=JSON_CONTENT_TYPE,
        )

    def build_passwordless_authorization_request(
        self,
        otp_identifier: str,
        otp: str,
        verification_method: OtpVerificationMethod,
        code_challenge: str,
    ) -> HttpRequest:
        """Build the passwordless (OTP) authorization request.

        Args:
            otp_identifier: Identifier returned by the OTP request
            otp: One-time passcode the user received
            verification_method: Channel the OTP was delivered through
            code_challenge: S256 challenge of this attempt's verifier

        Raises:
            EncodingError: If the identifier or OTP cannot be encoded
        """
        authorization = colon_concatenated_b64(otp_identifier, otp)
        headers = {
            REQUEST_TYPE_HEADER: REQUEST_TYPE_PASSWORDLESS_LOGIN,
            VERIFICATION_TYPE_HEADER: verification_method.value,
            AUTHORIZATION_HEADER: f"{AUTHORIZATION_TYPE_BASIC} {authorization}",
        }
        logger.debug(
            "Built passwordless authorization request for client "
            f"{self.config.client_id}"
        )
        return self._authorization_request(headers, code_challenge)

    def build_token_request(
        self, authorization_response: AuthorizationResponse, code_verifier: str
    ) -> HttpRequest:
        """Build the authorization code exchange request.

        The token endpoint lives on the community URL returned by the
        authorization endpoint, not on the login host.
        """
        token_request = TokenRequest(
            code=authorization_response.code,
            client_id=self.config.client_id,
            redirect_uri=self.config.redirect_uri,
            code_verifier=code_verifier,
        )
        logger.debug(
            f"Built token request for {authorization_response.community_url}"
        )
        return HttpRequest(
            method="POST",
            base_url=authorization_response.community_url,
            path=TOKEN_PATH,
            body=token_request.encode(),
            content_type=FORM_CONTENT_TYPE,
        )

    def _authorization_request(
        self, headers: dict[str, str], code_challenge: str
    ) -> HttpRequest:
        body = AuthorizationRequestBody(
            client_id=self.config.client_id,
            redirect_uri=self.config.redirect_uri,
            code_challenge=code_challenge,
        )
        return HttpRequest(
            method="POST",
            base_url=self.config.login_url,
            path=AUTHORIZE_PATH,
            body=body.encode(),
            content_type=FORM_CONTENT_TYPE,
            headers=headers,
        )
