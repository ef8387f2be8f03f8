"""Response decoding for the Headless Identity API.

Turns transport responses into typed records. Every malformed body surfaces
as DecodingError, which the login manager reports as an unknown error and
never as rejected credentials.
"""

from __future__ import annotations

import logging
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from nativelogin.models.errors import DecodingError
from nativelogin.models.responses import (
    AuthorizationResponse,
    HttpResponse,
    OAuthErrorResponse,
    OtpResponse,
    TokenPayload,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class ResponseDecoder:
    """Decodes JSON response bodies into response models."""

    def decode_otp_response(self, response: HttpResponse) -> OtpResponse:
        """Decode a passwordless login initialization response.

        Raises:
            DecodingError: If the body is not JSON or misses status/identifier
        """
        otp_response = self._decode(response, OtpResponse)
        logger.debug(f"OTP request status: {otp_response.status}")
        return otp_response

    def decode_authorization_response(
        self, response: HttpResponse
    ) -> AuthorizationResponse:
        """Decode an authorization endpoint response.

        Raises:
            DecodingError: If the body is not JSON or misses the community
                URL, community id or code
        """
        authorization_response = self._decode(response, AuthorizationResponse)
        logger.debug(
            "Authorization response for community "
            f"{authorization_response.community_id}"
        )
        return authorization_response

    def decode_token_payload(self, response: HttpResponse) -> TokenPayload:
        """Wrap a token endpoint response without inspecting its fields.

        Raises:
            DecodingError: If the response has no body
        """
        if not response.content:
            raise DecodingError("Token response body is empty")
        return TokenPayload(raw=response.content, content_type=response.content_type)

    def describe_error(self, body: bytes | None) -> str:
        """Summarize an OAuth error body for logging, best effort."""
        if not body:
            return "no response body"
        try:
            return OAuthErrorResponse.model_validate_json(body).describe()
        except ValidationError:
            return f"unparseable response body ({len(body)} bytes)"

    def _decode(
        self, response: HttpResponse, model: type[ModelT]
    ) -> ModelT:
        try:
            return model.model_validate_json(response.content)
        except ValidationError as e:
            raise DecodingError(
                f"Invalid {model.__name__} format: {e.error_count()} error(s), "
                f"first: {e.errors()[0]['msg']}"
            ) from e
