"""Exception hierarchy for headless native login.

Internal failures are raised as these types and downgraded to a
NativeLoginResult at the login manager boundary. Only InvalidParameterError
is meant to reach application code.
"""

from __future__ import annotations


class NativeLoginError(Exception):
    """Base exception for all native login errors."""

    pass


class InvalidParameterError(NativeLoginError, ValueError):
    """Raised when the caller supplies parameters that break the API contract.

    Raised before any network call is made, for example when enterprise
    reCAPTCHA is requested without a site key or Google Cloud project id.
    """

    pass


class EncodingError(NativeLoginError):
    """Raised when a request value cannot be encoded."""

    pass


class DecodingError(NativeLoginError):
    """Raised when a response body is malformed or misses required fields."""

    pass


class PKCEError(NativeLoginError):
    """Raised when PKCE parameter generation fails."""

    pass


class TransportError(NativeLoginError):
    """Raised by transports for network failures and non-2xx responses.

    When the server answered, the status code and raw body are attached so
    the failure can be described in logs.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: bytes | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class AuthenticationRejectedError(NativeLoginError):
    """Raised when the authorization endpoint rejects the credentials."""

    pass


class TokenExchangeError(NativeLoginError):
    """Raised when the authorization code to token exchange fails."""

    pass
