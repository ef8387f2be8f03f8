"""Terminal results and flow states returned by the login manager."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class NativeLoginResult(Enum):
    """The only outcome a login entry point reports to its caller.

    Underlying exception details are logged, never returned.
    """

    SUCCESS = "success"
    INVALID_USERNAME = "invalid_username"
    INVALID_PASSWORD = "invalid_password"
    INVALID_CREDENTIALS = "invalid_credentials"
    UNKNOWN_ERROR = "unknown_error"


class OtpVerificationMethod(Enum):
    """Delivery channel for a one-time passcode.

    The value doubles as the Auth-Verification-Type header value and the
    OTP request's verificationmethod field.
    """

    EMAIL = "email"
    SMS = "sms"


@dataclass(frozen=True)
class OtpRequestResult:
    """Outcome of an OTP request.

    otp_identifier is only present on success and must be passed to the
    passwordless authorization request.
    """

    result: NativeLoginResult
    otp_identifier: str | None = None

    def is_success(self) -> bool:
        return self.result is NativeLoginResult.SUCCESS


class LoginState(Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    REQUESTING_OTP = "requesting_otp"
    AWAITING_AUTHORIZATION = "awaiting_authorization"
    AWAITING_TOKEN_EXCHANGE = "awaiting_token_exchange"
    SUCCESS = "success"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (LoginState.SUCCESS, LoginState.FAILED, LoginState.CANCELLED)
