"""Security-related models for headless native login.

Contains PKCE parameters and the ephemeral credential pairs that are encoded
into Basic authorization header values.
"""

from __future__ import annotations

import base64
import re
from dataclasses import dataclass, field

from nativelogin.constants import AUTHORIZATION_TYPE_BASIC, CODE_CHALLENGE_METHOD
from nativelogin.models.errors import EncodingError

_URLSAFE_UNPADDED = re.compile(r"[A-Za-z0-9_-]+")


def urlsafe_b64encode(data: bytes) -> str:
    """Base64url-encode bytes without padding (RFC 4648 Section 5)."""
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def colon_concatenated_b64(left: str, right: str) -> str:
    """Encode ``left:right`` as unpadded base64url, as the Headless Identity API
    expects in its Basic authorization header values.

    Raises:
        EncodingError: If the values cannot be UTF-8 encoded
    """
    try:
        encoded = f"{left}:{right}".encode("utf-8")
    except UnicodeEncodeError as e:
        raise EncodingError(
            f"Unable to UTF-8 encode colon-concatenated value: {e.reason}"
        ) from e
    return urlsafe_b64encode(encoded)


@dataclass(frozen=True)
class PKCEParameters:
    """PKCE (Proof Key for Code Exchange) parameters for one login attempt.

    Immutable parameters generated for each authorization attempt and used
    by exactly one token exchange (RFC 7636).
    """

    code_verifier: str = field(repr=False)
    code_challenge: str = field()
    code_challenge_method: str = field(default=CODE_CHALLENGE_METHOD)

    def __post_init__(self) -> None:
        """Validate PKCE parameters are unpadded base64url values."""
        if len(self.code_verifier) < 43:
            raise ValueError("code_verifier must be at least 43 characters")
        if not _URLSAFE_UNPADDED.fullmatch(self.code_verifier):
            raise ValueError("code_verifier must be unpadded base64url")
        if len(self.code_challenge) != 43:
            raise ValueError("code_challenge must be 43 characters")
        if not _URLSAFE_UNPADDED.fullmatch(self.code_challenge):
            raise ValueError("code_challenge must be unpadded base64url")
        if self.code_challenge_method != CODE_CHALLENGE_METHOD:
            raise ValueError("Only S256 code challenge method is supported")


@dataclass(frozen=True)
class Credentials:
    """A username/password pair for the named-user authorization request.

    Only ever encoded into a single Basic authorization header value.
    """

    username: str
    password: str = field(repr=False)

    def to_basic_authorization(self) -> str:
        """Build the Authorization header value for these credentials."""
        encoded = colon_concatenated_b64(self.username, self.password)
        return f"{AUTHORIZATION_TYPE_BASIC} {encoded}"
