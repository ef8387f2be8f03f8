"""PKCE (Proof Key for Code Exchange) generator for headless login.

Implements RFC 7636 S256 parameter generation. The authorization request
carries only the challenge; the verifier is revealed once, to the token
endpoint, by the same attempt.
"""

from __future__ import annotations

import hashlib
import secrets
from collections.abc import Callable

from nativelogin.constants import (
    CODE_VERIFIER_BYTE_LENGTH,
    MINIMUM_CODE_VERIFIER_BYTE_LENGTH,
)
from nativelogin.models.errors import EncodingError, PKCEError
from nativelogin.models.security import PKCEParameters, urlsafe_b64encode


def _sha256(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


class PKCEGenerator:
    """Generates PKCE parameters for native login attempts.

    The random byte source and digest function are pluggable so hosts can
    supply their own cryptographic provider. Verifiers are base64url
    encodings of ``byte_length`` random bytes, the length the Headless
    Identity API expects.
    """

    def __init__(
        self,
        byte_length: int = CODE_VERIFIER_BYTE_LENGTH,
        random_bytes: Callable[[int], bytes] = secrets.token_bytes,
        digest: Callable[[bytes], bytes] = _sha256,
    ):
        """Initialize the generator.

        Args:
            byte_length: Number of random bytes behind each verifier
            random_bytes: Cryptographically secure byte source
            digest: SHA-256 digest function

        Raises:
            ValueError: If byte_length is below 32
        """
        if byte_length < MINIMUM_CODE_VERIFIER_BYTE_LENGTH:
            raise ValueError(
                f"byte_length must be at least {MINIMUM_CODE_VERIFIER_BYTE_LENGTH}"
            )
        self.byte_length = byte_length
        self._random_bytes = random_bytes
        self._digest = digest

    def generate_parameters(self) -> PKCEParameters:
        """Generate a fresh verifier/challenge pair for one login attempt.

        Returns:
            PKCEParameters: Immutable parameters for the attempt

        Raises:
            PKCEError: If parameter generation fails
        """
        try:
            code_verifier = self.generate_code_verifier()
            code_challenge = self.generate_challenge(code_verifier)

            return PKCEParameters(
                code_verifier=code_verifier,
                code_challenge=code_challenge,
            )

        except Exception as e:
            raise PKCEError(f"Failed to generate PKCE parameters: {e}") from e

    def generate_code_verifier(self) -> str:
        """Generate a cryptographically secure code verifier.

        Returns:
            Unpadded base64url encoding of ``byte_length`` random bytes
        """
        return urlsafe_b64encode(self._random_bytes(self.byte_length))

    def generate_challenge(self, code_verifier: str) -> str:
        """Derive the S256 code challenge for a verifier.

        RFC 7636 Section 4.2: BASE64URL-ENCODE(SHA256(code_verifier))

        Raises:
            EncodingError: If the verifier cannot be UTF-8 encoded
        """
        try:
            data = code_verifier.encode("utf-8")
        except UnicodeEncodeError as e:
            raise EncodingError(f"Cannot UTF-8 encode code verifier: {e.reason}") from e

        return urlsafe_b64encode(self._digest(data))
