"""Configuration for the headless native login client."""

from __future__ import annotations

import os
from dataclasses import dataclass
from urllib.parse import urlparse

from dotenv import load_dotenv

from nativelogin.constants import (
    CODE_VERIFIER_BYTE_LENGTH,
    MINIMUM_CODE_VERIFIER_BYTE_LENGTH,
)
from nativelogin.models.errors import InvalidParameterError

DEFAULT_ENV_PREFIX = "NATIVE_LOGIN_"


@dataclass(frozen=True)
class NativeLoginConfig:
    """Connected app settings and login host for native login.

    Attributes:
        client_id: Connected app consumer key
        redirect_uri: Connected app callback URL
        login_url: Base URL of the login host, e.g. https://login.salesforce.com
        timeout: HTTP request timeout in seconds for the default transport
        code_verifier_byte_length: Random bytes behind each PKCE verifier
    """

    client_id: str
    redirect_uri: str
    login_url: str
    timeout: float = 30.0
    code_verifier_byte_length: int = CODE_VERIFIER_BYTE_LENGTH

    def __post_init__(self) -> None:
        if not self.client_id:
            raise InvalidParameterError("client_id is required")
        if not self.redirect_uri:
            raise InvalidParameterError("redirect_uri is required")

        parsed = urlparse(self.login_url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise InvalidParameterError(
                f"login_url must be an http(s) URL, got {self.login_url!r}"
            )
        # Frozen dataclass, normalize through object.__setattr__
        object.__setattr__(self, "login_url", self.login_url.rstrip("/"))

        if self.timeout <= 0:
            raise InvalidParameterError("timeout must be positive")
        if self.code_verifier_byte_length < MINIMUM_CODE_VERIFIER_BYTE_LENGTH:
            raise InvalidParameterError(
                "code_verifier_byte_length must be at least "
                f"{MINIMUM_CODE_VERIFIER_BYTE_LENGTH}"
            )

    @classmethod
    def from_env(
        cls, prefix: str = DEFAULT_ENV_PREFIX, dotenv_path: str | None = None
    ) -> NativeLoginConfig:
        """Build a configuration from environment variables.

        Loads a ``.env`` file first (existing variables win), then reads
        ``<prefix>CLIENT_ID``, ``<prefix>REDIRECT_URI``, ``<prefix>LOGIN_URL``
        and the optional ``<prefix>TIMEOUT``.

        Raises:
            InvalidParameterError: If a required variable is missing or the
                timeout is not a number
        """
        load_dotenv(dotenv_path)

        def require(name: str) -> str:
            value = os.getenv(f"{prefix}{name}")
            if not value:
                raise InvalidParameterError(
                    f"Missing required environment variable {prefix}{name}"
                )
            return value

        timeout = os.getenv(f"{prefix}TIMEOUT")
        try:
            timeout_seconds = float(timeout) if timeout else 30.0
        except ValueError as e:
            raise InvalidParameterError(
                f"{prefix}TIMEOUT must be a number, got {timeout!r}"
            ) from e

        return cls(
            client_id=require("CLIENT_ID"),
            redirect_uri=require("REDIRECT_URI"),
            login_url=require("LOGIN_URL"),
            timeout=timeout_seconds,
        )
