"""Response models for the Headless Identity API."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


@dataclass(frozen=True)
class HttpResponse:
    """A response returned by the HTTP transport."""

    status_code: int
    content: bytes = b""
    headers: dict[str, str] = field(default_factory=dict, repr=False)

    @property
    def content_type(self) -> str | None:
        for name, value in self.headers.items():
            if name.lower() == "content-type":
                return value
        return None

    def is_success(self) -> bool:
        return 200 <= self.status_code < 300


class OtpResponse(BaseModel):
    """Passwordless login initialization response.

    The identifier is required by the passwordless authorization request.
    """

    status: str
    identifier: str


class AuthorizationResponse(BaseModel):
    """Headless Identity API authorization endpoint response.

    community_url replaces the login host as the token endpoint's base URL.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    community_url: str = Field(alias="sfdc_community_url")
    community_id: str = Field(alias="sfdc_community_id")
    code: str = Field(repr=False)


class OAuthErrorResponse(BaseModel):
    """OAuth error response fields (RFC 6749 Section 5.2).

    Only used to describe failed steps in logs.
    """

    error: str | None = None
    error_description: str | None = None
    error_uri: str | None = None

    def describe(self) -> str:
        description = self.error or "unknown_error"
        if self.error_description:
            description += f" - {self.error_description}"
        if self.error_uri:
            description += f" (see: {self.error_uri})"
        return description


@dataclass(frozen=True)
class TokenPayload:
    """Token endpoint success payload, forwarded verbatim to the session sink."""

    raw: bytes = field(repr=False)
    content_type: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Parse the payload as a JSON object."""
        return json.loads(self.raw)
