"""Request models for the Headless Identity API.

Contains the transport-neutral HTTP request shape, the reCAPTCHA modes of
the OTP request, and the form bodies of the authorization and token steps.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from urllib.parse import urlencode

from pydantic import BaseModel, ConfigDict, Field

from nativelogin.constants import (
    GRANT_TYPE_AUTHORIZATION_CODE,
    RECAPTCHA_EXPECTED_ACTION,
    RESPONSE_TYPE_CODE_CREDENTIALS,
)
from nativelogin.models.errors import InvalidParameterError


@dataclass(frozen=True)
class HttpRequest:
    """A single unauthenticated request handed to the HTTP transport."""

    method: str
    base_url: str
    path: str
    body: str
    content_type: str
    headers: dict[str, str] = field(default_factory=dict, repr=False)

    @property
    def url(self) -> str:
        return f"{self.base_url.rstrip('/')}/{self.path.lstrip('/')}"


@dataclass(frozen=True)
class StandardRecaptcha:
    """reCAPTCHA token from the standard reCAPTCHA SDK."""

    token: str


@dataclass(frozen=True)
class EnterpriseRecaptcha:
    """reCAPTCHA Enterprise event parameters.

    site_key is the reCAPTCHA key id and project_id the Google Cloud project
    id, both as shown in the Google Cloud console.
    """

    token: str
    site_key: str
    project_id: str
    expected_action: str = RECAPTCHA_EXPECTED_ACTION


RecaptchaMode = StandardRecaptcha | EnterpriseRecaptcha


def recaptcha_mode(
    token: str,
    site_key: str | None = None,
    project_id: str | None = None,
    is_enterprise: bool = False,
) -> RecaptchaMode:
    """Select the reCAPTCHA mode for an OTP request.

    Raises:
        InvalidParameterError: If enterprise reCAPTCHA is requested without
            a site key or Google Cloud project id
    """
    if not is_enterprise:
        return StandardRecaptcha(token=token)

    if not site_key:
        raise InvalidParameterError(
            "A reCAPTCHA site key must be provided when using enterprise reCAPTCHA."
        )
    if not project_id:
        raise InvalidParameterError(
            "A Google Cloud project id must be provided when using enterprise "
            "reCAPTCHA."
        )
    return EnterpriseRecaptcha(token=token, site_key=site_key, project_id=project_id)


class RecaptchaEvent(BaseModel):
    """The OTP request body's recaptchaevent member."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    token: str
    site_key: str = Field(alias="siteKey")
    project_id: str = Field(alias="projectId")
    expected_action: str = Field(
        default=RECAPTCHA_EXPECTED_ACTION, alias="expectedAction"
    )


class OtpRequestBody(BaseModel):
    """JSON body of the passwordless login initialization request.

    Exactly one of recaptcha and recaptchaevent is populated.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    recaptcha: str | None = None
    recaptchaevent: RecaptchaEvent | None = None
    username: str
    verification_method: str = Field(alias="verificationmethod")

    @classmethod
    def create(
        cls, username: str, recaptcha: RecaptchaMode, verification_method: str
    ) -> OtpRequestBody:
        if isinstance(recaptcha, EnterpriseRecaptcha):
            return cls(
                recaptchaevent=RecaptchaEvent(
                    token=recaptcha.token,
                    site_key=recaptcha.site_key,
                    project_id=recaptcha.project_id,
                    expected_action=recaptcha.expected_action,
                ),
                username=username,
                verification_method=verification_method,
            )
        return cls(
            recaptcha=recaptcha.token,
            username=username,
            verification_method=verification_method,
        )

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)


@dataclass(frozen=True)
class AuthorizationRequestBody:
    """Form body shared by the named-user and passwordless authorization steps."""

    client_id: str
    redirect_uri: str
    code_challenge: str
    response_type: str = RESPONSE_TYPE_CODE_CREDENTIALS

    def to_form_data(self) -> dict[str, str]:
        return {
            "response_type": self.response_type,
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "code_challenge": self.code_challenge,
        }

    def encode(self) -> str:
        return urlencode(self.to_form_data())


@dataclass(frozen=True)
class TokenRequest:
    """Authorization code exchange parameters (RFC 6749 Section 4.1.3).

    Includes the PKCE code_verifier (RFC 7636) of the attempt that obtained
    the code.
    """

    code: str
    client_id: str
    redirect_uri: str
    code_verifier: str = field(repr=False)
    grant_type: str = GRANT_TYPE_AUTHORIZATION_CODE

    def to_form_data(self) -> dict[str, str]:
        """Convert to form data for an application/x-www-form-urlencoded body."""
        return {
            "grant_type": self.grant_type,
            "code": self.code,
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "code_verifier": self.code_verifier,
        }

    def encode(self) -> str:
        return urlencode(self.to_form_data())
