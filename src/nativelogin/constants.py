"""Headless Identity API endpoints, header names and credential limits."""

from __future__ import annotations

# Endpoints
AUTHORIZE_PATH = "/services/oauth2/authorize"
TOKEN_PATH = "/services/oauth2/token"
PASSWORDLESS_LOGIN_INIT_PATH = "/services/auth/headless/init/passwordless/login"

# Headers
AUTHORIZATION_HEADER = "Authorization"
AUTHORIZATION_TYPE_BASIC = "Basic"
REQUEST_TYPE_HEADER = "Auth-Request-Type"
REQUEST_TYPE_NAMED_USER = "Named-User"
REQUEST_TYPE_PASSWORDLESS_LOGIN = "passwordless-login"
VERIFICATION_TYPE_HEADER = "Auth-Verification-Type"

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
JSON_CONTENT_TYPE = "application/json"

# OAuth parameters
RESPONSE_TYPE_CODE_CREDENTIALS = "code_credentials"
GRANT_TYPE_AUTHORIZATION_CODE = "authorization_code"
CODE_CHALLENGE_METHOD = "S256"

# The Headless Identity API expects verifiers derived from 128 random bytes
CODE_VERIFIER_BYTE_LENGTH = 128
MINIMUM_CODE_VERIFIER_BYTE_LENGTH = 32

# Credential limits
MAXIMUM_USERNAME_LENGTH = 80
MINIMUM_PASSWORD_LENGTH = 8
MAXIMUM_PASSWORD_LENGTH_IN_BYTES = 16000

RECAPTCHA_EXPECTED_ACTION = "login"
