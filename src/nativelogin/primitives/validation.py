"""Credential shape validation performed before any network call.

These are the weakest possible username and password requirements the
Headless Identity API enforces; passing them does not mean the credentials
are valid. Callers trim surrounding whitespace before validating.
"""

from __future__ import annotations

import re

from nativelogin.constants import (
    MAXIMUM_PASSWORD_LENGTH_IN_BYTES,
    MAXIMUM_USERNAME_LENGTH,
    MINIMUM_PASSWORD_LENGTH,
)

EMAIL_STYLE_PATTERN = re.compile(r"[A-Z0-9a-z._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")


def validate_username(username: str) -> bool:
    """Check the username is an email-style string of at most 80 characters."""
    if len(username) > MAXIMUM_USERNAME_LENGTH:
        return False
    return EMAIL_STYLE_PATTERN.fullmatch(username) is not None


def validate_password(password: str) -> bool:
    """Check the password has at least 8 characters, fits in 16000 UTF-8 bytes
    and contains at least one digit and one letter.
    """
    if len(password) < MINIMUM_PASSWORD_LENGTH:
        return False
    if len(password.encode("utf-8", errors="surrogatepass")) > (
        MAXIMUM_PASSWORD_LENGTH_IN_BYTES
    ):
        return False

    contains_number = any(character.isdecimal() for character in password)
    contains_letter = any(character.isalpha() for character in password)
    return contains_number and contains_letter
