"""Parsing of ``Authorization`` header values.

Supported schemes:
- ``Basic <base64(username:password)>``: used by login
- ``Bearer <token>``: used by logout, authorize and refresh

Headers coming from some clients carry a non-breaking space around the
scheme token, so values are trimmed of it as well as of ASCII whitespace
and control characters before parsing.
"""

from __future__ import annotations

import base64
import binascii
from typing import Final

from .errors import HeaderEncodingError, HeaderFormatError

BASIC_SCHEME: Final[str] = "Basic"
BEARER_SCHEME: Final[str] = "Bearer"

_TRIM_CHARS: Final[str] = "".join(chr(c) for c in range(0x21)) + "\u00a0"
"""Every code point up to and including space, plus NBSP."""


def trim(value: str) -> str:
    """Strip whitespace, control characters and NBSP from both ends."""
    return value.strip(_TRIM_CHARS)


def _scheme_value(header: str, scheme: str) -> str:
    trimmed = trim(header)
    if not trimmed.startswith(scheme):
        raise HeaderFormatError(f"Invalid Authorization header (expected '{scheme} <value>')")

    parts = [part for part in trimmed.split(" ") if part]
    if len(parts) < 2:
        raise HeaderFormatError(f"Invalid Authorization header (expected '{scheme} <value>')")

    return parts[1]


def get_basic_header(header: str) -> str:
    """Extract and decode the value of a Basic Authorization header.

    Args:
        header: Raw header value, e.g. ``"Basic dXNlcjpwd2Q="``.

    Returns:
        The base64-decoded value as text (``"user:pwd"``).

    Raises:
        HeaderFormatError: If the header does not use the Basic scheme.
        HeaderEncodingError: If the value is not base64 encoded UTF-8.
            Missing "=" padding is accepted.
    """
    value = _scheme_value(header, BASIC_SCHEME)
    # Padding is optional.
    value += "=" * (-len(value) % 4)
    try:
        return base64.b64decode(value, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise HeaderEncodingError("Invalid header encoding") from e


def get_bearer_token(header: str) -> str:
    """Extract the token of a Bearer Authorization header.

    Repeated spaces between scheme and token are tolerated, so
    ``"Bearer  abc "`` yields ``"abc"``.

    Raises:
        HeaderFormatError: If the header does not use the Bearer scheme or
            carries no token.
    """
    token = trim(_scheme_value(header, BEARER_SCHEME))
    if not token:
        raise HeaderFormatError("Bearer token is empty")
    return token


def split_basic_credentials(decoded: str) -> tuple[str, str]:
    """Split a decoded Basic value into ``(username, password)``.

    The split happens on the first ``:`` so passwords may contain colons.

    Raises:
        HeaderFormatError: If the value has no ``:`` separator.
    """
    username, sep, password = decoded.partition(":")
    if not sep:
        raise HeaderFormatError("Invalid header format (expected 'username:password')")
    return username, password
