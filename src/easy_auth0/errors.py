"""Authentication and Auth0 client errors.

This module defines the exception hierarchy raised by the helper. All errors
inherit from AuthError to allow catch-all error handling.

Each error carries an ``error_code`` (the HTTP status an application would
answer with) and a ``description`` used by the Flask integration.

Security Note:
    Error messages are intentionally generic to avoid leaking implementation
    details. Detailed logs are written server-side, not returned to clients.
"""

from __future__ import annotations


class AuthError(Exception):
    """Base exception for all helper failures.

    Attributes:
        error_code: HTTP status code an application should answer with.
    """

    error_code: int = 401

    @property
    def description(self) -> str:
        """Human readable message (the first exception argument)."""
        return str(self.args[0]) if self.args else self.__class__.__name__


class InvalidDomainError(AuthError):
    """Raised at construction when the tenant domain is not a valid URL.

    This is fatal: no client can be built from the given configuration.
    """

    error_code = 500


class HeaderFormatError(AuthError):
    """Raised when an Authorization header has the wrong scheme or shape.

    This occurs when:
    - The header does not start with the expected scheme (Basic / Bearer)
    - The scheme is not followed by a value
    - A decoded Basic value has no ``username:password`` separator
    """


class HeaderEncodingError(AuthError):
    """Raised when a Basic header value is not valid base64 encoded UTF-8."""


class InvalidToken(AuthError):  # noqa: N818
    """Raised when a token is present but cannot be verified.

    This occurs when:
    - Token is malformed (not a valid JWT structure)
    - Signature verification fails (wrong secret or tampered token)
    - Issuer (iss) or audience (aud) doesn't match
    """


class ExpiredToken(InvalidToken):
    """Raised when a token's expiration time (exp claim) has passed."""


class LoginFailedError(AuthError):
    """Raised when the provider rejects credentials or the login call fails."""


class RefreshFailedError(AuthError):
    """Raised when a refresh request fails or its response cannot be parsed."""


class TokenGrantError(AuthError):
    """Raised when a client-credentials grant for the admin API fails."""

    error_code = 502
