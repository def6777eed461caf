"""Protocol definitions for the Auth0 helper.

This module defines structural interfaces using Protocol (PEP 544) for:
- Token verification
- Session tracking
- Identity provider calls

Using protocols allows for duck-typing and easier testing/mocking without
requiring explicit inheritance. Any class that implements the required methods
satisfies the protocol.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any, Protocol, TypeAlias

if TYPE_CHECKING:
    from .models import Credentials, TokenBundle, User

# ============================================================================
# Type Aliases
# ============================================================================

Claims: TypeAlias = Mapping[str, Any]
"""Represents the decoded JWT payload as an immutable mapping."""

ViewFunc: TypeAlias = Callable[..., Any]
"""Type alias for Flask view functions."""


# ============================================================================
# Core Protocols
# ============================================================================


class TokenVerifier(Protocol):
    """Protocol for JWT verification implementations."""

    def verify(self, token: str) -> Claims:
        """Verify a JWT and return its decoded claims.

        Raises:
            InvalidToken: Token is malformed, signature invalid, or claims invalid
            ExpiredToken: Token's exp claim has passed
        """
        ...


class SessionStore(Protocol):
    """Protocol for tracking logged-in users.

    A store keeps two mappings, ``email -> Credentials`` and
    ``access_token -> email``, plus a refresh token index. They are kept
    consistent by convention only, so callers must tolerate stale entries.

    All operations are total: absence is reported with ``None``/``False``,
    never with an exception.
    """

    def record(self, credentials: Credentials) -> None:
        """Insert or overwrite the entry for ``credentials.user.email``.

        The previous entry's access token is dropped from the reverse index.
        """
        ...

    def lookup(self, access_token: str) -> Credentials | None:
        """Return the credentials tracked under an access token."""
        ...

    def find_by_refresh_token(self, refresh_token: str) -> Credentials | None:
        """Return the credentials whose refresh token equals ``refresh_token``."""
        ...

    def replace_access_token(
        self, credentials: Credentials, access_token: str, expires_in: int
    ) -> Credentials | None:
        """Swap the session's access token after a refresh.

        Evicts the old token from the reverse index, indexes the new one and
        rewrites ``access_token``/``expires_in`` on ``credentials`` in place.

        Returns None and changes nothing if the session was forgotten or
        replaced by a new login since ``credentials`` was read.
        """
        ...

    def forget(self, access_token: str) -> bool:
        """Remove a session. Returns whether anything was removed."""
        ...

    def contains(self, access_token: str) -> bool:
        """Membership test against the reverse mapping."""
        ...


class IdentityProvider(Protocol):
    """Protocol for the remote calls the helper delegates to."""

    def login(self, username: str, password: str) -> TokenBundle: ...

    def user_info(self, access_token: str) -> User: ...

    def reset_password(self, email: str) -> None: ...

    def refresh(self, refresh_token: str) -> TokenBundle: ...

    def list_users(self, audience: str) -> list[User]: ...

    def verify(self, token: str) -> Claims: ...
