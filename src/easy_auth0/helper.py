"""Header-driven authentication facade.

``Auth0Helper`` is what an application calls from its request handlers. Every
method takes the raw ``Authorization`` header value:

- ``login``: ``Basic <base64(username:password)>``
- ``logout`` / ``authorize``: ``Bearer <access token>``
- ``refresh``: ``Bearer <refresh token>``

Flow (login)
------------
1. Decode the Basic header into username and password.
2. Password-realm login at the provider, then user-info lookup.
3. Record the new session, evicting any previous session of the same user.

Security notes
--------------
- ``authorize`` requires both a valid signature/issuer/expiry AND a tracked
  session, so logged-out tokens are rejected even while still unexpired.
- ``reset`` and ``logout`` answer with booleans only, so callers cannot
  learn whether an email or token exists from the error channel.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .client import Auth0Client
from .errors import AuthError, LoginFailedError, TokenGrantError
from .headers import get_basic_header, get_bearer_token, split_basic_credentials
from .models import Credentials
from .session_stores import InMemorySessionStore

if TYPE_CHECKING:
    from .config import Auth0Settings
    from .models import User
    from .protocols import IdentityProvider, SessionStore

logger = logging.getLogger(__name__)


class Auth0Helper:
    """Basic/Bearer authentication on top of an Auth0 tenant.

    Example:
        ```python
        helper = Auth0Helper(
            "tenant.eu.auth0.com",
            client_id,
            client_secret,
            "Username-Password-Authentication",
        )

        credentials = helper.login(request.headers["Authorization"])
        ...
        if not helper.authorize(request.headers["Authorization"]):
            abort(401)
        ```

    Attributes:
        _client: Identity provider calls and token verification.
        _store: Session tracking.
    """

    def __init__(
        self,
        domain: str,
        client_id: str,
        client_secret: str,
        connection: str,
        *,
        store: SessionStore | None = None,
        client: IdentityProvider | None = None,
        leeway: int = 1,
        audience: str | None = None,
    ) -> None:
        """Initialize the helper.

        Args:
            domain: Tenant domain, with or without scheme.
            client_id: Application client id.
            client_secret: Application client secret.
            connection: Database connection users log in against.
            store: Session store. Defaults to an InMemorySessionStore.
            client: Identity provider client. Built from the other arguments
                when omitted.
            leeway: Clock skew tolerance in seconds for token verification.
            audience: Default management API identifier for ``users``.

        Raises:
            InvalidDomainError: If the domain is not a valid URL.
        """
        self._client: IdentityProvider = client or Auth0Client(
            domain, client_id, client_secret, connection, leeway=leeway
        )
        self._store: SessionStore = store or InMemorySessionStore()
        self._audience = audience

    @classmethod
    def from_settings(
        cls, settings: Auth0Settings, *, store: SessionStore | None = None
    ) -> Auth0Helper:
        return cls(
            settings.domain,
            settings.client_id,
            settings.client_secret,
            settings.connection,
            store=store,
            leeway=settings.leeway,
            audience=settings.audience,
        )

    @property
    def store(self) -> SessionStore:
        return self._store

    def login(self, auth_header: str) -> Credentials:
        """Log a user in with a Basic Authorization header.

        Returns:
            The new session's credentials.

        Raises:
            HeaderFormatError: Not a Basic header, or no ``:`` in the value.
            HeaderEncodingError: The value is not base64 encoded UTF-8.
            LoginFailedError: The provider rejected the login or could not
                be reached.
        """
        username, password = split_basic_credentials(get_basic_header(auth_header))

        try:
            bundle = self._client.login(username, password)
            user = self._client.user_info(bundle.access_token)
        except Exception as e:
            logger.warning("Login failed for %s: %s", username, e)
            raise LoginFailedError(str(e) or "Login failed") from e

        credentials = Credentials(
            user=user,
            access_token=bundle.session_token,
            refresh_token=bundle.refresh_token,
            expires_in=bundle.expires_in,
        )
        self._store.record(credentials)
        return credentials

    def logout(self, auth_header: str) -> bool:
        """Forget the session of a Bearer access token.

        Returns:
            True if a session was removed, False if the token was not tracked.

        Raises:
            HeaderFormatError: Not a Bearer header.
        """
        return self._store.forget(get_bearer_token(auth_header))

    def authorize(self, auth_header: str) -> bool:
        """Check a Bearer access token.

        Returns:
            True only if the token verifies and belongs to a tracked session.

        Raises:
            HeaderFormatError: Not a Bearer header.
        """
        token = get_bearer_token(auth_header)
        try:
            self._client.verify(token)
        except AuthError as e:
            logger.info("Token rejected: %s", e)
            return False
        return self._store.contains(token)

    def refresh(self, auth_header: str) -> Credentials | None:
        """Get a new access token with a Bearer refresh token.

        The session keeps its refresh token; only the access token and its
        lifetime change.

        Returns:
            The updated credentials, or None if no session has this refresh
            token or the session ended while the provider was answering.

        Raises:
            HeaderFormatError: Not a Bearer header.
            RefreshFailedError: The provider rejected the refresh or answered
                with an unparseable body.
        """
        refresh_token = get_bearer_token(auth_header)
        bundle = self._client.refresh(refresh_token)

        credentials = self._store.find_by_refresh_token(refresh_token)
        if credentials is None:
            logger.info("Refreshed token does not belong to a tracked session")
            return None

        updated = self._store.replace_access_token(
            credentials, bundle.session_token, bundle.expires_in
        )
        if updated is None:
            logger.info("Session ended before its access token could be replaced")
        return updated

    def reset(self, email: str) -> bool:
        """Start a password reset flow.

        Returns:
            True if the provider accepted the request, False on any failure.
        """
        try:
            self._client.reset_password(email)
        except Exception as e:
            logger.warning("Password reset request failed: %s", e)
            return False
        return True

    def users(self, audience: str | None = None) -> list[User]:
        """List the users of the configured connection.

        Args:
            audience: Management API identifier, e.g.
                ``https://tenant.eu.auth0.com/api/v2/``. Defaults to the
                audience the helper was built with.

        Raises:
            TokenGrantError: If no audience is known or no management API
                token could be obtained.
        """
        audience = audience or self._audience
        if not audience:
            raise TokenGrantError("No management API audience configured")
        return self._client.list_users(audience)

    def credentials_for(self, auth_header: str) -> Credentials | None:
        """Return the tracked credentials of a Bearer access token, if any.

        Raises:
            HeaderFormatError: Not a Bearer header.
        """
        return self._store.lookup(get_bearer_token(auth_header))
