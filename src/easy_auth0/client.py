"""
Auth0 authentication API client.

Wraps the remote calls the helper needs and the verifier for the tokens
they return.

Responsibilities
----------------
1. Normalize and validate the tenant domain once, at construction.
2. Password-realm login and user-info lookup.
3. Password reset trigger.
4. Refresh-token exchange that keeps the original refresh token.
5. Client-credentials grant and user listing for the management API.
6. Verification of session tokens (HS256, client secret as key).

Transport
---------
All calls go through an Authlib ``OAuth2Session`` (a ``requests.Session``).
Authlib keeps the token of the last ``fetch_token`` on the session; login
clears it again, so the session never holds a user's token between calls.
Requests that need a token pass it explicitly and set ``withhold_token=True``.
"""

from __future__ import annotations

import ipaddress
import logging
import re
from typing import TYPE_CHECKING, Any, Final
from urllib.parse import urlsplit

import requests
from authlib.integrations.requests_client import OAuth2Session

from .errors import InvalidDomainError, RefreshFailedError, TokenGrantError
from .models import TokenBundle, User
from .verifier import JWTVerifier, JWTVerifyOptions

if TYPE_CHECKING:
    from .protocols import Claims

logger = logging.getLogger(__name__)

GRANT_PASSWORD_REALM: Final[str] = "http://auth0.com/oauth/grant-type/password-realm"
GRANT_REFRESH: Final[str] = "refresh_token"
GRANT_CLIENT_CREDENTIALS: Final[str] = "client_credentials"

SCOPE_LOGIN: Final[str] = "openid offline_access"
SCOPE_REFRESH: Final[str] = "openid"

OAUTH_TOKEN_PATH: Final[str] = "/oauth/token"
USERINFO_PATH: Final[str] = "/userinfo"
CHANGE_PASSWORD_PATH: Final[str] = "/dbconnections/change_password"
USERS_PATH: Final[str] = "/api/v2/users"

_HOST_LABEL = re.compile(r"^(?!-)[a-z0-9-]{1,63}(?<!-)$", re.IGNORECASE)


def _is_valid_host(host: str) -> bool:
    try:
        ipaddress.ip_address(host)
        return True
    except ValueError:
        pass

    if len(host) > 253:
        return False
    # Single-label hosts such as "localhost" are accepted.
    return all(_HOST_LABEL.match(label) for label in host.rstrip(".").split("."))


def normalize_domain(domain: str) -> str:
    """Turn a tenant domain into an https base URL.

    - ``tenant.auth0.com`` -> ``https://tenant.auth0.com``
    - ``http://tenant.auth0.com`` -> ``https://tenant.auth0.com``
    - ``https://tenant.auth0.com/`` -> ``https://tenant.auth0.com``

    Raises:
        InvalidDomainError: If the result is not a valid URL.
    """
    domain = (domain or "").strip()

    if domain.startswith("http://"):
        url = "https://" + domain[len("http://") :]
    elif domain.startswith("https://"):
        url = domain
    else:
        url = "https://" + domain
    url = url.rstrip("/")

    if any(ch.isspace() for ch in url):
        raise InvalidDomainError("Invalid Domain URL")

    try:
        parts = urlsplit(url)
        host = parts.hostname
        parts.port  # noqa: B018  raises ValueError on an invalid port
    except ValueError as e:
        raise InvalidDomainError("Invalid Domain URL") from e

    if (
        parts.scheme != "https"
        or not host
        or parts.username is not None
        or "//" in parts.path
        or parts.query
        or parts.fragment
        or not _is_valid_host(host)
    ):
        raise InvalidDomainError("Invalid Domain URL")

    return url


class Auth0Client:
    """
    Client for an Auth0 tenant's authentication and management endpoints.

    Parameters
    ----------
    domain : str
        Tenant domain, with or without scheme (``tenant.eu.auth0.com``).

    client_id, client_secret : str
        Application credentials. The secret also verifies HS256 ID tokens.

    connection : str
        Database connection (realm) users log in against.

    session : OAuth2Session | None
        HTTP session to use. Built from the client credentials when omitted.

    leeway : int
        Clock skew tolerance in seconds when verifying tokens.

    Raises
    ------
    InvalidDomainError
        If the domain does not normalize to a valid URL.

    Example
    -------
    client = Auth0Client("tenant.auth0.com", "id", "secret", "Username-Password-Authentication")
    bundle = client.login("user@example.com", "hunter2")
    user = client.user_info(bundle.access_token)
    """

    def __init__(
        self,
        domain: str,
        client_id: str,
        client_secret: str,
        connection: str,
        *,
        session: Any | None = None,
        leeway: int = 1,
    ) -> None:
        self._base_url = normalize_domain(domain)
        self._client_id = client_id
        self._client_secret = client_secret
        self._connection = connection

        if session is None:
            session = OAuth2Session(
                client_id=client_id,
                client_secret=client_secret,
                token_endpoint_auth_method="client_secret_post",
            )
        self._session = session
        self._verifier = JWTVerifier(
            secret=client_secret,
            options=JWTVerifyOptions(
                issuer=self.issuer,
                audience=client_id,
                leeway=leeway,
            ),
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def issuer(self) -> str:
        """Expected ``iss`` claim: the base URL with a trailing slash."""
        return f"{self._base_url}/"

    @property
    def connection(self) -> str:
        return self._connection

    @property
    def verifier(self) -> JWTVerifier:
        return self._verifier

    def _url(self, path: str) -> str:
        return f"{self._base_url}{path}"

    def login(self, username: str, password: str) -> TokenBundle:
        """Password-realm grant against the configured connection.

        Raises:
            authlib OAuthError: The provider rejected the credentials.
            requests.RequestException: Transport failure.
            ValueError: The token response could not be parsed.
        """
        logger.debug("Login request for %s on connection %s", username, self._connection)
        try:
            token = self._session.fetch_token(
                self._url(OAUTH_TOKEN_PATH),
                grant_type=GRANT_PASSWORD_REALM,
                username=username,
                password=password,
                realm=self._connection,
                scope=SCOPE_LOGIN,
            )
        finally:
            self._session.token = None
        return TokenBundle.from_mapping(token)

    def user_info(self, access_token: str) -> User:
        """Fetch the profile of the user owning ``access_token``.

        Raises:
            requests.HTTPError: Non-2xx response.
            ValueError: The body is not JSON or has no email.
        """
        resp = self._session.get(
            self._url(USERINFO_PATH),
            headers={"Authorization": f"Bearer {access_token}"},
            withhold_token=True,
        )
        resp.raise_for_status()
        return User.from_userinfo(resp.json())

    def reset_password(self, email: str) -> None:
        """Ask the provider to send a password reset email.

        The provider answers the same way for known and unknown addresses.

        Raises:
            requests.RequestException: Transport failure or non-2xx response.
        """
        resp = self._session.post(
            self._url(CHANGE_PASSWORD_PATH),
            json={
                "client_id": self._client_id,
                "email": email,
                "connection": self._connection,
            },
            withhold_token=True,
        )
        resp.raise_for_status()

    def refresh(self, refresh_token: str) -> TokenBundle:
        """Exchange a refresh token for a new ID/access token.

        A raw form POST is used rather than ``OAuth2Session.refresh_token`` so
        the session keeps its original refresh token whatever the provider
        returns.

        Raises:
            RefreshFailedError: Transport failure, non-2xx response, or a body
                that is not a valid token response.
        """
        try:
            resp = self._session.post(
                self._url(OAUTH_TOKEN_PATH),
                data={
                    "grant_type": GRANT_REFRESH,
                    "client_id": self._client_id,
                    "client_secret": self._client_secret,
                    "refresh_token": refresh_token,
                    "scope": SCOPE_REFRESH,
                },
                withhold_token=True,
            )
        except requests.RequestException as e:
            logger.warning("Refresh token request failed: %s", e)
            raise RefreshFailedError(f"Refresh token request failed: {e}") from e

        if not resp.ok:
            logger.warning("Refresh token request failed: %s - %s", resp.status_code, resp.reason)
            raise RefreshFailedError(
                f"Refresh token request failed: {resp.status_code} - {resp.reason}"
            )

        try:
            return TokenBundle.from_mapping(resp.json())
        except ValueError as e:
            logger.warning("Refresh token response not valid: %s", e)
            raise RefreshFailedError(
                f"Refresh token request not valid: {resp.status_code} - {resp.reason}"
            ) from e

    def client_credentials_token(self, audience: str) -> str:
        """Obtain a machine-to-machine access token for ``audience``.

        Raises:
            TokenGrantError: Transport failure, non-2xx response, or a body
                without an access token.
        """
        try:
            resp = self._session.post(
                self._url(OAUTH_TOKEN_PATH),
                data={
                    "grant_type": GRANT_CLIENT_CREDENTIALS,
                    "client_id": self._client_id,
                    "client_secret": self._client_secret,
                    "audience": audience,
                },
                withhold_token=True,
            )
            resp.raise_for_status()
            return TokenBundle.from_mapping(resp.json()).access_token
        except (requests.RequestException, ValueError) as e:
            logger.warning("Client credentials grant for %s failed: %s", audience, e)
            raise TokenGrantError(f"Client credentials grant failed: {e}") from e

    def list_users(self, audience: str) -> list[User]:
        """List the users of the configured connection.

        Returns an empty list when the users request is not successful or
        its body is not a JSON list. Records without an email are skipped.

        Raises:
            TokenGrantError: If no management API token could be obtained.
        """
        access_token = self.client_credentials_token(audience)

        resp = self._session.get(
            self._url(USERS_PATH),
            params={"connection": self._connection},
            headers={"Authorization": f"Bearer {access_token}"},
            withhold_token=True,
        )
        if not resp.ok:
            logger.warning("Users request failed or no users found: %s", resp.status_code)
            return []

        try:
            records = resp.json()
        except ValueError as e:
            logger.warning("Users response is not JSON: %s", e)
            return []
        if not isinstance(records, list):
            logger.warning("Users response is not a list")
            return []

        users = []
        for record in records:
            if not isinstance(record, dict) or not record.get("email"):
                logger.warning("Skipping user record without email")
                continue
            users.append(User.from_management_api(record))
        return users

    def verify(self, token: str) -> Claims:
        """Verify a session token. See ``JWTVerifier.verify``."""
        return self._verifier.verify(token)
