"""Users, session credentials and token endpoint responses."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class User:
    """An identity provider user.

    Attributes:
        nickname: Provider nickname.
        display_name: Full name (user-info) or username (admin API).
        email: Email address, the key sessions are tracked under.
    """

    nickname: str
    display_name: str
    email: str

    @classmethod
    def from_userinfo(cls, data: Mapping[str, Any]) -> User:
        """Build a user from a ``/userinfo`` response body.

        Raises:
            ValueError: If the response has no email.
        """
        email = data.get("email")
        if not email:
            raise ValueError("User info response has no email")
        return cls(
            nickname=str(data.get("nickname") or ""),
            display_name=str(data.get("name") or ""),
            email=str(email),
        )

    @classmethod
    def from_management_api(cls, data: Mapping[str, Any]) -> User:
        """Build a user from an ``/api/v2/users`` record.

        Database connections without usernames fall back to ``name``.

        Raises:
            ValueError: If the record has no email.
        """
        email = data.get("email")
        if not email:
            raise ValueError("User record has no email")
        return cls(
            nickname=str(data.get("nickname") or ""),
            display_name=str(data.get("username") or data.get("name") or ""),
            email=str(email),
        )


@dataclass(slots=True)
class Credentials:
    """Session data of a logged-in user.

    ``access_token`` and ``expires_in`` are rewritten in place on refresh.
    ``refresh_token`` stays the one issued at login.
    """

    user: User
    access_token: str
    refresh_token: str | None
    expires_in: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "user": {
                "nickname": self.user.nickname,
                "display_name": self.user.display_name,
                "email": self.user.email,
            },
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "expires_in": self.expires_in,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Credentials:
        return cls(
            user=User(**data["user"]),
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token"),
            expires_in=int(data["expires_in"]),
        )


@dataclass(frozen=True, slots=True)
class TokenBundle:
    """Parsed response of the ``/oauth/token`` endpoint.

    Attributes:
        access_token: Opaque or JWT access token for provider APIs.
        expires_in: Lifetime of the tokens in seconds.
        id_token: OIDC ID token, present when ``openid`` was requested.
        refresh_token: Present when ``offline_access`` was requested.
        token_type: Usually ``Bearer``.
        scope: Granted scopes.
    """

    access_token: str
    expires_in: int
    id_token: str | None = None
    refresh_token: str | None = None
    token_type: str | None = None
    scope: str | None = None

    @property
    def session_token(self) -> str:
        """Token tracked as the session's access token.

        The ID token is signed with the client secret, so it is the one
        ``authorize`` can verify; the access token is used when the provider
        returned no ID token.
        """
        return self.id_token or self.access_token

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> TokenBundle:
        """Parse a token endpoint JSON body.

        Raises:
            ValueError: If ``access_token`` is missing or ``expires_in`` is
                not an integer.
        """
        if not isinstance(data, Mapping):
            raise ValueError("Token response is not a JSON object")

        access_token = data.get("access_token")
        if not access_token or not isinstance(access_token, str):
            raise ValueError("Token response has no access_token")

        try:
            expires_in = int(data.get("expires_in", 0))
        except (TypeError, ValueError) as e:
            raise ValueError("Token response has an invalid expires_in") from e

        return cls(
            access_token=access_token,
            expires_in=expires_in,
            id_token=data.get("id_token"),
            refresh_token=data.get("refresh_token"),
            token_type=data.get("token_type"),
            scope=data.get("scope"),
        )
