"""JWT verification implementation using PyJWT.

Tokens handed out by the helper are ID tokens signed by the provider with
the application's client secret (HS256). The verifier checks:
- the signature against the shared secret
- the issuer (``https://<tenant>/``)
- the audience (the client id)
- expiry, with a small clock-skew leeway

PyJWT exceptions are mapped to domain-specific error types.
"""

from __future__ import annotations

from dataclasses import dataclass

import jwt

from .errors import ExpiredToken, InvalidToken
from .protocols import Claims


@dataclass(frozen=True, slots=True)
class JWTVerifyOptions:
    """Configuration for JWT validation rules.

    Attributes:
        issuer: Expected `iss` claim, e.g. "https://dev-abc123.us.auth0.com/"
            (note trailing slash).
        audience: Expected `aud` claim. For ID tokens this is the client id.
            If None, tokens carrying an `aud` claim are rejected by PyJWT.
        algorithms: Allowed signing algorithms. Must be an explicit allowlist
            to prevent algorithm confusion. Default: ("HS256",)
        leeway: Clock skew tolerance in seconds for exp/nbf/iat validation.
    """

    issuer: str
    audience: str | None
    algorithms: tuple[str, ...] = ("HS256",)
    leeway: int = 1


class JWTVerifier:
    """Shared-secret JWT verification using PyJWT.

    Thread Safety:
        Stateless apart from immutable configuration; safe to share.

    Example:
        ```python
        verifier = JWTVerifier(
            secret=client_secret,
            options=JWTVerifyOptions(
                issuer="https://dev-abc123.us.auth0.com/",
                audience=client_id,
            ),
        )

        try:
            claims = verifier.verify(raw_token)
        except ExpiredToken:
            ...
        except InvalidToken:
            ...
        ```
    """

    def __init__(self, secret: str | bytes, options: JWTVerifyOptions) -> None:
        if not secret:
            raise ValueError("secret cannot be empty")
        self._secret = secret
        self._opt = options

    @property
    def options(self) -> JWTVerifyOptions:
        return self._opt

    def verify(self, token: str) -> Claims:
        """Verify a JWT and return its decoded claims.

        Raises:
            ExpiredToken: If the exp claim has passed (accounting for leeway).
            InvalidToken: If the token is malformed, the signature is invalid
                or the issuer/audience don't match.
        """
        try:
            return jwt.decode(
                token,
                self._secret,
                algorithms=list(self._opt.algorithms),
                audience=self._opt.audience,
                issuer=self._opt.issuer,
                leeway=self._opt.leeway,
            )
        except jwt.ExpiredSignatureError as e:
            raise ExpiredToken("Token has expired") from e
        except jwt.InvalidTokenError as e:
            raise InvalidToken(f"Token validation failed: {e}") from e
