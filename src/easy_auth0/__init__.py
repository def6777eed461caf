"""
Auth0 login, logout, token validation and refresh for application backends.

High-level flow
---------------
1. `Auth0Helper.login("Basic <b64(user:pass)>")`:
   - Decodes the header into username and password
   - Password-realm login at the tenant, then user-info lookup
   - Records the session (email -> credentials, token -> email)
2. `Auth0Helper.authorize("Bearer <token>")`:
   - Verifies the HS256 token (signature, issuer, audience, expiry)
   - Checks the token belongs to a tracked session
3. `Auth0Helper.refresh("Bearer <refresh token>")` swaps the session's
   access token; `Auth0Helper.logout("Bearer <token>")` forgets it.

Security notes
--------------
- A token must both verify and be tracked; logged-out tokens are rejected.
- Password reset and logout answer with booleans only, to avoid leaking
  whether an email or token exists.

Example usage
-------------

.. code-block:: python

    from easy_auth0 import Auth0Extension, Auth0Helper, Auth0Settings

    settings = Auth0Settings.from_env()
    helper = Auth0Helper.from_settings(settings)

    credentials = helper.login(request.headers["Authorization"])

    auth = Auth0Extension(helper)

    @app.route("/protected")
    @auth.require()
    def protected_route():
        return {"email": g.credentials.user.email}
"""

# Client
from .client import Auth0Client, normalize_domain

# Configuration
from .config import Auth0Settings

# Errors
from .errors import (
    AuthError,
    ExpiredToken,
    HeaderEncodingError,
    HeaderFormatError,
    InvalidDomainError,
    InvalidToken,
    LoginFailedError,
    RefreshFailedError,
    TokenGrantError,
)

# Flask extension
from .flask_extension import Auth0Extension

# Header parsing
from .headers import get_basic_header, get_bearer_token, split_basic_credentials, trim

# Facade
from .helper import Auth0Helper

# Models
from .models import Credentials, TokenBundle, User

# Protocols
from .protocols import Claims, IdentityProvider, SessionStore, TokenVerifier, ViewFunc

# Session stores
from .session_stores import InMemorySessionStore, RedisSessionStore

# Verifier
from .verifier import JWTVerifier, JWTVerifyOptions

__all__ = [
    # Errors
    "AuthError",
    "ExpiredToken",
    "HeaderEncodingError",
    "HeaderFormatError",
    "InvalidDomainError",
    "InvalidToken",
    "LoginFailedError",
    "RefreshFailedError",
    "TokenGrantError",
    # Protocols
    "Claims",
    "IdentityProvider",
    "SessionStore",
    "TokenVerifier",
    "ViewFunc",
    # Header parsing
    "get_basic_header",
    "get_bearer_token",
    "split_basic_credentials",
    "trim",
    # Models
    "Credentials",
    "TokenBundle",
    "User",
    # Verifier
    "JWTVerifier",
    "JWTVerifyOptions",
    # Session stores
    "InMemorySessionStore",
    "RedisSessionStore",
    # Client
    "Auth0Client",
    "normalize_domain",
    # Facade
    "Auth0Helper",
    # Configuration
    "Auth0Settings",
    # Flask extension
    "Auth0Extension",
]
