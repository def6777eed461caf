"""Flask extension for session-based route protection.

Security Model:
1. Read the Authorization header of the request
2. Verify the Bearer token and check that it belongs to a tracked session
3. Store the session's credentials in flask.g.credentials for route access
4. Convert failures to HTTP 401 responses
"""

from __future__ import annotations

from functools import wraps
from typing import TYPE_CHECKING, Any, Final

from flask import Flask, abort, g, request

from .errors import AuthError

if TYPE_CHECKING:
    from collections.abc import Callable

    from .helper import Auth0Helper
    from .protocols import ViewFunc

_EXT_KEY: Final[str] = "easy_auth0"
"""Flask extensions registry key for Auth0Extension."""


class Auth0Extension:
    """
    Flask decorator glue for Auth0Helper.

    Pattern:
        auth = Auth0Extension()
        auth.init_app(app, helper=helper)

    Usage:
        auth = Auth0Extension(helper)

        @app.get("/me")
        @auth.require()
        def me():
            return {"email": g.credentials.user.email}
    """

    def __init__(self, helper: Auth0Helper | None = None) -> None:
        self._helper = helper

    def init_app(self, app: Flask, *, helper: Auth0Helper | None = None) -> None:
        """Register the extension on ``app``.

        Args:
            app (Flask): The Flask application instance.
            helper (Auth0Helper | None, optional): Helper to use. Defaults to
                the one given at construction.
        """
        if helper is not None:
            self._helper = helper
        if self._helper is None:
            raise RuntimeError("Auth0Extension needs an Auth0Helper")

        app.extensions[_EXT_KEY] = self

    @property
    def helper(self) -> Auth0Helper:
        if self._helper is None:
            raise RuntimeError("Auth0Extension is not initialized")
        return self._helper

    def require(self) -> Callable[[ViewFunc], ViewFunc]:
        """Decorator to protect Flask routes with a tracked Bearer session.

        Error mapping:
        - Missing or malformed header -> HTTP 401
        - Token fails verification or is not tracked -> HTTP 401

        Side Effects:
            - Writes the session's Credentials to ``flask.g.credentials``.
            - May terminate request handling early via ``flask.abort``.
        """

        def decorator(view: ViewFunc) -> ViewFunc:
            @wraps(view)
            def wrapper(*args: Any, **kwargs: Any) -> Any:
                header = request.headers.get("Authorization", "")
                if not header:
                    abort(401, description="Missing Authorization header")

                try:
                    authorized = self.helper.authorize(header)
                except AuthError as e:
                    abort(e.error_code, description=e.description)

                if not authorized:
                    abort(401, description="Invalid token")

                credentials = self.helper.credentials_for(header)
                if credentials is None:
                    abort(401, description="Session ended")

                g.credentials = credentials
                return view(*args, **kwargs)

            return wrapper

        return decorator
