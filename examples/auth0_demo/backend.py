from dataclasses import asdict

from flask import Flask, g, jsonify, request

from easy_auth0 import Auth0Extension, Auth0Helper, AuthError, Credentials

from examples.auth0_demo.app_config import build_auth


def _credentials_json(credentials: Credentials) -> dict:
    return {
        "user": asdict(credentials.user),
        "access_token": credentials.access_token,
        "refresh_token": credentials.refresh_token,
        "expires_in": credentials.expires_in,
    }


def create_app(
    helper: Auth0Helper | None = None,
    auth: Auth0Extension | None = None,
) -> Flask:
    """
    Create the demo API guarded by Auth0 sessions.

    Returns:
        Flask: Configured Flask application instance
    """
    if helper is None:
        helper, auth = build_auth()
    elif auth is None:
        auth = Auth0Extension(helper)

    app = Flask(__name__)
    auth.init_app(app)

    def authorization() -> str:
        return request.headers.get("Authorization", "")

    # ==================== Routes ====================

    @app.post("/api/login")
    def login():
        """Log in with `Authorization: Basic <base64(user:password)>`."""
        credentials = helper.login(authorization())
        return jsonify(_credentials_json(credentials)), 200

    @app.post("/api/logout")
    def logout():
        """Forget the session of `Authorization: Bearer <access token>`."""
        return jsonify({"logged_out": helper.logout(authorization())}), 200

    @app.post("/api/refresh")
    def refresh():
        """Swap the access token with `Authorization: Bearer <refresh token>`."""
        credentials = helper.refresh(authorization())
        if credentials is None:
            return jsonify({"status": "denied", "message": "Unknown session"}), 401
        return jsonify(_credentials_json(credentials)), 200

    @app.post("/api/reset")
    def reset():
        """Start a password reset; always answers the same way."""
        email = (request.get_json(silent=True) or {}).get("email", "")
        helper.reset(email)
        return jsonify({"status": "sent"}), 202

    @app.get("/api/me")
    @auth.require()
    def me():
        """Profile of the session owning the Bearer token."""
        return jsonify(asdict(g.credentials.user)), 200

    @app.get("/api/users")
    @auth.require()
    def users():
        """Users of the connection, via the management API audience in AUTH0_API_AUDIENCE."""
        return jsonify([asdict(user) for user in helper.users()]), 200

    # ==================== Error Handlers ====================

    @app.errorhandler(AuthError)
    def auth_error(error: AuthError):
        """Answer helper errors with their status code."""
        return jsonify({"status": "denied", "message": error.description}), error.error_code

    @app.errorhandler(401)
    def unauthorized(error):
        """Handle unauthorized access errors."""
        return jsonify(
            {
                "status": "denied",
                "message": "Access Denied - Please login first",
                "authenticated": False,
            }
        ), 401

    return app
