from easy_auth0 import Auth0Extension, Auth0Helper, Auth0Settings, SessionStore


def build_auth(
    settings: Auth0Settings | None = None,
    *,
    store: SessionStore | None = None,
) -> tuple[Auth0Helper, Auth0Extension]:
    """Build the helper and the Flask extension guarding the demo routes.

    Settings are read from the environment (and a .env file) when not given.
    """
    settings = settings or Auth0Settings.from_env()
    helper = Auth0Helper.from_settings(settings, store=store)
    # auth is the extension registered on the Flask app
    auth = Auth0Extension(helper)
    return helper, auth
