# session_auth/api/routes/__init__.py

from flask import Flask

from session_auth.api.routes.auth_routes import bp_auth
from session_auth.api.routes.health_routes import bp_health
from session_auth.api.routes.user_routes import bp_users


def register_routes(app: Flask, *, api_prefix: str, app_prefix: str) -> None:
    # health sits outside /api
    app.register_blueprint(bp_health, url_prefix=f"{app_prefix}/health")

    app.register_blueprint(bp_auth, url_prefix=f"{api_prefix}/auth")
    app.register_blueprint(bp_users, url_prefix=f"{api_prefix}/users")
