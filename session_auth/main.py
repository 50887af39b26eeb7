# session_auth/main.py
from __future__ import annotations

from flask import Flask
from flask_cors import CORS
from sqlalchemy.engine import Engine

from session_auth.api.cli import db_cli, tokens_cli
from session_auth.api.middlewares.error_handler import register_error_handlers
from session_auth.api.routes import register_routes
from session_auth.api.runtime import init_runtime
from session_auth.config.flask_config import configure_app
from session_auth.config.settings import Settings, get_settings
from session_auth.core.log_config import configure_logging
from session_auth.infrastructure.database.session import build_engine, create_schema
from session_auth.infrastructure.security.jwt_provider import JwtProvider
from session_auth.infrastructure.security.password_hasher import PasswordHasher


def create_app(settings: Settings | None = None, *, engine: Engine | None = None) -> Flask:
    # a missing or malformed secret/TTL fails here, before any request is served
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = Flask(__name__)

    api_prefix = settings.api_prefix
    app_prefix = settings.app_prefix.rstrip("/")

    CORS(
        app,
        resources={rf"{api_prefix}/*": {"origins": settings.cors_origin_list}},
        allow_headers=["Content-Type", "Authorization"],
        methods=["GET", "POST", "OPTIONS"],
    )

    configure_app(app, settings)

    if engine is None:
        engine = build_engine(
            settings.database_url,
            statement_timeout_ms=settings.db_statement_timeout_ms,
            echo=settings.debug,
        )
    create_schema(engine)

    init_runtime(
        app,
        engine=engine,
        jwt_provider=JwtProvider.from_settings(settings),
        hasher=PasswordHasher(settings.bcrypt_rounds),
    )

    register_routes(app, api_prefix=api_prefix, app_prefix=app_prefix)
    register_error_handlers(app)

    app.cli.add_command(tokens_cli)
    app.cli.add_command(db_cli)

    return app


if __name__ == "__main__":
    create_app().run(host="0.0.0.0", port=5000)
