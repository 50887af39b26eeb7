"""
tests/conftest.py -- Shared fixtures.

Every test gets its own in-memory SQLite database. build_engine() pins
":memory:" URLs to a StaticPool, so the schema created here is the one the
service (and the Flask test client) sees.

bcrypt runs at cost 4 in tests; the production default of 10 is covered
in test_password_hasher.py.
"""

from __future__ import annotations

from collections.abc import Generator

import pytest
from flask.testing import FlaskClient
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from session_auth.config.settings import Settings
from session_auth.infrastructure.database.session import build_engine, build_session_factory, create_schema
from session_auth.infrastructure.security.jwt_provider import JwtProvider
from session_auth.infrastructure.security.password_hasher import PasswordHasher
from session_auth.main import create_app
from session_auth.repositories.refresh_token_repository import RefreshTokenRepository
from session_auth.repositories.user_repository import UserRepository
from session_auth.services.session_service import SessionService

ACCESS_SECRET = "test-access-secret-0123456789abcdef"
REFRESH_SECRET = "test-refresh-secret-0123456789abcdef"


def make_settings(**overrides) -> Settings:
    values = {
        "database_url": "sqlite:///:memory:",
        "jwt_access_secret": ACCESS_SECRET,
        "jwt_refresh_secret": REFRESH_SECRET,
        "jwt_access_ttl": "15m",
        "jwt_refresh_ttl": "7d",
        "bcrypt_rounds": 4,
        "log_level": "WARNING",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    eng = build_engine("sqlite:///:memory:")
    create_schema(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session(engine: Engine) -> Generator[Session, None, None]:
    s = build_session_factory(engine)()
    yield s
    s.rollback()
    s.close()


@pytest.fixture
def jwt_provider(settings: Settings) -> JwtProvider:
    return JwtProvider.from_settings(settings)


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


@pytest.fixture
def ledger(session: Session) -> RefreshTokenRepository:
    return RefreshTokenRepository(session)


@pytest.fixture
def service(session: Session, ledger: RefreshTokenRepository, jwt_provider: JwtProvider, hasher: PasswordHasher) -> SessionService:
    return SessionService(
        users=UserRepository(session),
        ledger=ledger,
        jwt_provider=jwt_provider,
        hasher=hasher,
    )


@pytest.fixture
def app(settings: Settings, engine: Engine):
    return create_app(settings, engine=engine)


@pytest.fixture
def client(app) -> FlaskClient:
    return app.test_client()
