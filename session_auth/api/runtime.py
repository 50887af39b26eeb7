# session_auth/api/runtime.py
from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional

from flask import Flask, current_app
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from session_auth.infrastructure.database.session import build_session_factory, session_scope
from session_auth.infrastructure.security.jwt_provider import JwtProvider
from session_auth.infrastructure.security.password_hasher import PasswordHasher
from session_auth.repositories.refresh_token_repository import RefreshTokenRepository
from session_auth.repositories.user_repository import UserRepository
from session_auth.services.session_service import SessionService
from session_auth.services.user_service import UserService

_EXTENSION_KEY = "session_auth"


@dataclass(frozen=True)
class AuthRuntime:
    engine: Engine
    session_factory: sessionmaker
    jwt_provider: JwtProvider
    hasher: PasswordHasher


def init_runtime(app: Flask, *, engine: Engine, jwt_provider: JwtProvider, hasher: PasswordHasher) -> AuthRuntime:
    rt = AuthRuntime(
        engine=engine,
        session_factory=build_session_factory(engine),
        jwt_provider=jwt_provider,
        hasher=hasher,
    )
    app.extensions[_EXTENSION_KEY] = rt
    return rt


def runtime() -> AuthRuntime:
    return current_app.extensions[_EXTENSION_KEY]


@contextmanager
def db_session(timeout_ms: Optional[int] = None) -> Iterator[Session]:
    with session_scope(runtime().session_factory, timeout_ms=timeout_ms) as session:
        yield session


def session_service(session: Session) -> SessionService:
    rt = runtime()
    return SessionService(
        users=UserRepository(session),
        ledger=RefreshTokenRepository(session),
        jwt_provider=rt.jwt_provider,
        hasher=rt.hasher,
    )


def user_service(session: Session) -> UserService:
    return UserService(UserRepository(session), runtime().hasher)
