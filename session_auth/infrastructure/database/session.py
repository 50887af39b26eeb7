# session_auth/infrastructure/database/session.py

from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from session_auth.infrastructure.database.base_model import BaseModel


def build_engine(database_url: str, *, statement_timeout_ms: int = 5000, echo: bool = False) -> Engine:
    url = make_url(database_url)

    if url.get_backend_name() == "sqlite":
        kwargs = {
            "connect_args": {
                "check_same_thread": False,
                "timeout": statement_timeout_ms / 1000,
            }
        }
        # an in-memory db only exists on its one connection
        if url.database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=echo, **kwargs)

    connect_args = {}
    if url.get_backend_name() == "postgresql":
        connect_args["options"] = f"-c statement_timeout={int(statement_timeout_ms)}"

    return create_engine(
        url,
        echo=echo,
        pool_pre_ping=True,
        connect_args=connect_args,
    )


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        bind=engine,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
    )


def create_schema(engine: Engine) -> None:
    import session_auth.infrastructure.database.models  # noqa: F401

    BaseModel.metadata.create_all(engine)


def _apply_timeout(session: Session, timeout_ms: int) -> Optional[int]:
    """Bound the statements of this unit of work; returns what to restore, if anything."""
    if timeout_ms <= 0:
        raise ValueError("timeout_ms must be positive")

    backend = session.get_bind().dialect.name
    if backend == "postgresql":
        # SET LOCAL ends with the transaction
        session.execute(text(f"SET LOCAL statement_timeout = {int(timeout_ms)}"))
        return None
    if backend == "sqlite":
        previous = session.execute(text("PRAGMA busy_timeout")).scalar()
        session.execute(text(f"PRAGMA busy_timeout = {int(timeout_ms)}"))
        return previous
    return None


@contextmanager
def session_scope(factory: sessionmaker, *, timeout_ms: Optional[int] = None) -> Iterator[Session]:
    """Commit on success, roll back on any error.

    ``timeout_ms`` overrides the engine's statement timeout for this scope
    only. A statement that exceeds it raises and the whole scope rolls back.
    """
    session: Session = factory()
    restore = None
    try:
        if timeout_ms is not None:
            restore = _apply_timeout(session, timeout_ms)
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        if restore is not None:
            # sqlite pragmas outlive the transaction, so put the connection back as it was
            session.execute(text(f"PRAGMA busy_timeout = {int(restore)}"))
            session.commit()
        session.close()
