# session_auth/api/cli.py
import click
from flask.cli import AppGroup

from session_auth.api.runtime import db_session, runtime, session_service
from session_auth.infrastructure.database.session import create_schema

tokens_cli = AppGroup("tokens", help="Refresh-token maintenance.")
db_cli = AppGroup("db", help="Database management.")


@tokens_cli.command("sweep")
def sweep_command() -> None:
    """Tombstone every expired refresh token that is still marked live."""
    with db_session() as session:
        count = session_service(session).sweep_expired()
    click.echo(f"revoked {count} expired refresh token(s)")


@db_cli.command("init")
def init_command() -> None:
    """Create missing tables."""
    create_schema(runtime().engine)
    click.echo("schema ready")
