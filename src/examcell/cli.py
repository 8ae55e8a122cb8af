"""CLI entry point for the examcell server."""

from __future__ import annotations

import sys

import click
import uvicorn

from examcell import __version__
from examcell.auth import Role
from examcell.auth.security import hash_password
from examcell.config import get_settings
from examcell.logging import setup_logging
from examcell.state_store import StateStore, UserExistsError


@click.group()
@click.version_option(__version__)
def main() -> None:
    """examcell - examination cell portal backend."""
    pass


@main.command()
@click.option("--host", default="127.0.0.1", show_default=True, help="Interface to bind")
@click.option("--port", default=8000, show_default=True, type=int, help="Port to listen on")
@click.option(
    "--db",
    "db_path",
    default=None,
    help="SQLite database path (default: EXAMCELL_DATABASE_PATH or examcell.db)",
)
@click.option("--log-dir", default=None, help="Directory for rotating log files")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def serve(host: str, port: int, db_path: str | None, log_dir: str | None, verbose: bool) -> None:
    """Run the REST API with uvicorn."""
    from examcell.api.app import create_app  # noqa: PLC0415

    settings = get_settings()
    setup_logging(
        log_dir=log_dir or settings.log_dir,
        level="DEBUG" if verbose else settings.log_level,
    )
    app = create_app(settings, db_path=db_path or settings.database_path)
    uvicorn.run(app, host=host, port=port, log_level="debug" if verbose else "info")


@main.command("create-admin")
@click.option("--email", required=True, help="Login email of the admin account")
@click.option("--name", "full_name", required=True, help="Full name shown in the portal")
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
@click.option("--db", "db_path", default=None, help="SQLite database path")
def create_admin(email: str, full_name: str, password: str, db_path: str | None) -> None:
    """Create an exam-cell admin account."""
    settings = get_settings()
    store = StateStore(db_path or settings.database_path)
    try:
        user = store.create_user(
            email=email,
            username=email.split("@", 1)[0],
            password_hash=hash_password(password, rounds=settings.bcrypt_rounds),
            full_name=full_name,
            role=Role.ADMIN,
        )
    except UserExistsError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    finally:
        store.close()
    click.echo(f"Created admin {user.email} ({user.id})")


if __name__ == "__main__":
    main()
