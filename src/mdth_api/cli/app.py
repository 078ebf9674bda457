"""Typer CLI root application with serve command."""

import typer
from loguru import logger

from mdth_api import __version__
from mdth_api.core.config import get_settings
from mdth_api.core.logging import setup_logging

app = typer.Typer(name="mdth-api", help="MDTH platform accounts CLI")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"mdth-api {__version__}")
        raise typer.Exit


@app.callback()
def _main_callback(
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show the version and exit"
    ),
) -> None:
    """Initialize logging for all CLI commands."""
    settings = get_settings()
    setup_logging(settings.log_level, log_dir=settings.log_dir)


@app.command()
def serve(
    reload: bool = typer.Option(False, "--reload", help="Enable auto-reload for development"),
    host: str | None = typer.Option(None, "--host", help="Bind host (defaults to HOST)"),
    port: int | None = typer.Option(None, "--port", help="Bind port (defaults to PORT)"),
) -> None:
    """Start the API server."""
    import uvicorn

    settings = get_settings()
    if settings.uses_default_secret:
        logger.warning("Serving with the development JWT secret; set JWT_SECRET_KEY before deploying")
    uvicorn.run(
        "mdth_api.main:create_app",
        factory=True,
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


def _register_subcommands() -> None:
    """Register all CLI subcommand groups."""
    from mdth_api.cli.db_cmd import db_app
    from mdth_api.cli.user_cmd import user_app

    app.add_typer(db_app, name="db", help="Database schema commands")
    app.add_typer(user_app, name="user", help="User management commands")


_register_subcommands()
