"""Database schema CLI commands: Alembic migrations and a development bootstrap."""

import asyncio

import typer
from loguru import logger

db_app = typer.Typer()


def _alembic_config():  # type: ignore[no-untyped-def]
    """Load ``alembic.ini`` pointed at the configured database."""
    from alembic.config import Config

    from mdth_api.core.config import get_settings

    config = Config("alembic.ini")
    config.set_main_option("sqlalchemy.url", get_settings().database_url)
    return config


@db_app.command()
def upgrade(
    revision: str = typer.Argument("head", help="Target revision"),
) -> None:
    """Run database migrations up to the target revision."""
    from alembic import command

    logger.info(f"Upgrading database to {revision}")
    command.upgrade(_alembic_config(), revision)
    logger.info("Database upgrade complete")


@db_app.command()
def downgrade(
    revision: str = typer.Argument("-1", help="Target revision"),
) -> None:
    """Roll back the database to the target revision."""
    from alembic import command

    logger.info(f"Downgrading database to {revision}")
    command.downgrade(_alembic_config(), revision)
    logger.info("Database downgrade complete")


@db_app.command()
def current() -> None:
    """Show the current database migration revision."""
    from alembic import command

    command.current(_alembic_config(), verbose=True)


@db_app.command("create-tables")
def create_tables_cmd() -> None:
    """Create missing tables directly from the models (development databases)."""
    asyncio.run(_create_tables())


async def _create_tables() -> None:
    from mdth_api.core.config import get_settings
    from mdth_api.core.database import create_tables, database_session

    async with database_session(get_settings().database_url):
        await create_tables()
    typer.echo("Tables created")
