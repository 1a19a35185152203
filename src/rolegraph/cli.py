"""Command-line interface for RoleGraph.

This module provides the CLI commands for running the RoleGraph server
and provisioning the realms and clients that own roles.
"""

import asyncio
from typing import NoReturn

import click

from rolegraph import __version__
from rolegraph.core.config import get_settings
from rolegraph.core.exceptions import RoleGraphError
from rolegraph.core.logging import configure_logging, get_logger


@click.group()
@click.version_option(version=__version__, prog_name="RoleGraph")
def cli() -> None:
    """RoleGraph - realm and client roles with composite role graphs.

    Settings are read from ROLEGRAPH_* environment variables and .env files.
    """


@cli.command()
@click.option(
    "--host",
    type=str,
    default=None,
    help="Host to bind to (overrides config)",
)
@click.option(
    "--port",
    type=int,
    default=None,
    help="Port to bind to (overrides config)",
)
@click.option(
    "--workers",
    type=int,
    default=None,
    help="Number of worker processes (overrides config)",
)
@click.option(
    "--reload",
    is_flag=True,
    default=False,
    help="Enable auto-reload for development",
)
def serve(host: str | None, port: int | None, workers: int | None, reload: bool) -> None:
    """Start the RoleGraph server."""
    import uvicorn

    settings = get_settings()

    bind_host = host or settings.host
    bind_port = port or settings.port
    bind_workers = workers or settings.workers

    configure_logging(settings)

    logger = get_logger(__name__)
    logger.info(
        "Starting RoleGraph server",
        host=bind_host,
        port=bind_port,
        workers=bind_workers,
        reload=reload,
        environment=settings.environment,
    )

    uvicorn.run(
        "rolegraph.infrastructure.api.app:app",
        host=bind_host,
        port=bind_port,
        workers=1 if reload else bind_workers,
        reload=reload,
        log_level=settings.log_level.lower(),
        access_log=True,
    )


@cli.command()
@click.option(
    "--force",
    is_flag=True,
    help="Skip confirmation prompt",
)
def init_db(force: bool) -> None:
    """Initialize the database.

    Creates all database tables. Use this only in development.
    """
    from rolegraph.infrastructure.persistence.database import close_database, init_database

    settings = get_settings()
    configure_logging(settings)

    if settings.is_production and not force:
        click.echo(
            "ERROR: Running in production mode. Refusing to create tables without --force.",
            err=True,
        )
        raise SystemExit(1)

    if not force:
        click.confirm(
            "This will create all database tables. Continue?",
            abort=True,
            default=False,
        )

    async def initialize() -> None:
        try:
            await init_database(create_tables=True)
            click.echo("Database initialized successfully.")
        finally:
            await close_database()

    asyncio.run(initialize())


@cli.command()
@click.argument("name")
def create_realm(name: str) -> None:
    """Create a realm named NAME and print its ID."""
    from rolegraph.infrastructure.persistence.repositories import ContainerRepository

    async def create():
        async with _session() as session:
            return await ContainerRepository(session).create_realm(name)

    realm = _run(create)
    click.echo(f"Realm created: {realm.name} (id={realm.id})")


@cli.command()
@click.argument("realm")
@click.argument("client_id")
def create_client(realm: str, client_id: str) -> None:
    """Register CLIENT_ID in REALM and print its internal ID."""
    from rolegraph.infrastructure.persistence.repositories import ContainerRepository

    async def create():
        async with _session() as session:
            return await ContainerRepository(session).create_client(realm, client_id)

    client = _run(create)
    click.echo(f"Client created: {client.name} (id={client.id})")


@cli.command()
def info() -> None:
    """Display RoleGraph configuration information."""
    settings = get_settings()

    click.echo(f"RoleGraph v{settings.app_version}")
    click.echo(f"Environment: {settings.environment}")
    click.echo(f"Database: {settings.database_url}")
    click.echo(f"API prefix: {settings.api_prefix}")
    click.echo(f"Composite traversal limit: {settings.composite_traversal_limit}")
    click.echo(f"Log level: {settings.log_level}")


def _session():
    from rolegraph.infrastructure.persistence.database import get_db_manager

    return get_db_manager().session()


def _run(operation):
    """Run a provisioning coroutine, reporting domain errors to stderr."""
    from rolegraph.infrastructure.persistence.database import close_database, init_database

    configure_logging(get_settings())

    async def run():
        try:
            await init_database()
            return await operation()
        finally:
            await close_database()

    try:
        return asyncio.run(run())
    except RoleGraphError as e:
        click.echo(f"ERROR: {e}", err=True)
        raise SystemExit(1) from e


def main() -> NoReturn:
    """Main entry point for the CLI.

    This function is called when the `rolegraph` command is run
    or when using `python -m rolegraph`.
    """
    cli()


if __name__ == "__main__":
    main()
