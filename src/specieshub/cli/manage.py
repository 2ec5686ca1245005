"""Command-line management tool for Species Hub.

Commands:
- init-db: create the database tables
- create-account: register a sign-in account
- import-species: load species records from a CSV file
- serve: run the web application under uvicorn
"""

import asyncio
import logging
from pathlib import Path

import click
import pandas as pd
from pydantic import ValidationError

from specieshub.config import ConfigManager
from specieshub.database.core import DatabaseService
from specieshub.species.models import SpeciesValues
from specieshub.species.repository import SpeciesRepository, SpeciesStoreError
from specieshub.system.path_resolver import PathResolver
from specieshub.system.structlog_configurator import configure_structlog
from specieshub.utils.auth import AccountExistsError, AccountService

logger = logging.getLogger(__name__)

SPECIES_COLUMNS = (
    "scientific_name",
    "common_name",
    "kingdom",
    "total_population",
    "image",
    "description",
)


def setup_database_service() -> DatabaseService:
    """Set up database service at the configured data location."""
    return DatabaseService(PathResolver().get_database_path())


def read_species_rows(csv_path: Path) -> list[dict[str, object]]:
    """Read species CSV rows, keeping only the known columns."""
    frame = pd.read_csv(csv_path, dtype=str, keep_default_na=False)
    frame.columns = [str(column).strip() for column in frame.columns]
    if "scientific_name" not in frame.columns:
        raise click.ClickException("CSV must have a 'scientific_name' column.")
    columns = [column for column in SPECIES_COLUMNS if column in frame.columns]
    # Blank cells are left out so the model defaults apply
    return [
        {key: value.strip() for key, value in row.items() if value.strip()}
        for row in frame[columns].to_dict(orient="records")
    ]


@click.group()
def cli() -> None:
    """Manage the Species Hub database, accounts and web server."""
    configure_structlog(ConfigManager().load())


@cli.command("init-db")
def init_db() -> None:
    """Create any missing database tables."""

    async def _run() -> None:
        database = setup_database_service()
        try:
            await database.initialize()
        finally:
            await database.dispose()
        click.echo(f"Database ready at {database.db_path}")

    asyncio.run(_run())


@cli.command("create-account")
@click.option("--email", prompt=True, help="Sign-in email address")
@click.option(
    "--password",
    prompt=True,
    hide_input=True,
    confirmation_prompt=True,
    help="Sign-in password",
)
@click.option("--display-name", default="", help="Name shown in the header")
def create_account(email: str, password: str, display_name: str) -> None:
    """Register a new sign-in account."""

    async def _run() -> None:
        database = setup_database_service()
        try:
            await database.initialize()
            account = await AccountService(database).register(email, password, display_name)
        except AccountExistsError as e:
            raise click.ClickException(str(e)) from e
        finally:
            await database.dispose()
        click.echo(f"✓ Created account {account.email} ({account.id})")

    asyncio.run(_run())


@cli.command("import-species")
@click.argument("csv_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--author", default=None, help="Email of the account that will own the rows")
def import_species(csv_path: Path, author: str | None) -> None:
    """Import species records from CSV_PATH.

    The CSV needs a scientific_name column; common_name, kingdom,
    total_population, image and description are optional. Invalid rows are
    reported and skipped.

    Examples:
        # Import unowned rows, editable by any account
        specieshub import-species species.csv

        # Import rows owned by one account
        specieshub import-species species.csv --author someone@example.com
    """
    rows = read_species_rows(csv_path)

    async def _run() -> tuple[int, int]:
        database = setup_database_service()
        imported = skipped = 0
        try:
            await database.initialize()
            author_id = None
            if author:
                account = await AccountService(database).get_account_by_email(author)
                if account is None:
                    raise click.ClickException(f"No account found for {author}")
                author_id = account.id

            repository = SpeciesRepository(database)
            for line, row in enumerate(rows, start=2):
                try:
                    values = SpeciesValues.model_validate(row)
                except ValidationError as e:
                    skipped += 1
                    click.echo(f"Skipping line {line}: {e.error_count()} invalid field(s)")
                    continue
                try:
                    await repository.create_species(author_id, values)
                except SpeciesStoreError as e:
                    raise click.ClickException(
                        f"Stopped at line {line} after importing {imported} species: {e}"
                    ) from e
                imported += 1
        finally:
            await database.dispose()
        return imported, skipped

    imported, skipped = asyncio.run(_run())
    click.echo(f"✓ Imported {imported} species, skipped {skipped}")


@cli.command()
@click.option("--host", default="127.0.0.1", show_default=True, help="Bind address")
@click.option("--port", default=8000, show_default=True, type=int, help="Bind port")
@click.option("--reload", is_flag=True, help="Restart on code changes")
def serve(host: str, port: int, reload: bool) -> None:
    """Run the web application."""
    import uvicorn

    # Request logging middleware replaces uvicorn's access log
    uvicorn.run(
        "specieshub.web.core.factory:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        access_log=False,
    )


if __name__ == "__main__":
    cli()
