"""Defines the Command Line Interface (CLI) using Typer."""

import asyncio
import json
import sys

import typer
from dotenv import load_dotenv
from pydantic import ValidationError
from typer import Option
from typing_extensions import Annotated

from gitspot_sync.configuration.env import Settings
from gitspot_sync.exceptions import ConfigurationError, StorageSchemaError
from gitspot_sync.storage.database import create_engine, init_db
from gitspot_sync.synchronize.driver import build_services, run_release_sync_workflow, run_repository_sync_workflow
from gitspot_sync.synchronize.results import RepositorySyncResult, RunSummary
from gitspot_sync.utils.logging import configure_logging

load_dotenv()

typer_app = typer.Typer(pretty_exceptions_show_locals=False, help="Mirror GitHub releases into HubSpot company notes.")


@typer_app.callback()
def main_callback(
    ctx: typer.Context,
    debug: Annotated[bool, Option(envvar="DEBUG", help="Enable debug logging.")] = False,
) -> None:
    """Load settings and configure logging for every command."""
    ctx.ensure_object(dict)
    try:
        settings = Settings()
    except ValidationError as e:
        typer.echo(f"Invalid configuration: {e}", err=True)
        raise typer.Exit(2) from e
    configure_logging(debug=debug or settings.DEBUG)
    ctx.obj["settings"] = settings


@typer_app.command(name="init-db")
def init_db_cli(ctx: typer.Context) -> None:
    """Create every table the synchronization engine needs."""
    settings: Settings = ctx.obj["settings"]

    async def _init_db() -> list[str]:
        engine = create_engine(settings.DATABASE_URL)
        try:
            return await init_db(engine)
        finally:
            await engine.dispose()

    tables = asyncio.run(_init_db())
    typer.echo(f"Initialized {len(tables)} tables: {', '.join(tables)}")


@typer_app.command(name="sync-releases")
def sync_releases_cli(
    ctx: typer.Context,
    mapping_id: Annotated[int | None, Option("--mapping-id", help="Only synchronize the mapping with this ID.")] = None,
    dry_run: Annotated[bool, Option("--dry-run", help="Report what would be published without publishing or persisting anything.")] = False,
    record: Annotated[bool, Option("--record/--no-record", help="Record the run in the run log.")] = True,
) -> None:
    """Publish new GitHub releases as HubSpot company notes and print the run summary as JSON."""
    settings: Settings = ctx.obj["settings"]

    async def _sync_releases() -> tuple[RunSummary, int | None]:
        services = await build_services(settings)
        try:
            return await run_release_sync_workflow(services, mapping_id=mapping_id, dry_run=dry_run, record=record)
        finally:
            await services.close()

    try:
        summary, run_id = asyncio.run(_sync_releases())
    except (ConfigurationError, StorageSchemaError) as e:
        typer.echo(str(e), err=True)
        sys.exit(1)

    if dry_run:
        typer.echo("Dry run - no notes were published and no watermarks were updated", err=True)
    if run_id is not None:
        typer.echo(f"Recorded run log {run_id}", err=True)
    typer.echo(json.dumps(summary.to_response(), indent=2))
    if summary.errors:
        typer.echo(f"{len(summary.errors)} mapping(s) failed", err=True)
        sys.exit(1)


@typer_app.command(name="sync-repositories")
def sync_repositories_cli(
    ctx: typer.Context,
    org: Annotated[str | None, Option("--org", envvar="GITHUB_ORG", help="GitHub organization to list repositories from.")] = None,
) -> None:
    """Synchronize the GitHub repository catalog into the database."""
    settings: Settings = ctx.obj["settings"]

    async def _sync_repositories() -> RepositorySyncResult:
        services = await build_services(settings)
        try:
            return await run_repository_sync_workflow(services, org=org)
        finally:
            await services.close()

    try:
        result = asyncio.run(_sync_repositories())
    except (ConfigurationError, StorageSchemaError) as e:
        typer.echo(str(e), err=True)
        sys.exit(1)

    typer.echo(f"Repositories created: {result.created}, updated: {result.updated}")
    if result.errors:
        typer.echo("Error(s) encountered while synchronizing repositories:", err=True)
        for err in result.errors:
            typer.echo(err, err=True)
        sys.exit(1)


if __name__ == "__main__":
    typer_app()
