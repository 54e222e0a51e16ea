"""CLI entry point for sleep-log-server."""

import asyncio
from pathlib import Path

import typer
import uvicorn

from sleep_log_server import __version__
from sleep_log_server.core.config import settings
from sleep_log_server.core.database import close_database, get_session
from sleep_log_server.services.csv_import import CsvImportService, ImportOutcome
from sleep_log_server.services.users import UserService

app = typer.Typer(
    name="sleep-log-server",
    help="Personal sleep log tracking server",
    no_args_is_help=True,
)


@app.command()
def serve(
    host: str = typer.Option(None, help="Host to bind to (overrides config)"),
    port: int = typer.Option(None, help="Port to bind to (overrides config)"),
    reload: bool = typer.Option(False, help="Enable auto-reload for development"),
) -> None:
    """Start the API server.

    Example:
        sleep-log-server serve
        sleep-log-server serve --host 0.0.0.0 --port 8080 --reload
    """
    uvicorn.run(
        "sleep_log_server.app:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


@app.command()
def version() -> None:
    """Show version information."""
    typer.echo(f"sleep-log-server v{__version__}")


async def _run_import(text: str, username: str) -> ImportOutcome | None:
    """Import CSV text for a user, None when the user does not exist."""
    try:
        async with get_session() as session:
            user = await UserService(session).get_by_username(username)
            if user is None:
                return None
            return await CsvImportService(session).import_csv(text, user.id)
    finally:
        await close_database()


@app.command("import-csv")
def import_csv(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="CSV file to import"),
    username: str = typer.Option(..., help="Owner of the imported sleep logs"),
) -> None:
    """Import a CSV file of sleep logs for an existing user.

    Example:
        sleep-log-server import-csv sleep.csv --username alice
    """
    text = path.read_text(encoding="utf-8-sig")
    outcome = asyncio.run(_run_import(text, username))

    if outcome is None:
        typer.echo(f"User not found: {username}", err=True)
        raise typer.Exit(code=1)

    typer.echo(outcome.summary)
    for error in outcome.errors:
        typer.echo(f"  {error}")


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
