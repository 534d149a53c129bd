from __future__ import annotations

import asyncio

import typer
import uvicorn

from shared.logging import setup_logging

from .app import create_app
from .client import create_client
from .config import get_settings
from .models import BootstrapReport
from .services import DocumentIndexGateway

cli = typer.Typer(help="Search Service entrypoint")


@cli.command()
def serve(host: str = "0.0.0.0", port: int = 8080) -> None:
    """Start the Search Service using uvicorn."""

    settings = get_settings()
    app = create_app()
    uvicorn.run(app, host=host, port=port, log_level=settings.log_level.lower(), lifespan="on")


async def _bootstrap() -> BootstrapReport:
    settings = get_settings()
    gateway = DocumentIndexGateway(create_client(settings), settings=settings)
    try:
        return await gateway.bootstrap()
    finally:
        await gateway.close()


@cli.command()
def bootstrap() -> None:
    """Ensure every search index exists and matches its declared mapping."""

    setup_logging(get_settings().log_level)
    report = asyncio.run(_bootstrap())
    for result in report.results:
        line = f"{result.index}: {result.status}"
        if result.error:
            line += f" ({result.error})"
        typer.echo(line)
        for mismatch in result.mismatches:
            typer.echo(f"  - {mismatch}")
    if not report.healthy:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    cli()
