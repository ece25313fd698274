"""
QC Records CLI.

Command-line interface for inspecting the entity registry and checking
entity tables against the configured database.
"""

import asyncio
import sys

import typer
from rich.console import Console
from rich.table import Table

from shared.config.settings import get_settings
from shared.infrastructure.db import create_database
from shared.utils.health import HealthStatus

from qc_api.entities import ENTITY_DEFINITIONS, get_definition
from qc_api.generic import wire_entity

app = typer.Typer(
    name="qc-records",
    help="QC Records backend CLI",
    add_completion=False,
)
console = Console()

STATUS_STYLE = {
    HealthStatus.HEALTHY: "green",
    HealthStatus.DEGRADED: "yellow",
    HealthStatus.UNHEALTHY: "red",
}


def _definitions(entity: str | None):
    if entity is None:
        return list(ENTITY_DEFINITIONS)
    definition = get_definition(entity)
    if definition is None:
        console.print(f"[red]Unknown entity: {entity}[/red]")
        raise typer.Exit(1)
    return [definition]


# =============================================================================
# Registry Commands
# =============================================================================

@app.command()
def entities():
    """List registered entities."""
    settings = get_settings()
    table = Table(title="Registered Entities")
    table.add_column("Entity", style="cyan")
    table.add_column("Table")
    table.add_column("Path")
    table.add_column("Key")
    table.add_column("Delete", style="yellow")

    for definition in ENTITY_DEFINITIONS:
        config = definition.config
        table.add_row(
            config.entity_name,
            config.table_name,
            f"{settings.api_prefix}{config.api_path}",
            f"{config.key_kind.value} ({', '.join(config.key_fields)})",
            config.delete_mode.value,
        )

    console.print(table)


# =============================================================================
# Health Commands
# =============================================================================

@app.command()
def health(
    entity: str | None = typer.Argument(None, help="Entity name (all entities when omitted)"),
):
    """Check entity tables against the configured database."""
    definitions = _definitions(entity)

    async def _health():
        database = create_database()
        table = Table(title="Entity Health")
        table.add_column("Entity", style="cyan")
        table.add_column("Status")
        table.add_column("Database")
        table.add_column("Table")
        table.add_column("Records")
        table.add_column("Total / Active", style="yellow")
        try:
            for definition in definitions:
                stack = wire_entity(definition, database)
                result = await stack.repository.health()
                style = STATUS_STYLE[result.status]
                table.add_row(
                    definition.config.entity_name,
                    f"[{style}]{result.status.value}[/{style}]",
                    *("✓" if result.checks[name] else "✗" for name in ("database", "table", "records")),
                    f"{result.metrics['total']} / {result.metrics['active']}",
                )
        finally:
            await database.dispose()
        console.print(table)

    asyncio.run(_health())


# =============================================================================
# Server Commands
# =============================================================================

@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Bind address"),
    port: int = typer.Option(None, help="Port (defaults to REST_API_PORT)"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
):
    """Run the API server."""
    import uvicorn

    port = port or get_settings().rest_api_port
    console.print(f"[blue]Starting QC API on {host}:{port}[/blue]")
    uvicorn.run("qc_api.main:app", host=host, port=port, reload=reload)


@app.command()
def version():
    """Show version information."""
    table = Table(title="QC Records Version")
    table.add_column("Component", style="cyan")
    table.add_column("Version", style="green")

    table.add_row("API", "0.1.0")
    table.add_row("Python", sys.version.split()[0])

    console.print(table)


if __name__ == "__main__":
    app()
