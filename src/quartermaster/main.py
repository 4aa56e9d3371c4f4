from __future__ import annotations

import typer
import uvicorn

from quartermaster.config import settings
from quartermaster.session import DEFAULT_RULES, check_route_sets

cli = typer.Typer(help="Quartermaster CLI (asset tracking web console)")


@cli.command()
def version() -> None:
    """Print runtime version."""
    typer.echo(f"{settings.app.name} {settings.app.version}")


@cli.command()
def serve(
    host: str = typer.Option("127.0.0.1", help="Host to bind"),
    port: int = typer.Option(8000, help="Port to bind"),
    reload: bool = typer.Option(False, help="Enable autoreload for local development"),
) -> None:
    """Run the console server."""
    uvicorn.run(
        "quartermaster.api.main:app",
        host=host,
        port=port,
        reload=reload,
        app_dir="src",
    )


@cli.command()
def routes() -> None:
    """Show public paths and role rules, and verify they cannot loop."""
    routing = settings.routing
    typer.echo("Public:")
    for path in routing.public_paths:
        typer.echo(f"  {path}")
    typer.echo("Guarded:")
    for rule in DEFAULT_RULES:
        roles = ", ".join(sorted(role.value for role in rule.roles))
        typer.echo(f"  {rule.pattern:<22} {roles:<40} -> {rule.fallback}")

    problems = check_route_sets(routing)
    if problems:
        for problem in problems:
            typer.echo(f"ERROR: {problem}", err=True)
        raise typer.Exit(code=1)
    typer.echo("OK: public and guarded paths are disjoint")


if __name__ == "__main__":
    cli()
