"""UXR Metrics CLI.

Commands:
- init: Initialize database schema
- create-admin: Create or promote an ADMIN user
- seed: Create the default category/tag taxonomy
- stats: Show project counts by status and source
- web serve: Run the HTTP API
"""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table
from sqlalchemy import func, select

from uxrmetrics.config import get_config
from uxrmetrics.db.connection import close_db, get_session, init_db
from uxrmetrics.db.models import ProjectModel
from uxrmetrics.db.seed import ensure_admin_user, seed_taxonomy
from uxrmetrics.models import ProjectSource, ProjectStatus
from uxrmetrics.web.auth import hash_password

app = typer.Typer(
    name="uxrmetrics",
    help="UXR Metrics - UX research project tracking",
    no_args_is_help=True,
)

web_cli = typer.Typer(help="Web API")
app.add_typer(web_cli, name="web")

console = Console()


@app.command()
def init(
    drop: bool = typer.Option(False, "--drop", help="Drop existing tables"),
):
    """Initialize database schema."""
    config = get_config()
    console.print(f"[bold]Initializing database:[/bold] {config.db.url}")

    async def _init():
        if drop:
            console.print("[yellow]Dropping existing tables...[/yellow]")
        await init_db(drop=drop)
        await close_db()

    asyncio.run(_init())
    console.print("[bold green]✓[/bold green] Database initialized")


@app.command(name="create-admin")
def create_admin(
    email: str | None = typer.Argument(None, help="Admin email (default: UXR_ADMIN_EMAIL)"),
    password: str | None = typer.Option(
        None, "--password", help="Password (default: UXR_ADMIN_PASSWORD, else prompt)"
    ),
    name: str = typer.Option("UXR Admin", "--name", help="Display name"),
):
    """Create an ADMIN user, or promote an existing one and reset its password."""
    auth_config = get_config().auth
    email = email or auth_config.admin_email
    password = password or auth_config.admin_password
    if not password:
        password = typer.prompt("Password", hide_input=True, confirmation_prompt=True)

    async def _create():
        async with get_session() as session:
            _, created = await ensure_admin_user(session, email, hash_password(password), name)
        await close_db()
        return created

    created = asyncio.run(_create())
    verb = "Created" if created else "Updated"
    console.print(f"[bold green]✓[/bold green] {verb} admin user {email}")


@app.command()
def seed():
    """Create the default categories and tags (idempotent)."""

    async def _seed():
        async with get_session() as session:
            result = await seed_taxonomy(session)
        await close_db()
        return result

    categories, tags = asyncio.run(_seed())
    console.print(
        f"[bold green]✓[/bold green] Seeded {categories} categories and {tags} tags"
    )


@app.command()
def stats():
    """Show project counts by status and by source."""

    async def _stats():
        async with get_session() as session:
            by_status = (
                await session.execute(
                    select(ProjectModel.status, func.count()).group_by(ProjectModel.status)
                )
            ).all()
            by_source = (
                await session.execute(
                    select(ProjectModel.source, func.count()).group_by(ProjectModel.source)
                )
            ).all()
        await close_db()
        return by_status, by_source

    by_status, by_source = asyncio.run(_stats())

    tables = (
        ("Projects by Status", ProjectStatus, by_status),
        ("Projects by Source", ProjectSource, by_source),
    )
    for title, values, rows in tables:
        counts = dict(rows)
        table = Table(title=title, min_width=40)
        table.add_column("Value", style="cyan")
        table.add_column("Count", justify="right", style="green")
        for value in values:
            table.add_row(value.value, str(counts.get(value.value, 0)))
        console.print(table)


@web_cli.command("serve")
def web_serve(
    host: str = typer.Option("0.0.0.0", help="Host to bind"),
    port: int = typer.Option(8000, help="Port to bind"),
    reload: bool = typer.Option(False, help="Enable autoreload (dev only)"),
):
    """Run the FastAPI application with uvicorn."""
    import uvicorn

    typer.echo(f"Starting UXR Metrics API on http://{host}:{port}")
    uvicorn.run(
        "uxrmetrics.web.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        workers=1,
    )


def main():
    """Entry point for CLI."""
    app()


if __name__ == "__main__":
    main()
