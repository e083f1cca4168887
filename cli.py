"""
Menu SaaS CLI.

Command-line interface for common operations.
"""

import sys

import typer
from email_validator import EmailNotValidError, validate_email
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from shared.utils.exceptions import AppException

app = typer.Typer(
    name="menu-saas",
    help="Menu SaaS management CLI",
    add_completion=False,
)
console = Console()

CLI_ACTOR = {"sub": None, "email": "cli", "roles": ["root_admin"], "restaurant_id": None}


# =============================================================================
# Database Commands
# =============================================================================

@app.command()
def db_init(
    demo: bool = typer.Option(False, "--demo", help="Also create the demo restaurant"),
):
    """Create tables and seed plans and the root admin."""
    from rest_api.models import Base
    from rest_api.seed import seed
    from shared.config.logging import setup_logging
    from shared.infrastructure.db import engine, get_db_context

    setup_logging()
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        progress.add_task("Creating tables...", total=None)
        Base.metadata.create_all(bind=engine)
        progress.add_task("Seeding...", total=None)
        with get_db_context() as db:
            seed(db, demo=demo)

    console.print("[green]✓ Database ready[/green]")


@app.command()
def create_root_admin(
    username: str = typer.Option(..., prompt=True, help="Login username"),
    email: str = typer.Option(..., prompt=True, help="Email address"),
    password: str = typer.Option(
        ..., prompt=True, hide_input=True, confirmation_prompt=True, help="Password"
    ),
    full_name: str = typer.Option("Root Admin", help="Display name"),
):
    """Create an additional root admin."""
    from rest_api.services.domain import UserService
    from shared.config.constants import Roles
    from shared.infrastructure.db import get_db_context

    try:
        email = validate_email(email, check_deliverability=False).normalized
    except EmailNotValidError as e:
        raise typer.BadParameter(str(e), param_hint="--email")

    data = {
        "username": username,
        "email": email,
        "password": password,
        "full_name": full_name,
        "role": Roles.ROOT_ADMIN,
        "restaurant_id": None,
    }
    try:
        with get_db_context() as db:
            user = UserService(db).create_user(data, CLI_ACTOR)
    except AppException as e:
        console.print(f"[red]✗ {e.detail}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]✓ Root admin created (id={user.id})[/green]")


@app.command()
def list_plans():
    """Show the active subscription plans."""
    from rest_api.services.domain import RegistrationService
    from shared.infrastructure.db import get_db_context

    with get_db_context() as db:
        plans = RegistrationService(db).list_plans()

    if not plans:
        console.print("[yellow]No plans found. Run db-init first.[/yellow]")
        return

    table = Table(title="Plans")
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Price (CLP)", justify="right")
    table.add_column("Popular")

    for plan in plans:
        table.add_row(
            str(plan.id),
            plan.name,
            f"{plan.price:,}".replace(",", "."),
            "★" if plan.is_popular else "",
        )

    console.print(table)


@app.command()
def purge_sessions():
    """Delete expired and revoked login sessions."""
    from rest_api.services.domain.auth_service import purge_stale_sessions
    from shared.infrastructure.db import get_db_context

    with get_db_context() as db:
        purged = purge_stale_sessions(db)
        db.commit()

    console.print(f"[green]✓ {purged} stale session(s) removed[/green]")


# =============================================================================
# Server Commands
# =============================================================================

@app.command()
def run(
    host: str = typer.Option("0.0.0.0", help="Bind address"),
    port: int = typer.Option(None, help="Port (defaults to REST_API_PORT)"),
    reload: bool = typer.Option(False, "--reload", help="Auto-reload on changes"),
):
    """Run the REST API with uvicorn."""
    import uvicorn

    from shared.config.settings import settings

    uvicorn.run(
        "rest_api.main:app",
        host=host,
        port=port or settings.rest_api_port,
        reload=reload,
    )


@app.command()
def health(
    url: str = typer.Option("http://localhost:8000/api/health/detailed", help="Health URL"),
):
    """Check a running API."""
    import time

    import httpx

    table = Table(title="Service Health")
    table.add_column("Component", style="cyan")
    table.add_column("Status", style="green")
    table.add_column("Response Time", style="yellow")

    start = time.time()
    try:
        response = httpx.get(url, timeout=5.0)
    except httpx.HTTPError as e:
        table.add_row("REST API", f"✗ {type(e).__name__}", "-")
        console.print(table)
        raise typer.Exit(1)
    elapsed = (time.time() - start) * 1000

    body = response.json()
    table.add_row("REST API", body.get("status", str(response.status_code)), f"{elapsed:.0f}ms")
    for name, component in body.get("dependencies", {}).items():
        table.add_row(name, component.get("status", "?"), "-")

    console.print(table)
    if response.status_code != 200:
        raise typer.Exit(1)


@app.command()
def version():
    """Show version information."""
    table = Table(title="Menu SaaS Version")
    table.add_column("Component", style="cyan")
    table.add_column("Version", style="green")

    table.add_row("API", "0.1.0")
    table.add_row("Python", sys.version.split()[0])

    console.print(table)


if __name__ == "__main__":
    app()
