"""CLI `gmsf` (Typer + Rich).

Capa de vista mínima: cada comando llama a `GymGateway` y renderiza el
resultado. No contiene lógica de sesión ni de envelopes.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

import typer
from rich.console import Console
from rich.logging import RichHandler

from cli import doctor
from cli.ui_components import (
    build_clients_table,
    build_stats_table,
    build_trainers_table,
    build_user_panel,
    print_banner,
)
from core.config import AppSettings
from core.domain.errors import GatewayError, NotAuthenticatedError
from core.domain.models import ListParams
from core.services.gateway import GymGateway

T = TypeVar("T")

app = typer.Typer(no_args_is_help=True, help="Administrative client for the GMSF gym backend.")
app.add_typer(doctor.app, name="doctor")

_console = Console()

_STATS_SOURCES: dict[str, Callable[[GymGateway], Awaitable[dict]]] = {
    "dashboard": lambda api: api.get_dashboard_stats(),
    "optimized": lambda api: api.get_optimized_stats(),
    "summary": lambda api: api.get_quick_summary(),
    "metrics": lambda api: api.get_main_metrics(),
    "widget": lambda api: api.get_widget(),
    "contracts": lambda api: api.get_contract_stats(),
    "memberships": lambda api: api.get_membership_stats(),
    "attendance": lambda api: api.get_attendance_stats(),
    "trends": lambda api: api.get_attendance_trends(),
}


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(name)s - %(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _run(action: Callable[[GymGateway], Awaitable[T]]) -> T:
    async def runner() -> T:
        async with GymGateway(AppSettings()) as api:
            return await action(api)

    try:
        return asyncio.run(runner())
    except GatewayError as exc:
        _console.print(f"[red]Error ({exc.kind.value}):[/red] {exc.message}")
        raise typer.Exit(code=1) from exc


async def _authenticated(api: GymGateway) -> None:
    if not await api.restore_session():
        raise NotAuthenticatedError("No active session. Run `gmsf login` first.")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log requests and session transitions."),
) -> None:
    settings = AppSettings()
    configure_logging("DEBUG" if verbose else settings.log_level)


@app.command()
def login(
    correo: str = typer.Option(..., "--email", "-e", prompt="Email"),
    contrasena: str = typer.Option(..., "--password", "-p", prompt="Password", hide_input=True),
) -> None:
    """Sign in as a gym administrator and persist the session."""

    print_banner(_console)
    result = _run(lambda api: api.login(correo, contrasena))
    if not result.success:
        _console.print(f"[red]{result.error}[/red]")
        raise typer.Exit(code=1)
    user = result.session.user if result.session else None
    if user is not None:
        _console.print(build_user_panel(user, title="Sesión iniciada"))


@app.command()
def logout() -> None:
    """Close the session on the server (best-effort) and locally."""

    _run(lambda api: api.logout())
    _console.print("[green]Session closed.[/green]")


@app.command()
def whoami() -> None:
    """Show the live profile of the authenticated administrator."""

    async def action(api: GymGateway):
        await _authenticated(api)
        return await api.get_profile()

    _console.print(build_user_panel(_run(action)))


@app.command()
def trainers(
    page: int = typer.Option(1, min=1),
    limit: int = typer.Option(10, min=1, max=500),
    search: Optional[str] = typer.Option(None, "--search", "-s"),
) -> None:
    """List trainers."""

    async def action(api: GymGateway):
        await _authenticated(api)
        return await api.get_trainers(ListParams(page=page, limit=limit, search=search))

    _console.print(build_trainers_table(_run(action)))


@app.command()
def clients(
    page: int = typer.Option(1, min=1),
    limit: int = typer.Option(10, min=1, max=500),
    search: Optional[str] = typer.Option(None, "--search", "-s"),
) -> None:
    """List clients."""

    async def action(api: GymGateway):
        await _authenticated(api)
        return await api.get_clients(ListParams(page=page, limit=limit, search=search))

    _console.print(build_clients_table(_run(action)))


@app.command()
def stats(
    source: str = typer.Argument("dashboard", help=f"One of: {', '.join(_STATS_SOURCES)}"),
) -> None:
    """Show an aggregate/statistics endpoint."""

    fetch = _STATS_SOURCES.get(source)
    if fetch is None:
        raise typer.BadParameter(f"unknown source '{source}'")

    async def action(api: GymGateway):
        await api.check_token_status()
        return await fetch(api)

    _console.print(build_stats_table(source, _run(action)))


def run() -> None:
    app()
