"""`gmsf doctor`: configuration, connectivity and stored-session checks."""

from __future__ import annotations

import asyncio

import httpx
import typer
from rich.console import Console
from rich.table import Table

from adapters.http_client import build_async_client
from core.config import AppSettings, write_user_env_vars
from core.services.gateway import GymGateway

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_http(settings: AppSettings) -> tuple[bool, str]:
    try:
        async with build_async_client(settings) as client:
            response = await client.get("/")
        return True, f"HTTP {response.status_code}"
    except httpx.HTTPError as exc:
        return False, str(exc)


async def _check_session(settings: AppSettings) -> tuple[str, str]:
    async with GymGateway(settings) as api:
        token = await api.get_stored_token()
        user = await api.get_stored_user()
    if not token:
        return "NONE", "No stored session"
    if user is None:
        return "PARTIAL", "Token stored without user record"
    if not api.session_manager.is_permitted(user):
        return "INVALID", f"Stored user has role {user.role_id}"
    return "OK", f"{user.correo} (role {user.role_id})"


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="GMSF Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    table.add_row("API base_url", "OK", settings.api_base_url)
    table.add_row("Timeout", "OK", f"{settings.http_timeout_seconds:g}s")
    table.add_row("Session file", "OK", str(settings.resolved_credentials_path()))

    # Connectivity (best-effort)
    ok_http, detail_http = asyncio.run(_check_http(settings))
    table.add_row("HTTP connectivity", "OK" if ok_http else "FAIL", detail_http)

    status, detail = asyncio.run(_check_session(settings))
    table.add_row("Stored session", status, detail)

    _console.print(table)

    if not ok_http:
        _console.print(
            "\n[yellow]Note:[/yellow] Set a reachable backend with `gmsf doctor set-url <url>`."
        )


@app.command(name="set-url")
def set_url(url: str = typer.Argument(..., help="Backend origin, e.g. https://gmsf-backend.vercel.app")) -> None:
    """Persist the backend base URL in the user config .env."""

    url = url.strip().rstrip("/")
    if not url.startswith(("http://", "https://")):
        raise typer.BadParameter("url must start with http:// or https://")

    env_path = write_user_env_vars({"GMSF_API_BASE_URL": url})
    _console.print(f"[green]Saved API config to:[/green] {env_path}")
