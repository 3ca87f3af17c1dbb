"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en múltiples comandos.
"""

from __future__ import annotations

from typing import Any, Mapping

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import Client, PaginatedResult, Trainer, User


def print_banner(console: Console) -> None:
    title = Text("GMSF Gateway", style="bold cyan")
    subtitle = Text("Administración del gimnasio • Sesión • API", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def _active_cell(active: bool) -> Text:
    return Text("sí", style="green") if active else Text("no", style="red")


def _page_caption(page: PaginatedResult[Any]) -> str:
    return f"Página {page.page}/{max(page.total_pages, 1)} • {page.total} registros"


def build_trainers_table(page: PaginatedResult[Trainer]) -> Table:
    table = Table(title="Entrenadores", caption=_page_caption(page))
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Nombre", style="white")
    table.add_column("Email", style="magenta")
    table.add_column("Especialidad", style="cyan")
    table.add_column("Activo")
    for trainer in page.data:
        table.add_row(
            trainer.id,
            f"{trainer.nombre} {trainer.apellido}".strip(),
            trainer.email,
            trainer.especialidad,
            _active_cell(trainer.activo),
        )
    return table


def build_clients_table(page: PaginatedResult[Client]) -> Table:
    table = Table(title="Clientes", caption=_page_caption(page))
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Nombre", style="white")
    table.add_column("Documento", style="cyan")
    table.add_column("Email", style="magenta")
    table.add_column("Membresía")
    table.add_column("Activo")
    for client in page.data:
        membership = client.membresia.estado if client.membresia else "-"
        table.add_row(
            client.id,
            f"{client.nombre} {client.apellido}".strip(),
            f"{client.tipo_documento} {client.numero_documento}".strip(),
            client.email,
            membership,
            _active_cell(client.activo),
        )
    return table


def build_user_panel(user: User, *, title: str = "Perfil") -> Panel:
    body = Text()
    body.append(f"{user.nombre} {user.apellido or ''}".strip() + "\n", style="bold")
    body.append(f"{user.correo}\n")
    if user.telefono:
        body.append(f"Tel: {user.telefono}\n")
    if user.document_number:
        body.append(f"Doc: {user.document_type or ''} {user.document_number}\n")
    body.append(f"\nRol: {user.role_name or user.role_id}", style="dim")
    return Panel(body, title=Text(title, style="bold yellow"), border_style="yellow")


def build_stats_table(title: str, stats: Mapping[str, Any]) -> Table:
    """Tabla clave/valor; los valores anidados se muestran compactos."""

    table = Table(title=title)
    table.add_column("Métrica", style="cyan", no_wrap=True)
    table.add_column("Valor", style="white")
    for key, value in stats.items():
        if isinstance(value, (list, dict)):
            value = f"{type(value).__name__}[{len(value)}]"
        table.add_row(str(key), str(value))
    return table
