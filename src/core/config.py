"""Configuración del gateway (`GMSF_*`).

Por qué un único `AppSettings`:
- Transporte, almacén de credenciales, sesión y CLI leen los mismos valores.
- El `.env` por usuario permite fijar la URL del backend una vez
  (`gmsf doctor set-url`) y usarla desde cualquier directorio.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

APP_DIR_NAME = "gmsf-gateway"


def get_user_config_dir() -> Path:
    """Directorio por usuario donde viven el `.env` global y `session.json`."""

    home = Path.home()
    if sys.platform.startswith("win"):
        return Path(os.environ.get("APPDATA") or home) / APP_DIR_NAME
    if sys.platform == "darwin":
        return home / "Library" / "Application Support" / APP_DIR_NAME
    return Path(os.environ.get("XDG_CONFIG_HOME") or home / ".config") / APP_DIR_NAME


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _read_env_file(path: Path) -> dict[str, str]:
    if not path.exists():
        return {}
    values: dict[str, str] = {}
    for line in path.read_text(encoding="utf-8").splitlines():
        key, sep, value = line.strip().partition("=")
        key = key.strip()
        if not sep or not key or key.startswith("#"):
            continue
        values[key] = value.strip().strip("\"'")
    return values


def write_user_env_vars(values: dict[str, str], *, env_path: Path | None = None) -> Path:
    """Fusiona `values` en el `.env` de usuario; las claves existentes se conservan."""

    target = env_path or get_user_env_file()
    target.parent.mkdir(parents=True, exist_ok=True)

    merged = _read_env_file(target)
    merged.update((key, value) for key, value in values.items() if value is not None)

    body = "".join(f"{key}={merged[key]}\n" for key in sorted(merged))
    target.write_text("# gmsf-gateway user settings\n" + body, encoding="utf-8")
    return target


class AppSettings(BaseSettings):
    """Valores leídos de `GMSF_*`, del `.env` del proyecto y del `.env` de usuario.

    Un valor inválido (timeout <= 0, URL vacía) falla al construir, antes de
    abrir ninguna conexión.
    """

    model_config = SettingsConfigDict(
        env_prefix="GMSF_",
        extra="ignore",
        case_sensitive=False,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    api_base_url: str = Field(
        default="https://gmsf-backend.vercel.app",
        min_length=8,
        description="Origen del backend REST; todos los endpoints son relativos a él.",
    )
    http_timeout_seconds: float = Field(
        default=15.0,
        gt=0,
        description="Timeout único por request (segundos).",
    )
    user_agent: str = Field(
        default="gmsf-gateway/1.0",
        min_length=1,
        description="User-Agent enviado al backend.",
    )
    admin_role_id: int = Field(
        default=1,
        ge=1,
        description="Único id de rol autorizado a mantener una sesión.",
    )
    credentials_path: Path | None = Field(
        default=None,
        description="Ruta del fichero de sesión persistida (por defecto en el directorio de usuario).",
    )
    log_level: str = Field(
        default="WARNING",
        description="Nivel de logging para la CLI (DEBUG, INFO, WARNING, ERROR).",
    )

    def resolved_credentials_path(self) -> Path:
        return self.credentials_path or (get_user_config_dir() / "session.json")
