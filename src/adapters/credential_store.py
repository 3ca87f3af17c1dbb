"""Almacenes de credenciales.

- `JsonFileCredentialStore`: persiste la sesión en un JSON del directorio de
  configuración del usuario (sobrevive reinicios del proceso).
- `MemoryCredentialStore`: sesión efímera del proceso (tests, uso embebido).

El I/O de disco es bloqueante, así que se delega a un hilo con
`asyncio.to_thread` para no congelar el event loop.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Iterable

from core.domain.errors import StorageError
from core.interfaces.credential_store import CredentialStore

logger = logging.getLogger(__name__)


class MemoryCredentialStore(CredentialStore):
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def remove_many(self, keys: Iterable[str]) -> None:
        for key in keys:
            self._data.pop(key, None)

    def snapshot(self) -> dict[str, str]:
        return dict(self._data)


class JsonFileCredentialStore(CredentialStore):
    """Documento JSON plano `{clave: valor}` con permisos 0600."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StorageError(f"Could not read credential store: {exc}") from exc
        if not raw.strip():
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise StorageError("Credential store is corrupted.") from exc
        if not isinstance(data, dict):
            raise StorageError("Credential store is corrupted.")
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write(self, data: dict[str, str]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self._path.with_suffix(self._path.suffix + ".tmp")
            tmp.write_text(
                json.dumps(data, ensure_ascii=False, indent=2, sort_keys=True) + "\n",
                encoding="utf-8",
            )
            os.chmod(tmp, 0o600)
            os.replace(tmp, self._path)
        except OSError as exc:
            raise StorageError(f"Could not write credential store: {exc}") from exc

    def _set_sync(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def _remove_sync(self, keys: list[str]) -> None:
        data = self._read()
        changed = False
        for key in keys:
            if key in data:
                del data[key]
                changed = True
        if changed:
            self._write(data)

    async def get(self, key: str) -> str | None:
        data = await asyncio.to_thread(self._read)
        return data.get(key)

    async def set(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._set_sync, key, value)

    async def remove_many(self, keys: Iterable[str]) -> None:
        keys = list(keys)
        await asyncio.to_thread(self._remove_sync, keys)
        logger.debug("Removed %d keys from %s", len(keys), self._path)
