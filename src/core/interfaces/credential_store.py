"""Contrato del almacén persistente de credenciales.

Por qué Protocol:
- Define un contrato estructural (duck typing) sin herencia rígida.
- El gateway funciona igual con un fichero JSON, memoria o un keyring, y los
  tests pueden inyectar cualquier implementación.
"""

from __future__ import annotations

from typing import Iterable, Protocol, runtime_checkable

# Nombres estables entre versiones: la restauración de sesión depende de ellos.
ACCESS_TOKEN_KEY = "authToken"
REFRESH_TOKEN_KEY = "refreshToken"
USER_KEY = "userInfo"

SESSION_KEYS: tuple[str, ...] = (ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY, USER_KEY)


@runtime_checkable
class CredentialStore(Protocol):
    """Almacén clave/valor asíncrono que sobrevive reinicios del proceso.

    Reglas de diseño:
    - Todas las operaciones son asíncronas (pueden suspender en I/O).
    - `get` devuelve `None` para claves ausentes; nunca lanza por eso.
    - Los fallos de I/O se elevan como `core.domain.errors.StorageError`.
    """

    async def get(self, key: str) -> str | None:
        ...

    async def set(self, key: str, value: str) -> None:
        ...

    async def remove_many(self, keys: Iterable[str]) -> None:
        ...
