"""Estados de la sesión del gateway.

Vive en el dominio para que la capa de servicios y la CLI compartan una única
fuente de verdad sin importar adaptadores.
"""

from __future__ import annotations

from enum import Enum


class SessionState(str, Enum):
    """Estados de la máquina de sesión."""

    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"

    @classmethod
    def initial(cls) -> "SessionState":
        return cls.UNAUTHENTICATED

    def label(self) -> str:
        """Human readable label for prompts and logging."""

        return {
            SessionState.UNAUTHENTICATED: "Sin sesión",
            SessionState.AUTHENTICATING: "Autenticando",
            SessionState.AUTHENTICATED: "Autenticado",
        }[self]
