"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Validación y documentación autocontenida (Field) sin acoplar el Core a HTTP.
- Serialización estable con alias camelCase, el formato que consume la capa de
  vista (`fechaIngreso`, `totalPages`, `roleId`...).

Nota:
- Estos modelos describen *qué* devuelve el gateway, no *cómo* lo envía el
  backend. La traducción desde los registros crudos vive en `adapters.mappers`.
"""

from __future__ import annotations

from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from pydantic.config import ConfigDict

T = TypeVar("T")

MembershipStatus = Literal["activa", "vencida", "suspendida"]


class DomainModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class User(DomainModel):
    """Usuario autenticado (administrador) tal como lo ve la aplicación."""

    id: str = Field(..., description="Identificador, siempre normalizado a string.")
    nombre: str = Field(default="")
    apellido: str | None = None
    correo: str = Field(default="")
    telefono: str | None = None
    direccion: str | None = None
    genero: str | None = None
    document_type: str | None = None
    document_number: str | None = None
    birth_date: str | None = None
    role_id: int = Field(default=0, description="Id de rol; solo uno puede mantener sesión.")
    role_name: str = Field(default="")
    active: bool | None = None


class Membership(DomainModel):
    id: str = Field(default="")
    tipo: str = Field(default="")
    fecha_inicio: str
    fecha_fin: str
    estado: MembershipStatus = Field(default="activa")
    precio: float = Field(default=0.0)


class Trainer(DomainModel):
    id: str
    nombre: str = Field(default="")
    apellido: str = Field(default="")
    email: str = Field(default="")
    telefono: str = Field(default="")
    especialidad: str = Field(default="General")
    fecha_ingreso: str
    activo: bool = Field(default=True)
    experiencia: int = Field(default=0, ge=0)
    certificaciones: list[str] = Field(default_factory=list)


class Client(DomainModel):
    id: str
    nombre: str = Field(default="")
    apellido: str = Field(default="")
    email: str = Field(default="")
    telefono: str = Field(default="")
    tipo_documento: str = Field(default="CC")
    numero_documento: str = Field(default="")
    fecha_nacimiento: str
    fecha_registro: str
    activo: bool = Field(default=True)
    membresia: Membership | None = None
    beneficiarios: list[Client] | None = None


class PaginatedResult(DomainModel, Generic[T]):
    """Página canónica devuelta por todos los métodos de listado."""

    data: list[T] = Field(default_factory=list)
    total: int = Field(default=0, ge=0)
    page: int = Field(default=1)
    limit: int = Field(default=10)
    total_pages: int = Field(default=0, ge=0)


class ListParams(DomainModel):
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=500)
    search: str | None = None


class Session(DomainModel):
    """Credenciales y usuario de la sesión activa (espejo del almacén persistente)."""

    access_token: str = Field(..., min_length=1)
    refresh_token: str | None = None
    user: User | None = None


class LoginResult(DomainModel):
    """Resultado total de `login`: nunca se propaga una excepción más allá."""

    success: bool
    error: str | None = None
    error_kind: str | None = None
    session: Session | None = None


class ClientCheckResult(DomainModel):
    exists: bool
    client: Client | None = None


class TrainerInput(DomainModel):
    """Cuerpo de creación/actualización de entrenador.

    Todos los campos son opcionales para permitir actualizaciones parciales;
    solo se envían los que el llamador fijó explícitamente.
    """

    nombre: str | None = None
    apellido: str | None = None
    email: str | None = None
    telefono: str | None = None
    especialidad: str | None = None
    experiencia: int | None = Field(default=None, ge=0)
    certificaciones: list[str] | None = None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_unset=True)


class ClientInput(DomainModel):
    nombre: str | None = None
    apellido: str | None = None
    email: str | None = None
    telefono: str | None = None
    tipo_documento: str | None = None
    numero_documento: str | None = None
    fecha_nacimiento: str | None = None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_unset=True)
