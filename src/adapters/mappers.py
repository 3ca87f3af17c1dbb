"""Mappers de registros crudos del backend a entidades del dominio.

Los registros llegan con los campos en el nivel superior o anidados bajo
`usuario`/`persona`, con nombres alternativos y tipos inconsistentes. Cada
campo se resuelve con una lista ordenada de extractores (`record -> valor | None`);
el primero que devuelve algo gana.

Todos los mappers son totales: nunca lanzan y nunca exigen campos.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Mapping

from core.domain.models import Client, Membership, MembershipStatus, Trainer, User

Record = Mapping[str, Any]
Extractor = Callable[[Record], Any]

PERSON_KEYS = ("usuario", "persona")

_TRUE_STRINGS = {"true", "1", "activo", "activa", "active", "si", "sí", "yes"}
_FALSE_STRINGS = {"false", "0", "inactivo", "inactiva", "inactive", "no"}

_MEMBERSHIP_STATUS: dict[str, MembershipStatus] = {
    "activa": "activa",
    "activo": "activa",
    "active": "activa",
    "vigente": "activa",
    "vencida": "vencida",
    "vencido": "vencida",
    "expirada": "vencida",
    "expired": "vencida",
    "suspendida": "suspendida",
    "suspendido": "suspendida",
    "cancelada": "suspendida",
    "suspended": "suspendida",
}


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# Extractores


def top(*names: str) -> Extractor:
    """Primer valor no vacío entre `names` en el nivel superior."""

    def extract(record: Record) -> Any:
        for name in names:
            value = record.get(name)
            if value is not None and value != "":
                return value
        return None

    return extract


def nested(*names: str, under: Iterable[str] = PERSON_KEYS) -> Extractor:
    """Igual que `top`, pero dentro del primer sub-registro presente en `under`."""

    under = tuple(under)
    lookup = top(*names)

    def extract(record: Record) -> Any:
        for key in under:
            sub = record.get(key)
            if isinstance(sub, Mapping):
                return lookup(sub)
        return None

    return extract


def person(*names: str) -> tuple[Extractor, ...]:
    """Campo de persona: sub-registro anidado primero, luego nivel superior."""

    return (nested(*names), top(*names))


def first(record: Record, extractors: Iterable[Extractor], default: Any = None) -> Any:
    for extractor in extractors:
        value = extractor(record)
        if value is not None:
            return value
    return default


# Coerciones


def as_id(value: Any) -> str:
    if value is None or isinstance(value, bool):
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def as_str(value: Any, default: str = "") -> str:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip()
    return str(value)


def as_optional_str(value: Any) -> str | None:
    text = as_str(value)
    return text or None


def as_int(value: Any, default: int = 0) -> int:
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return default


def as_float(value: Any, default: float = 0.0) -> float:
    if value is None or isinstance(value, bool):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def as_bool(value: Any, default: bool | None = True) -> bool | None:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    return default


def as_str_list(value: Any) -> list[str]:
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    if isinstance(value, (list, tuple)):
        out: list[str] = []
        for item in value:
            if isinstance(item, Mapping):
                item = item.get("nombre") or item.get("name")
            text = as_str(item)
            if text:
                out.append(text)
        return out
    return []


def _as_record(raw: Any) -> Record:
    return raw if isinstance(raw, Mapping) else {}


# Usuario

_USER_ID = (nested("id", "id_usuario"), top("id_usuario", "id"))
_ROLE_ID = (
    nested("id_rol", "rol_id", "roleId"),
    top("id_rol", "rol_id", "roleId"),
    lambda r: _as_record(r.get("rol")).get("id"),
    lambda r: _as_record(_as_record(r.get("usuario")).get("rol")).get("id"),
)
_ROLE_NAME = (
    lambda r: _as_record(_as_record(r.get("usuario")).get("rol")).get("nombre"),
    lambda r: _as_record(r.get("rol")).get("nombre"),
    top("roleName", "nombre_rol"),
)

ADMIN_ROLE_NAME = "Administrador"


def to_user(raw: Any, *, admin_role_id: int = 1) -> User:
    record = _as_record(raw)
    role_id = as_int(first(record, _ROLE_ID))
    role_name = as_str(first(record, _ROLE_NAME))
    if not role_name and role_id == admin_role_id:
        role_name = ADMIN_ROLE_NAME

    return User(
        id=as_id(first(record, _USER_ID)),
        nombre=as_str(first(record, person("nombre"))),
        apellido=as_optional_str(first(record, person("apellido"))),
        correo=as_str(first(record, person("correo", "email"))),
        telefono=as_optional_str(first(record, person("telefono"))),
        direccion=as_optional_str(first(record, person("direccion"))),
        genero=as_optional_str(first(record, person("genero"))),
        document_type=as_optional_str(first(record, person("tipo_documento", "tipoDocumento"))),
        document_number=as_optional_str(first(record, person("numero_documento", "numeroDocumento"))),
        birth_date=as_optional_str(first(record, person("fecha_nacimiento", "fechaNacimiento"))),
        role_id=role_id,
        role_name=role_name,
        active=as_bool(first(record, person("estado", "activo")), default=None),
    )


# Entrenador

_TRAINER_ID = (top("id", "id_entrenador"), nested("id"))
_TRAINER_SPECIALTY = (top("especialidad"), nested("especialidad"))
_TRAINER_JOINED = (
    nested("fecha_registro", "fecha_ingreso"),
    top("fecha_ingreso", "fechaIngreso", "fecha_registro"),
)
_ACTIVE = (top("estado", "activo"), nested("estado", "activo"))


def to_trainer(raw: Any) -> Trainer:
    record = _as_record(raw)
    return Trainer(
        id=as_id(first(record, _TRAINER_ID)),
        nombre=as_str(first(record, person("nombre"))),
        apellido=as_str(first(record, person("apellido"))),
        email=as_str(first(record, person("correo", "email"))),
        telefono=as_str(first(record, person("telefono"))),
        especialidad=as_str(first(record, _TRAINER_SPECIALTY), "General") or "General",
        fecha_ingreso=as_str(first(record, _TRAINER_JOINED)) or _now_iso(),
        activo=bool(as_bool(first(record, _ACTIVE), default=True)),
        experiencia=max(0, as_int(first(record, (top("experiencia", "anos_experiencia"),)))),
        certificaciones=as_str_list(first(record, (top("certificaciones"),))),
    )


# Membresía

_MEMBERSHIP_ID = (top("id", "id_membresia", "id_contrato"),)
_MEMBERSHIP_TYPE = (
    top("tipo", "nombre"),
    lambda r: _as_record(r.get("membresia")).get("nombre"),
)


def _membership_status(value: Any) -> MembershipStatus:
    if isinstance(value, bool):
        return "activa" if value else "suspendida"
    if isinstance(value, str):
        return _MEMBERSHIP_STATUS.get(value.strip().lower(), "activa")
    return "activa"


def to_membership(raw: Any) -> Membership:
    record = _as_record(raw)
    return Membership(
        id=as_id(first(record, _MEMBERSHIP_ID)),
        tipo=as_str(first(record, _MEMBERSHIP_TYPE)),
        fecha_inicio=as_str(first(record, (top("fecha_inicio", "fechaInicio"),))) or _now_iso(),
        fecha_fin=as_str(first(record, (top("fecha_fin", "fechaFin"),))) or _now_iso(),
        estado=_membership_status(first(record, (top("estado"),))),
        precio=as_float(first(record, (top("precio", "precio_total", "valor"),))),
    )


# Cliente

_CLIENT_ID = (top("id_persona", "id", "id_cliente"), nested("id"))
_CLIENT_REGISTERED = (top("fecha_registro", "fechaRegistro"), nested("fecha_registro"))
_CLIENT_MEMBERSHIP = (top("membresia", "membresia_activa", "contrato_activo"),)


def _beneficiary_record(raw: Any) -> Record:
    record = _as_record(raw)
    sub = record.get("persona_beneficiaria")
    return sub if isinstance(sub, Mapping) else record


def to_client(raw: Any) -> Client:
    record = _as_record(raw)

    membership_raw = first(record, _CLIENT_MEMBERSHIP)
    beneficiaries_raw = record.get("beneficiarios")

    return Client(
        id=as_id(first(record, _CLIENT_ID)),
        nombre=as_str(first(record, person("nombre"))),
        apellido=as_str(first(record, person("apellido"))),
        email=as_str(first(record, person("correo", "email"))),
        telefono=as_str(first(record, person("telefono"))),
        tipo_documento=as_str(first(record, person("tipo_documento", "tipoDocumento"))) or "CC",
        numero_documento=as_str(first(record, person("numero_documento", "numeroDocumento"))),
        fecha_nacimiento=as_str(first(record, person("fecha_nacimiento", "fechaNacimiento"))) or _now_iso(),
        fecha_registro=as_str(first(record, _CLIENT_REGISTERED)) or _now_iso(),
        activo=bool(as_bool(first(record, _ACTIVE), default=True)),
        membresia=to_membership(membership_raw) if isinstance(membership_raw, Mapping) else None,
        beneficiarios=(
            [to_client(_beneficiary_record(item)) for item in beneficiaries_raw]
            if isinstance(beneficiaries_raw, list)
            else None
        ),
    )
