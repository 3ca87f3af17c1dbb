"""Normalizador de envelopes de respuesta.

El backend envuelve la carga útil de forma distinta según el endpoint:

- `{"status": "success", "data": T}` o `{"status": "success", "data": {"data": [T], "pagination": {...}}}`
- `{"success": true, "data": T}` o anidado como arriba
- array desnudo `[T]`
- objeto desnudo `T`

`detect_envelope` clasifica el cuerpo en una variante explícita y
`extract_page` / `extract_record` la consumen. Ninguna función lanza para un
JSON bien formado: las formas desconocidas degradan a un resultado vacío.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Mapping, Union

logger = logging.getLogger(__name__)

_TOTAL_KEYS = ("total", "totalItems", "total_items", "count")
_PAGE_KEYS = ("page", "pagina", "currentPage", "current_page")
_LIMIT_KEYS = ("limit", "limite", "perPage", "per_page", "pageSize")
_TOTAL_PAGES_KEYS = ("totalPages", "total_pages", "totalPaginas", "pages")


@dataclass(frozen=True)
class PagedEnvelope:
    """`{data: [...], pagination: {...}}` (con o sin wrapper de estado)."""

    items: list[Any]
    pagination: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ListEnvelope:
    items: list[Any]


@dataclass(frozen=True)
class RecordEnvelope:
    record: Mapping[str, Any]


@dataclass(frozen=True)
class UnrecognizedEnvelope:
    body: Any = None


Envelope = Union[PagedEnvelope, ListEnvelope, RecordEnvelope, UnrecognizedEnvelope]


@dataclass(frozen=True)
class Pagination:
    total: int
    page: int
    limit: int
    total_pages: int


def _is_success_wrapper(body: Any) -> bool:
    if not isinstance(body, Mapping):
        return False
    return body.get("status") == "success" or body.get("success") is True


def _classify(value: Any) -> Envelope:
    if isinstance(value, Mapping):
        inner = value.get("data")
        if isinstance(inner, list):
            pagination = value.get("pagination")
            return PagedEnvelope(
                items=list(inner),
                pagination=pagination if isinstance(pagination, Mapping) else {},
            )
        return RecordEnvelope(record=value)
    if isinstance(value, list):
        return ListEnvelope(items=list(value))
    return UnrecognizedEnvelope(body=value)


def detect_envelope(body: Any) -> Envelope:
    """Clasifica el cuerpo en la primera variante que encaje (el orden importa)."""

    if _is_success_wrapper(body):
        return _classify(body.get("data"))
    return _classify(body)


def _first_int(source: Mapping[str, Any], keys: tuple[str, ...]) -> int | None:
    for key in keys:
        value = source.get(key)
        if isinstance(value, bool) or value is None:
            continue
        try:
            return int(value)
        except (TypeError, ValueError, OverflowError):
            continue
    return None


def reconcile_pagination(
    *,
    item_count: int,
    pagination: Mapping[str, Any] | None,
    requested_page: int,
    requested_limit: int,
) -> Pagination:
    """Completa la paginación: los valores del backend ganan, el resto se deriva."""

    pagination = pagination or {}
    total = _first_int(pagination, _TOTAL_KEYS)
    if total is None or total < 0:
        total = item_count
    page = _first_int(pagination, _PAGE_KEYS) or requested_page
    limit = _first_int(pagination, _LIMIT_KEYS) or requested_limit
    total_pages = _first_int(pagination, _TOTAL_PAGES_KEYS)
    if total_pages is None or total_pages < 0:
        total_pages = math.ceil(total / limit) if limit > 0 else 0
    return Pagination(total=total, page=page, limit=limit, total_pages=total_pages)


def extract_page(body: Any, *, page: int, limit: int) -> tuple[list[Any], Pagination]:
    """Extrae `(items, pagination)` de cualquier envelope conocido.

    Un registro único o una forma desconocida donde se esperaba una lista se
    tratan como envelope malformado: lista vacía con `total=0`.
    """

    envelope = detect_envelope(body)
    if isinstance(envelope, PagedEnvelope):
        items, raw_pagination = envelope.items, envelope.pagination
    elif isinstance(envelope, ListEnvelope):
        items, raw_pagination = envelope.items, {}
    else:
        logger.warning("Unrecognized list envelope (%s); returning empty page", type(body).__name__)
        items, raw_pagination = [], {}

    pagination = reconcile_pagination(
        item_count=len(items),
        pagination=raw_pagination,
        requested_page=page,
        requested_limit=limit,
    )
    return items, pagination


def extract_record(body: Any, *unwrap_keys: str) -> dict[str, Any]:
    """Extrae un registro único.

    `unwrap_keys` permite desempaquetar un nivel extra cuando el endpoint
    anida el registro (p.ej. `{"trainer": {...}}`); el primero presente gana.
    Formas desconocidas devuelven `{}`.
    """

    envelope = detect_envelope(body)
    if not isinstance(envelope, RecordEnvelope):
        # Cuerpo vacío (204) no es un error de forma.
        if body is not None:
            logger.warning("Unrecognized record envelope (%s); returning empty record", type(body).__name__)
        return {}

    record = envelope.record
    for key in unwrap_keys:
        nested = record.get(key)
        if isinstance(nested, Mapping):
            return dict(nested)
    return dict(record)
