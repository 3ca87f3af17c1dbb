"""Superficie pública del API: lo único que la capa de vista puede invocar.

Compone almacén de credenciales, transporte, normalizador de envelopes,
mappers y gestor de sesión. Cada método pasa la respuesta cruda por
`adapters.envelope` y luego por `adapters.mappers`, así que ningún llamador ve
nunca la forma original del backend.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Literal, TypeVar

import httpx

from adapters.credential_store import JsonFileCredentialStore
from adapters.envelope import (
    ListEnvelope,
    PagedEnvelope,
    detect_envelope,
    extract_page,
    extract_record,
)
from adapters.http_client import ApiTransport
from adapters.mappers import to_client, to_trainer
from core import endpoints
from core.config import AppSettings
from core.domain.errors import NotFoundError
from core.domain.models import (
    Client,
    ClientCheckResult,
    ClientInput,
    ListParams,
    LoginResult,
    PaginatedResult,
    Trainer,
    TrainerInput,
    User,
)
from core.domain.session_state import SessionState
from core.interfaces.credential_store import CredentialStore
from core.services.session_manager import SessionManager

logger = logging.getLogger(__name__)

T = TypeVar("T")

Period = Literal["today", "week", "month"]


class GymGateway:
    """Gateway del backend de gestión del gimnasio para administradores.

    Uso típico:

        async with GymGateway() as api:
            if not await api.restore_session():
                await api.login("admin@gym.com", "secret")
            page = await api.get_trainers(ListParams(page=1, limit=20))
    """

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        store: CredentialStore | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._store = store or JsonFileCredentialStore(self._settings.resolved_credentials_path())
        self._transport = ApiTransport(self._settings, self._store, transport=transport)
        self._session = SessionManager(self._transport, self._store, self._settings)

    async def __aenter__(self) -> "GymGateway":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._transport.aclose()

    @property
    def settings(self) -> AppSettings:
        return self._settings

    @property
    def state(self) -> SessionState:
        return self._session.state

    @property
    def session_manager(self) -> SessionManager:
        return self._session

    # Sesión

    async def login(self, correo: str, contrasena: str) -> LoginResult:
        return await self._session.login(correo, contrasena)

    async def logout(self) -> None:
        await self._session.logout()

    async def restore_session(self) -> bool:
        return await self._session.restore_session()

    async def check_token_status(self) -> None:
        await self._session.check_token_status()

    async def get_profile(self) -> User:
        return await self._session.fetch_profile()

    async def get_stored_user(self) -> User | None:
        return await self._session.get_stored_user()

    async def get_stored_token(self) -> str | None:
        return await self._session.get_stored_token()

    # Helpers

    async def _get_page(
        self,
        path: str,
        query: dict[str, Any],
        params: ListParams,
        mapper: Callable[[Any], T],
    ) -> PaginatedResult[T]:
        body = await self._transport.get(path, params=query)
        items, pagination = extract_page(body, page=params.page, limit=params.limit)
        logger.debug("%s: %d items (total %d)", path, len(items), pagination.total)
        return PaginatedResult(
            data=[mapper(item) for item in items],
            total=pagination.total,
            page=pagination.page,
            limit=pagination.limit,
            total_pages=pagination.total_pages,
        )

    async def _get_stats(self, path: str, query: dict[str, Any] | None = None) -> dict[str, Any]:
        body = await self._transport.get(path, params=query)
        envelope = detect_envelope(body)
        # Algunas series (tendencias) llegan como lista.
        if isinstance(envelope, (ListEnvelope, PagedEnvelope)):
            return {"data": list(envelope.items)}
        return extract_record(body)

    # Entrenadores

    async def get_trainers(self, params: ListParams | None = None) -> PaginatedResult[Trainer]:
        params = params or ListParams()
        query = {"pagina": params.page, "limite": params.limit, "q": params.search}
        return await self._get_page(endpoints.TRAINERS, query, params, to_trainer)

    async def get_trainer(self, trainer_id: str) -> Trainer:
        body = await self._transport.get(endpoints.trainer_detail(trainer_id))
        return to_trainer(extract_record(body, "trainer", "entrenador"))

    async def create_trainer(self, trainer: TrainerInput) -> Trainer:
        body = await self._transport.post(endpoints.TRAINERS, json=trainer.to_payload())
        return to_trainer(extract_record(body, "trainer", "entrenador"))

    async def update_trainer(self, trainer_id: str, trainer: TrainerInput) -> Trainer:
        body = await self._transport.put(endpoints.trainer_detail(trainer_id), json=trainer.to_payload())
        return to_trainer(extract_record(body, "trainer", "entrenador"))

    async def delete_trainer(self, trainer_id: str) -> None:
        await self._transport.delete(endpoints.trainer_detail(trainer_id))

    async def set_trainer_active(self, trainer_id: str, active: bool) -> None:
        await self._transport.patch(endpoints.trainer_activation(trainer_id, active))

    # Clientes

    async def get_clients(self, params: ListParams | None = None) -> PaginatedResult[Client]:
        params = params or ListParams()
        query = {"page": params.page, "limit": params.limit, "search": params.search}
        return await self._get_page(endpoints.CLIENTS, query, params, to_client)

    async def get_client(self, client_id: str) -> Client:
        body = await self._transport.get(endpoints.client_detail(client_id))
        return to_client(extract_record(body, "client", "cliente"))

    async def create_client(self, client: ClientInput) -> Client:
        body = await self._transport.post(endpoints.CLIENTS, json=client.to_payload())
        return to_client(extract_record(body, "client", "cliente"))

    async def update_client(self, client_id: str, client: ClientInput) -> Client:
        body = await self._transport.put(endpoints.client_detail(client_id), json=client.to_payload())
        return to_client(extract_record(body, "client", "cliente"))

    async def delete_client(self, client_id: str) -> None:
        await self._transport.delete(endpoints.client_detail(client_id))

    async def set_client_active(self, client_id: str, active: bool) -> None:
        await self._transport.patch(endpoints.client_activation(client_id, active))

    async def check_client_user(self, tipo_documento: str, numero_documento: str) -> ClientCheckResult:
        try:
            body = await self._transport.get(endpoints.client_check(tipo_documento, numero_documento))
        except NotFoundError:
            return ClientCheckResult(exists=False)
        record = extract_record(body)
        if not record:
            return ClientCheckResult(exists=False)
        # El endpoint devuelve el usuario desnudo, sin wrapper de cliente.
        client_record = record if "usuario" in record else {"usuario": record, "estado": True}
        return ClientCheckResult(exists=True, client=to_client(client_record))

    # Estadísticas

    async def get_dashboard_stats(self) -> dict[str, Any]:
        return await self._get_stats(endpoints.DASHBOARD_STATS)

    async def get_optimized_stats(self) -> dict[str, Any]:
        return await self._get_stats(endpoints.DASHBOARD_OPTIMIZED)

    async def get_quick_summary(self, period: Period = "today") -> dict[str, Any]:
        return await self._get_stats(endpoints.MOBILE_QUICK_SUMMARY, {"period": period, "compact": "true"})

    async def get_main_metrics(self, period: Period = "today") -> dict[str, Any]:
        return await self._get_stats(endpoints.MOBILE_MAIN_METRICS, {"period": period})

    async def get_widget(self) -> dict[str, Any]:
        return await self._get_stats(endpoints.MOBILE_WIDGET)

    async def get_contract_stats(self) -> dict[str, Any]:
        return await self._get_stats(endpoints.CONTRACTS_STATS)

    async def get_membership_stats(self) -> dict[str, Any]:
        return await self._get_stats(endpoints.MEMBERSHIPS_STATS)

    async def get_attendance_stats(self) -> dict[str, Any]:
        return await self._get_stats(endpoints.ATTENDANCE_STATS)

    async def get_attendance_trends(self, period: Period = "week") -> dict[str, Any]:
        return await self._get_stats(endpoints.ATTENDANCE_TRENDS, {"period": period})
