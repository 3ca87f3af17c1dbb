"""Transporte HTTP (wrapper de httpx).

Por qué un wrapper:
- Estandariza base URL, timeout y headers para todos los endpoints.
- Dos interceptores como event hooks de httpx:
  - request: adjunta `Authorization: Bearer <token>` leyendo el almacén de
    credenciales (excepto en el login).
  - response: ante un 401 espera la invalidación completa de la sesión antes
    de que el error llegue al llamador.
- Traduce fallos de red y status de error a la taxonomía de `core.domain.errors`.
- Facilita testeo: se puede inyectar un `httpx.MockTransport`.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable

import httpx

from core.config import AppSettings
from core.domain.errors import ApiError, GatewayError, NetworkError, StorageError, error_for_status
from core.interfaces.credential_store import ACCESS_TOKEN_KEY, CredentialStore

logger = logging.getLogger(__name__)

UnauthorizedHandler = Callable[[], Awaitable[None]]

LOGIN_PATH = "/auth/login"
_ANONYMOUS_PATHS: tuple[str, ...] = (LOGIN_PATH,)


def build_async_client(
    settings: AppSettings | None = None,
    *,
    extra_headers: dict[str, str] | None = None,
    event_hooks: dict[str, list[Callable[..., Any]]] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Crea un `httpx.AsyncClient` con los defaults del backend.

    Por qué un builder:
    - Centraliza base URL/timeouts/headers para que todas las llamadas se
      comporten igual.
    - El comando `doctor` reutiliza la misma configuración sin sesión.
    """

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": "application/json",
        "Content-Type": "application/json",
    }
    if extra_headers:
        headers.update(extra_headers)
    return httpx.AsyncClient(
        base_url=settings.api_base_url,
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        headers=headers,
        event_hooks=event_hooks,
        transport=transport,
    )


def _error_message(response: httpx.Response) -> str | None:
    try:
        payload = response.json()
    except ValueError:
        return None
    if isinstance(payload, dict):
        message = payload.get("message") or payload.get("error")
        if isinstance(message, str) and message.strip():
            return message.strip()
    return None


def _parse_body(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        logger.warning("Non-JSON body from %s %s", response.request.method, response.request.url.path)
        return None


class ApiTransport:
    """Cliente HTTP único, configurado una vez, con los dos interceptores."""

    def __init__(
        self,
        settings: AppSettings,
        store: CredentialStore,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._store = store
        self._on_unauthorized: UnauthorizedHandler | None = None
        self._client = build_async_client(
            settings,
            event_hooks={
                "request": [self._attach_token],
                "response": [self._check_unauthorized],
            },
            transport=transport,
        )

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client

    def set_unauthorized_handler(self, handler: UnauthorizedHandler) -> None:
        self._on_unauthorized = handler

    def set_bearer(self, token: str) -> None:
        self._client.headers["Authorization"] = f"Bearer {token}"

    def clear_bearer(self) -> None:
        self._client.headers.pop("Authorization", None)

    @property
    def has_bearer(self) -> bool:
        return "Authorization" in self._client.headers

    async def _attach_token(self, request: httpx.Request) -> None:
        if request.url.path.rstrip("/").endswith(_ANONYMOUS_PATHS):
            request.headers.pop("Authorization", None)
            logger.debug("Request: %s %s (anonymous)", request.method, request.url.path)
            return

        try:
            token = await self._store.get(ACCESS_TOKEN_KEY)
        except StorageError:
            logger.warning("Credential store unavailable; sending %s unauthenticated", request.url.path)
            token = None

        if token:
            request.headers["Authorization"] = f"Bearer {token}"
        logger.debug("Request: %s %s", request.method, request.url.path)

    async def _check_unauthorized(self, response: httpx.Response) -> None:
        logger.debug(
            "Response: %s %s %s",
            response.status_code,
            response.request.method,
            response.request.url.path,
        )
        if response.status_code == 401 and self._on_unauthorized is not None:
            logger.info("401 on %s; invalidating session", response.request.url.path)
            await self._on_unauthorized()

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> Any:
        """Ejecuta la llamada y devuelve el cuerpo JSON ya parseado (o `None`).

        Lanza:
        - `NetworkError` si no hubo respuesta (conectividad, timeout).
        - La subclase de `GatewayError` correspondiente al status de error.
        """

        if params:
            params = {k: v for k, v in params.items() if v is not None}
        try:
            response = await self._client.request(method, path, params=params or None, json=json)
        except httpx.TimeoutException as exc:
            logger.warning("Timeout on %s %s", method, path)
            raise NetworkError() from exc
        except httpx.TransportError as exc:
            logger.warning("Network error on %s %s: %s", method, path, exc)
            raise NetworkError() from exc
        except httpx.RequestError as exc:
            # Cuerpo con Content-Encoding corrupto o bucle de redirecciones.
            logger.warning("Unusable response on %s %s: %s", method, path, exc)
            raise ApiError(f"Unusable response from the server: {exc}") from exc

        if response.is_error:
            error: GatewayError = error_for_status(response.status_code, _error_message(response))
            logger.warning("API error %s on %s %s", response.status_code, method, path)
            raise error

        return _parse_body(response)

    async def get(self, path: str, *, params: dict[str, Any] | None = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, *, json: Any = None) -> Any:
        return await self.request("POST", path, json=json)

    async def put(self, path: str, *, json: Any = None) -> Any:
        return await self.request("PUT", path, json=json)

    async def patch(self, path: str, *, json: Any = None) -> Any:
        return await self.request("PATCH", path, json=json)

    async def delete(self, path: str) -> Any:
        return await self.request("DELETE", path)

    async def aclose(self) -> None:
        await self._client.aclose()
