import json
from typing import Any

import httpx
import pytest

from adapters.credential_store import MemoryCredentialStore
from core.config import AppSettings
from core.domain.errors import StorageError
from core.services.gateway import GymGateway

BASE_URL = "https://api.test"

ADMIN_USER = {
    "id": 7,
    "nombre": "Ana",
    "correo": "admin@gym.com",
    "id_rol": 1,
    "id_persona": None,
}

TRAINER_USER = {
    "id": 9,
    "nombre": "Tomás",
    "correo": "trainer@x.com",
    "id_rol": 2,
    "id_persona": 31,
}


def login_body(user: dict[str, Any], token: str = "tok-123", refresh: str = "ref-456") -> dict[str, Any]:
    return {
        "status": "success",
        "message": "Login exitoso",
        "data": {"accessToken": token, "refreshToken": refresh, "user": user},
    }


def profile_body(user: dict[str, Any]) -> dict[str, Any]:
    return {"status": "success", "data": {"usuario": user}}


class FakeBackend:
    """Backend simulado para `httpx.MockTransport`.

    Las rutas se registran por `(método, path)`; las no registradas devuelven 404.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], tuple[int, Any, type[Exception] | None]] = {}
        self.requests: list[httpx.Request] = []

    def add(
        self,
        method: str,
        path: str,
        *,
        status: int = 200,
        body: Any = None,
        error: type[Exception] | None = None,
    ) -> None:
        self.routes[(method, path)] = (status, body, error)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"status": "error", "message": "Ruta no encontrada"})
        status, body, error = route
        if error is not None:
            raise error("simulated failure", request=request)
        if body is None:
            return httpx.Response(status)
        return httpx.Response(status, json=body)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def last(self, method: str, path: str) -> httpx.Request:
        matching = self.calls(method, path)
        assert matching, f"no {method} {path} request was sent"
        return matching[-1]

    @staticmethod
    def json_of(request: httpx.Request) -> Any:
        return json.loads(request.content) if request.content else None


class FlakyCredentialStore(MemoryCredentialStore):
    """Almacén en memoria que lanza `StorageError` en las operaciones pedidas.

    `fail_set_after=n` deja pasar las primeras `n` escrituras.
    """

    def __init__(
        self,
        initial: dict[str, str] | None = None,
        *,
        fail: tuple[str, ...] = (),
        fail_set_after: int | None = None,
    ) -> None:
        super().__init__(initial)
        self.fail = set(fail)
        self.fail_set_after = fail_set_after
        self.set_calls = 0

    async def get(self, key: str) -> str | None:
        if "get" in self.fail:
            raise StorageError("disk unavailable")
        return await super().get(key)

    async def set(self, key: str, value: str) -> None:
        self.set_calls += 1
        if "set" in self.fail or (
            self.fail_set_after is not None and self.set_calls > self.fail_set_after
        ):
            raise StorageError("disk full")
        await super().set(key, value)

    async def remove_many(self, keys) -> None:
        if "remove_many" in self.fail:
            raise StorageError("read-only filesystem")
        await super().remove_many(keys)


@pytest.fixture
def settings():
    return AppSettings(api_base_url=BASE_URL, http_timeout_seconds=5, _env_file=None)


@pytest.fixture
def store():
    return MemoryCredentialStore()


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def gateway(settings, store, backend):
    return GymGateway(settings, store=store, transport=httpx.MockTransport(backend.handler))


@pytest.fixture
def admin_store():
    """Almacén con una sesión de administrador ya persistida."""

    return MemoryCredentialStore(
        {
            "authToken": "stored-token",
            "refreshToken": "stored-refresh",
            "userInfo": json.dumps(ADMIN_USER),
        }
    )


@pytest.fixture
def admin_gateway(settings, admin_store, backend):
    return GymGateway(settings, store=admin_store, transport=httpx.MockTransport(backend.handler))


@pytest.fixture
def make_gateway(settings, backend):
    """Construye un gateway sobre el backend simulado con el almacén dado."""

    def build(store):
        return GymGateway(settings, store=store, transport=httpx.MockTransport(backend.handler))

    return build
