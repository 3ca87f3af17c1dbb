"""Gestor de sesión: máquina de estados sobre
`UNAUTHENTICATED -> AUTHENTICATING -> AUTHENTICATED`.

Responsabilidades:
- login con validación local previa y compuerta de rol (solo administradores);
- persistir/limpiar credenciales en el `CredentialStore`;
- restaurar la sesión al arrancar y verificarla contra `/auth/profile`;
- invalidar la sesión cuando el transporte recibe un 401.

`is_permitted_role` es el único punto donde vive la política de rol: login,
perfil y restauración la invocan por igual.
"""

from __future__ import annotations

import json
import logging
import re

from adapters.envelope import extract_record
from adapters.http_client import ApiTransport
from adapters.mappers import to_user
from core import endpoints
from core.config import AppSettings
from core.domain.errors import (
    DEFAULT_MESSAGES,
    ApiError,
    ErrorKind,
    ForbiddenError,
    GatewayError,
    InputValidationError,
    NotAuthenticatedError,
    StorageError,
)
from core.domain.models import LoginResult, Session, User
from core.domain.session_state import SessionState
from core.interfaces.credential_store import (
    ACCESS_TOKEN_KEY,
    REFRESH_TOKEN_KEY,
    SESSION_KEYS,
    USER_KEY,
    CredentialStore,
)

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

ACCESS_DENIED_MESSAGE = "Access denied. This application is restricted to gym administrators."

# Mensajes de login por tipo de fallo (el mensaje del backend tiene prioridad).
_LOGIN_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.UNAUTHORIZED: "Invalid credentials. Check your email and password.",
    ErrorKind.FORBIDDEN: ACCESS_DENIED_MESSAGE,
    ErrorKind.NOT_FOUND: "User not found. Check your email.",
    ErrorKind.SERVER: "Server error. Please try again in a few moments.",
    ErrorKind.NETWORK: DEFAULT_MESSAGES[ErrorKind.NETWORK],
}


def is_permitted_role(role_id: int | None, *, allowed_role_id: int = 1) -> bool:
    return role_id is not None and role_id == allowed_role_id


def validate_login_input(correo: str, contrasena: str) -> str:
    """Valida el formulario de login antes de tocar la red; devuelve el correo normalizado."""

    email = (correo or "").strip().lower()
    if not email:
        raise InputValidationError("Email is required.")
    if not _EMAIL_RE.match(email):
        raise InputValidationError("Enter a valid email address.")
    if not contrasena:
        raise InputValidationError("Password is required.")
    return email


class SessionManager:
    def __init__(
        self,
        transport: ApiTransport,
        store: CredentialStore,
        settings: AppSettings,
    ) -> None:
        self._transport = transport
        self._store = store
        self._settings = settings
        self._state = SessionState.initial()
        self._session: Session | None = None
        transport.set_unauthorized_handler(self.handle_unauthorized)

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def session(self) -> Session | None:
        return self._session

    def is_permitted(self, user: User | None) -> bool:
        return user is not None and is_permitted_role(
            user.role_id, allowed_role_id=self._settings.admin_role_id
        )

    def _set_state(self, state: SessionState) -> None:
        if state is not self._state:
            logger.info("Session state: %s -> %s", self._state.value, state.value)
        self._state = state

    def _activate(self, session: Session) -> None:
        self._session = session
        self._transport.set_bearer(session.access_token)
        self._set_state(SessionState.AUTHENTICATED)

    async def invalidate(self) -> None:
        """Destruye la sesión: memoria, header por defecto y almacén persistente.

        Idempotente; la memoria se limpia aunque el almacén falle.
        """

        self._session = None
        self._transport.clear_bearer()
        self._set_state(SessionState.UNAUTHENTICATED)
        await self._store.remove_many(SESSION_KEYS)

    async def handle_unauthorized(self) -> None:
        """Hook del transporte ante un 401: la respuesta 401 debe seguir llegando al llamador."""

        await self._invalidate_quietly()

    async def _invalidate_quietly(self) -> None:
        try:
            await self.invalidate()
        except StorageError:
            logger.exception("Could not clear credential store")

    async def login(self, correo: str, contrasena: str) -> LoginResult:
        """Función total: devuelve siempre un `LoginResult`, nunca lanza."""

        try:
            email = validate_login_input(correo, contrasena)
        except InputValidationError as exc:
            return LoginResult(success=False, error=exc.message, error_kind=exc.kind.value)

        self._set_state(SessionState.AUTHENTICATING)
        logger.info("Login attempt for %s", email)
        try:
            body = await self._transport.post(
                endpoints.AUTH_LOGIN,
                json={"correo": email, "contrasena": contrasena},
            )
            data = extract_record(body)
            access_token = data.get("accessToken") or data.get("access_token")
            raw_user = data.get("user") or data.get("usuario")
            if not isinstance(access_token, str) or not access_token or not isinstance(raw_user, dict):
                message = body.get("message") if isinstance(body, dict) else None
                raise ApiError(message or "Unexpected login response.")

            user = to_user(raw_user, admin_role_id=self._settings.admin_role_id)
            if not self.is_permitted(user):
                logger.warning("Access denied for role %s (%s)", user.role_id, user.nombre)
                await self._invalidate_quietly()
                return LoginResult(
                    success=False,
                    error=ACCESS_DENIED_MESSAGE,
                    error_kind=ErrorKind.FORBIDDEN.value,
                )

            refresh_token = data.get("refreshToken") or data.get("refresh_token")
            refresh_token = refresh_token if isinstance(refresh_token, str) and refresh_token else None

            await self._store.set(ACCESS_TOKEN_KEY, access_token)
            if refresh_token:
                await self._store.set(REFRESH_TOKEN_KEY, refresh_token)
            else:
                await self._store.remove_many([REFRESH_TOKEN_KEY])
            await self._store.set(USER_KEY, json.dumps(raw_user, ensure_ascii=False))
        except GatewayError as exc:
            await self._invalidate_quietly()
            message = exc.detail or _LOGIN_MESSAGES.get(exc.kind, exc.message)
            logger.warning("Login failed (%s): %s", exc.kind.value, message)
            return LoginResult(success=False, error=message, error_kind=exc.kind.value)
        else:
            session = Session(access_token=access_token, refresh_token=refresh_token, user=user)
            self._activate(session)
            logger.info("Administrator authenticated: %s", user.nombre)
            return LoginResult(success=True, session=session)
        finally:
            # Ningún camino de salida deja la sesión a medio autenticar.
            if self._state is SessionState.AUTHENTICATING:
                self._set_state(SessionState.UNAUTHENTICATED)

    async def logout(self) -> None:
        """Cierra sesión en el servidor (best-effort) y siempre localmente."""

        try:
            await self._transport.post(endpoints.AUTH_LOGOUT)
            logger.info("Server logout OK")
        except GatewayError as exc:
            logger.warning("Server logout failed (%s); clearing local session anyway", exc.kind.value)
        finally:
            await self.invalidate()

    async def get_stored_token(self) -> str | None:
        try:
            return await self._store.get(ACCESS_TOKEN_KEY)
        except StorageError:
            logger.exception("Could not read stored token")
            return None

    async def get_stored_user(self) -> User | None:
        try:
            raw = await self._store.get(USER_KEY)
        except StorageError:
            logger.exception("Could not read stored user")
            return None
        if not raw:
            return None
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Stored user record is not valid JSON")
            return None
        return to_user(payload, admin_role_id=self._settings.admin_role_id)

    async def fetch_profile(self) -> User:
        """Perfil vivo del servidor; `ForbiddenError` si ya no es administrador."""

        body = await self._transport.get(endpoints.AUTH_PROFILE)
        user = to_user(extract_record(body), admin_role_id=self._settings.admin_role_id)
        if not self.is_permitted(user):
            raise ForbiddenError("User is no longer an administrator.")
        if self._session is not None:
            self._session = self._session.model_copy(update={"user": user})
        return user

    async def restore_session(self) -> bool:
        """Restaura la sesión persistida al arrancar; `True` si quedó autenticada."""

        token = await self.get_stored_token()
        user = await self.get_stored_user()
        if not token or user is None:
            logger.info("No stored session to restore")
            return False

        if not self.is_permitted(user):
            logger.warning("Stored user fails role gate; destroying session")
            await self._invalidate_quietly()
            return False

        try:
            refresh_token = await self._store.get(REFRESH_TOKEN_KEY)
        except StorageError:
            refresh_token = None
        self._activate(Session(access_token=token, refresh_token=refresh_token, user=user))

        try:
            await self.fetch_profile()
        except GatewayError as exc:
            logger.warning("Stored session rejected (%s); destroying it", exc.kind.value)
            await self._invalidate_quietly()
            return False
        return True

    async def check_token_status(self) -> None:
        """Guardia ligera antes de flujos de datos: token local + verificación viva."""

        token = await self.get_stored_token()
        if not token:
            raise NotAuthenticatedError("No token found.")
        try:
            await self.fetch_profile()
        except ForbiddenError:
            await self._invalidate_quietly()
            raise
