"""Rutas del backend (relativas a `AppSettings.api_base_url`)."""

from __future__ import annotations

AUTH_LOGIN = "/auth/login"
AUTH_LOGOUT = "/auth/logout"
AUTH_PROFILE = "/auth/profile"

TRAINERS = "/trainers"
CLIENTS = "/clients"

DASHBOARD_STATS = "/dashboard/stats"
DASHBOARD_OPTIMIZED = "/dashboard/optimized"
MOBILE_QUICK_SUMMARY = "/dashboard-mobile/quick-summary"
MOBILE_MAIN_METRICS = "/dashboard-mobile/main-metrics"
MOBILE_WIDGET = "/dashboard-mobile/widget"

CONTRACTS_STATS = "/contracts/stats"
MEMBERSHIPS_STATS = "/memberships/stats"
ATTENDANCE_STATS = "/attendance/stats"
ATTENDANCE_TRENDS = "/attendance/trends"


def trainer_detail(trainer_id: str) -> str:
    return f"{TRAINERS}/{trainer_id}"


def trainer_activation(trainer_id: str, active: bool) -> str:
    return f"{TRAINERS}/{trainer_id}/{'activate' if active else 'deactivate'}"


def client_detail(client_id: str) -> str:
    return f"{CLIENTS}/{client_id}"


def client_activation(client_id: str, active: bool) -> str:
    return f"{CLIENTS}/{client_id}/{'activate' if active else 'deactivate'}"


def client_check(tipo_documento: str, numero_documento: str) -> str:
    return f"{CLIENTS}/check-user/{tipo_documento}/{numero_documento}"
