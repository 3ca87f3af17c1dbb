import pytest

from core.domain.errors import ApiError, NotFoundError
from core.domain.models import ClientInput, ListParams, TrainerInput

TRAINER_RECORD = {
    "id": 3,
    "especialidad": "Yoga",
    "estado": True,
    "usuario": {"id": 40, "nombre": "Luis", "apellido": "Pérez", "correo": "luis@gym.com"},
}

CLIENT_RECORD = {
    "id_persona": 12,
    "estado": True,
    "usuario": {"nombre": "Marta", "correo": "marta@x.com", "tipo_documento": "CC", "numero_documento": "555"},
}


class TestTrainers:
    @pytest.mark.asyncio
    async def test_nested_envelope_and_query(self, admin_gateway, backend):
        backend.add(
            "GET",
            "/trainers",
            body={
                "status": "success",
                "data": {"data": [TRAINER_RECORD], "pagination": {"total": 1, "page": 2, "limit": 5}},
            },
        )

        result = await admin_gateway.get_trainers(ListParams(page=2, limit=5, search="luis"))

        request = backend.last("GET", "/trainers")
        assert dict(request.url.params) == {"pagina": "2", "limite": "5", "q": "luis"}
        assert request.headers["Authorization"] == "Bearer stored-token"
        assert [t.nombre for t in result.data] == ["Luis"]
        assert (result.total, result.page, result.limit, result.total_pages) == (1, 2, 5, 1)

    @pytest.mark.asyncio
    async def test_search_is_omitted_when_empty(self, admin_gateway, backend):
        backend.add("GET", "/trainers", body=[])

        await admin_gateway.get_trainers()

        assert "q" not in backend.last("GET", "/trainers").url.params

    @pytest.mark.asyncio
    async def test_malformed_body_is_an_empty_page(self, admin_gateway, backend):
        backend.add("GET", "/trainers", body={"foo": "bar"})

        result = await admin_gateway.get_trainers(ListParams(page=3, limit=20))

        assert result.data == []
        assert (result.total, result.page, result.limit, result.total_pages) == (0, 3, 20, 0)

    @pytest.mark.asyncio
    async def test_total_pages_is_rounded_up(self, admin_gateway, backend):
        backend.add(
            "GET",
            "/trainers",
            body={"success": True, "data": {"data": [TRAINER_RECORD] * 10, "pagination": {"total": 95}}},
        )

        result = await admin_gateway.get_trainers(ListParams(page=1, limit=10))

        assert result.total == 95
        assert result.total_pages == 10

    @pytest.mark.asyncio
    async def test_get_trainer_unwraps_record(self, admin_gateway, backend):
        backend.add("GET", "/trainers/3", body={"status": "success", "data": {"entrenador": TRAINER_RECORD}})

        trainer = await admin_gateway.get_trainer("3")

        assert trainer.id == "3"
        assert trainer.email == "luis@gym.com"
        assert trainer.especialidad == "Yoga"

    @pytest.mark.asyncio
    async def test_get_missing_trainer(self, admin_gateway, backend):
        with pytest.raises(NotFoundError):
            await admin_gateway.get_trainer("404")

    @pytest.mark.asyncio
    async def test_create_sends_only_set_fields(self, admin_gateway, backend):
        backend.add("POST", "/trainers", status=201, body={"status": "success", "data": TRAINER_RECORD})

        trainer = await admin_gateway.create_trainer(TrainerInput(nombre="Luis", especialidad="Yoga"))

        assert backend.json_of(backend.last("POST", "/trainers")) == {"nombre": "Luis", "especialidad": "Yoga"}
        assert trainer.id == "3"

    @pytest.mark.asyncio
    async def test_update_uses_put(self, admin_gateway, backend):
        backend.add("PUT", "/trainers/3", body={"trainer": {**TRAINER_RECORD, "especialidad": "Pilates"}})

        trainer = await admin_gateway.update_trainer("3", TrainerInput(especialidad="Pilates"))

        assert trainer.especialidad == "Pilates"

    @pytest.mark.asyncio
    async def test_activation_and_delete(self, admin_gateway, backend):
        backend.add("PATCH", "/trainers/3/deactivate", body={"status": "success"})
        backend.add("PATCH", "/trainers/3/activate", body={"status": "success"})
        backend.add("DELETE", "/trainers/3", status=204)

        assert await admin_gateway.set_trainer_active("3", False) is None
        await admin_gateway.set_trainer_active("3", True)
        await admin_gateway.delete_trainer("3")

        assert len(backend.calls("PATCH", "/trainers/3/deactivate")) == 1
        assert len(backend.calls("PATCH", "/trainers/3/activate")) == 1
        assert len(backend.calls("DELETE", "/trainers/3")) == 1


class TestClients:
    @pytest.mark.asyncio
    async def test_bare_array(self, admin_gateway, backend):
        backend.add("GET", "/clients", body=[CLIENT_RECORD, {**CLIENT_RECORD, "id_persona": 13}])

        result = await admin_gateway.get_clients(ListParams(page=1, limit=10, search="mar"))

        assert dict(backend.last("GET", "/clients").url.params) == {"page": "1", "limit": "10", "search": "mar"}
        assert [c.id for c in result.data] == ["12", "13"]
        assert result.total == 2
        assert result.total_pages == 1

    @pytest.mark.asyncio
    async def test_create_client_payload_uses_camel_case(self, admin_gateway, backend):
        backend.add("POST", "/clients", body={"status": "success", "data": {"cliente": CLIENT_RECORD}})

        client = await admin_gateway.create_client(ClientInput(nombre="Marta", numero_documento="555"))

        assert backend.json_of(backend.last("POST", "/clients")) == {"nombre": "Marta", "numeroDocumento": "555"}
        assert client.numero_documento == "555"

    @pytest.mark.asyncio
    async def test_validation_error_from_backend(self, admin_gateway, backend):
        backend.add("POST", "/clients", status=400, body={"status": "error", "message": "Documento duplicado"})

        with pytest.raises(ApiError) as exc_info:
            await admin_gateway.create_client(ClientInput(nombre="Marta"))

        assert exc_info.value.message == "Documento duplicado"
        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_check_user_exists(self, admin_gateway, backend):
        backend.add(
            "GET",
            "/clients/check-user/CC/555",
            body={"status": "success", "data": {"id": 99, "nombre": "Marta", "numero_documento": "555"}},
        )

        result = await admin_gateway.check_client_user("CC", "555")

        assert result.exists is True
        assert result.client is not None
        assert result.client.nombre == "Marta"

    @pytest.mark.asyncio
    async def test_check_user_missing(self, admin_gateway, backend):
        result = await admin_gateway.check_client_user("CC", "000")

        assert result.exists is False
        assert result.client is None

    @pytest.mark.asyncio
    async def test_activation_path(self, admin_gateway, backend):
        backend.add("PATCH", "/clients/12/activate", body=None)

        await admin_gateway.set_client_active("12", True)

        assert len(backend.calls("PATCH", "/clients/12/activate")) == 1


class TestStats:
    @pytest.mark.asyncio
    async def test_record_stats(self, admin_gateway, backend):
        backend.add("GET", "/dashboard/stats", body={"status": "success", "data": {"clientes": 120, "ingresos": 5}})

        assert await admin_gateway.get_dashboard_stats() == {"clientes": 120, "ingresos": 5}

    @pytest.mark.asyncio
    async def test_list_stats_are_wrapped(self, admin_gateway, backend):
        backend.add("GET", "/attendance/trends", body={"success": True, "data": [{"dia": "lun", "total": 4}]})

        stats = await admin_gateway.get_attendance_trends()

        assert stats == {"data": [{"dia": "lun", "total": 4}]}
        assert backend.last("GET", "/attendance/trends").url.params["period"] == "week"

    @pytest.mark.asyncio
    async def test_quick_summary_params(self, admin_gateway, backend):
        backend.add("GET", "/dashboard-mobile/quick-summary", body={"status": "success", "data": {"hoy": 3}})

        await admin_gateway.get_quick_summary("month")

        params = backend.last("GET", "/dashboard-mobile/quick-summary").url.params
        assert dict(params) == {"period": "month", "compact": "true"}

    @pytest.mark.asyncio
    async def test_unrecognized_stats_are_empty(self, admin_gateway, backend):
        backend.add("GET", "/memberships/stats", status=204)

        assert await admin_gateway.get_membership_stats() == {}
