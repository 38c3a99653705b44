import asyncio
import json

import httpx
import pytest

from campus_access.client.gateway import ApiGateway
from campus_access.client.session import SessionStore
from campus_access.models.schemas import UserOut
from campus_access.utils.exceptions import (
    ApiError, NotFoundError, ServerError, TransportError, ValidationError,
)
from conftest import ANA

BASE = "http://testserver/api"


def _gateway(handler, session=None) -> ApiGateway:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return ApiGateway(BASE, session=session, client=client)


def _run(coro):
    return asyncio.run(coro)


def test_get_user_by_code_parses_user():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["content_type"] = request.headers["content-type"]
        return httpx.Response(200, json={"usuario": {"nombre": "Ana", "correo": "ana@campus.edu",
                                                     "rol": "member", "codigo_barra": "A1B2C3"}})

    user = _run(_gateway(handler).get_user_by_code("A1B2C3"))

    assert user.nombre == "Ana"
    assert seen["url"] == f"{BASE}/users/bycode/A1B2C3"
    assert seen["content_type"] == "application/json"


def test_codes_are_url_quoted():
    seen = {}

    def handler(request):
        seen["path"] = request.url.raw_path.decode()
        return httpx.Response(404, json={"error": "User not found."})

    with pytest.raises(NotFoundError):
        _run(_gateway(handler).get_user_by_code("A/1 2"))

    assert seen["path"] == "/api/users/bycode/A%2F1%202"


def test_404_becomes_not_found_with_payload():
    def handler(request):
        return httpx.Response(404, json={"error": "User not found."})

    with pytest.raises(NotFoundError) as info:
        _run(_gateway(handler).get_user_by_code("Z9Z9Z9"))

    assert info.value.status == 404
    assert info.value.message == "User not found."
    assert info.value.data == {"error": "User not found."}


def test_server_error_message_is_kept_verbatim():
    def handler(request):
        return httpx.Response(500, json={"error": "Failed to record access log. ORA-00001"})

    with pytest.raises(ServerError) as info:
        _run(_gateway(handler).record_access("A1B2C3", "entry"))

    assert info.value.status == 500
    assert info.value.message == "Failed to record access log. ORA-00001"


def test_non_json_error_is_transport_error_with_raw_status():
    def handler(request):
        return httpx.Response(502, text="<html>Bad gateway</html>")

    with pytest.raises(TransportError) as info:
        _run(_gateway(handler).get_user_by_code("A1B2C3"))

    assert info.value.status == 502


def test_network_failure_has_status_zero():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TransportError) as info:
        _run(_gateway(handler).get_user_by_code("A1B2C3"))

    assert info.value.status == 0
    assert "connection refused" in info.value.message


def test_non_json_success_is_empty_object():
    def handler(request):
        return httpx.Response(200, text="")

    assert _run(_gateway(handler).get("/anything")) == {}


def test_other_statuses_use_generic_error():
    def handler(request):
        return httpx.Response(401, json={"message": "nope"})

    with pytest.raises(ApiError) as info:
        _run(_gateway(handler).login("ana@campus.edu", "secret-pass"))

    assert type(info.value) is ApiError
    assert info.value.status == 401
    assert info.value.message == "nope"


def test_record_access_validates_before_network():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(201, json={"success": True})

    gateway = _gateway(handler)
    with pytest.raises(ValidationError):
        _run(gateway.record_access("A1B2C3", "lunch"))
    with pytest.raises(ValidationError):
        _run(gateway.record_access("  ", "entry"))

    assert calls == []


def test_record_access_sends_expected_body():
    bodies = []

    def handler(request):
        bodies.append(json.loads(request.content))
        return httpx.Response(201, json={"success": True, "message": "ok"})

    _run(_gateway(handler).record_access("A1B2C3", "exit"))

    assert bodies == [{"user_code": "A1B2C3", "event_type": "exit"}]


def test_register_validates_locally():
    def handler(request):
        raise AssertionError("no request expected")

    gateway = _gateway(handler)
    with pytest.raises(ValidationError, match="at least 8"):
        _run(gateway.register("Ana", "ana@campus.edu", "A1B2C3", "Ing", "member", "short"))
    with pytest.raises(ValidationError, match="valid email"):
        _run(gateway.register("Ana", "not-an-email", "A1B2C3", "Ing", "member", "long-enough"))


def test_bearer_token_from_session_is_sent():
    headers = {}

    def handler(request):
        headers.update(request.headers)
        return httpx.Response(200, json={"data": [], "total": 0, "page": 1, "limit": 10})

    session = SessionStore()
    session.save(UserOut(nombre="Ana", correo="ana@campus.edu", rol="member", codigo_barra="A1B2C3"),
                 token="user-1-A1B2C3")

    _run(_gateway(handler, session=session).list_access_logs())

    assert headers["authorization"] == "Bearer user-1-A1B2C3"


def test_gateway_against_running_app(database):
    from campus_access.main import create_app

    app = create_app(database=database)

    async def scenario():
        client = httpx.AsyncClient(transport=httpx.ASGITransport(app=app))
        async with client:
            gateway = ApiGateway(BASE, client=client)
            await gateway.register(**ANA)
            login = await gateway.login(ANA["correo"], ANA["contrasena"])
            user = await gateway.get_user_by_code("A1B2C3")
            await gateway.record_access("A1B2C3", "entry")
            page = await gateway.list_access_logs(user_code="A1B2C3")
            with pytest.raises(NotFoundError):
                await gateway.record_access("Z9Z9Z9", "entry")
            return login, user, page

    login, user, page = _run(scenario())

    assert login.usuario.codigo_barra == "A1B2C3"
    assert user.nombre == "Ana"
    assert page.total == 1
    assert page.data[0].event_type == "entry"
