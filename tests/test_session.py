import json

import pytest

from campus_access.client.session import SessionStore
from campus_access.client.views import AccountView
from campus_access.models.schemas import UserOut
from campus_access.utils.exceptions import SessionError


def _ana() -> UserOut:
    return UserOut(user_id=1, nombre="Ana", correo="ana@campus.edu", carrera="Ingeniería",
                   rol="member", codigo_barra="A1B2C3")


def test_save_and_load_round_trip(tmp_path):
    path = tmp_path / "session" / "current_user.json"
    SessionStore(path).save(_ana(), token="user-1-A1B2C3")

    loaded = SessionStore(path).load()

    assert loaded.usuario.nombre == "Ana"
    assert loaded.token == "user-1-A1B2C3"


def test_credential_is_never_written(tmp_path):
    path = tmp_path / "current_user.json"
    SessionStore(path).save(_ana())

    stored = json.loads(path.read_text(encoding="utf-8"))

    assert "contrasena" not in stored["usuario"]
    assert "contrasena" not in path.read_text(encoding="utf-8")


def test_load_without_session_is_none(tmp_path):
    assert SessionStore(tmp_path / "missing.json").load() is None


def test_clear_removes_file(tmp_path):
    path = tmp_path / "current_user.json"
    store = SessionStore(path)
    store.save(_ana())

    store.clear()

    assert not path.exists()
    assert store.load() is None
    assert store.token() is None


def test_corrupt_session_raises(tmp_path):
    path = tmp_path / "current_user.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(SessionError):
        SessionStore(path).load()


def test_account_view_summary_reads_session():
    store = SessionStore()
    store.save(_ana())

    summary = AccountView(store).summary()

    assert summary == {
        "name": "Ana",
        "email": "ana@campus.edu",
        "code": "A1B2C3",
        "program": "Ingeniería",
        "role": "member",
    }


def test_account_view_requires_login():
    view = AccountView(SessionStore())

    with pytest.raises(SessionError, match="log in"):
        view.summary()


def test_logout_clears_session():
    store = SessionStore()
    store.save(_ana())
    view = AccountView(store)

    view.logout()

    assert store.load() is None
