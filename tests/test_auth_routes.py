from conftest import ANA


def test_register_returns_success(client):
    response = client.post("/api/registro", json=ANA)

    assert response.status_code == 200
    assert response.json() == {"success": True}


def test_register_duplicate_code_fails_with_error_body(client, registered_user):
    duplicate = dict(ANA, correo="other@campus.edu")

    response = client.post("/api/registro", json=duplicate)

    assert response.status_code == 500
    assert "already registered" in response.json()["error"]


def test_register_rejects_short_password(client):
    response = client.post("/api/registro", json=dict(ANA, contrasena="short"))

    assert response.status_code == 400
    assert "contrasena" in response.json()["error"]


def test_register_rejects_unknown_role(client):
    response = client.post("/api/registro", json=dict(ANA, rol="janitor"))

    assert response.status_code == 400


def test_password_is_stored_hashed(client, registered_user, database):
    row = database.fetch_one(
        "SELECT contrasena FROM usuarios WHERE codigo_barra = :c", {"c": ANA["codigo_barra"]}
    )

    assert row["contrasena"] != ANA["contrasena"]
    assert row["contrasena"].startswith("$pbkdf2-sha256$")


def test_login_returns_user_without_password(client, registered_user):
    response = client.post(
        "/api/login", json={"correo": ANA["correo"], "contrasena": ANA["contrasena"]}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["usuario"]["nombre"] == "Ana"
    assert body["usuario"]["codigo_barra"] == "A1B2C3"
    assert "contrasena" not in body["usuario"]
    assert body["token"]


def test_login_is_case_insensitive_on_email(client, registered_user):
    response = client.post(
        "/api/login", json={"correo": "ANA@Campus.edu", "contrasena": ANA["contrasena"]}
    )

    assert response.status_code == 200


def test_login_wrong_password_is_401(client, registered_user):
    response = client.post(
        "/api/login", json={"correo": ANA["correo"], "contrasena": "not-the-password"}
    )

    assert response.status_code == 401
    assert response.json() == {"error": "Incorrect email or password"}


def test_login_unknown_email_is_401(client):
    response = client.post(
        "/api/login", json={"correo": "nobody@campus.edu", "contrasena": "whatever123"}
    )

    assert response.status_code == 401


def test_health_reports_database(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.json()["dataAvailable"] is True
