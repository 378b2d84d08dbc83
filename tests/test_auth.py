from conftest import login, make_user

from siscont.models.core import UserRole


def test_api_requires_session(client):
    resp = client.get("/api/activos")
    assert resp.status_code == 401
    assert resp.get_json() == {"error": "No autenticado"}


def test_login_and_current_user(app, client):
    make_user("contador", UserRole.EMPRESA, password="secreto")

    bad = login(client, "contador", "otra")
    assert bad.status_code == 401

    resp = login(client, "contador", "secreto")
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["username"] == "contador"
    assert "password_hash" not in body

    me = client.get("/api/user")
    assert me.get_json()["role"] == UserRole.EMPRESA

    client.post("/api/logout")
    assert client.get("/api/user").status_code == 401


def test_login_requires_credentials(client):
    resp = client.post("/api/login", json={"username": ""})
    assert resp.status_code == 400


def test_users_listing_is_admin_only(app, client):
    make_user("admin", UserRole.ADMIN)
    make_user("asistente", UserRole.ASISTENTE)

    login(client, "asistente")
    assert client.get("/api/users").status_code == 403

    client.post("/api/logout")
    login(client, "admin")
    resp = client.get("/api/users")
    assert resp.status_code == 200
    assert [u["username"] for u in resp.get_json()] == ["admin", "asistente"]


def test_request_id_is_echoed(admin_client):
    resp = admin_client.get("/api/activos", headers={"X-Request-Id": "abc123"})
    assert resp.headers["X-Request-Id"] == "abc123"
