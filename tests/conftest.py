import os
import sys
from io import BytesIO


# Ensure the project root is on PYTHONPATH when running pytest from any working dir.
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import pytest  # noqa: E402
from openpyxl import Workbook  # noqa: E402

from siscont import create_app  # noqa: E402
from siscont.extensions import db  # noqa: E402
from siscont.models.core import User, UserRole  # noqa: E402


@pytest.fixture()
def app(tmp_path):
    app = create_app(
        {
            "TESTING": True,
            "WTF_CSRF_ENABLED": False,
            "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
            "SECRET_KEY": "test",
            "UPLOAD_FOLDER": str(tmp_path / "uploads"),
            "IMPORT_ATOMIC_BATCH": False,
            "AUTO_CREATE_DB": False,
        }
    )
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


def make_user(username: str, role: str, password: str = "pw") -> User:
    user = User(username=username, role=role, nombre=username.title(), email=f"{username}@example.com")
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    return user


def login(client, username: str, password: str = "pw"):
    return client.post("/api/login", json={"username": username, "password": password})


@pytest.fixture()
def admin_client(app, client):
    make_user("admin", UserRole.ADMIN)
    resp = login(client, "admin")
    assert resp.status_code == 200
    return client


@pytest.fixture()
def asistente_client(app, client):
    make_user("asistente", UserRole.ASISTENTE)
    resp = login(client, "asistente")
    assert resp.status_code == 200
    return client


def workbook_bytes(headers, rows) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.append(list(headers))
    for row in rows:
        ws.append(list(row))
    bio = BytesIO()
    wb.save(bio)
    return bio.getvalue()


def write_workbook(path, headers, rows) -> str:
    with open(path, "wb") as f:
        f.write(workbook_bytes(headers, rows))
    return str(path)
