from datetime import datetime
from io import BytesIO

from openpyxl import load_workbook

from conftest import workbook_bytes

from siscont.models import Activo, Depreciacion

HEADERS = ["Código del Activo", "Descripción", "% Depreciación"]


def _upload(client, content, filename="inventario.xlsx"):
    return client.post(
        "/api/importacion/upload",
        data={"file": (BytesIO(content), filename)},
        content_type="multipart/form-data",
    )


def test_upload_distribute_and_report(app, admin_client):
    year = datetime.now().year
    resp = _upload(admin_client, workbook_bytes(HEADERS, [["A1", "Monitor", "10"], ["A2", "Teclado", "5"]]))
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["headers"] == HEADERS
    assert body["preview"] == [
        {"Código del Activo": "A1", "Descripción": "Monitor", "% Depreciación": "10"},
        {"Código del Activo": "A2", "Descripción": "Teclado", "% Depreciación": "5"},
    ]
    # preview writes nothing
    assert Activo.query.count() == 0

    resp = admin_client.post("/api/importacion/distribuir", json={"importId": body["importId"]})
    assert resp.status_code == 200
    result = resp.get_json()
    assert result["message"] == "Datos importados correctamente"
    assert result["created"] == 2

    deps = Depreciacion.query.filter_by(anio=year).order_by(Depreciacion.id).all()
    assert [d.porcentaje_depreciacion for d in deps] == ["10", "5"]

    status = admin_client.get(f"/api/importacion/{body['importId']}").get_json()
    assert status["status"] == "distributed"
    assert status["rowCount"] == 2

    report = admin_client.get(f"/api/reportes/formato71?anio={year}").get_json()
    assert [r["codigoActivo"] for r in report["rows"]] == ["A1", "A2"]
    assert report["totals"]["depreciacionAcumuladaAnterior"] == "0.00"

    export = admin_client.get(f"/api/reportes/exportar?tipo=formato71&anio={year}")
    assert export.status_code == 200
    assert f"reporte-formato71-{year}.xlsx" in export.headers["Content-Disposition"]
    ws = load_workbook(BytesIO(export.data)).active
    assert ws["A9"].value == "A1"
    assert ws["A11"].value == "TOTALES"


def test_distribute_uses_the_previewed_file(admin_client):
    first = _upload(admin_client, workbook_bytes(HEADERS, [["A1", "Monitor", "10"]])).get_json()
    _upload(admin_client, workbook_bytes(HEADERS, [["B1", "Otro", "1"]]))

    admin_client.post("/api/importacion/distribuir", json={"importId": first["importId"]})
    assert [a.codigo_activo for a in Activo.query.all()] == ["A1"]


def test_upload_without_file_is_500(admin_client):
    resp = admin_client.post("/api/importacion/upload", data={}, content_type="multipart/form-data")
    assert resp.status_code == 500
    assert resp.get_json()["error"] == "No se encontró ningún archivo"


def test_upload_unreadable_workbook_is_500(admin_client):
    resp = _upload(admin_client, b"esto no es un xlsx")
    assert resp.status_code == 500
    assert "error" in resp.get_json()


def test_distribute_requires_import_id(admin_client):
    assert admin_client.post("/api/importacion/distribuir", json={}).status_code == 400
    assert admin_client.post("/api/importacion/distribuir", json={"importId": "nope"}).status_code == 404


def test_distribute_needs_manager_role(asistente_client):
    resp = asistente_client.post("/api/importacion/distribuir", json={"importId": "x"})
    assert resp.status_code == 403


def test_export_unknown_kind_is_400(admin_client):
    assert admin_client.get("/api/reportes/exportar?tipo=otro&anio=todos").status_code == 400
    assert admin_client.get("/api/reportes/exportar?anio=todos").status_code == 400


def test_export_pdf(admin_client):
    resp = admin_client.get("/api/reportes/exportar?tipo=resumen&anio=todos&formato=pdf")
    assert resp.status_code == 200
    assert resp.mimetype == "application/pdf"
    assert resp.data.startswith(b"%PDF")
