ACTIVO = {
    "codigoActivo": "AF-010",
    "cuentaContable": "335",
    "descripcion": "Servidor",
    "marca": "HP",
    "modelo": "DL380",
    "numeroSerie": "SN-77",
    "fechaAdquisicion": "2024-02-01",
    "fechaUso": "2024-02-15T00:00:00.000Z",
    "metodoAplicado": "LINEA_RECTA",
}


def _create_activo(client, **overrides):
    resp = client.post("/api/activos", json={**ACTIVO, **overrides})
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()


def test_activo_round_trip(admin_client):
    created = _create_activo(admin_client)
    fetched = admin_client.get(f"/api/activos/{created['id']}").get_json()

    for key in ("codigoActivo", "cuentaContable", "descripcion", "marca", "modelo", "numeroSerie", "metodoAplicado"):
        assert fetched[key] == ACTIVO[key]
    assert fetched["fechaAdquisicion"].startswith("2024-02-01")
    assert fetched["fechaUso"].startswith("2024-02-15")
    assert fetched["estado"] == "ACTIVO"


def test_activo_missing_fields_is_400(admin_client):
    resp = admin_client.post("/api/activos", json={"codigoActivo": "X"})
    assert resp.status_code == 400
    fields = resp.get_json()["fields"]
    assert fields["descripcion"] == "campo requerido"
    assert "fechaUso" in fields


def test_activo_unknown_field_and_bad_method(admin_client):
    resp = admin_client.post("/api/activos", json={**ACTIVO, "color": "rojo", "metodoAplicado": "LINEAL"})
    assert resp.status_code == 400
    fields = resp.get_json()["fields"]
    assert fields["color"] == "campo desconocido"
    assert "metodoAplicado" in fields


def test_activo_update_and_year_filter(admin_client):
    created = _create_activo(admin_client)
    _create_activo(admin_client, codigoActivo="AF-011", fechaUso="2023-05-01")

    payload = {**created, "descripcion": "Servidor principal"}
    resp = admin_client.put(f"/api/activos/{created['id']}", json=payload)
    assert resp.status_code == 200
    assert resp.get_json()["descripcion"] == "Servidor principal"

    assert [a["codigoActivo"] for a in admin_client.get("/api/activos?anio=2024").get_json()] == ["AF-010"]
    assert len(admin_client.get("/api/activos").get_json()) == 2
    assert admin_client.get("/api/activos/999").status_code == 404


def test_valoracion_computes_adjusted_value(admin_client):
    activo = _create_activo(admin_client)
    resp = admin_client.post(
        "/api/valoracion",
        json={"activoId": activo["id"], "anio": 2024, "valorHistorico": "1500.50", "ajustePorInflacion": "20"},
    )
    assert resp.status_code == 201
    body = resp.get_json()
    assert body["valorAjustado"] == "1520.50"
    assert body["activo"]["codigoActivo"] == "AF-010"

    mismatch = admin_client.post(
        "/api/valoracion",
        json={"activoId": activo["id"], "valorHistorico": "10", "ajustePorInflacion": "1", "valorAjustado": "12"},
    )
    assert mismatch.status_code == 400


def test_ledger_requires_existing_activo(admin_client):
    resp = admin_client.post("/api/movimientos", json={"activoId": 404, "saldoInicial": "10"})
    assert resp.status_code == 400
    assert resp.get_json()["fields"]["activoId"] == "no existe"


def test_movimiento_crud(admin_client):
    activo = _create_activo(admin_client)
    created = admin_client.post(
        "/api/movimientos", json={"activoId": activo["id"], "anio": 2024, "saldoInicial": "100", "mejoras": 5.5}
    ).get_json()
    assert created["saldoInicial"] == "100"
    assert created["mejoras"] == "5.5"
    assert created["retiros"] == "0"

    updated = admin_client.put(
        f"/api/movimientos/{created['id']}", json={"activoId": activo["id"], "anio": 2024, "saldoInicial": "150"}
    ).get_json()
    assert updated["saldoInicial"] == "150"

    assert len(admin_client.get("/api/movimientos?anio=2024").get_json()) == 1
    assert admin_client.get("/api/movimientos?anio=2023").get_json() == []

    assert admin_client.delete(f"/api/movimientos/{created['id']}").status_code == 200
    assert admin_client.get(f"/api/movimientos/{created['id']}").status_code == 404


def test_depreciacion_percentage_must_be_non_negative(admin_client):
    activo = _create_activo(admin_client)
    resp = admin_client.post("/api/depreciacion", json={"activoId": activo["id"], "porcentajeDepreciacion": "-1"})
    assert resp.status_code == 400

    ok = admin_client.post("/api/depreciacion", json={"activoId": activo["id"], "porcentajeDepreciacion": "10"})
    assert ok.status_code == 201
    assert ok.get_json()["depreciacionEjercicio"] == "0"


def test_empresa_upsert(admin_client):
    assert admin_client.get("/api/empresa").get_json() is None

    first = admin_client.post("/api/empresa", json={"ruc": "20123456789", "razonSocial": "Andina SAC"}).get_json()
    second = admin_client.post("/api/empresa", json={"ruc": "20123456789", "razonSocial": "Andina S.A.C."}).get_json()
    assert first["id"] == second["id"]
    assert admin_client.get("/api/empresa").get_json()["razonSocial"] == "Andina S.A.C."

    assert admin_client.post("/api/empresa", json={"ruc": ""}).status_code == 400


def test_empresa_write_needs_manager_role(asistente_client):
    resp = asistente_client.post("/api/empresa", json={"ruc": "1", "razonSocial": "X"})
    assert resp.status_code == 403
    assert asistente_client.get("/api/empresa").status_code == 200
