from datetime import datetime

import pytest

from conftest import write_workbook

from siscont.errors import ParseError, ReconciliationError
from siscont.extensions import db
from siscont.models import Activo, Depreciacion, ImportSession, MetodoDepreciacion
from siscont.services import spreadsheet_import
from siscont.services.spreadsheet_import import distribute, open_local_file, read_workbook

HEADERS = ["Código del Activo", "Cuenta Contable", "Descripción", "Marca", "% Depreciación"]


def _session(tmp_path, headers, rows, name="inventario.xlsx"):
    path = write_workbook(tmp_path / name, headers, rows)
    import_session, _ = open_local_file(path)
    return import_session


def test_read_workbook_keeps_headers_and_raw_values(app, tmp_path):
    path = write_workbook(
        tmp_path / "a.xlsx",
        [" Código del Activo ", "Descripción", "COSTO"],
        [["A1", "Monitor", 150.5], [None, None, None], ["A2", None, 10]],
    )
    sheet = read_workbook(path)
    assert sheet.headers == ["Código del Activo", "Descripción", "COSTO"]
    assert sheet.rows == [
        {"Código del Activo": "A1", "Descripción": "Monitor", "COSTO": 150.5},
        {"Código del Activo": "A2", "COSTO": 10},
    ]
    assert sheet.row_numbers == [2, 4]


def test_unreadable_file_is_a_parse_error(app, tmp_path):
    path = tmp_path / "roto.xlsx"
    path.write_bytes(b"not a zip")
    with pytest.raises(ParseError):
        read_workbook(str(path))


def test_unsupported_extension_is_rejected(app, tmp_path):
    path = tmp_path / "datos.csv"
    path.write_text("a,b\n")
    with pytest.raises(ParseError):
        open_local_file(str(path))


def test_distribute_creates_assets_and_depreciation(app, tmp_path):
    year = datetime.now().year
    s = _session(tmp_path, HEADERS, [["AF-001", "", "Laptop", "Dell", "25"], ["AF-002", "336", "Silla", None, None]])

    result = distribute(s)

    assert (result.created, result.updated, result.skipped) == (2, 0, 0)
    assert result.placeholder_dates == 2
    laptop = Activo.query.filter_by(codigo_activo="AF-001").one()
    assert laptop.cuenta_contable == "33"
    assert laptop.marca == "Dell"
    assert laptop.metodo_aplicado == MetodoDepreciacion.LINEA_RECTA
    assert laptop.estado == "ACTIVO"
    silla = Activo.query.filter_by(codigo_activo="AF-002").one()
    assert silla.cuenta_contable == "336"

    dep = Depreciacion.query.filter_by(activo_id=laptop.id, anio=year).one()
    assert dep.porcentaje_depreciacion == "25"
    assert dep.depreciacion_ejercicio == "0"
    assert Depreciacion.query.filter_by(activo_id=silla.id).one().porcentaje_depreciacion == "0"
    assert db.session.get(ImportSession, s.id).status == ImportSession.STATUS_DISTRIBUTED


def test_distribute_twice_is_idempotent(app, tmp_path):
    rows = [["AF-001", "33", "Laptop", "Dell", "25"]]
    distribute(_session(tmp_path, HEADERS, rows, "uno.xlsx"))
    second = distribute(_session(tmp_path, HEADERS, [["AF-001", "", "Laptop HP", "HP", "30"]], "dos.xlsx"))

    assert (second.created, second.updated) == (0, 1)
    assert second.depreciacion_created == 0
    activos = Activo.query.filter_by(codigo_activo="AF-001").all()
    assert len(activos) == 1
    assert activos[0].descripcion == "Laptop HP"
    # blank account keeps the stored one
    assert activos[0].cuenta_contable == "33"
    deps = Depreciacion.query.filter_by(activo_id=activos[0].id).all()
    assert len(deps) == 1
    assert deps[0].porcentaje_depreciacion == "25"


def test_rows_without_code_and_description_are_skipped(app, tmp_path):
    s = _session(
        tmp_path,
        HEADERS,
        [["A1", "", "Monitor", "", "10"], ["", "336", "", "LG", "5"], ["A2", "", "Teclado", "", ""]],
    )
    result = distribute(s)
    assert (result.created, result.skipped) == (2, 1)
    assert sorted(a.codigo_activo for a in Activo.query.all()) == ["A1", "A2"]


def test_row_with_code_but_no_description_aborts(app, tmp_path):
    s = _session(tmp_path, HEADERS, [["A1", "", "Uno", "", "10"], ["A2", "", None, "", "5"]])

    with pytest.raises(ReconciliationError) as excinfo:
        distribute(s)

    assert excinfo.value.row_number == 3
    assert "Descripción requerida" in excinfo.value.message
    assert [a.codigo_activo for a in Activo.query.all()] == ["A1"]


def test_row_with_description_but_no_code_aborts(app, tmp_path):
    s = _session(tmp_path, HEADERS, [["", "", "Sin código", "", "10"]])

    with pytest.raises(ReconciliationError) as excinfo:
        distribute(s)

    assert excinfo.value.committed_rows == 0
    assert Activo.query.count() == 0


def test_skip_then_abort_keeps_earlier_rows(app, tmp_path):
    s = _session(
        tmp_path,
        HEADERS,
        [
            ["A1", "", "Uno", "", "10"],
            ["A2", "", "Dos", "", "5"],
            ["", "", "", "Dell", ""],
            ["A4", "", "", "", "1"],
            ["A5", "", "Cinco", "", "1"],
        ],
    )

    with pytest.raises(ReconciliationError) as excinfo:
        distribute(s)

    assert excinfo.value.row_number == 5
    assert excinfo.value.committed_rows == 2
    assert sorted(a.codigo_activo for a in Activo.query.all()) == ["A1", "A2"]
    assert db.session.get(ImportSession, s.id).status == ImportSession.STATUS_FAILED


def test_legacy_headers_are_imported(app, tmp_path):
    s = _session(
        tmp_path,
        ["CODIGO PRODUCTO", "NOMBRE ACTIVO", "CTA ACTIVO", "SERIE", "PORCT DEPRE"],
        [["X9", "Escritorio", "335", "SN-1", "S/ 10.00"]],
    )
    distribute(s)
    activo = Activo.query.filter_by(codigo_activo="X9").one()
    assert activo.descripcion == "Escritorio"
    assert activo.numero_serie == "SN-1"
    assert Depreciacion.query.filter_by(activo_id=activo.id).one().porcentaje_depreciacion == "10.00"


def test_failing_row_aborts_batch_but_keeps_earlier_rows(app, tmp_path, monkeypatch):
    real = spreadsheet_import.parse_numeric_value

    def boom(value):
        if value == "boom":
            raise RuntimeError("valor corrupto")
        return real(value)

    monkeypatch.setattr(spreadsheet_import, "parse_numeric_value", boom)
    s = _session(
        tmp_path,
        HEADERS,
        [["A1", "", "Uno", "", "10"], ["A2", "", "Dos", "", "boom"], ["A3", "", "Tres", "", "5"]],
    )

    with pytest.raises(ReconciliationError) as excinfo:
        distribute(s)

    assert excinfo.value.row_number == 3
    assert excinfo.value.committed_rows == 1
    assert "fila 3" in excinfo.value.message
    codes = sorted(a.codigo_activo for a in Activo.query.all())
    assert codes == ["A1"]
    failed = db.session.get(ImportSession, s.id)
    assert failed.status == ImportSession.STATUS_FAILED


def test_atomic_batch_rolls_everything_back(app, tmp_path, monkeypatch):
    def boom(value):
        if value == "boom":
            raise RuntimeError("valor corrupto")
        return "1"

    monkeypatch.setattr(spreadsheet_import, "parse_numeric_value", boom)
    s = _session(tmp_path, HEADERS, [["A1", "", "Uno", "", "10"], ["A2", "", "Dos", "", "boom"]])

    with pytest.raises(ReconciliationError) as excinfo:
        distribute(s, atomic=True)

    assert excinfo.value.committed_rows == 0
    assert Activo.query.count() == 0
    assert Depreciacion.query.count() == 0
