from siscont.services.column_mapping import cell_text, extract_fields, resolve_field


def test_current_template_headers():
    row = {"Código del Activo": "AF-001", "Descripción": "Laptop", "Marca": "Dell"}
    fields = extract_fields(row)
    assert fields["codigo_activo"] == "AF-001"
    assert fields["descripcion"] == "Laptop"
    assert fields["marca"] == "Dell"
    assert fields["modelo"] is None


def test_falls_back_to_legacy_header():
    row = {"CODIGO PRODUCTO": "X9", "NOMBRE ACTIVO": "Silla", "PORCT DEPRE": "10"}
    fields = extract_fields(row)
    assert fields["codigo_activo"] == "X9"
    assert fields["descripcion"] == "Silla"
    assert fields["porcentaje_depreciacion"] == "10"


def test_first_non_empty_alias_wins():
    row = {"Código del Activo": "", "CODIGO PRODUCTO": "X9"}
    assert resolve_field(row, "codigo_activo") == "X9"

    row = {"Código del Activo": "A1", "CODIGO PRODUCTO": "X9"}
    assert resolve_field(row, "codigo_activo") == "A1"


def test_header_match_is_exact():
    row = {"codigo del activo": "A1", "CODIGO  PRODUCTO": "X9"}
    assert resolve_field(row, "codigo_activo") is None


def test_cell_text():
    assert cell_text(None) == ""
    assert cell_text(1001.0) == "1001"
    assert cell_text("  Dell ") == "Dell"
    assert cell_text(336) == "336"
