"""Header aliases for the two historical import layouts.

The importer accepts the current template ("Código del Activo", "Descripción",
...) and the older inventory export ("CODIGO PRODUCTO", "NOMBRE ACTIVO", ...).
Headers are matched exactly: no case folding, no accent stripping.
"""

from __future__ import annotations

from typing import Any, Mapping

FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "codigo_activo": ("Código del Activo", "CODIGO PRODUCTO"),
    "cuenta_contable": ("Cuenta Contable", "CTA ACTIVO"),
    "descripcion": ("Descripción", "NOMBRE ACTIVO"),
    "marca": ("Marca", "MARCA"),
    "modelo": ("Modelo", "MODELO"),
    "numero_serie": ("N° Serie/Placa", "SERIE"),
    "porcentaje_depreciacion": ("PORCT DEPRE", "% Depreciación"),
    "costo": ("COSTO", "Valor Histórico"),
}


def is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value == "")


def resolve_field(row: Mapping[str, Any], field: str, default: Any = None) -> Any:
    """Return the first non-empty value among the aliases of ``field``."""
    for header in FIELD_ALIASES[field]:
        value = row.get(header)
        if not is_empty(value):
            return value
    return default


def extract_fields(row: Mapping[str, Any]) -> dict[str, Any]:
    return {field: resolve_field(row, field) for field in FIELD_ALIASES}


def cell_text(value: Any) -> str:
    """Text form of a cell used for descriptive asset fields."""
    if is_empty(value):
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()
