"""Field schemas for the CRUD endpoints.

Each entity has a fixed list of JSON fields. Validation checks presence and
type only and returns model attribute values ready to be assigned. PUT uses
the same schema as POST: an update overwrites every field.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional

from ..errors import ValidationError
from ..models.assets import ESTADO_ACTIVO, MetodoDepreciacion

# Keys echoed back by GET that clients may send on PUT; they are never written.
READ_ONLY_KEYS = frozenset({"id", "createdAt", "updatedAt", "activo", "empresaId"})


@dataclass(frozen=True)
class FieldSpec:
    wire: str
    attr: str
    kind: str  # text|date|money|int|choice
    required: bool = False
    default: Any = None
    choices: tuple[str, ...] = ()
    non_negative: bool = False


def _current_year() -> int:
    return datetime.now().year


ACTIVO_FIELDS = (
    FieldSpec("codigoActivo", "codigo_activo", "text", required=True),
    FieldSpec("cuentaContable", "cuenta_contable", "text", required=True),
    FieldSpec("descripcion", "descripcion", "text", required=True),
    FieldSpec("marca", "marca", "text"),
    FieldSpec("modelo", "modelo", "text"),
    FieldSpec("numeroSerie", "numero_serie", "text"),
    FieldSpec("documentoAutorizacion", "documento_autorizacion", "text"),
    FieldSpec("fechaAdquisicion", "fecha_adquisicion", "date", required=True),
    FieldSpec("fechaUso", "fecha_uso", "date", required=True),
    FieldSpec("metodoAplicado", "metodo_aplicado", "choice", required=True, choices=MetodoDepreciacion.ALL),
    FieldSpec("estado", "estado", "text", default=ESTADO_ACTIVO),
)

MOVIMIENTO_FIELDS = (
    FieldSpec("activoId", "activo_id", "int", required=True),
    FieldSpec("anio", "anio", "int", default=_current_year),
    FieldSpec("saldoInicial", "saldo_inicial", "money", default="0"),
    FieldSpec("adquisiciones", "adquisiciones", "money", default="0"),
    FieldSpec("mejoras", "mejoras", "money", default="0"),
    FieldSpec("retiros", "retiros", "money", default="0"),
    FieldSpec("otrosAjustes", "otros_ajustes", "money", default="0"),
)

VALORACION_FIELDS = (
    FieldSpec("activoId", "activo_id", "int", required=True),
    FieldSpec("anio", "anio", "int", default=_current_year),
    FieldSpec("valorHistorico", "valor_historico", "money", required=True),
    FieldSpec("ajustePorInflacion", "ajuste_por_inflacion", "money", default="0"),
    FieldSpec("valorAjustado", "valor_ajustado", "money"),
)

DEPRECIACION_FIELDS = (
    FieldSpec("activoId", "activo_id", "int", required=True),
    FieldSpec("anio", "anio", "int", default=_current_year),
    FieldSpec("porcentajeDepreciacion", "porcentaje_depreciacion", "money", required=True, non_negative=True),
    FieldSpec("depreciacionAcumuladaAnterior", "depreciacion_acumulada_anterior", "money", default="0"),
    FieldSpec("depreciacionEjercicio", "depreciacion_ejercicio", "money", default="0"),
    FieldSpec("depreciacionRetiros", "depreciacion_retiros", "money", default="0"),
    FieldSpec("depreciacionOtrosAjustes", "depreciacion_otros_ajustes", "money", default="0"),
    FieldSpec("depreciacionAcumuladaHistorica", "depreciacion_acumulada_historica", "money", default="0"),
    FieldSpec("ajustePorInflacionDepreciacion", "ajuste_por_inflacion_depreciacion", "money", default="0"),
    FieldSpec("depreciacionAcumuladaAjustada", "depreciacion_acumulada_ajustada", "money", default="0"),
)

EMPRESA_FIELDS = (
    FieldSpec("ruc", "ruc", "text", required=True),
    FieldSpec("razonSocial", "razon_social", "text", required=True),
)


def _missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _parse_date(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str):
        raise ValueError("fecha inválida")
    s = value.strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    parsed = datetime.fromisoformat(s)
    # stored naive (UTC when an offset was given)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _parse_money(value: Any) -> str:
    if isinstance(value, bool):
        raise ValueError("importe inválido")
    if isinstance(value, float):
        value = repr(value)
    try:
        d = Decimal(str(value).strip())
    except InvalidOperation as e:
        raise ValueError("importe inválido") from e
    if not d.is_finite():
        raise ValueError("importe inválido")
    return str(d)


def _parse_int(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError("entero inválido")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    raise ValueError("entero inválido")


def _convert(spec: FieldSpec, value: Any) -> Any:
    if spec.kind == "text":
        if isinstance(value, (dict, list, bool)):
            raise ValueError("texto inválido")
        return str(value).strip()
    if spec.kind == "date":
        return _parse_date(value)
    if spec.kind == "money":
        money = _parse_money(value)
        if spec.non_negative and Decimal(money) < 0:
            raise ValueError("debe ser mayor o igual a 0")
        return money
    if spec.kind == "int":
        return _parse_int(value)
    if spec.kind == "choice":
        text = str(value).strip()
        if text not in spec.choices:
            raise ValueError(f"debe ser uno de: {', '.join(spec.choices)}")
        return text
    raise ValueError(f"tipo desconocido: {spec.kind}")


def validate_payload(specs: tuple[FieldSpec, ...], payload: Optional[Mapping[str, Any]]) -> dict[str, Any]:
    """Return ``{model_attr: value}`` or raise ValidationError listing every bad field."""
    if not isinstance(payload, Mapping):
        raise ValidationError("Cuerpo JSON inválido")

    known = {s.wire for s in specs}
    errors: dict[str, str] = {}
    for key in payload:
        if key not in known and key not in READ_ONLY_KEYS:
            errors[key] = "campo desconocido"

    values: dict[str, Any] = {}
    for spec in specs:
        raw = payload.get(spec.wire)
        if _missing(raw):
            if spec.required:
                errors[spec.wire] = "campo requerido"
                continue
            default = spec.default() if callable(spec.default) else spec.default
            values[spec.attr] = default
            continue
        try:
            values[spec.attr] = _convert(spec, raw)
        except ValueError as e:
            errors[spec.wire] = str(e)

    if errors:
        raise ValidationError("Faltan campos requeridos o tienen un formato inválido", fields=errors)
    return values


def apply_valuation_invariant(values: dict[str, Any]) -> dict[str, Any]:
    """valor_ajustado = valor_historico + ajuste_por_inflacion, checked on the server."""
    expected = Decimal(values["valor_historico"]) + Decimal(values.get("ajuste_por_inflacion") or "0")
    sent = values.get("valor_ajustado")
    if sent is not None and Decimal(sent) != expected:
        raise ValidationError(
            "El valor ajustado debe ser igual al valor histórico más el ajuste por inflación",
            fields={"valorAjustado": f"esperado {expected}"},
        )
    values["valor_ajustado"] = str(expected)
    return values
