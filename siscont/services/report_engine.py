"""Aggregation of the asset registry into report tables.

Each report kind is a ``ReportLayout``: it declares its column groups and
columns and turns one asset plus its ledger rows for the period into a row.
``build_report`` runs the layout over the filtered assets and adds the
totals. The xlsx/pdf renderers and the JSON endpoint all consume the same
``Report``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from flask import current_app

from ..errors import ValidationError
from ..models.assets import Activo
from ..models.core import Empresa
from ..models.ledger import Depreciacion, Movimiento, Valoracion
from .numeric import format_money, round_money, sum_displayed, to_decimal

report_logger = logging.getLogger("siscont.reports")

ALL_YEARS = "todos"
DEFAULT_DATE_FORMAT = "%d/%m/%Y"


@dataclass(frozen=True)
class ReportColumn:
    key: str
    header: str
    numeric: bool = False


@dataclass(frozen=True)
class ColumnGroup:
    title: str
    span: int


@dataclass
class LedgerRows:
    movimiento: Optional[Movimiento] = None
    valoracion: Optional[Valoracion] = None
    depreciacion: Optional[Depreciacion] = None


@dataclass
class Report:
    kind: str
    title: str
    period: str
    company: Optional[Empresa]
    groups: list[ColumnGroup]
    columns: list[ReportColumn]
    rows: list[list[Any]] = field(default_factory=list)
    totals: list[Any] = field(default_factory=list)

    def to_dict(self) -> dict:
        def cell(col: ReportColumn, value: Any) -> Any:
            if col.numeric and value is not None:
                return format_money(value)
            return value

        return {
            "tipo": self.kind,
            "title": self.title,
            "periodo": self.period,
            "company": self.company.to_dict() if self.company else None,
            "groups": [{"title": g.title, "span": g.span} for g in self.groups],
            "columns": [{"key": c.key, "header": c.header, "numeric": c.numeric} for c in self.columns],
            "rows": [{c.key: cell(c, v) for c, v in zip(self.columns, row)} for row in self.rows],
            "totals": {c.key: cell(c, v) for c, v in zip(self.columns, self.totals) if c.numeric and v is not None},
        }


def parse_year(anio: Any) -> Optional[int]:
    """``"todos"``/empty -> None (every year); otherwise a four-digit year."""
    if anio is None:
        return None
    if isinstance(anio, int) and not isinstance(anio, bool):
        return anio
    text = str(anio).strip().lower()
    if text in ("", ALL_YEARS):
        return None
    if not text.isdigit():
        raise ValidationError(f"Año inválido: {anio}")
    return int(text)


def format_date(value: Any, fmt: Optional[str] = None) -> str:
    """Short es-PE date. A value that cannot be formatted is logged and shown blank."""
    if value is None or value == "":
        return ""
    fmt = fmt or DEFAULT_DATE_FORMAT
    try:
        if isinstance(value, str):
            value = datetime.fromisoformat(value.strip())
        if not isinstance(value, (date, datetime)):
            raise TypeError(f"unsupported date value {value!r}")
        return value.strftime(fmt)
    except (TypeError, ValueError) as e:
        report_logger.warning("event=report.date_format_failed value=%r err=%s", value, str(e))
        return ""


def in_year(activo: Activo, year: Optional[int]) -> bool:
    if year is None:
        return True
    fecha = activo.fecha_uso
    return fecha is not None and fecha.year == year


def load_assets(year: Optional[int]) -> list[Activo]:
    activos = Activo.query.order_by(Activo.codigo_activo.asc(), Activo.id.asc()).all()
    return [a for a in activos if in_year(a, year)]


def _first_by_asset(model, year: Optional[int]) -> dict[int, Any]:
    # a second row for the same (asset, year) is ignored: the lowest id wins
    query = model.query
    if year is not None:
        query = query.filter(model.anio == year)
    found: dict[int, Any] = {}
    for row in query.order_by(model.id.asc()).all():
        found.setdefault(row.activo_id, row)
    return found


def load_ledger(year: Optional[int]) -> dict[int, LedgerRows]:
    movimientos = _first_by_asset(Movimiento, year)
    valoraciones = _first_by_asset(Valoracion, year)
    depreciaciones = _first_by_asset(Depreciacion, year)
    ledger: dict[int, LedgerRows] = {}
    for activo_id in set(movimientos) | set(valoraciones) | set(depreciaciones):
        ledger[activo_id] = LedgerRows(
            movimiento=movimientos.get(activo_id),
            valoracion=valoraciones.get(activo_id),
            depreciacion=depreciaciones.get(activo_id),
        )
    return ledger


def _money(row: Any, attr: str) -> Decimal:
    if row is None:
        return Decimal("0.00")
    return round_money(getattr(row, attr, None))


class ReportLayout:
    kind: str = ""
    title: str = ""
    groups: tuple[ColumnGroup, ...] = ()
    columns: tuple[ReportColumn, ...] = ()

    def include(self, ledger: LedgerRows) -> bool:
        return True

    def build_row(self, activo: Activo, ledger: LedgerRows, *, date_format: str) -> list[Any]:
        raise NotImplementedError


class Formato71Layout(ReportLayout):
    kind = "formato71"
    title = 'FORMATO 7.1: "REGISTRO DE ACTIVOS FIJOS - DETALLE DE LOS ACTIVOS FIJOS"'
    groups = (
        ColumnGroup("IDENTIFICACIÓN DEL ACTIVO FIJO", 6),
        ColumnGroup("MOVIMIENTOS DEL EJERCICIO", 5),
        ColumnGroup("VALOR DEL ACTIVO FIJO", 3),
        ColumnGroup("DATOS DE LA DEPRECIACIÓN", 5),
        ColumnGroup("DEPRECIACIÓN", 7),
    )
    columns = (
        ReportColumn("codigoActivo", "Código Relacionado con el Activo Fijo"),
        ReportColumn("cuentaContable", "Cuenta Contable del Activo Fijo"),
        ReportColumn("descripcion", "Descripción"),
        ReportColumn("marca", "Marca del Activo Fijo"),
        ReportColumn("modelo", "Modelo del Activo Fijo"),
        ReportColumn("numeroSerie", "Número de Serie y/o Placa del Activo Fijo"),
        ReportColumn("saldoInicial", "Saldo Inicial", numeric=True),
        ReportColumn("adquisiciones", "Adquisiciones Adiciones", numeric=True),
        ReportColumn("mejoras", "Mejoras", numeric=True),
        ReportColumn("retiros", "Retiros y/o Bajas", numeric=True),
        ReportColumn("otrosAjustes", "Otros Ajustes", numeric=True),
        ReportColumn("valorHistorico", "Valor Histórico del Activo Fijo al 31.12", numeric=True),
        ReportColumn("ajustePorInflacion", "Ajuste por Inflación", numeric=True),
        ReportColumn("valorAjustado", "Valor Ajustado del Activo Fijo al 31.12", numeric=True),
        ReportColumn("fechaAdquisicion", "Fecha de Adquisición"),
        ReportColumn("fechaUso", "Fecha de Inicio del Uso del Activo Fijo"),
        ReportColumn("metodoAplicado", "Método Aplicado"),
        ReportColumn("documentoAutorizacion", "N° de Documento de Autorización"),
        ReportColumn("porcentajeDepreciacion", "Porcentaje de la Depreciación", numeric=True),
        ReportColumn("depreciacionAcumuladaAnterior", "Depreciación Acumulada al Cierre del Ejercicio Anterior", numeric=True),
        ReportColumn("depreciacionEjercicio", "Depreciación del Ejercicio", numeric=True),
        ReportColumn("depreciacionRetiros", "Depreciación del Ejercicio Relacionada con los Retiros y/o Bajas", numeric=True),
        ReportColumn("depreciacionOtrosAjustes", "Depreciación Relacionada con Otros Ajustes", numeric=True),
        ReportColumn("depreciacionAcumuladaHistorica", "Depreciación Acumulada Histórica", numeric=True),
        ReportColumn("ajustePorInflacionDepreciacion", "Ajuste por Inflación de la Depreciación", numeric=True),
        ReportColumn("depreciacionAcumuladaAjustada", "Depreciación Acumulada Ajustada por Inflación", numeric=True),
    )

    def build_row(self, activo: Activo, ledger: LedgerRows, *, date_format: str) -> list[Any]:
        mov, val, dep = ledger.movimiento, ledger.valoracion, ledger.depreciacion
        return [
            activo.codigo_activo or "",
            activo.cuenta_contable or "",
            activo.descripcion or "",
            activo.marca or "",
            activo.modelo or "",
            activo.numero_serie or "",
            _money(mov, "saldo_inicial"),
            _money(mov, "adquisiciones"),
            _money(mov, "mejoras"),
            _money(mov, "retiros"),
            _money(mov, "otros_ajustes"),
            _money(val, "valor_historico"),
            _money(val, "ajuste_por_inflacion"),
            _money(val, "valor_ajustado"),
            format_date(activo.fecha_adquisicion, date_format),
            format_date(activo.fecha_uso, date_format),
            activo.metodo_aplicado or "",
            activo.documento_autorizacion or "",
            _money(dep, "porcentaje_depreciacion"),
            _money(dep, "depreciacion_acumulada_anterior"),
            _money(dep, "depreciacion_ejercicio"),
            _money(dep, "depreciacion_retiros"),
            _money(dep, "depreciacion_otros_ajustes"),
            _money(dep, "depreciacion_acumulada_historica"),
            _money(dep, "ajuste_por_inflacion_depreciacion"),
            _money(dep, "depreciacion_acumulada_ajustada"),
        ]


class ResumenLayout(ReportLayout):
    kind = "resumen"
    title = "RESUMEN GENERAL DE ACTIVOS FIJOS"
    groups = (ColumnGroup("ACTIVO FIJO", 2), ColumnGroup("VALORES", 4))
    columns = (
        ReportColumn("codigoActivo", "Código"),
        ReportColumn("descripcion", "Descripción"),
        ReportColumn("valorHistorico", "Valor Histórico", numeric=True),
        ReportColumn("valorAjustado", "Valor Ajustado", numeric=True),
        ReportColumn("depreciacionAcumuladaAjustada", "Depreciación Acumulada", numeric=True),
        ReportColumn("valorNeto", "Valor Neto", numeric=True),
    )

    def build_row(self, activo: Activo, ledger: LedgerRows, *, date_format: str) -> list[Any]:
        val, dep = ledger.valoracion, ledger.depreciacion
        ajustado = _money(val, "valor_ajustado")
        acumulada = _money(dep, "depreciacion_acumulada_ajustada")
        neto = ajustado - acumulada
        return [
            activo.codigo_activo or "",
            activo.descripcion or "",
            _money(val, "valor_historico"),
            ajustado,
            acumulada,
            neto,
        ]


class MovimientosLayout(ReportLayout):
    kind = "movimientos"
    title = "MOVIMIENTOS DEL EJERCICIO"
    groups = (ColumnGroup("ACTIVO FIJO", 2), ColumnGroup("MOVIMIENTOS", 6))
    columns = (
        ReportColumn("codigoActivo", "Código"),
        ReportColumn("descripcion", "Descripción"),
        ReportColumn("saldoInicial", "Saldo Inicial", numeric=True),
        ReportColumn("adquisiciones", "Adquisiciones", numeric=True),
        ReportColumn("mejoras", "Mejoras", numeric=True),
        ReportColumn("retiros", "Retiros", numeric=True),
        ReportColumn("otrosAjustes", "Otros Ajustes", numeric=True),
        ReportColumn("saldoFinal", "Saldo Final", numeric=True),
    )

    def build_row(self, activo: Activo, ledger: LedgerRows, *, date_format: str) -> list[Any]:
        mov = ledger.movimiento
        saldo = _money(mov, "saldo_inicial")
        adq = _money(mov, "adquisiciones")
        mejoras = _money(mov, "mejoras")
        retiros = _money(mov, "retiros")
        otros = _money(mov, "otros_ajustes")
        return [
            activo.codigo_activo or "",
            activo.descripcion or "",
            saldo,
            adq,
            mejoras,
            retiros,
            otros,
            saldo + adq + mejoras - retiros + otros,
        ]

    def include(self, ledger: LedgerRows) -> bool:
        return ledger.movimiento is not None


LAYOUTS: dict[str, ReportLayout] = {
    layout.kind: layout for layout in (Formato71Layout(), ResumenLayout(), MovimientosLayout())
}

# names used by the older client
KIND_ALIASES = {"full-format": "formato71", "summary": "resumen", "movements": "movimientos"}


def get_layout(kind: str) -> ReportLayout:
    key = (kind or "").strip().lower()
    key = KIND_ALIASES.get(key, key)
    layout = LAYOUTS.get(key)
    if layout is None:
        raise ValidationError(f"Tipo de reporte no soportado: {kind}")
    return layout


def compute_totals(columns: tuple[ReportColumn, ...] | list[ReportColumn], rows: list[list[Any]]) -> list[Any]:
    totals: list[Any] = []
    for idx, col in enumerate(columns):
        if col.numeric:
            totals.append(sum_displayed(row[idx] for row in rows))
        else:
            totals.append(None)
    return totals


def build_report(anio: Any, kind: str, *, date_format: Optional[str] = None) -> Report:
    """Aggregate assets and their ledger rows for one period into a report table.

    ``anio`` is a year or ``"todos"``. Assets are filtered by the year of
    their in-service date, ledger rows by their ``anio``.
    """
    layout = get_layout(kind)
    year = parse_year(anio)
    date_format = date_format or current_app.config.get("REPORT_DATE_FORMAT") or DEFAULT_DATE_FORMAT

    activos = load_assets(year)
    ledger = load_ledger(year)

    rows: list[list[Any]] = []
    for activo in activos:
        entries = ledger.get(activo.id, LedgerRows())
        if not layout.include(entries):
            continue
        rows.append(layout.build_row(activo, entries, date_format=date_format))

    report = Report(
        kind=layout.kind,
        title=layout.title,
        period=str(year) if year is not None else ALL_YEARS.upper(),
        company=Empresa.current(),
        groups=list(layout.groups),
        columns=list(layout.columns),
        rows=rows,
        totals=compute_totals(layout.columns, rows),
    )
    report_logger.info(
        "event=report.built kind=%s period=%s assets=%s rows=%s",
        report.kind,
        report.period,
        len(activos),
        len(rows),
    )
    return report


def money_total(report: Report, key: str) -> Decimal:
    for col, value in zip(report.columns, report.totals):
        if col.key == key:
            return to_decimal(value)
    raise KeyError(key)
