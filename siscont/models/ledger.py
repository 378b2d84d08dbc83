from __future__ import annotations

from datetime import datetime

from ..extensions import db

# Monetary amounts are kept as exact decimal strings ("0", "1234.56").
# Aggregation converts them with decimal.Decimal, never float.
MONEY = db.String(32)


def _current_year() -> int:
    return datetime.now().year


class _LedgerRowMixin:
    """Columns shared by every per-asset, per-year ledger table.

    ``MONEY_FIELDS`` maps the model attribute to its JSON wire name.
    """

    MONEY_FIELDS: dict[str, str] = {}

    id = db.Column(db.Integer, primary_key=True)
    anio = db.Column(db.Integer, nullable=False, default=_current_year, index=True)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self, *, include_activo: bool = False) -> dict:
        data = {
            "id": self.id,
            "activoId": self.activo_id,
            "anio": self.anio,
        }
        for attr, wire in self.MONEY_FIELDS.items():
            data[wire] = getattr(self, attr)
        data["createdAt"] = self.created_at.isoformat() if self.created_at else None
        data["updatedAt"] = self.updated_at.isoformat() if self.updated_at else None
        if include_activo:
            data["activo"] = self.activo.to_dict() if self.activo else None
        return data


class Movimiento(_LedgerRowMixin, db.Model):
    """Yearly change of an asset's carrying balance."""

    __tablename__ = "sisevo_movimientos"

    MONEY_FIELDS = {
        "saldo_inicial": "saldoInicial",
        "adquisiciones": "adquisiciones",
        "mejoras": "mejoras",
        "retiros": "retiros",
        "otros_ajustes": "otrosAjustes",
    }

    activo_id = db.Column(db.Integer, db.ForeignKey("sisevo_activos.id"), nullable=False, index=True)

    saldo_inicial = db.Column(MONEY, nullable=False, default="0")
    adquisiciones = db.Column(MONEY, nullable=False, default="0")
    mejoras = db.Column(MONEY, nullable=False, default="0")
    retiros = db.Column(MONEY, nullable=False, default="0")
    otros_ajustes = db.Column(MONEY, nullable=False, default="0")

    activo = db.relationship("Activo")


class Valoracion(_LedgerRowMixin, db.Model):
    """Historical and inflation-adjusted value of an asset for a year.

    ``valor_ajustado`` is always ``valor_historico + ajuste_por_inflacion``;
    the API computes it before saving.
    """

    __tablename__ = "sisevo_valoracion"

    MONEY_FIELDS = {
        "valor_historico": "valorHistorico",
        "ajuste_por_inflacion": "ajustePorInflacion",
        "valor_ajustado": "valorAjustado",
    }

    activo_id = db.Column(db.Integer, db.ForeignKey("sisevo_activos.id"), nullable=False, index=True)

    valor_historico = db.Column(MONEY, nullable=False, default="0")
    ajuste_por_inflacion = db.Column(MONEY, nullable=False, default="0")
    valor_ajustado = db.Column(MONEY, nullable=False, default="0")

    activo = db.relationship("Activo")


class Depreciacion(_LedgerRowMixin, db.Model):
    """Yearly depreciation amounts. One row per (activo_id, anio) by convention, not enforced."""

    __tablename__ = "sisevo_depreciacion"

    MONEY_FIELDS = {
        "porcentaje_depreciacion": "porcentajeDepreciacion",
        "depreciacion_acumulada_anterior": "depreciacionAcumuladaAnterior",
        "depreciacion_ejercicio": "depreciacionEjercicio",
        "depreciacion_retiros": "depreciacionRetiros",
        "depreciacion_otros_ajustes": "depreciacionOtrosAjustes",
        "depreciacion_acumulada_historica": "depreciacionAcumuladaHistorica",
        "ajuste_por_inflacion_depreciacion": "ajustePorInflacionDepreciacion",
        "depreciacion_acumulada_ajustada": "depreciacionAcumuladaAjustada",
    }

    activo_id = db.Column(db.Integer, db.ForeignKey("sisevo_activos.id"), nullable=False, index=True)

    porcentaje_depreciacion = db.Column(MONEY, nullable=False, default="0")
    depreciacion_acumulada_anterior = db.Column(MONEY, nullable=False, default="0")
    depreciacion_ejercicio = db.Column(MONEY, nullable=False, default="0")
    depreciacion_retiros = db.Column(MONEY, nullable=False, default="0")
    depreciacion_otros_ajustes = db.Column(MONEY, nullable=False, default="0")
    depreciacion_acumulada_historica = db.Column(MONEY, nullable=False, default="0")
    ajuste_por_inflacion_depreciacion = db.Column(MONEY, nullable=False, default="0")
    depreciacion_acumulada_ajustada = db.Column(MONEY, nullable=False, default="0")

    activo = db.relationship("Activo")
