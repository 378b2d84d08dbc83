from __future__ import annotations

from datetime import datetime

from ..extensions import db


class MetodoDepreciacion:
    LINEA_RECTA = "LINEA_RECTA"
    UNIDADES_PRODUCIDAS = "UNIDADES_PRODUCIDAS"
    OTROS = "OTROS"

    ALL = (LINEA_RECTA, UNIDADES_PRODUCIDAS, OTROS)


ESTADO_ACTIVO = "ACTIVO"


class Activo(db.Model):
    """A fixed asset. ``codigo_activo`` is the business key but is not unique in the table."""

    __tablename__ = "sisevo_activos"

    id = db.Column(db.Integer, primary_key=True)
    codigo_activo = db.Column(db.String(64), nullable=False, index=True)
    cuenta_contable = db.Column(db.String(32), nullable=True, default="33")
    descripcion = db.Column(db.String(255), nullable=False)
    marca = db.Column(db.String(120), nullable=True)
    modelo = db.Column(db.String(120), nullable=True)
    numero_serie = db.Column(db.String(120), nullable=True)
    documento_autorizacion = db.Column(db.String(120), nullable=True)

    fecha_adquisicion = db.Column(db.DateTime, nullable=True, default=datetime.utcnow)
    fecha_uso = db.Column(db.DateTime, nullable=True, default=datetime.utcnow)

    metodo_aplicado = db.Column(
        db.String(32),
        nullable=True,
        default=MetodoDepreciacion.LINEA_RECTA,
        doc="LINEA_RECTA|UNIDADES_PRODUCIDAS|OTROS",
    )
    estado = db.Column(db.String(32), nullable=True, default=ESTADO_ACTIVO)

    empresa_id = db.Column(db.Integer, db.ForeignKey("sisevo_empresa.id", ondelete="SET NULL"), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    empresa = db.relationship("Empresa", backref=db.backref("activos", lazy="dynamic"))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "codigoActivo": self.codigo_activo,
            "cuentaContable": self.cuenta_contable,
            "descripcion": self.descripcion,
            "marca": self.marca,
            "modelo": self.modelo,
            "numeroSerie": self.numero_serie,
            "documentoAutorizacion": self.documento_autorizacion,
            "fechaAdquisicion": self.fecha_adquisicion.isoformat() if self.fecha_adquisicion else None,
            "fechaUso": self.fecha_uso.isoformat() if self.fecha_uso else None,
            "metodoAplicado": self.metodo_aplicado,
            "estado": self.estado,
            "empresaId": self.empresa_id,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
