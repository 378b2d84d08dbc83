from __future__ import annotations

import logging
from datetime import datetime

from flask import jsonify, request
from flask_login import login_required

from ...errors import NotFoundError, ValidationError
from ...extensions import db
from ...models.assets import Activo
from ...models.core import Empresa
from ...models.ledger import Depreciacion, Movimiento, Valoracion
from ...security import MANAGERS, require_roles
from ...services.report_engine import in_year, parse_year
from ...services.validation import (
    ACTIVO_FIELDS,
    DEPRECIACION_FIELDS,
    EMPRESA_FIELDS,
    MOVIMIENTO_FIELDS,
    VALORACION_FIELDS,
    apply_valuation_invariant,
    validate_payload,
)
from . import bp

registry_logger = logging.getLogger("siscont.registry")


def _year_arg():
    # the old client sends ?año=
    return parse_year(request.args.get("anio", request.args.get("año")))


def _get_or_404(model, obj_id: int, label: str):
    obj = db.session.get(model, obj_id)
    if obj is None:
        raise NotFoundError(f"{label} no encontrado")
    return obj


def _check_activo(values: dict) -> None:
    if db.session.get(Activo, values["activo_id"]) is None:
        raise ValidationError("El activo no existe", fields={"activoId": "no existe"})


def _assign(obj, values: dict) -> None:
    for attr, value in values.items():
        setattr(obj, attr, value)


# -----------------
# Empresa
# -----------------


@bp.route("/empresa", methods=["GET"])
@login_required
def empresa_get():
    empresa = Empresa.current()
    return jsonify(empresa.to_dict() if empresa else None)


@bp.route("/empresa", methods=["POST"])
@login_required
@require_roles(*MANAGERS)
def empresa_upsert():
    values = validate_payload(EMPRESA_FIELDS, request.get_json(silent=True))
    empresa = Empresa.current()
    created = empresa is None
    if created:
        empresa = Empresa(**values)
        db.session.add(empresa)
    else:
        _assign(empresa, values)
        empresa.updated_at = datetime.utcnow()
    db.session.commit()
    registry_logger.info("event=empresa.saved empresa_id=%s created=%s", empresa.id, created)
    return jsonify(empresa.to_dict())


# -----------------
# Activos
# -----------------


@bp.route("/activos", methods=["GET"])
@login_required
def activos_list():
    year = _year_arg()
    activos = Activo.query.order_by(Activo.codigo_activo.asc(), Activo.id.asc()).all()
    return jsonify([a.to_dict() for a in activos if in_year(a, year)])


@bp.route("/activos", methods=["POST"])
@login_required
def activos_create():
    values = validate_payload(ACTIVO_FIELDS, request.get_json(silent=True))
    empresa = Empresa.current()
    activo = Activo(**values, empresa_id=empresa.id if empresa else None)
    db.session.add(activo)
    db.session.commit()
    registry_logger.info("event=activo.created activo_id=%s codigo=%s", activo.id, activo.codigo_activo)
    return jsonify(activo.to_dict()), 201


@bp.route("/activos/<int:activo_id>", methods=["GET"])
@login_required
def activos_get(activo_id: int):
    return jsonify(_get_or_404(Activo, activo_id, "Activo").to_dict())


@bp.route("/activos/<int:activo_id>", methods=["PUT"])
@login_required
def activos_update(activo_id: int):
    activo = _get_or_404(Activo, activo_id, "Activo")
    values = validate_payload(ACTIVO_FIELDS, request.get_json(silent=True))
    _assign(activo, values)
    activo.updated_at = datetime.utcnow()
    db.session.commit()
    registry_logger.info("event=activo.updated activo_id=%s", activo.id)
    return jsonify(activo.to_dict())


# -----------------
# Ledger tables (movimientos, valoracion, depreciacion)
# -----------------


def _ledger_list(model):
    query = model.query
    year = _year_arg()
    if year is not None:
        query = query.filter(model.anio == year)
    activo_id = request.args.get("activoId", type=int)
    if activo_id is not None:
        query = query.filter(model.activo_id == activo_id)
    rows = query.order_by(model.anio.desc(), model.id.asc()).all()
    return jsonify([r.to_dict(include_activo=True) for r in rows])


def _ledger_values(specs, model) -> dict:
    values = validate_payload(specs, request.get_json(silent=True))
    _check_activo(values)
    if model is Valoracion:
        apply_valuation_invariant(values)
    return values


def _ledger_create(model, specs, label: str):
    values = _ledger_values(specs, model)
    row = model(**values)
    db.session.add(row)
    db.session.commit()
    registry_logger.info("event=%s.created id=%s activo_id=%s anio=%s", label, row.id, row.activo_id, row.anio)
    return jsonify(row.to_dict(include_activo=True)), 201


def _ledger_update(model, specs, label: str, row_id: int):
    row = _get_or_404(model, row_id, label.capitalize())
    values = _ledger_values(specs, model)
    _assign(row, values)
    row.updated_at = datetime.utcnow()
    db.session.commit()
    registry_logger.info("event=%s.updated id=%s", label, row.id)
    return jsonify(row.to_dict(include_activo=True))


@bp.route("/movimientos", methods=["GET"])
@login_required
def movimientos_list():
    return _ledger_list(Movimiento)


@bp.route("/movimientos", methods=["POST"])
@login_required
def movimientos_create():
    return _ledger_create(Movimiento, MOVIMIENTO_FIELDS, "movimiento")


@bp.route("/movimientos/<int:row_id>", methods=["GET"])
@login_required
def movimientos_get(row_id: int):
    return jsonify(_get_or_404(Movimiento, row_id, "Movimiento").to_dict(include_activo=True))


@bp.route("/movimientos/<int:row_id>", methods=["PUT"])
@login_required
def movimientos_update(row_id: int):
    return _ledger_update(Movimiento, MOVIMIENTO_FIELDS, "movimiento", row_id)


@bp.route("/movimientos/<int:row_id>", methods=["DELETE"])
@login_required
def movimientos_delete(row_id: int):
    row = _get_or_404(Movimiento, row_id, "Movimiento")
    db.session.delete(row)
    db.session.commit()
    registry_logger.info("event=movimiento.deleted id=%s", row_id)
    return jsonify({"message": "Movimiento eliminado", "id": row_id})


@bp.route("/valoracion", methods=["GET"])
@login_required
def valoracion_list():
    return _ledger_list(Valoracion)


@bp.route("/valoracion", methods=["POST"])
@login_required
def valoracion_create():
    return _ledger_create(Valoracion, VALORACION_FIELDS, "valoracion")


@bp.route("/valoracion/<int:row_id>", methods=["GET"])
@login_required
def valoracion_get(row_id: int):
    return jsonify(_get_or_404(Valoracion, row_id, "Valoración").to_dict(include_activo=True))


@bp.route("/valoracion/<int:row_id>", methods=["PUT"])
@login_required
def valoracion_update(row_id: int):
    return _ledger_update(Valoracion, VALORACION_FIELDS, "valoracion", row_id)


@bp.route("/depreciacion", methods=["GET"])
@login_required
def depreciacion_list():
    return _ledger_list(Depreciacion)


@bp.route("/depreciacion", methods=["POST"])
@login_required
def depreciacion_create():
    return _ledger_create(Depreciacion, DEPRECIACION_FIELDS, "depreciacion")


@bp.route("/depreciacion/<int:row_id>", methods=["GET"])
@login_required
def depreciacion_get(row_id: int):
    return jsonify(_get_or_404(Depreciacion, row_id, "Depreciación").to_dict(include_activo=True))


@bp.route("/depreciacion/<int:row_id>", methods=["PUT"])
@login_required
def depreciacion_update(row_id: int):
    return _ledger_update(Depreciacion, DEPRECIACION_FIELDS, "depreciacion", row_id)
