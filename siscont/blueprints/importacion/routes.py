from __future__ import annotations

from flask import jsonify, request
from flask_login import current_user, login_required

from ...errors import ValidationError
from ...security import MANAGERS, require_roles
from ...services.report_engine import parse_year
from ...services.spreadsheet_import import distribute, get_import_session, preview_payload, upload_and_preview
from . import bp


@bp.route("/upload", methods=["POST"])
@login_required
def upload():
    """Store the workbook and return its headers and rows for review; nothing is imported yet."""
    import_session, sheet = upload_and_preview(request.files.get("file"), user_id=current_user.id)
    return jsonify(preview_payload(import_session, sheet))


@bp.route("/distribuir", methods=["POST"])
@login_required
@require_roles(*MANAGERS)
def distribuir():
    payload = request.get_json(silent=True) or {}
    import_id = str(payload.get("importId") or "").strip()
    if not import_id:
        raise ValidationError("Falta el identificador de importación", fields={"importId": "campo requerido"})
    year = parse_year(payload.get("anio"))

    import_session = get_import_session(import_id)
    result = distribute(import_session, year=year)
    return jsonify(result.to_dict())


@bp.route("/<import_id>", methods=["GET"])
@login_required
def status(import_id: str):
    return jsonify(get_import_session(import_id).to_dict())
