from __future__ import annotations

import logging
from io import BytesIO

from flask import jsonify, request, send_file
from flask_login import login_required

from ...errors import ValidationError
from ...services.pdf_export import report_to_pdf_bytes
from ...services.report_engine import ALL_YEARS, build_report
from ...services.xlsx_export import report_to_xlsx_bytes
from . import bp

report_logger = logging.getLogger("siscont.reports")

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _anio_arg() -> str:
    return (request.args.get("anio") or ALL_YEARS).strip()


@bp.route("/exportar", methods=["GET"])
@login_required
def exportar():
    tipo = (request.args.get("tipo") or "").strip()
    if not tipo:
        raise ValidationError("Falta el tipo de reporte", fields={"tipo": "campo requerido"})
    anio = _anio_arg()
    formato = (request.args.get("formato") or "xlsx").strip().lower()

    report = build_report(anio, tipo)
    if formato == "xlsx":
        content, mimetype = report_to_xlsx_bytes(report), XLSX_MIMETYPE
    elif formato == "pdf":
        content, mimetype = report_to_pdf_bytes(report), "application/pdf"
    else:
        raise ValidationError(f"Formato no soportado: {formato}", fields={"formato": "xlsx|pdf"})

    filename = f"reporte-{tipo}-{anio}.{formato}"
    report_logger.info(
        "event=report.exported kind=%s anio=%s formato=%s rows=%s bytes=%s",
        report.kind,
        anio,
        formato,
        len(report.rows),
        len(content),
    )
    return send_file(
        BytesIO(content),
        mimetype=mimetype,
        as_attachment=True,
        download_name=filename,
    )


@bp.route("/<tipo>", methods=["GET"])
@login_required
def ver(tipo: str):
    report = build_report(_anio_arg(), tipo)
    return jsonify(report.to_dict())
