"""Spreadsheet import: upload + preview, then Distribute into the asset registry.

Distribute commits every reconciled row as soon as it is processed. When a row
raises, the batch stops and the rows before it stay committed; the error says
how many. Set ``IMPORT_ATOMIC_BATCH`` to roll the whole batch back instead.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Optional
from zipfile import BadZipFile

from flask import current_app
from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from ..errors import NotFoundError, ParseError, ReconciliationError, ValidationError
from ..extensions import db
from ..models.assets import ESTADO_ACTIVO, Activo, MetodoDepreciacion
from ..models.imports import ImportSession
from ..models.ledger import Depreciacion
from .column_mapping import cell_text, extract_fields
from .file_storage_service import StoredFile, resolve_abs_path, store_path, store_upload
from .numeric import parse_numeric_value

import_logger = logging.getLogger("siscont.import")


@dataclass
class ParsedSheet:
    headers: list[str]
    rows: list[dict[str, Any]]
    row_numbers: list[int]


@dataclass
class RowOutcome:
    activo: Activo
    created: bool
    depreciacion_created: bool


@dataclass
class DistributeResult:
    import_id: str
    year: int
    created: int = 0
    updated: int = 0
    skipped: int = 0
    depreciacion_created: int = 0
    placeholder_dates: int = 0

    def to_dict(self) -> dict:
        return {
            "message": "Datos importados correctamente",
            "importId": self.import_id,
            "anio": self.year,
            "created": self.created,
            "updated": self.updated,
            "skipped": self.skipped,
            "depreciationCreated": self.depreciacion_created,
            "placeholderDates": self.placeholder_dates,
        }


def _header_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def read_workbook(path: str) -> ParsedSheet:
    """Parse the first worksheet: row 1 is the header list, later rows map header -> raw value.

    Empty cells are left out of a row mapping and fully empty rows are dropped.
    When two columns share a header, the rightmost value wins in the mapping
    while ``headers`` keeps both.
    """
    try:
        wb = load_workbook(path, data_only=True)
    except (InvalidFileException, BadZipFile, KeyError, OSError, ValueError) as e:
        raise ParseError(f"Error al procesar el archivo: {e}") from e

    try:
        if not wb.worksheets:
            raise ParseError("No se pudo leer la hoja de cálculo")
        ws = wb.worksheets[0]

        rows_iter = ws.iter_rows(values_only=True)
        header_cells = next(rows_iter, None)
        if header_cells is None or all(c is None or c == "" for c in header_cells):
            raise ParseError("La hoja de cálculo no tiene fila de encabezados")
        headers = [_header_text(c) for c in header_cells]

        rows: list[dict[str, Any]] = []
        row_numbers: list[int] = []
        for row_number, values in enumerate(rows_iter, start=2):
            row: dict[str, Any] = {}
            for idx, value in enumerate(values):
                if value is None or idx >= len(headers):
                    continue
                row[headers[idx]] = value
            if row:
                rows.append(row)
                row_numbers.append(row_number)
    finally:
        wb.close()

    return ParsedSheet(headers=headers, rows=rows, row_numbers=row_numbers)


def json_cell(value: Any) -> Any:
    """Raw cell value in a JSON-friendly form for the preview table."""
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    return value


def preview_payload(import_session: ImportSession, sheet: ParsedSheet) -> dict:
    return {
        "importId": import_session.token,
        "headers": sheet.headers,
        "preview": [{k: json_cell(v) for k, v in row.items()} for row in sheet.rows],
    }


def _open_session(stored: StoredFile, *, user_id: Optional[int]) -> tuple[ImportSession, ParsedSheet]:
    sheet = read_workbook(stored.abs_path)
    import_session = ImportSession(
        storage_path=stored.rel_path,
        original_filename=stored.original_filename,
        size_bytes=stored.size_bytes,
        sha256=stored.sha256,
        headers_json=sheet.headers,
        row_count=len(sheet.rows),
        user_id=user_id,
    )
    db.session.add(import_session)
    db.session.commit()
    import_logger.info(
        "event=import.uploaded import_id=%s file=%s rows=%s headers=%s",
        import_session.token,
        stored.original_filename,
        len(sheet.rows),
        len(sheet.headers),
    )
    return import_session, sheet


def upload_and_preview(file_storage, *, user_id: Optional[int] = None) -> tuple[ImportSession, ParsedSheet]:
    """Store the upload, parse it and open an import session. Nothing else is written."""
    stored = store_upload(file_storage)
    return _open_session(stored, user_id=user_id)


def open_local_file(path: str, *, user_id: Optional[int] = None) -> tuple[ImportSession, ParsedSheet]:
    stored = store_path(path)
    return _open_session(stored, user_id=user_id)


def get_import_session(token: str) -> ImportSession:
    import_session = ImportSession.query.filter_by(token=(token or "").strip()).first()
    if import_session is None:
        raise NotFoundError("No se encontró la importación")
    return import_session


def reconcile_row(row: dict[str, Any], *, year: int) -> Optional[RowOutcome]:
    """Match-or-create one asset and seed its depreciation row for ``year``.

    Returns None when both code and description are empty. A row with only
    one of them raises, which aborts the batch.
    """
    fields = extract_fields(row)
    codigo = cell_text(fields["codigo_activo"])
    descripcion = cell_text(fields["descripcion"])
    if not codigo and not descripcion:
        return None
    if not codigo:
        raise ValidationError("Código del activo requerido")
    if not descripcion:
        raise ValidationError(f"Descripción requerida para el activo {codigo}")

    cuenta = cell_text(fields["cuenta_contable"])
    marca = cell_text(fields["marca"]) or None
    modelo = cell_text(fields["modelo"]) or None
    serie = cell_text(fields["numero_serie"]) or None

    activo = Activo.query.filter_by(codigo_activo=codigo).order_by(Activo.id.asc()).first()
    created = activo is None
    if activo is not None:
        activo.codigo_activo = codigo
        if cuenta:
            activo.cuenta_contable = cuenta
        activo.descripcion = descripcion
        activo.marca = marca
        activo.modelo = modelo
        activo.numero_serie = serie
    else:
        # The sheet carries no dates: both are set to "now" and must be fixed by hand.
        now = datetime.utcnow()
        activo = Activo(
            codigo_activo=codigo,
            cuenta_contable=cuenta or "33",
            descripcion=descripcion,
            marca=marca,
            modelo=modelo,
            numero_serie=serie,
            fecha_adquisicion=now,
            fecha_uso=now,
            metodo_aplicado=MetodoDepreciacion.LINEA_RECTA,
            estado=ESTADO_ACTIVO,
        )
        db.session.add(activo)
        db.session.flush()
        import_logger.warning(
            "event=import.placeholder_dates codigo=%s activo_id=%s msg=%s",
            codigo,
            activo.id,
            "fecha_adquisicion/fecha_uso set to import time",
        )

    existing = Depreciacion.query.filter_by(activo_id=activo.id, anio=year).first()
    depreciacion_created = False
    if existing is None:
        db.session.add(
            Depreciacion(
                activo_id=activo.id,
                anio=year,
                porcentaje_depreciacion=parse_numeric_value(fields["porcentaje_depreciacion"]),
                depreciacion_acumulada_anterior="0",
                depreciacion_ejercicio="0",
                depreciacion_retiros="0",
                depreciacion_otros_ajustes="0",
                depreciacion_acumulada_historica="0",
                ajuste_por_inflacion_depreciacion="0",
                depreciacion_acumulada_ajustada="0",
            )
        )
        depreciacion_created = True

    return RowOutcome(activo=activo, created=created, depreciacion_created=depreciacion_created)


def _mark_failed(import_session: ImportSession, message: str) -> None:
    import_session.status = ImportSession.STATUS_FAILED
    import_session.error = message[:2000]
    import_session.distributed_at = datetime.utcnow()
    db.session.commit()


def distribute(
    import_session: ImportSession,
    *,
    year: Optional[int] = None,
    atomic: Optional[bool] = None,
) -> DistributeResult:
    """Reconcile every row of the session's workbook against the asset registry."""
    if atomic is None:
        atomic = bool(current_app.config.get("IMPORT_ATOMIC_BATCH", False))
    year = int(year or datetime.now().year)

    sheet = read_workbook(resolve_abs_path(import_session.storage_path))
    result = DistributeResult(import_id=import_session.token, year=year)
    import_logger.info(
        "event=import.distribute.start import_id=%s rows=%s year=%s atomic=%s",
        import_session.token,
        len(sheet.rows),
        year,
        atomic,
    )

    committed = 0
    for row_number, row in zip(sheet.row_numbers, sheet.rows):
        try:
            outcome = reconcile_row(row, year=year)
            if outcome is None:
                result.skipped += 1
                import_logger.info("event=import.row.skipped import_id=%s row=%s", import_session.token, row_number)
                continue
            if not atomic:
                db.session.commit()
                committed += 1
        except Exception as e:
            db.session.rollback()
            message = f"Error procesando fila {row_number}: {e}"
            import_logger.error(
                "event=import.distribute.failed import_id=%s row=%s committed=%s err=%s",
                import_session.token,
                row_number,
                committed,
                str(e),
            )
            _mark_failed(import_session, message)
            raise ReconciliationError(message, row_number=row_number, committed_rows=committed) from e

        if outcome.created:
            result.created += 1
            result.placeholder_dates += 1
        else:
            result.updated += 1
        if outcome.depreciacion_created:
            result.depreciacion_created += 1

    import_session.status = ImportSession.STATUS_DISTRIBUTED
    import_session.error = None
    import_session.created_rows = result.created
    import_session.updated_rows = result.updated
    import_session.skipped_rows = result.skipped
    import_session.distributed_at = datetime.utcnow()
    db.session.commit()

    import_logger.info(
        "event=import.distribute.done import_id=%s created=%s updated=%s skipped=%s depreciation_created=%s",
        import_session.token,
        result.created,
        result.updated,
        result.skipped,
        result.depreciacion_created,
    )
    return result
