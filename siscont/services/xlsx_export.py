from __future__ import annotations

"""Excel (XLSX) rendering of a ``Report``.

Layout of the sheet:
- row 1: report title (merged across every column)
- rows 3-5: PERIODO / RUC / razón social
- a section row with one merged cell per column group
- the column header row
- one row per asset, then a bold TOTALES row
"""

from io import BytesIO
from typing import Any

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from .report_engine import Report

THIN = Side(style="thin", color="000000")
BORDER = Border(left=THIN, right=THIN, top=THIN, bottom=THIN)
HEADER_FILL = PatternFill("solid", fgColor="F2F2F2")
NUMBER_FORMAT = "0.00"

HEADER_BLOCK_ROW = 3
COMPANY_LABEL = "APELLIDOS Y NOMBRES, DENOMINACIÓN O RAZÓN SOCIAL:"


def _safe_cell(v: Any) -> Any:
    # Decimal is written as float; the cell format keeps two decimals on screen
    if v is None:
        return None
    if isinstance(v, (int, float, str)):
        return v
    try:
        return float(v)
    except (TypeError, ValueError):
        return str(v)


def report_to_xlsx_bytes(report: Report) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = report.kind[:31] or "Reporte"
    ncols = max(1, len(report.columns))

    ws["A1"].value = report.title
    ws["A1"].font = Font(size=14, bold=True)
    ws.merge_cells(start_row=1, start_column=1, end_row=1, end_column=ncols)
    ws["A1"].alignment = Alignment(horizontal="center", vertical="center")

    company = report.company
    header_block = (
        ("PERIODO:", report.period),
        ("RUC:", company.ruc if company else ""),
        (COMPANY_LABEL, company.razon_social if company else ""),
    )
    for offset, (label, value) in enumerate(header_block):
        row = HEADER_BLOCK_ROW + offset
        ws.cell(row=row, column=1, value=label).font = Font(bold=True)
        ws.cell(row=row, column=2, value=value)

    # Section groups
    group_row = HEADER_BLOCK_ROW + len(header_block) + 1
    start = 1
    for group in report.groups:
        end = start + group.span - 1
        cell = ws.cell(row=group_row, column=start, value=group.title)
        cell.font = Font(bold=True)
        cell.alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)
        cell.fill = HEADER_FILL
        if end > start:
            ws.merge_cells(start_row=group_row, start_column=start, end_row=group_row, end_column=end)
        for c in range(start, end + 1):
            ws.cell(row=group_row, column=c).border = BORDER
        start = end + 1

    # Header
    header_row = group_row + 1
    for c_idx, col in enumerate(report.columns, start=1):
        cell = ws.cell(row=header_row, column=c_idx, value=col.header)
        cell.font = Font(bold=True)
        cell.alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)
        cell.fill = HEADER_FILL
        cell.border = BORDER
    ws.row_dimensions[header_row].height = 60

    # Data
    r_idx = header_row
    for r_idx, values in enumerate(report.rows, start=header_row + 1):
        for c_idx, (col, v) in enumerate(zip(report.columns, values), start=1):
            cell = ws.cell(row=r_idx, column=c_idx, value=_safe_cell(v))
            cell.border = BORDER
            if col.numeric:
                cell.number_format = NUMBER_FORMAT
                cell.alignment = Alignment(horizontal="right")
            else:
                cell.alignment = Alignment(horizontal="left")

    # Totals
    totals_row = r_idx + 1
    for c_idx, (col, v) in enumerate(zip(report.columns, report.totals), start=1):
        cell = ws.cell(row=totals_row, column=c_idx, value=_safe_cell(v))
        cell.font = Font(bold=True)
        cell.border = BORDER
        if col.numeric:
            cell.number_format = NUMBER_FORMAT
            cell.alignment = Alignment(horizontal="right")
    label = ws.cell(row=totals_row, column=1)
    label.value = "TOTALES"
    label.alignment = Alignment(horizontal="left")

    ws.freeze_panes = ws.cell(row=header_row + 1, column=1)

    for i, col in enumerate(report.columns, start=1):
        width = 14 if col.numeric else min(40, max(12, len(col.header) // 2 + 2))
        ws.column_dimensions[get_column_letter(i)].width = width

    bio = BytesIO()
    wb.save(bio)
    return bio.getvalue()
