from __future__ import annotations

from io import BytesIO
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A3, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from .numeric import format_money
from .report_engine import Report


def report_to_pdf_bytes(report: Report) -> bytes:
    """Render a report as a landscape table.

    The Formato 7.1 layout has 26 columns, so it goes on A3 with a small font.
    Header text is wrapped in Paragraphs so long regulatory titles fit.
    """

    buf = BytesIO()
    doc = SimpleDocTemplate(
        buf,
        pagesize=landscape(A3),
        leftMargin=18,
        rightMargin=18,
        topMargin=18,
        bottomMargin=18,
        title=report.title,
    )

    styles = getSampleStyleSheet()
    small = styles["BodyText"].clone("small", fontSize=6, leading=7)
    small_bold = small.clone("small_bold", fontName="Helvetica-Bold")

    company = report.company
    story = [
        Paragraph(escape(report.title), styles["Title"]),
        Paragraph(f"PERIODO: {report.period}", styles["Normal"]),
        Paragraph(escape(f"RUC: {company.ruc if company else ''}"), styles["Normal"]),
        Paragraph(
            escape(f"APELLIDOS Y NOMBRES, DENOMINACIÓN O RAZÓN SOCIAL: {company.razon_social if company else ''}"),
            styles["Normal"],
        ),
        Spacer(1, 12),
    ]

    groups_row: list = []
    spans = []
    col = 0
    for group in report.groups:
        groups_row.append(Paragraph(escape(group.title), small_bold))
        groups_row.extend([""] * (group.span - 1))
        spans.append(("SPAN", (col, 0), (col + group.span - 1, 0)))
        col += group.span

    data = [groups_row, [Paragraph(escape(c.header), small_bold) for c in report.columns]]
    for r in report.rows:
        data.append(
            [format_money(v) if c.numeric else ("" if v is None else str(v)) for c, v in zip(report.columns, r)]
        )
    totals = [format_money(v) if (c.numeric and v is not None) else "" for c, v in zip(report.columns, report.totals)]
    if totals:
        totals[0] = "TOTALES"
    data.append(totals)

    numeric_cols = [i for i, c in enumerate(report.columns) if c.numeric]
    style = [
        ("BACKGROUND", (0, 0), (-1, 1), colors.HexColor("#f2f2f2")),
        ("GRID", (0, 0), (-1, -1), 0.25, colors.HexColor("#999999")),
        ("FONTSIZE", (0, 0), (-1, -1), 6),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
        *spans,
    ]
    for i in numeric_cols:
        style.append(("ALIGN", (i, 2), (i, -1), "RIGHT"))

    ncols = max(1, len(report.columns))
    tbl = Table(data, colWidths=[doc.width / ncols] * ncols, repeatRows=2)
    tbl.setStyle(TableStyle(style))

    story.append(tbl)
    doc.build(story)
    return buf.getvalue()
