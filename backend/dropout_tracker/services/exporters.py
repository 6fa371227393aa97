"""
Export renderers - turn aggregator rows into downloadable PDF / Excel bytes.

Both renderers are opaque sinks: they receive rows already ordered and
formatted by the report aggregator and only handle layout.
"""

from io import BytesIO
from datetime import datetime
from typing import List, Optional
from xml.sax.saxutils import escape

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import mm
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle

from dropout_tracker.services.report_aggregator import (
    EXPORT_COLUMNS, SPREADSHEET_COLUMNS, ReportSummary
)

REPORT_TITLE = "Student Dropout Risk Report"
SHEET_TITLE = "Students Dropout Report"

PDF_FILENAME = "student_dropout_report.pdf"
EXCEL_FILENAME = "student_dropout_report.xlsx"
EXCEL_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

HEADER_COLOR = colors.Color(41 / 255, 128 / 255, 185 / 255)
STRIPE_COLOR = colors.Color(245 / 255, 245 / 255, 245 / 255)

# Risk Level cell fill and text colour
RISK_CELL_COLORS = {
    "High": (colors.Color(1, 0, 0), colors.white),
    "Medium": (colors.Color(1, 165 / 255, 0), colors.black),
    "Low": (colors.Color(0, 128 / 255, 0), colors.white),
}

COLUMN_WIDTHS = [70 * mm, 30 * mm, 25 * mm, 35 * mm, 35 * mm, 30 * mm]
RISK_COLUMN = EXPORT_COLUMNS.index("Risk Level")


def _draw_page_number(canvas, doc):
    canvas.saveState()
    canvas.setFont("Helvetica", 8)
    canvas.setFillColor(colors.grey)
    canvas.drawString(doc.leftMargin, 10 * mm, "Page {}".format(doc.page))
    canvas.restoreState()


def _table_style(rows: List[list]) -> TableStyle:
    commands = [
        ("FONTNAME", (0, 0), (-1, -1), "Helvetica"),
        ("FONTSIZE", (0, 0), (-1, -1), 9),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("GRID", (0, 0), (-1, -1), 0.25, colors.black),
        ("TOPPADDING", (0, 0), (-1, -1), 3),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 3),
        ("ALIGN", (1, 0), (-1, -1), "CENTER"),
        # Header
        ("BACKGROUND", (0, 0), (-1, 0), HEADER_COLOR),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("ALIGN", (0, 0), (-1, 0), "CENTER"),
    ]
    if rows:
        commands.append(("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, STRIPE_COLOR]))

    for i, row in enumerate(rows, start=1):
        fill, text = RISK_CELL_COLORS.get(row[RISK_COLUMN], (colors.white, colors.black))
        commands.append(("BACKGROUND", (RISK_COLUMN, i), (RISK_COLUMN, i), fill))
        commands.append(("TEXTCOLOR", (RISK_COLUMN, i), (RISK_COLUMN, i), text))

    return TableStyle(commands)


def build_table_data(rows: List[list], name_style: ParagraphStyle) -> List[list]:
    """Header plus rows, with each name wrapped in an escaped Paragraph so long names wrap in their column."""
    return [EXPORT_COLUMNS] + [[Paragraph(escape(row[0]), name_style)] + list(row[1:]) for row in rows]


def render_pdf_report(rows: List[list], summary: ReportSummary,
                      generated_at: Optional[datetime] = None) -> bytes:
    """
    Render the landscape PDF report.

    Args:
        rows: Output of report_aggregator.to_export_rows
        summary: Output of report_aggregator.summarize over the same snapshot
        generated_at: Timestamp printed under the title (defaults to now)

    Returns:
        PDF document bytes
    """
    generated_at = generated_at or datetime.now()
    buffer = BytesIO()

    doc = SimpleDocTemplate(buffer, pagesize=landscape(A4), leftMargin=14 * mm, rightMargin=14 * mm,
                            topMargin=14 * mm, bottomMargin=20 * mm, title=REPORT_TITLE)

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle("ReportTitle", parent=styles["Heading1"], fontSize=20, spaceAfter=6)
    muted_style = ParagraphStyle("Muted", parent=styles["Normal"], fontSize=12, textColor=colors.grey)
    name_style = ParagraphStyle("NameCell", parent=styles["Normal"], fontName="Helvetica", fontSize=9, leading=11)

    story = [
        Paragraph(REPORT_TITLE, title_style),
        Paragraph("Generated on: {}".format(generated_at.strftime("%Y-%m-%d")), muted_style),
        Spacer(1, 8 * mm),
    ]

    table = Table(build_table_data(rows, name_style), colWidths=COLUMN_WIDTHS, repeatRows=1, hAlign="LEFT")
    table.setStyle(_table_style(rows))
    story.append(table)

    story.append(Spacer(1, 10 * mm))
    story.append(Paragraph("Summary", styles["Heading2"]))
    story.append(Paragraph("Total Students: {}".format(summary.total), styles["Normal"]))
    story.append(Paragraph(
        "High Risk: {} &nbsp;&nbsp;&nbsp; Medium Risk: {} &nbsp;&nbsp;&nbsp; Low Risk: {}".format(
            summary.high_count, summary.medium_count, summary.low_count),
        styles["Normal"]))

    doc.build(story, onFirstPage=_draw_page_number, onLaterPages=_draw_page_number)
    return buffer.getvalue()


def render_excel_report(rows: List[list]) -> bytes:
    """
    Render the Excel workbook: one sheet, header row, one row per student.

    Args:
        rows: Output of report_aggregator.to_spreadsheet_rows

    Returns:
        .xlsx file bytes
    """
    wb = Workbook()
    ws = wb.active
    ws.title = SHEET_TITLE

    ws.append(SPREADSHEET_COLUMNS)
    header_fill = PatternFill(start_color="2980B9", end_color="2980B9", fill_type="solid")
    for cell in ws[1]:
        cell.font = Font(bold=True, color="FFFFFF")
        cell.fill = header_fill
        cell.alignment = Alignment(horizontal="center")

    for row in rows:
        ws.append(row)
        # Text cells are stored as strings, so a name like "=1+1" is never a formula
        for cell in ws[ws.max_row]:
            if isinstance(cell.value, str):
                cell.data_type = "s"

    for idx, column in enumerate(SPREADSHEET_COLUMNS, start=1):
        width = max([len(str(column))] + [len(str(row[idx - 1])) for row in rows])
        ws.column_dimensions[ws.cell(row=1, column=idx).column_letter].width = width + 2
    ws.freeze_panes = "A2"

    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()
