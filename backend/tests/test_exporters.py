"""Unit tests for the PDF and Excel report renderers."""

import re
from datetime import datetime
from io import BytesIO

from openpyxl import load_workbook

from reportlab.lib.styles import ParagraphStyle
from reportlab.platypus import Paragraph

from dropout_tracker.services.exporters import (
    SHEET_TITLE, build_table_data, render_excel_report, render_pdf_report
)
from dropout_tracker.services.report_aggregator import (
    SPREADSHEET_COLUMNS,
    ReportSummary,
    summarize,
    to_export_rows,
    to_spreadsheet_rows,
)


def test_pdf_report_is_a_pdf(cohort):
    pdf = render_pdf_report(to_export_rows(cohort), summarize(cohort),
                            generated_at=datetime(2026, 10, 19))
    assert pdf.startswith(b"%PDF")
    assert len(pdf) > 1000


def test_pdf_report_with_no_students():
    pdf = render_pdf_report([], ReportSummary(0, 0, 0, 0))
    assert pdf.startswith(b"%PDF")


def test_pdf_report_spans_pages_for_large_cohorts(cohort):
    rows = to_export_rows(cohort) * 40
    pdf = render_pdf_report(rows, summarize(cohort * 40))
    page_counts = [int(n) for n in re.findall(rb"/Count (\d+)", pdf)]
    assert max(page_counts) >= 2


def test_excel_report_contents(cohort):
    xlsx = render_excel_report(to_spreadsheet_rows(cohort))
    wb = load_workbook(BytesIO(xlsx))
    ws = wb[SHEET_TITLE]

    values = list(ws.iter_rows(values_only=True))
    assert list(values[0]) == SPREADSHEET_COLUMNS
    assert list(values[1]) == ["Ananya Reddy", 10, "2.00", 5, 87, "High", "2026-01-01"]
    assert len(values) == len(cohort) + 1
    assert [row[4] for row in values[1:]] == [87, 76, 62, 50, 26, 6]


def test_excel_report_with_no_students():
    wb = load_workbook(BytesIO(render_excel_report([])))
    values = list(wb[SHEET_TITLE].iter_rows(values_only=True))
    assert values == [tuple(SPREADSHEET_COLUMNS)]


def test_pdf_name_cells_wrap_and_escape_markup():
    rows = [["Ananya <Reddy> & Co", "10%", "2.00", "5%", "87%", "High"]]
    data = build_table_data(rows, ParagraphStyle("NameCell"))

    assert data[0][0] == "Name"
    name_cell = data[1][0]
    assert isinstance(name_cell, Paragraph)
    assert name_cell.getPlainText() == "Ananya <Reddy> & Co"
    assert data[1][1:] == ["10%", "2.00", "5%", "87%", "High"]


def test_pdf_report_renders_long_and_markup_names():
    rows = [
        ["Venkata Subramanya Lakshmi Narasimha Chakravarthy Ramanathan Iyer", "10%", "2.00", "5%", "87%", "High"],
        ["Rohan <b>Iyer</b> & Sons", "40%", "4.00", "30%", "62%", "Medium"],
    ]
    pdf = render_pdf_report(rows, ReportSummary(2, 1, 1, 0))
    assert pdf.startswith(b"%PDF")


def test_excel_report_keeps_formula_like_names_as_text():
    xlsx = render_excel_report([["=1+1", 50, "5.00", 50, 50, "Medium", "2026-01-01"]])
    ws = load_workbook(BytesIO(xlsx))[SHEET_TITLE]

    assert ws["A2"].data_type == "s"
    assert ws["A2"].value == "=1+1"
    assert ws["E2"].value == 50
