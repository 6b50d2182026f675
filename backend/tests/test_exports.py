"""
Tests for the spreadsheet and PDF exports.
"""

import logging
from io import BytesIO

from openpyxl import load_workbook

from exporters import pdf_report
from exporters.base import PDF_MEDIA_TYPE, XLSX_MEDIA_TYPE, report_filename
from exporters.excel_report import ITEMS_SHEET, ORDERS_SHEET, SUMMARY_SHEET, generate_excel, summary_rows
from exporters.pdf_report import PdfFonts, generate_pdf, order_table_rows, pdf_money, summary_table_rows
from conftest import REPORT_DATE
from services.report_service import build_daily_report

HELVETICA = PdfFonts("Helvetica", "Helvetica-Bold", False)
UNICODE = PdfFonts("ReportSans", "ReportSans", True)


def _summary_values(workbook):
    sheet = workbook[SUMMARY_SHEET]
    return {row[0]: row[1] for row in sheet.iter_rows(values_only=True) if row[0] is not None}


class TestExcelExport:
    """Three-sheet workbook."""

    def test_file_metadata(self, report):
        export = generate_excel(report)
        assert export.filename == "SalesReport_2026-10-19.xlsx"
        assert export.media_type == XLSX_MEDIA_TYPE
        assert export.content_disposition == 'attachment; filename="SalesReport_2026-10-19.xlsx"'

    def test_sheets(self, report):
        workbook = load_workbook(BytesIO(generate_excel(report).content))
        assert workbook.sheetnames == [SUMMARY_SHEET, ORDERS_SHEET, ITEMS_SHEET]

    def test_summary_sheet(self, report):
        values = _summary_values(load_workbook(BytesIO(generate_excel(report).content)))
        assert values["Report For"] == "Kacchi House"
        assert values["Date"] == "October 19th, 2026"
        assert values["Net Sales"] == 1000
        assert values["Gross Sales"] == 1100
        assert values["Avg Per Person"] == 200
        assert values["Total Guests"] == 5

    def test_order_types_are_always_listed(self, report):
        values = _summary_values(load_workbook(BytesIO(generate_excel(report).content)))
        assert values["Dine-In"] == 700
        assert values["Takeaway"] == 300
        assert values["Delivery"] == 0

    def test_summary_row_layout(self, report):
        rows = summary_rows(report)
        assert rows[0] == ["Report For", "Kacchi House"]
        assert rows[3] == ["SALES OVERVIEW", None]
        assert [r[0] for r in rows if r[0] and r[0].isupper()] == [
            "SALES OVERVIEW", "COLLECTIONS", "ORDER TYPES", "GUEST INFO"
        ]

    def test_detailed_orders_sheet(self, report):
        sheet = load_workbook(BytesIO(generate_excel(report).content))[ORDERS_SHEET]
        rows = list(sheet.iter_rows(values_only=True))
        assert rows[0][0] == "Invoice ID"
        assert rows[1][0] == "INV-001"
        assert rows[1][1] == "3:05 PM"
        assert rows[1][3] == "T-1"
        assert rows[1][5] == "Kacchi Biryani (x2), Borhani (x1)"
        assert rows[2][3] == "N/A"
        assert sheet["A1"].font.bold

    def test_itemized_sales_sheet(self, report):
        sheet = load_workbook(BytesIO(generate_excel(report).content))[ITEMS_SHEET]
        rows = list(sheet.iter_rows(values_only=True))
        assert len(rows) == 4
        assert rows[3][2] == "Chicken Roll"
        assert rows[3][3] == 2

    def test_empty_day_keeps_headers(self):
        report = build_daily_report({}, None, REPORT_DATE)
        workbook = load_workbook(BytesIO(generate_excel(report).content))
        rows = list(workbook[ORDERS_SHEET].iter_rows(values_only=True))
        assert rows[0][0] == "Invoice ID"
        assert len(rows) == 1


class TestPdfExport:
    """A4 PDF summary and order table."""

    def test_generates_pdf(self, report):
        export = generate_pdf(report)
        assert export.content.startswith(b"%PDF")
        assert export.filename == report_filename(REPORT_DATE, "pdf")
        assert export.media_type == PDF_MEDIA_TYPE

    def test_money_without_unicode_font(self):
        assert pdf_money(1100, HELVETICA) == "Tk 1,100.00"
        assert pdf_money(100, HELVETICA, deduction=True) == "- Tk 100.00"

    def test_missing_unicode_font_is_reported(self, monkeypatch, caplog):
        monkeypatch.setattr(pdf_report, "_fonts", None)
        monkeypatch.setattr(pdf_report, "resolve_font_path", lambda: None)

        with caplog.at_level(logging.WARNING, logger="exporters.pdf_report"):
            fonts = pdf_report.get_fonts()

        assert fonts == HELVETICA
        assert "PDF_FONT_PATH" in caplog.text

    def test_money_with_unicode_font(self):
        assert pdf_money(1100, UNICODE) == "৳1,100.00"

    def test_summary_grid_matches_screen(self, report):
        rows = summary_table_rows(report, HELVETICA)
        assert len(rows) == 6
        assert all(len(row) == 4 for row in rows)
        assert rows[0] == ["Net Sales", "Tk 1,000.00", "Cash Collection", "Tk 600.00"]
        assert rows[1][:2] == ["Gross Sales", "Tk 1,100.00"]
        assert rows[2][1] == "- Tk 100.00"
        assert rows[5][2:] == ["Avg Per Person", "Tk 200.00"]

    def test_order_table(self, report):
        rows = order_table_rows(report, HELVETICA)
        assert rows[0] == ["#", "Time", "Invoice ID", "Type", "Items", "Payment", "Total"]
        assert rows[1] == ["1", "3:05 PM", "INV-001", "dine-in", "3", "Cash", "Tk 700.00"]
        assert len(rows) == 3

    def test_many_orders_span_pages(self, day_response, company_response):
        order = day_response["orders"][1]
        day_response["orders"] = [dict(order, invoiceSerial=f"INV-{i:03d}") for i in range(120)]
        report = build_daily_report(day_response, company_response[0], REPORT_DATE)
        assert generate_pdf(report).content.startswith(b"%PDF")
