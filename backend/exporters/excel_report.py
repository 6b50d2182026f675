"""
Spreadsheet export of the daily report: Summary, Detailed Orders and
Itemized Sales sheets.
"""
from io import BytesIO
from typing import Any, Dict, List

import pandas as pd
from openpyxl.styles import Alignment, Font, PatternFill

from config.logging import get_logger
from exporters.base import ExportFile, XLSX_MEDIA_TYPE, report_filename
from schemas.report import DailyReport
from utils.date_utils import format_report_date, format_time

logger = get_logger(__name__)

SUMMARY_SHEET = "Summary"
ORDERS_SHEET = "Detailed Orders"
ITEMS_SHEET = "Itemized Sales"

SECTION_TITLES = {"SALES OVERVIEW", "COLLECTIONS", "ORDER TYPES", "GUEST INFO"}

# The summary sheet always lists these, zero or not
SUMMARY_ORDER_TYPES = (("dine-in", "Dine-In"), ("takeaway", "Takeaway"), ("delivery", "Delivery"))

ORDER_COLUMNS = [
    "Invoice ID", "Time", "Order Type", "Table/Provider", "Customer Name", "Products",
    "Discount", "VAT", "SD", "Total Amount", "Payment Method",
]
ITEM_COLUMNS = ["Invoice ID", "Time", "Product Name", "Quantity", "Rate", "Subtotal"]


def summary_rows(report: DailyReport) -> List[List[Any]]:
    summary, totals = report.summary, report.totals
    by_type = summary.sales_by_order_type
    rows: List[List[Any]] = [
        ["Report For", report.company.name],
        ["Date", format_report_date(report.report_date)],
        [None, None],
        ["SALES OVERVIEW", None],
        ["Net Sales", float(totals.net_sales)],
        ["Gross Sales", float(totals.gross_sales)],
        ["Total Discount", float(summary.total_discount)],
        ["Table Discount", float(summary.total_table_discount)],
        ["Complimentary", float(summary.total_complimentary_amount)],
        ["Total VAT", float(summary.total_vat)],
        ["Total SD", float(summary.total_sd)],
        [None, None],
        ["COLLECTIONS", None],
        ["Cash", float(summary.cash_payments)],
        ["Card", float(summary.card_payments)],
        ["Mobile Banking", float(summary.mobile_payments)],
        ["Bank", float(summary.bank_payments)],
        [None, None],
        ["ORDER TYPES", None],
    ]
    rows.extend([label, float(by_type.get(key, 0))] for key, label in SUMMARY_ORDER_TYPES)
    rows.extend([
        [None, None],
        ["GUEST INFO", None],
        ["Total Guests", summary.total_guest_count],
        ["Avg Per Person", float(totals.avg_per_person)],
    ])
    return rows


def order_rows(report: DailyReport) -> List[Dict[str, Any]]:
    return [
        {
            "Invoice ID": order.invoice_serial,
            "Time": format_time(order.date_time),
            "Order Type": order.order_type,
            "Table/Provider": order.table_or_provider,
            "Customer Name": order.customer_name or "",
            "Products": ", ".join(f"{item.product_name} (x{item.qty})" for item in order.products),
            "Discount": float(order.discount),
            "VAT": float(order.vat),
            "SD": float(order.sd),
            "Total Amount": float(order.total_amount),
            "Payment Method": order.payment_method or "",
        }
        for order in report.orders
    ]


def item_rows(report: DailyReport) -> List[Dict[str, Any]]:
    return [
        {
            "Invoice ID": order.invoice_serial,
            "Time": format_time(order.date_time),
            "Product Name": item.product_name,
            "Quantity": item.qty,
            "Rate": float(item.rate),
            "Subtotal": float(item.subtotal),
        }
        for order in report.orders
        for item in order.products
    ]


def _style_header(worksheet) -> None:
    header_fill = PatternFill(start_color='4472C4', end_color='4472C4', fill_type='solid')
    header_font = Font(color='FFFFFF', bold=True)
    for cell in worksheet[1]:
        cell.fill = header_fill
        cell.font = header_font
        cell.alignment = Alignment(horizontal='center')


def _autofit(worksheet, minimum: int = 10) -> None:
    for column in worksheet.columns:
        column_letter = column[0].column_letter
        max_length = max((len(str(cell.value)) for cell in column if cell.value is not None), default=0)
        worksheet.column_dimensions[column_letter].width = min(max(max_length + 2, minimum), 50)


def generate_excel(report: DailyReport) -> ExportFile:
    """Build the workbook in memory."""
    buffer = BytesIO()
    with pd.ExcelWriter(buffer, engine='openpyxl') as writer:
        pd.DataFrame(summary_rows(report)).to_excel(
            writer, sheet_name=SUMMARY_SHEET, index=False, header=False
        )
        summary_sheet = writer.sheets[SUMMARY_SHEET]
        for row in summary_sheet.iter_rows(min_col=1, max_col=1):
            if row[0].value in SECTION_TITLES:
                row[0].font = Font(bold=True)
        _autofit(summary_sheet, minimum=20)

        pd.DataFrame(order_rows(report), columns=ORDER_COLUMNS).to_excel(
            writer, sheet_name=ORDERS_SHEET, index=False
        )
        pd.DataFrame(item_rows(report), columns=ITEM_COLUMNS).to_excel(
            writer, sheet_name=ITEMS_SHEET, index=False
        )
        for sheet_name in (ORDERS_SHEET, ITEMS_SHEET):
            _style_header(writer.sheets[sheet_name])
            _autofit(writer.sheets[sheet_name])

    filename = report_filename(report.report_date, "xlsx")
    logger.info(f"Excel report created: {filename} ({len(report.orders)} orders)")
    return ExportFile(filename=filename, content=buffer.getvalue(), media_type=XLSX_MEDIA_TYPE)
