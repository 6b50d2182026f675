"""
On-screen summary grid for the daily report.

Rows carry the raw value next to the display string so the UI can sort or
chart without re-parsing. The print document renders these same sections.
"""
from decimal import Decimal
from typing import Callable, Dict, List

from schemas.report import DailyReport, GridRow, GridSection, SummaryGrid
from utils.date_utils import format_report_date
from utils.formatting import (
    delivery_provider_label, format_deduction, format_money, order_type_label
)


def _money_row(key: str, label: str, value: Decimal, emphasis: bool = False) -> GridRow:
    return GridRow(key=key, label=label, value=value, display=format_money(value), emphasis=emphasis)


def _deduction_row(key: str, label: str, value: Decimal) -> GridRow:
    return GridRow(key=key, label=label, value=value, display=format_deduction(value))


def _breakdown_rows(mapping: Dict[str, Decimal], label: Callable[[str], str]) -> List[GridRow]:
    return [_money_row(key, label(key), value) for key, value in mapping.items() if value != 0]


def sales_overview(report: DailyReport) -> GridSection:
    summary, totals = report.summary, report.totals
    return GridSection(title="Sales Overview", rows=[
        _money_row("grossSales", "Gross Sales", totals.gross_sales),
        _deduction_row("totalDiscount", "Total Discount", summary.total_discount),
        _deduction_row("totalTableDiscount", "Table Discount", summary.total_table_discount),
        _deduction_row("totalComplimentaryAmount", "Complimentary", summary.total_complimentary_amount),
        _money_row("netSales", "Net Sales", totals.net_sales, emphasis=True),
        _money_row("totalVat", "Total VAT", summary.total_vat),
        _money_row("totalSd", "Total SD", summary.total_sd),
    ])


def collections(report: DailyReport) -> GridSection:
    summary = report.summary
    return GridSection(title="Collections", rows=[
        _money_row("cashPayments", "Cash", summary.cash_payments),
        _money_row("cardPayments", "Card", summary.card_payments),
        _money_row("mobilePayments", "Mobile Banking", summary.mobile_payments),
        _money_row("bankPayments", "Bank", summary.bank_payments),
    ])


def guest_info(report: DailyReport) -> GridSection:
    guests = report.summary.total_guest_count
    return GridSection(title="Guest Info", rows=[
        GridRow(key="totalGuestCount", label="Total Guests", value=Decimal(guests), display=str(guests)),
        _money_row("avgPerPerson", "Avg Per Person", report.totals.avg_per_person),
    ])


def render_sections(report: DailyReport) -> List[GridSection]:
    return [
        sales_overview(report),
        collections(report),
        GridSection(title="Order Types", rows=_breakdown_rows(report.order_types, order_type_label)),
        GridSection(
            title="Delivery Providers",
            rows=_breakdown_rows(report.delivery_providers, delivery_provider_label)
        ),
        guest_info(report),
    ]


def render_summary_grid(report: DailyReport) -> SummaryGrid:
    return SummaryGrid(
        report_date=report.report_date,
        date_label=format_report_date(report.report_date),
        company_name=report.company.name,
        sections=render_sections(report),
    )
