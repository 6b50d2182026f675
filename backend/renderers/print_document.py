"""
Receipt-printer documents: the 72mm daily sales summary and the 80mm
single-invoice receipt, rendered to self-contained HTML with Jinja2.
"""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Dict, Optional

from jinja2 import Environment

from config.settings import get_settings
from config.logging import get_logger
from renderers.summary_grid import render_sections
from schemas.report import CompanyInfo, DailyReport, Order
from utils.date_utils import format_receipt_datetime, format_report_date, now_local
from utils.formatting import format_amount, format_deduction, format_money

logger = get_logger(__name__)
settings = get_settings()


@dataclass(frozen=True)
class PrintDocument:
    """A rendered document ready to hand to the print service."""
    name: str
    title: str
    html: str
    width_mm: int


class PrintRenderer:
    """Renders print documents from their templates."""

    def __init__(self):
        self.env = Environment(autoescape=True, trim_blocks=True, lstrip_blocks=True)
        self.env.filters["money"] = format_money
        self.env.filters["deduction"] = format_deduction
        self.env.filters["amount"] = format_amount
        self.templates: Dict[str, str] = {
            "daily_summary": self._get_daily_summary_template(),
            "order_receipt": self._get_order_receipt_template(),
        }

    def render(self, template_name: str, data: Dict) -> str:
        if template_name not in self.templates:
            raise ValueError(f"Template '{template_name}' not found")
        return self.env.from_string(self.templates[template_name]).render(**data)

    def render_daily_summary(self, report: DailyReport, printed_at: Optional[datetime] = None) -> PrintDocument:
        printed_at = printed_at or now_local()
        html = self.render("daily_summary", {
            "width_mm": settings.RECEIPT_WIDTH_MM,
            "company": report.company,
            "date_label": format_report_date(report.report_date),
            "sections": render_sections(report),
            "printed_at": format_receipt_datetime(printed_at),
        })
        logger.debug(f"Rendered daily summary for {report.report_date.isoformat()}")
        return PrintDocument(
            name=f"DailySummary_{report.report_date.isoformat()}",
            title="Daily Summary",
            html=html,
            width_mm=settings.RECEIPT_WIDTH_MM,
        )

    def render_order_receipt(self, order: Order, company: CompanyInfo) -> PrintDocument:
        items = [
            {
                "name": item.product_name,
                "qty": item.qty,
                "free": item.is_complimentary,
                "list_price": item.rate * item.qty,
                "subtotal": Decimal("0") if item.is_complimentary else item.subtotal,
            }
            for item in order.products
        ]
        html = self.render("order_receipt", {
            "width_mm": settings.INVOICE_RECEIPT_WIDTH_MM,
            "company": company,
            "order": order,
            "items": items,
            "dine_in": order.order_type == "dine-in",
            "date_label": format_receipt_datetime(order.date_time),
        })
        return PrintDocument(
            name=f"Receipt_{order.invoice_serial}",
            title=f"Invoice {order.invoice_serial}",
            html=html,
            width_mm=settings.INVOICE_RECEIPT_WIDTH_MM,
        )

    # HTML Template Methods
    def _get_daily_summary_template(self) -> str:
        return """<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>Daily Summary</title>
    <style>
        @page { margin: 0; size: {{ width_mm }}mm auto; }
        body { margin: 0; font-family: 'Courier New', Courier, monospace; color: #000; }
        .container { width: {{ width_mm }}mm; margin: auto; padding: 10px; font-size: 12px; background: #fff; }
        .header { text-align: center; margin-bottom: 10px; }
        .company-name { font-size: 18px; font-weight: bold; margin: 0 0 2px 0; }
        .info { font-size: 12px; margin: 2px 0; }
        .dashed { margin: 8px 0; border-top: 1px dashed #000; }
        .section-title { font-size: 12px; font-weight: bold; text-transform: uppercase; margin: 12px 0 6px 0;
                         border-bottom: 1px dashed #000; padding-bottom: 2px; }
        .row { display: flex; justify-content: space-between; padding: 2px 0; }
        .footer { text-align: center; margin-top: 10px; font-size: 10px; }
    </style>
</head>
<body>
<div class="container">
    <header class="header">
        <h2 class="company-name">{{ company.name }}</h2>
        <p class="info">{{ company.address }}</p>
        <p class="info">Daily Sales Summary</p>
        <p class="info">{{ date_label }}</p>
    </header>
    <div class="dashed"></div>
    {% for section in sections %}
    <section>
        <h3 class="section-title">{{ section.title }}</h3>
        {% for row in section.rows %}
        {% if row.emphasis %}
        <div class="row"><strong>{{ row.label }}:</strong><strong>{{ row.display }}</strong></div>
        {% else %}
        <div class="row"><span>{{ row.label }}:</span><span>{{ row.display }}</span></div>
        {% endif %}
        {% endfor %}
    </section>
    {% endfor %}
    <div class="dashed"></div>
    <footer class="footer">
        <p>Printed: {{ printed_at }}</p>
    </footer>
</div>
</body>
</html>
"""

    def _get_order_receipt_template(self) -> str:
        return """<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>Invoice {{ order.invoice_serial }}</title>
    <style>
        @page { margin: 0; size: {{ width_mm }}mm auto; }
        body { margin: 0; font-family: monospace; color: #000; }
        .container { width: {{ width_mm }}mm; padding: 8px; font-size: 12px; background: #fff; }
        .center { text-align: center; }
        .right { text-align: right; }
        .company-name { font-size: 20px; font-weight: bold; margin: 0; }
        .small { font-size: 11px; margin: 2px 0; }
        .free { font-size: 10px; font-weight: bold; margin-left: 4px; }
        .struck { text-decoration: line-through; margin-right: 4px; }
        hr { border: 0; border-top: 1px dashed #000; margin: 8px 0; }
        table { width: 100%; font-size: 11px; border-collapse: collapse; }
        th.item, td.item { text-align: left; }
        th.qty, td.qty { text-align: center; }
        th.subtotal, td.subtotal { text-align: right; }
        .total { font-weight: bold; font-size: 13px; }
        .order-type { font-weight: bold; text-transform: capitalize; }
    </style>
</head>
<body>
<div class="container">
    <div class="center">
        <h2 class="company-name">{{ company.name }}</h2>
        <p class="small">{{ company.address }}</p>
        <p class="small">Contact: {{ company.phone }}</p>
        {% if company.bin_number %}
        <p class="small">BIN: {{ company.bin_number }}</p>
        {% endif %}
    </div>
    <hr>
    <div class="center small">
        {% if dine_in %}
        <p><strong>Table: {{ order.table_name or '' }}</strong></p>
        {% endif %}
        <p>Invoice: {{ order.invoice_serial }}</p>
        <p>Date: {{ date_label }}</p>
        <p>Served By: {{ order.login_user_name or '' }}</p>
        <p><strong>Paid by:</strong> {{ order.payment_method or '' }}</p>
    </div>
    <hr>
    <table>
        <thead>
            <tr><th class="item">Item</th><th class="qty">Qty</th><th class="subtotal">Subtotal</th></tr>
        </thead>
        <tbody>
            {% for item in items %}
            <tr>
                <td class="item">{{ item.name }}{% if item.free %}<span class="free">(Free)</span>{% endif %}</td>
                <td class="qty">{{ item.qty }}</td>
                <td class="subtotal">
                    {% if item.free %}<span class="struck">{{ item.list_price | money }}</span>{% endif %}{{ item.subtotal | money }}
                </td>
            </tr>
            {% endfor %}
        </tbody>
    </table>
    <hr>
    <div class="right small">
        <p>Subtotal: {{ order.total_sale | money }}</p>
        {% if order.vat > 0 %}
        <p>VAT: {{ order.vat | money }}</p>
        {% endif %}
        {% if order.discount > 0 %}
        <p>Discount: -{{ order.discount | money }}</p>
        {% endif %}
        <p class="total">Total: {{ order.total_amount | money }}</p>
    </div>
    <hr>
    <div class="center">
        <p class="order-type">{{ order.order_type }}</p>
        <p class="small">Thank you!</p>
    </div>
</div>
</body>
</html>
"""


_renderer: Optional[PrintRenderer] = None


def get_renderer() -> PrintRenderer:
    global _renderer
    if _renderer is None:
        _renderer = PrintRenderer()
    return _renderer


def render_daily_summary(report: DailyReport, printed_at: Optional[datetime] = None) -> PrintDocument:
    return get_renderer().render_daily_summary(report, printed_at)


def render_order_receipt(order: Order, company: CompanyInfo) -> PrintDocument:
    return get_renderer().render_order_receipt(order, company)
