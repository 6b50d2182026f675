"""
Daily order-history report: turns the remote API's day summary and order list
into the DailyReport view model every renderer consumes.

Gross sales and average spend per guest are computed only in derive_totals.
"""
from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, List, Mapping, Optional

from clients.restaurant_api import RestaurantApiClient
from config.logging import get_logger, log_performance
from core.exceptions import NotFoundError, ReportDataError
from core.security import SessionContext
from schemas.report import (
    CompanyInfo, DailyReport, DerivedTotals, LineItem, Order, OrderSummary,
    PaymentMethodBreakdown
)
from utils.date_utils import parse_timestamp

logger = get_logger(__name__)

ZERO = Decimal("0")

# Remote field name -> OrderSummary attribute
SUMMARY_MONEY_FIELDS = {
    "totalAmount": "total_amount",
    "totalDiscount": "total_discount",
    "totalTableDiscount": "total_table_discount",
    "totalComplimentaryAmount": "total_complimentary_amount",
    "totalVat": "total_vat",
    "totalSd": "total_sd",
    "cashPayments": "cash_payments",
    "cardPayments": "card_payments",
    "mobilePayments": "mobile_payments",
    "bankPayments": "bank_payments",
}

SUMMARY_COUNT_FIELDS = {
    "totalGuestCount": "total_guest_count",
    "totalOrders": "total_orders",
    "totalQty": "total_qty",
}

# Payment method as recorded on the order -> (channel, sub-channel)
PAYMENT_METHOD_CHANNELS = {
    "Cash": ("cash", None),
    "Visa Card": ("card", "visa"),
    "Master Card": ("card", "mastercard"),
    "Amex Card": ("card", "amex"),
    "Bkash": ("mobile", "bkash"),
    "Nagad": ("mobile", "nagad"),
    "Rocket": ("mobile", "rocket"),
    "Bank": ("bank", None),
}


def to_decimal(field: str, value: Any) -> Decimal:
    """Missing values are zero; anything present must be numeric."""
    if value is None or value == "":
        return ZERO
    if isinstance(value, bool):
        raise ReportDataError(field, value)
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ReportDataError(field, value)
    if not result.is_finite():
        raise ReportDataError(field, value)
    return result


def to_count(field: str, value: Any) -> int:
    result = to_decimal(field, value)
    if result != result.to_integral_value():
        raise ReportDataError(field, value, "Count fields must be whole numbers")
    return int(result)


def _decimal_map(field: str, mapping: Any) -> Dict[str, Decimal]:
    if not mapping:
        return {}
    if not isinstance(mapping, Mapping):
        raise ReportDataError(field, mapping)
    return {str(key): to_decimal(f"{field}.{key}", value) for key, value in mapping.items()}


def normalize_summary(raw: Optional[Mapping[str, Any]]) -> OrderSummary:
    """Build an OrderSummary; missing numbers default to 0, missing maps to empty."""
    raw = raw or {}
    values: Dict[str, Any] = {}
    for remote, attr in SUMMARY_MONEY_FIELDS.items():
        values[attr] = to_decimal(remote, raw.get(remote))
    for remote, attr in SUMMARY_COUNT_FIELDS.items():
        values[attr] = to_count(remote, raw.get(remote))
    values["sales_by_order_type"] = _decimal_map("salesByOrderType", raw.get("salesByOrderType"))
    values["sales_by_delivery_provider"] = _decimal_map(
        "salesByDeliveryProvider", raw.get("salesByDeliveryProvider")
    )
    return OrderSummary(**values)


def derive_totals(summary: OrderSummary) -> DerivedTotals:
    net_sales = summary.total_amount
    gross_sales = net_sales + summary.total_discount
    if summary.total_guest_count > 0:
        avg_per_person = (net_sales / Decimal(summary.total_guest_count)).quantize(
            Decimal("0.01"), rounding=ROUND_HALF_UP
        )
    else:
        avg_per_person = ZERO
    return DerivedTotals(net_sales=net_sales, gross_sales=gross_sales, avg_per_person=avg_per_person)


def filter_breakdown(mapping: Mapping[str, Decimal]) -> Dict[str, Decimal]:
    """Drop zero-valued entries, keeping insertion order."""
    return {key: value for key, value in mapping.items() if value != 0}


def _text(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def _rows(field: str, value: Any) -> List[Mapping[str, Any]]:
    """A list of objects; missing means empty."""
    if value is None:
        return []
    if not isinstance(value, list):
        raise ReportDataError(field, value, "Expected a list of records")
    for index, row in enumerate(value):
        if not isinstance(row, Mapping):
            raise ReportDataError(f"{field}.{index}", row, "Expected a record")
    return value


def normalize_order(raw: Mapping[str, Any]) -> Order:
    if not isinstance(raw, Mapping):
        raise ReportDataError("orders", raw, "Expected a record")
    invoice = str(raw.get("invoiceSerial") or raw.get("_id") or "")
    products = [
        LineItem(
            product_name=str(item.get("productName") or ""),
            qty=to_count(f"{invoice}.qty", item.get("qty")),
            rate=to_decimal(f"{invoice}.rate", item.get("rate")),
            subtotal=to_decimal(f"{invoice}.subtotal", item.get("subtotal")),
            is_complimentary=bool(item.get("isComplimentary", False)),
        )
        for item in _rows(f"{invoice}.products", raw.get("products"))
    ]
    total_qty = raw.get("totalQty")
    return Order(
        invoice_serial=invoice,
        date_time=parse_timestamp(raw.get("dateTime")),
        order_type=str(raw.get("orderType") or ""),
        table_name=_text(raw.get("tableName")),
        delivery_provider=_text(raw.get("deliveryProvider")),
        customer_name=_text(raw.get("customerName")),
        products=products,
        discount=to_decimal(f"{invoice}.discount", raw.get("discount")),
        vat=to_decimal(f"{invoice}.vat", raw.get("vat")),
        sd=to_decimal(f"{invoice}.sd", raw.get("sd")),
        total_amount=to_decimal(f"{invoice}.totalAmount", raw.get("totalAmount")),
        total_sale=to_decimal(f"{invoice}.totalSale", raw.get("totalSale")),
        total_qty=to_count(f"{invoice}.totalQty", total_qty) if total_qty is not None
        else sum(item.qty for item in products),
        payment_method=_text(raw.get("paymentMethod")),
        login_user_name=_text(raw.get("loginUserName")),
        order_status=_text(raw.get("orderStatus")),
        counter=_text(raw.get("counter")),
    )


def payment_breakdown(orders: List[Order]) -> PaymentMethodBreakdown:
    totals: Dict[str, Decimal] = {}
    for order in orders:
        channel = PAYMENT_METHOD_CHANNELS.get(order.payment_method or "")
        if channel is None:
            continue
        main, sub = channel
        totals[main] = totals.get(main, ZERO) + order.total_amount
        if sub:
            totals[sub] = totals.get(sub, ZERO) + order.total_amount
    return PaymentMethodBreakdown(**totals)


def complimentary_item_count(orders: List[Order]) -> int:
    return sum(item.qty for order in orders for item in order.products if item.is_complimentary)


def normalize_company(raw: Optional[Mapping[str, Any]]) -> CompanyInfo:
    raw = raw or {}
    return CompanyInfo(
        name=str(raw.get("name") or ""),
        branch=str(raw.get("branch") or ""),
        address=str(raw.get("address") or ""),
        phone=str(raw.get("phone") or ""),
        email=str(raw.get("email") or ""),
        bin_number=_text(raw.get("binNumber")),
        logo=_text(raw.get("logo")),
    )


def build_daily_report(
    raw_response: Optional[Mapping[str, Any]],
    company: Optional[Mapping[str, Any]],
    report_date: date
) -> DailyReport:
    """Pure transform of the remote day response into the report view model.

    The day summary may arrive nested under "summary" or flat beside "orders".
    """
    raw_response = raw_response or {}
    raw_summary = raw_response.get("summary")
    if not isinstance(raw_summary, Mapping):
        raw_summary = raw_response

    summary = normalize_summary(raw_summary)
    orders = [normalize_order(order) for order in _rows("orders", raw_response.get("orders"))]
    totals = derive_totals(summary)

    return DailyReport(
        report_date=report_date,
        company=normalize_company(company),
        summary=summary,
        totals=totals,
        order_types=filter_breakdown(summary.sales_by_order_type),
        delivery_providers=filter_breakdown(summary.sales_by_delivery_provider),
        orders=orders,
        payment_breakdown=payment_breakdown(orders),
        complimentary_item_count=complimentary_item_count(orders),
        collections_mismatch=summary.collections_total - totals.net_sales,
    )


class ReportService:
    """Fetches a branch's day from the remote API and builds the report."""

    def __init__(self, api: RestaurantApiClient):
        self.api = api

    def get_company(self, ctx: SessionContext) -> Dict[str, Any]:
        """The branch's company profile; the first record wins."""
        companies = self.api.get(f"/company/branch/{ctx.branch}/", ctx.token)
        if isinstance(companies, list):
            return companies[0] if companies else {}
        if isinstance(companies, dict):
            return companies
        return {}

    @log_performance("services.report_service")
    def get_daily_report(self, ctx: SessionContext, report_date: date) -> DailyReport:
        raw = self.api.get(f"/invoice/{ctx.branch}/date/{report_date.isoformat()}", ctx.token)
        company = self.get_company(ctx)
        report = build_daily_report(raw if isinstance(raw, dict) else {}, company, report_date)

        logger.info(
            f"Built daily report for branch {ctx.branch} on {report_date.isoformat()}: "
            f"{len(report.orders)} orders"
        )
        if report.collections_mismatch != 0:
            logger.warning(
                f"Collections differ from net sales by {report.collections_mismatch} "
                f"for branch {ctx.branch} on {report_date.isoformat()}"
            )
        return report


def find_order(report: DailyReport, invoice_serial: str) -> Order:
    """Find one order of the report's day by invoice serial."""
    for order in report.orders:
        if order.invoice_serial == invoice_serial:
            return order
    raise NotFoundError("Order", invoice_serial)
