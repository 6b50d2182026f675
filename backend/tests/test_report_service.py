"""
Tests for the daily report view model.
"""

from datetime import date
from decimal import Decimal

import pytest

from conftest import BRANCH, REPORT_DATE, make_context
from core.exceptions import NotFoundError, ReportDataError
from services.report_service import (
    ReportService, build_daily_report, derive_totals, find_order, normalize_order,
    normalize_summary, to_decimal
)


class TestDerivedTotals:
    """Gross sales and average spend are derived from the server summary."""

    def test_gross_and_average(self):
        summary = normalize_summary({"totalAmount": 1000, "totalDiscount": 100, "totalGuestCount": 5})
        totals = derive_totals(summary)
        assert totals.net_sales == Decimal("1000")
        assert totals.gross_sales == Decimal("1100")
        assert totals.avg_per_person == Decimal("200.00")

    def test_zero_guests_gives_zero_average(self):
        summary = normalize_summary({"totalAmount": 500, "totalGuestCount": 0})
        assert derive_totals(summary).avg_per_person == Decimal("0")

    def test_average_rounds_half_up(self):
        summary = normalize_summary({"totalAmount": "100.05", "totalGuestCount": 2})
        assert derive_totals(summary).avg_per_person == Decimal("50.03")

    def test_empty_summary_is_all_zero(self):
        summary = normalize_summary({})
        assert summary.total_amount == Decimal("0")
        assert summary.total_guest_count == 0
        assert summary.sales_by_order_type == {}
        totals = derive_totals(summary)
        assert totals.gross_sales == Decimal("0")


class TestNumericParsing:
    """Monetary fields must be numeric when present."""

    @pytest.mark.parametrize("value,expected", [
        (None, Decimal("0")),
        ("", Decimal("0")),
        (12, Decimal("12")),
        ("12.50", Decimal("12.50")),
        (0.1, Decimal("0.1")),
    ])
    def test_accepted_values(self, value, expected):
        assert to_decimal("totalAmount", value) == expected

    @pytest.mark.parametrize("value", ["abc", "NaN", "Infinity", True, [1]])
    def test_rejected_values(self, value):
        with pytest.raises(ReportDataError) as exc_info:
            to_decimal("totalAmount", value)
        assert exc_info.value.status_code == 422
        assert exc_info.value.field == "totalAmount"

    def test_malformed_summary_field_is_rejected(self):
        with pytest.raises(ReportDataError):
            normalize_summary({"totalVat": "twelve"})

    def test_malformed_breakdown_is_rejected(self):
        with pytest.raises(ReportDataError):
            normalize_summary({"salesByOrderType": ["dine-in"]})

    @pytest.mark.parametrize("value", ["2.9", 0.5, Decimal("1.01")])
    def test_fractional_counts_are_rejected(self, value):
        with pytest.raises(ReportDataError) as exc_info:
            normalize_summary({"totalGuestCount": value})
        assert exc_info.value.field == "totalGuestCount"

    def test_whole_number_counts_are_accepted(self):
        assert normalize_summary({"totalGuestCount": "3.0"}).total_guest_count == 3


class TestBuildDailyReport:
    """The whole view model from one remote day response."""

    def test_summary_is_consumed_verbatim(self, report):
        assert report.summary.total_amount == Decimal("1000")
        assert report.summary.total_table_discount == Decimal("20")
        assert report.totals.gross_sales == Decimal("1100")
        assert report.totals.avg_per_person == Decimal("200.00")
        assert report.company.name == "Kacchi House"
        assert report.company.bin_number == "BIN-123"

    def test_flat_summary_is_accepted(self, day_response, company_response):
        flat = dict(day_response["summary"], orders=day_response["orders"])
        report = build_daily_report(flat, company_response[0], REPORT_DATE)
        assert report.totals.gross_sales == Decimal("1100")
        assert len(report.orders) == 2

    def test_zero_breakdown_entries_are_dropped(self, report):
        assert report.order_types == {"dine-in": Decimal("700"), "takeaway": Decimal("300")}
        assert report.delivery_providers == {}
        # The unfiltered breakdown stays on the summary
        assert report.summary.sales_by_order_type["delivery"] == Decimal("0")

    def test_payment_breakdown_from_orders(self, report):
        breakdown = report.payment_breakdown
        assert breakdown.cash == Decimal("700")
        assert breakdown.card == Decimal("300")
        assert breakdown.visa == Decimal("300")
        assert breakdown.mobile == Decimal("0")

    def test_complimentary_items_are_counted(self, report):
        assert report.complimentary_item_count == 1

    def test_collections_match_net_sales(self, report):
        assert report.collections_mismatch == Decimal("0")

    def test_collections_mismatch_is_reported(self, day_response, company_response):
        day_response["summary"]["cashPayments"] = 500
        report = build_daily_report(day_response, company_response[0], REPORT_DATE)
        assert report.collections_mismatch == Decimal("-100")

    def test_empty_day(self):
        report = build_daily_report({}, None, date(2026, 1, 1))
        assert report.orders == []
        assert report.totals.net_sales == Decimal("0")
        assert report.company.name == ""

    @pytest.mark.parametrize("orders,field", [
        ([None], "orders.0"),
        ("oops", "orders"),
        ({"invoiceSerial": "INV-1"}, "orders"),
    ])
    def test_malformed_order_list_is_rejected(self, orders, field):
        with pytest.raises(ReportDataError) as exc_info:
            build_daily_report({"orders": orders}, None, REPORT_DATE)
        assert exc_info.value.status_code == 422
        assert exc_info.value.field == field

    def test_malformed_product_row_is_rejected(self):
        with pytest.raises(ReportDataError) as exc_info:
            normalize_order({"invoiceSerial": "INV-9", "products": [None]})
        assert exc_info.value.field == "INV-9.products.0"

    def test_null_order_is_rejected(self):
        with pytest.raises(ReportDataError):
            normalize_order(None)


class TestNormalizeOrder:
    """Single order normalization."""

    def test_timestamps_are_shown_in_business_time(self, report):
        order = report.orders[0]
        assert order.date_time.hour == 15
        assert order.date_time.minute == 5

    def test_naive_timestamp_is_business_local(self):
        order = normalize_order({"invoiceSerial": "INV-9", "dateTime": "2026-10-19T10:15:00"})
        assert order.date_time.hour == 10
        assert order.date_time.utcoffset().total_seconds() == 6 * 3600

    def test_total_qty_falls_back_to_item_sum(self, report):
        assert report.orders[0].total_qty == 3

    def test_table_or_provider(self):
        assert normalize_order({"invoiceSerial": "A", "tableName": "T-4"}).table_or_provider == "T-4"
        assert normalize_order(
            {"invoiceSerial": "B", "deliveryProvider": "pathao"}
        ).table_or_provider == "pathao"
        assert normalize_order({"invoiceSerial": "C"}).table_or_provider == "N/A"

    def test_unparseable_timestamp_is_empty(self):
        assert normalize_order({"invoiceSerial": "X", "dateTime": "not a date"}).date_time is None

    def test_find_order(self, report):
        assert find_order(report, "INV-002").order_type == "takeaway"
        with pytest.raises(NotFoundError):
            find_order(report, "INV-404")


class TestReportService:
    """Fetching the day through the remote API."""

    def test_get_daily_report(self, api_client, remote):
        ctx = make_context()
        report = ReportService(api_client).get_daily_report(ctx, REPORT_DATE)
        assert report.report_date == REPORT_DATE
        assert report.company.address == "Road 27, Dhanmondi"

        sent = remote.sent("GET", f"/invoice/{BRANCH}/date/2026-10-19")
        assert len(sent) == 1
        assert sent[0].headers["Authorization"] == f"Bearer {ctx.token}"

    def test_missing_company_gives_blank_header(self, api_client, remote):
        remote.add("GET", f"/company/branch/{BRANCH}/", [])
        report = ReportService(api_client).get_daily_report(make_context(), REPORT_DATE)
        assert report.company.name == ""
