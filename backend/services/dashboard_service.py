"""
Sales dashboard built from the remote /invoice/{branch}/dashboard endpoint.
"""
from decimal import Decimal
from typing import Any, List, Mapping

from clients.restaurant_api import RestaurantApiClient
from config.logging import get_logger
from core.security import SessionContext
from schemas.dashboard import DailySalePoint, DashboardSummary, SummaryCard
from services.report_service import to_count, to_decimal
from utils.date_utils import now_local
from utils.formatting import format_money

logger = get_logger(__name__)


def daily_series(raw: Any) -> List[DailySalePoint]:
    points = []
    for index, day in enumerate(raw or []):
        if not isinstance(day, Mapping):
            continue
        label = day.get("date") or day.get("_id") or day.get("day")
        points.append(DailySalePoint(
            date=str(label) if label is not None else None,
            total_sale=to_decimal(f"dailySales.{index}.totalSale", day.get("totalSale")),
            total_orders=to_count(f"dailySales.{index}.totalOrders", day.get("totalOrders")),
        ))
    return points


def build_dashboard(raw: Mapping[str, Any]) -> DashboardSummary:
    """Summary cards plus the daily series; missing fields are zero or empty."""
    raw = raw or {}
    series = daily_series(raw.get("dailySales"))
    today = to_decimal("todaysTotalSale", raw.get("todaysTotalSale"))
    yesterday = to_decimal("yesterdaysTotalSale", raw.get("yesterdaysTotalSale"))
    month_total = sum((point.total_sale for point in series), Decimal("0"))
    pending = to_count("todaysPendingOrders", raw.get("todaysPendingOrders"))
    month_name = str(raw.get("thisMonthName") or now_local().strftime("%B"))

    cards = [
        SummaryCard(key="pendingOrders", title="Pending Orders", value=Decimal(pending), display=str(pending)),
        SummaryCard(key="todaysTotalSale", title="Today's Sale", value=today, display=format_money(today)),
        SummaryCard(key="yesterdaysTotalSale", title="Yesterday's Sale", value=yesterday,
                    display=format_money(yesterday)),
        SummaryCard(key="monthTotalSale", title=f"Total Sale ({month_name})", value=month_total,
                    display=format_money(month_total)),
    ]
    return DashboardSummary(
        pending_orders=pending,
        todays_total_sale=today,
        yesterdays_total_sale=yesterday,
        month_total_sale=month_total,
        month_name=month_name,
        cards=cards,
        daily_sales=series,
    )


class DashboardService:
    def __init__(self, api: RestaurantApiClient):
        self.api = api

    def get_summary(self, ctx: SessionContext) -> DashboardSummary:
        raw = self.api.get(f"/invoice/{ctx.branch}/dashboard", ctx.token)
        summary = build_dashboard(raw if isinstance(raw, dict) else {})
        logger.debug(f"Dashboard for {ctx.branch}: {len(summary.daily_sales)} days in series")
        return summary
