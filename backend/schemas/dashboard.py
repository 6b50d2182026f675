from pydantic import BaseModel
from typing import List, Optional
from decimal import Decimal


class DailySalePoint(BaseModel):
    date: Optional[str] = None
    total_sale: Decimal = Decimal("0")
    total_orders: int = 0


class SummaryCard(BaseModel):
    key: str
    title: str
    value: Decimal
    display: str


class DashboardSummary(BaseModel):
    pending_orders: int
    todays_total_sale: Decimal
    yesterdays_total_sale: Decimal
    month_total_sale: Decimal
    month_name: str
    cards: List[SummaryCard]
    daily_sales: List[DailySalePoint]
