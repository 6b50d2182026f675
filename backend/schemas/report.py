from pydantic import BaseModel, Field
from typing import Optional, List, Dict
from datetime import datetime, date
from decimal import Decimal
from enum import Enum


class ExportFormat(str, Enum):
    XLSX = "xlsx"
    PDF = "pdf"


class CompanyInfo(BaseModel):
    name: str = ""
    branch: str = ""
    address: str = ""
    phone: str = ""
    email: str = ""
    bin_number: Optional[str] = None
    logo: Optional[str] = None


class LineItem(BaseModel):
    product_name: str
    qty: int = 0
    rate: Decimal = Decimal("0")
    subtotal: Decimal = Decimal("0")
    is_complimentary: bool = False


class Order(BaseModel):
    invoice_serial: str
    date_time: Optional[datetime] = None
    order_type: str = ""
    table_name: Optional[str] = None
    delivery_provider: Optional[str] = None
    customer_name: Optional[str] = None
    products: List[LineItem] = []
    discount: Decimal = Decimal("0")
    vat: Decimal = Decimal("0")
    sd: Decimal = Decimal("0")
    total_amount: Decimal = Decimal("0")
    total_sale: Decimal = Decimal("0")
    total_qty: int = 0
    payment_method: Optional[str] = None
    login_user_name: Optional[str] = None
    order_status: Optional[str] = None
    counter: Optional[str] = None

    @property
    def table_or_provider(self) -> str:
        return self.table_name or self.delivery_provider or "N/A"


class OrderSummary(BaseModel):
    """Server-computed day totals, consumed verbatim."""
    total_amount: Decimal = Decimal("0")
    total_discount: Decimal = Decimal("0")
    total_table_discount: Decimal = Decimal("0")
    total_complimentary_amount: Decimal = Decimal("0")
    total_vat: Decimal = Decimal("0")
    total_sd: Decimal = Decimal("0")
    cash_payments: Decimal = Decimal("0")
    card_payments: Decimal = Decimal("0")
    mobile_payments: Decimal = Decimal("0")
    bank_payments: Decimal = Decimal("0")
    total_guest_count: int = 0
    total_orders: int = 0
    total_qty: int = 0
    sales_by_order_type: Dict[str, Decimal] = {}
    sales_by_delivery_provider: Dict[str, Decimal] = {}

    @property
    def collections_total(self) -> Decimal:
        return self.cash_payments + self.card_payments + self.mobile_payments + self.bank_payments


class DerivedTotals(BaseModel):
    net_sales: Decimal
    gross_sales: Decimal
    avg_per_person: Decimal


class PaymentMethodBreakdown(BaseModel):
    """Per-method totals computed from the order list; additive to the server totals."""
    cash: Decimal = Decimal("0")
    card: Decimal = Decimal("0")
    visa: Decimal = Decimal("0")
    mastercard: Decimal = Decimal("0")
    amex: Decimal = Decimal("0")
    mobile: Decimal = Decimal("0")
    bkash: Decimal = Decimal("0")
    nagad: Decimal = Decimal("0")
    rocket: Decimal = Decimal("0")
    bank: Decimal = Decimal("0")


class DailyReport(BaseModel):
    report_date: date
    company: CompanyInfo
    summary: OrderSummary
    totals: DerivedTotals
    order_types: Dict[str, Decimal] = {}
    delivery_providers: Dict[str, Decimal] = {}
    orders: List[Order] = []
    payment_breakdown: PaymentMethodBreakdown = Field(default_factory=PaymentMethodBreakdown)
    complimentary_item_count: int = 0
    collections_mismatch: Decimal = Decimal("0")


# On-screen grid
class GridRow(BaseModel):
    key: str
    label: str
    value: Decimal
    display: str
    emphasis: bool = False


class GridSection(BaseModel):
    title: str
    rows: List[GridRow]


class SummaryGrid(BaseModel):
    report_date: date
    date_label: str
    company_name: str
    sections: List[GridSection]


class OrderListItem(BaseModel):
    index: int
    invoice_serial: str
    time: str
    order_type: str
    table_or_provider: str
    total_qty: int
    payment_method: Optional[str] = None
    total_amount: Decimal


class OrderPage(BaseModel):
    data: List[OrderListItem]
    page: int
    limit: int
    total: int
    total_pages: int


class PrintJobResponse(BaseModel):
    job_id: str
    document: str
    submitted_at: datetime
