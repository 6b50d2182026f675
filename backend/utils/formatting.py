"""
Money and label formatting shared by the on-screen grid, print documents and
exports.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Union

from config.settings import get_settings

settings = get_settings()

TWO_PLACES = Decimal("0.01")

ORDER_TYPE_LABELS: Dict[str, str] = {
    "dine-in": "Dine-In",
    "takeaway": "Takeaway",
    "delivery": "Delivery",
}

DELIVERY_PROVIDER_LABELS: Dict[str, str] = {
    "pathao": "Pathao",
    "foodi": "Foodi",
    "foodpanda": "Foodpanda",
    "deliveryBoy": "Delivery Boy",
}


def quantize_money(value: Union[Decimal, int, float]) -> Decimal:
    return Decimal(str(value)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def format_amount(value: Union[Decimal, int, float]) -> str:
    """1234.5 -> '1,234.50'"""
    return f"{quantize_money(value):,.2f}"


def format_money(value: Union[Decimal, int, float]) -> str:
    """1234.5 -> '৳1,234.50'"""
    return f"{settings.CURRENCY_SYMBOL}{format_amount(value)}"


def format_deduction(value: Union[Decimal, int, float]) -> str:
    """Deductions (discounts, complimentary) are shown with a leading minus."""
    return f"- {format_money(value)}"


def humanize_key(key: str) -> str:
    """Fallback label for unknown breakdown keys: separators become spaces."""
    return str(key).replace("-", " ").replace("_", " ")


def label_for(key: str, labels: Dict[str, str]) -> str:
    if key in labels:
        return labels[key]
    lowered = str(key).lower()
    if lowered in labels:
        return labels[lowered]
    return humanize_key(key)


def order_type_label(key: str) -> str:
    return label_for(key, ORDER_TYPE_LABELS)


def delivery_provider_label(key: str) -> str:
    return label_for(key, DELIVERY_PROVIDER_LABELS)
