"""
Date and time utility functions for the restaurant admin backend.
Handles timezone conversion and the display formats used on reports, receipts
and exports.
"""

from datetime import date, datetime
from typing import Optional, Union

import pytz
from dateutil import parser

from config.settings import get_settings

settings = get_settings()

BUSINESS_TZ = pytz.timezone(settings.DEFAULT_TIMEZONE)
UTC_TZ = pytz.UTC


class DateUtils:
    """Date helpers for report and receipt rendering."""

    @staticmethod
    def get_business_now() -> datetime:
        """Get current time in the restaurant's timezone."""
        return datetime.now(BUSINESS_TZ)

    @staticmethod
    def to_business_timezone(dt: datetime) -> datetime:
        """Convert datetime to the restaurant's timezone.

        Naive values are taken to already be local restaurant time.
        """
        if dt.tzinfo is None:
            return BUSINESS_TZ.localize(dt)
        return dt.astimezone(BUSINESS_TZ)

    @staticmethod
    def parse_timestamp(value: Union[str, datetime, None]) -> Optional[datetime]:
        """Parse a timestamp from the remote API (ISO strings, with or without offset)."""
        if value is None:
            return None
        if isinstance(value, datetime):
            return DateUtils.to_business_timezone(value)
        if not str(value).strip():
            return None
        try:
            return DateUtils.to_business_timezone(parser.isoparse(str(value).strip()))
        except ValueError:
            try:
                return DateUtils.to_business_timezone(parser.parse(str(value).strip()))
            except (ValueError, OverflowError):
                return None

    @staticmethod
    def ordinal(day: int) -> str:
        """1 -> 1st, 2 -> 2nd, 11 -> 11th, 23 -> 23rd"""
        if 11 <= day % 100 <= 13:
            suffix = "th"
        else:
            suffix = {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")
        return f"{day}{suffix}"

    @staticmethod
    def format_report_date(value: Union[date, datetime]) -> str:
        """Long report date, e.g. 'October 19th, 2026'."""
        return f"{value.strftime('%B')} {DateUtils.ordinal(value.day)}, {value.year}"

    @staticmethod
    def format_time(dt: Optional[datetime]) -> str:
        """Clock time, e.g. '3:05 PM'."""
        if not dt:
            return ""
        hour = dt.hour % 12 or 12
        return f"{hour}:{dt.minute:02d} {'AM' if dt.hour < 12 else 'PM'}"

    @staticmethod
    def format_receipt_datetime(dt: Optional[datetime]) -> str:
        """Receipt timestamp, e.g. '19-Oct-2026 3:05 PM'."""
        if not dt:
            return ""
        return f"{dt.strftime('%d-%b-%Y')} {DateUtils.format_time(dt)}"


# Convenience functions
def now_local() -> datetime:
    return DateUtils.get_business_now()


def parse_timestamp(value) -> Optional[datetime]:
    return DateUtils.parse_timestamp(value)


def format_report_date(value: Union[date, datetime]) -> str:
    return DateUtils.format_report_date(value)


def format_time(dt: Optional[datetime]) -> str:
    return DateUtils.format_time(dt)


def format_receipt_datetime(dt: Optional[datetime]) -> str:
    return DateUtils.format_receipt_datetime(dt)
