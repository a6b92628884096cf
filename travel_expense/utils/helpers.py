"""
Helper Utilities
Formatting and pagination helpers shared by routes and notifications
"""

from datetime import date, datetime
from typing import Optional, Tuple

from travel_expense.config.settings import settings


def format_currency(amount: float, currency: str = "USD") -> str:
    """
    Format amount as currency

    Args:
        amount: Amount to format
        currency: Currency code

    Returns:
        str: Formatted currency string
    """
    if currency == "USD":
        return f"${amount:,.2f}"
    return f"{currency} {amount:,.2f}"


def format_date(value: date, format_str: Optional[str] = None) -> str:
    """
    Format a date as dd-mm-YYYY (or the given format)

    Args:
        value: Date or datetime
        format_str: Format string

    Returns:
        str: Formatted date string
    """
    return value.strftime(format_str or settings.DISPLAY_DATE_FORMAT)


def format_datetime(dt: datetime, format_str: Optional[str] = None) -> str:
    """Format datetime with time"""
    return dt.strftime(format_str or settings.DISPLAY_DATETIME_FORMAT)


def clamp_pagination(page: int, limit: Optional[int], default: int) -> Tuple[int, int]:
    """
    Normalize page/limit query parameters

    Returns:
        Tuple of (page, limit) with page >= 1 and 1 <= limit <= MAX_PAGE_SIZE
    """
    page = max(page, 1)
    limit = limit or default
    return page, max(1, min(limit, settings.MAX_PAGE_SIZE))
