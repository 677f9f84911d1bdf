from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Union

STATUS_COLORS = {
    "paid": "green",
    "pending": "yellow",
    "overdue": "red",
    "draft": "gray",
}

CENT = Decimal("0.01")


def format_currency(value: Union[Decimal, float, int, str]) -> str:
    """Format an amount as US dollars, e.g. 1234.5 -> "$1,234.50", -5 -> "-$5.00" """
    try:
        amount = Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError):
        return str(value)
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"


def _to_datetime(value: Union[datetime, date, str]) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def format_datetime(value: Union[datetime, date, str]) -> str:
    """Format as "Jan 5, 2024, 03:04 PM"; unparseable strings are returned unchanged"""
    try:
        moment = _to_datetime(value)
    except ValueError:
        return str(value)
    return f"{moment:%b} {moment.day}, {moment:%Y, %I:%M %p}"


def status_badge_color(status: str) -> str:
    return STATUS_COLORS.get(str(status).lower(), "gray")
