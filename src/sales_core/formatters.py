"""Brazilian Portuguese formatting utilities for reports and exports.

Output matches what a pt-BR browser locale renders, so reports produced here
are byte-identical to the dashboard's: currency as ``R$ 1.234,56`` with a
non-breaking space after the symbol, dates as ``dd/mm/yyyy`` and times on a
24-hour clock.
"""

from datetime import date, datetime

CURRENCY_SYMBOL = "R$"
NBSP = "\u00a0"


def format_brl(value: float) -> str:
    """Format a value as Brazilian reais, e.g. 'R$ 1.234,56'.

    Args:
        value: Amount in reais.

    Returns:
        Currency string with 2 decimals, '.' thousands and ',' decimal separators.
    """
    sign = "-" if round(value, 2) < 0 else ""
    digits = f"{abs(value):,.2f}"
    # swap en-US separators for pt-BR ones
    digits = digits.replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{sign}{CURRENCY_SYMBOL}{NBSP}{digits}"


def format_percent(value: float) -> str:
    """Format a percentage with one decimal, e.g. '12.5%'."""
    return f"{value:.1f}%"


def format_datetime_br(dt: datetime) -> str:
    """Format a timestamp like '19/10/2026, 14:03:05' (wall clock as recorded)."""
    return dt.strftime("%d/%m/%Y, %H:%M:%S")


def format_day_month(d: date) -> str:
    """Short chart label like '19/10'."""
    return d.strftime("%d/%m")


def format_hour(hour: int) -> str:
    """Hour label like '09:00'."""
    return f"{hour:02d}:00"
