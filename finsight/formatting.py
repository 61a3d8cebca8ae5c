"""Formatting utilities for currency display."""

from __future__ import annotations

from typing import Union

CURRENCY_SYMBOL = '฿'


def format_currency(amount: Union[float, int], include_sign: bool = True) -> str:
    """Format a baht amount with thousands separators and no decimals.

    Args:
        amount: The amount to format
        include_sign: Whether to include the baht sign

    Returns:
        Formatted currency string (e.g., "฿1,235" or "1,235")

    Example:
        >>> format_currency(1234.56)
        '฿1,235'
        >>> format_currency(-80, include_sign=False)
        '-80'
    """
    formatted = f"{amount:,.0f}"
    if not include_sign:
        return formatted
    if formatted.startswith('-'):
        return f"-{CURRENCY_SYMBOL}{formatted[1:]}"
    return f"{CURRENCY_SYMBOL}{formatted}"
