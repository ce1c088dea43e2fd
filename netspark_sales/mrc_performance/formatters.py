"""
Formatting utilities for MRC Performance
"""
import pandas as pd
from typing import Optional, Union
import logging

logger = logging.getLogger(__name__)


def format_currency(value: Union[int, float, None]) -> str:
    """
    Format as US dollars with thousand separators and 2 decimals

    Args:
        value: Amount to format; None / NaN render as $0.00

    Returns:
        e.g. "$1,234.50", "-$12.00"
    """
    try:
        if value is None or pd.isna(value):
            return "$0.00"
        amount = float(value)
    except (ValueError, TypeError):
        return "$0.00"

    if amount < 0:
        return f"-${abs(amount):,.2f}"
    return f"${amount:,.2f}"


def format_csv_amount(value: Union[int, float, None]) -> str:
    """Plain 2-decimal amount for CSV (no symbol, no separators)"""
    try:
        if value is None or pd.isna(value):
            return "0.00"
        return f"{float(value):.2f}"
    except (ValueError, TypeError):
        return "0.00"


def format_percent(value: Optional[float], decimals: int = 1) -> str:
    """Format percentage value"""
    if value is None or pd.isna(value):
        return "-"
    return f"{value:.{decimals}f}%"


def format_rank_movement(delta) -> str:
    """
    Arrow for stack rank movement

    ↑2 moved up two places, ↓1 dropped one, — no data or no change
    """
    if delta is None or pd.isna(delta) or delta == 0:
        return "—"
    if delta > 0:
        return f"↑{int(delta)}"
    return f"↓{abs(int(delta))}"
