"""formatting.py

Number formatting shared by the aggregator and the page renderers.

Kept free of Streamlit imports so the service layer stays importable
(and testable) without a running app.
"""

from __future__ import annotations

import math

ZERO_DISPLAY = "--"  # Default display for missing values


def fmt_quantity(value: float, min_decimals: int = 2, max_decimals: int = 8) -> str:
    """Thousands-separated quantity with between *min* and *max* decimals.

    Examples
    --------
    >>> fmt_quantity(1.5)
    '1.50'
    >>> fmt_quantity(0.000123456789)
    '0.00012346'
    >>> fmt_quantity(12345)
    '12,345.00'
    """
    text = f"{value:,.{max_decimals}f}"
    whole, _, frac = text.partition(".")
    frac = frac.rstrip("0")
    if len(frac) < min_decimals:
        frac = frac.ljust(min_decimals, "0")
    return f"{whole}.{frac}" if frac else whole


def fmt_usd(value: float) -> str:
    """``$1,234.56`` – negative values keep the sign in front of the dollar."""
    if value < 0:
        return f"-${abs(value):,.2f}"
    return f"${value:,.2f}"


def fmt_percent(value: float) -> str:
    """Signed percentage with two decimals (``+1.25%``)."""
    return f"{value:+.2f}%"


def fmt_significant(value: float | int | None, unity: str | None = None) -> str:
    """
    Format a float into a human-readable string with dynamic precision.

    - For absolute values >= 1: thousands separator and 2 decimal places.
      Example:  1234.6565  → "1,234.66"
    - For absolute values < 1: the first 2 significant decimal digits.
      Example:  0.006565   → "0.0066"
    - ``None``, NaN or exact zero: ``ZERO_DISPLAY``.

    Args:
        value: The number to format.
        unity: Optional unit/currency suffix (e.g., "USD").
    """
    if value is None or (isinstance(value, float) and math.isnan(value)) or value == 0.0:
        return ZERO_DISPLAY

    is_negative = value < 0
    abs_value = abs(value)

    if abs_value >= 1:
        formatted = f"{abs_value:,.2f}"
    else:
        # floor(log10(abs_value)) gives the exponent of the leading sig-digit.
        exp = math.floor(math.log10(abs_value))
        decimals = 2 - exp - 1
        rounded = round(abs_value, decimals)
        formatted = f"{rounded:.{decimals}f}"

    if is_negative:
        formatted = "-" + formatted
    if unity:
        formatted += f" {unity}"

    return formatted
