"""
Value formatting shared by the PDF, HTML and CSV renderers.
"""

import json
import re
from decimal import Decimal
from typing import Any

_CAMEL_BOUNDARY = re.compile(r"([A-Z])")


def humanize_key(key: str) -> str:
    """
    Turn a camelCase record key into a column/label title.

    Example:
        >>> humanize_key("totalCost")
        'Total Cost'
    """
    if not key:
        return key
    return key[0].upper() + _CAMEL_BOUNDARY.sub(r" \1", key[1:])


def format_number(value: Any) -> str:
    """Group thousands; floats keep at most 3 decimals."""
    if isinstance(value, int):
        return f"{value:,}"
    text = f"{float(value):,.3f}".rstrip("0").rstrip(".")
    return text if text not in ("", "-0") else "0"


def format_currency(amount: Any) -> str:
    """US dollar amount, e.g. $1,234.50."""
    return f"${float(amount or 0):,.2f}"


def format_value(value: Any) -> str:
    """Render a report value as display text."""
    if value is None:
        return "N/A"
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, (int, float, Decimal)):
        return format_number(value)
    if isinstance(value, (dict, list)):
        return json.dumps(value, default=str)
    return str(value)


def is_currency_key(key: str) -> bool:
    return "cost" in key.lower()
