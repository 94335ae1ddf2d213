"""
Size label parsing and the system size calculator.

Sizes travel as labels ("545W", "5kW") between the catalog, the selection form
and the API. They are parsed here, once, into floats; everything else compares
numbers.
"""
import math
import re
from typing import Optional

ZERO_SYSTEM_SIZE = "0kW"

_WATTS_RE = re.compile(r'^\s*(\d+(?:\.\d+)?)\s*(?:w|wp)?\s*$', re.IGNORECASE)
_KW_RE = re.compile(r'^\s*(\d+(?:\.\d+)?)\s*(?:kw|kwp)?\s*$', re.IGNORECASE)


def _parse(pattern: re.Pattern, label) -> Optional[float]:
    if label is None or isinstance(label, bool):
        return None
    if isinstance(label, (int, float)):
        value = float(label)
    else:
        match = pattern.match(str(label))
        if not match:
            return None
        value = float(match.group(1))
    if not math.isfinite(value):
        return None
    return value


def parse_watts(label) -> Optional[float]:
    """Parse a panel wattage label ("545W", "545", 545) to watts, or None."""
    return _parse(_WATTS_RE, label)


def parse_kw(label) -> Optional[float]:
    """Parse a kW label ("5kW", "5.0 kW", 5) to kW, or None."""
    return _parse(_KW_RE, label)


def _format_number(value: float) -> str:
    if value == int(value):
        return str(int(value))
    return repr(float(value))


def format_kw(value: float) -> str:
    """Format kW for display: 5.0 -> "5kW", 4.905 -> "4.905kW"."""
    return f"{_format_number(value)}kW"


def format_watts(value: float) -> str:
    return f"{_format_number(value)}W"


def calculate_system_size(panel_size, quantity) -> str:
    """
    Total array size from panel wattage and panel count.

    Returns "0kW" when either input is missing, non-positive or unparseable,
    when the quantity is not a whole number of panels, or when the total is
    too large to represent.
    """
    watts = parse_watts(panel_size)
    if watts is None or watts <= 0:
        return ZERO_SYSTEM_SIZE

    if isinstance(quantity, bool):
        return ZERO_SYSTEM_SIZE
    try:
        count = float(quantity)
    except (TypeError, ValueError, OverflowError):
        return ZERO_SYSTEM_SIZE
    if not math.isfinite(count) or count <= 0 or not count.is_integer():
        return ZERO_SYSTEM_SIZE

    kw = watts * count / 1000
    if not math.isfinite(kw):
        return ZERO_SYSTEM_SIZE
    return format_kw(kw)
