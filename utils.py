"""
Utility functions for Trip Tracker: cell access, coercion, dates and money
"""
from __future__ import annotations
import math
import os
import re
from datetime import date, datetime, time
from typing import Any, List, Optional, Union

from models import Cell

# countdown target time when the sheet only gives a day
DEFAULT_START_TIME = time(14, 0)

_LEADING_NUMBER = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")
_FULL_NUMBER = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")
_MONEY_NOISE = re.compile(r"[₹$€£¥,\s]")
_GVIZ_DATE = re.compile(r"^Date\((\d+(?:\s*,\s*\d+){2,6})\)$")

_DATE_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M",
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %H:%M",
)
_DAY_FORMATS = ("%Y-%m-%d", "%m/%d/%Y", "%d %b %Y", "%d %B %Y")


def app_dir() -> str:
    """
    Get application data directory: ~/Library/Application Support/TripTracker
    Creates directory if it doesn't exist.
    """
    base = os.path.expanduser("~/Library/Application Support")
    path = os.path.join(base, "TripTracker")
    os.makedirs(path, exist_ok=True)
    return path


def cell_value(row: List[Cell], index: int, prefer_formatted: bool = False) -> Any:
    """
    Return the value of a row cell, or None when the cell is missing.
    With prefer_formatted the display value 'f' wins over the raw 'v'.
    """
    if index >= len(row):
        return None
    cell = row[index]
    if not isinstance(cell, dict):
        return None
    if prefer_formatted:
        f = cell.get("f")
        if f not in (None, ""):
            return f
    return cell.get("v")


def cell_text(row: List[Cell], index: int, prefer_formatted: bool = False) -> str:
    """Cell value as a trimmed string; missing cells give ''"""
    v = cell_value(row, index, prefer_formatted)
    if v is None:
        return ""
    if isinstance(v, float) and v.is_integer():
        v = int(v)
    return str(v).strip()


def safe_float(x: Any, default: float = 0.0) -> float:
    """
    Convert a cell value to float safely, returning default on error.
    Strings are read like a lenient number parser: a leading number is
    accepted ("500 INR" -> 500.0). NaN and infinities give default.
    """
    if x is None or isinstance(x, bool):
        return default
    if isinstance(x, (int, float)):
        v = float(x)
        return v if math.isfinite(v) else default
    m = _LEADING_NUMBER.match(str(x).strip())
    if not m:
        return default
    try:
        v = float(m.group(0))
    except ValueError:
        return default
    return v if math.isfinite(v) else default


def parse_number(x: Any) -> Optional[float]:
    """
    Parse a numeric-looking value, tolerating currency symbols and
    thousands separators ("₹25,000.00" -> 25000.0). Returns None if the
    whole value is not a number.
    """
    if x is None or isinstance(x, bool):
        return None
    if isinstance(x, (int, float)):
        v = float(x)
        return v if math.isfinite(v) else None
    s = _MONEY_NOISE.sub("", str(x))
    if s.upper().startswith("RS."):
        s = s[3:]
    if not _FULL_NUMBER.match(s):
        return None
    v = float(s)
    return v if math.isfinite(v) else None


def coerce_scalar(x: Any) -> Union[float, str]:
    """Number when the value looks numeric, otherwise its trimmed text"""
    n = parse_number(x)
    if n is not None:
        return n
    if x is None:
        return ""
    return str(x).strip()


def parse_start_instant(value: Any) -> Optional[datetime]:
    """
    Parse a trip start value into a naive local datetime.
    Accepts date/datetime objects, gviz "Date(y,m,d[,h,mi,s])" literals
    (zero-based month), ISO and US-style strings. Day-only values get
    DEFAULT_START_TIME. Returns None when nothing matches.
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, DEFAULT_START_TIME)
    if value is None:
        return None
    s = str(value).strip()
    if not s:
        return None

    m = _GVIZ_DATE.match(s)
    if m:
        parts = [int(p) for p in m.group(1).split(",")]
        parts[1] += 1
        try:
            if len(parts) == 3:
                return datetime.combine(date(*parts), DEFAULT_START_TIME)
            return datetime(*parts)
        except ValueError:
            return None

    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(s, fmt)
        except ValueError:
            continue
    for fmt in _DAY_FORMATS:
        try:
            return datetime.combine(datetime.strptime(s, fmt).date(), DEFAULT_START_TIME)
        except ValueError:
            continue
    return None


def format_money(amount: float) -> str:
    """Format rupees with Indian digit grouping: 123456.5 -> '₹1,23,456.50'"""
    sign = "-" if amount < 0 else ""
    whole, frac = f"{abs(amount):.2f}".split(".")
    if len(whole) > 3:
        head, tail = whole[:-3], whole[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        whole = ",".join(groups + [tail])
    return f"{sign}₹{whole}.{frac}"
