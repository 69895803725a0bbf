"""
Turn decoded sheet tables into typed Trip Tracker records.

Every parser is pure and tolerant: a malformed row is dropped or gets
defaults, it never raises.
"""
from __future__ import annotations
import logging
from typing import List

from models import (
    DEFAULT_NOTES,
    DEFAULT_START_DATE,
    DEFAULT_TRIP_NAME,
    ROLE_ADMIN,
    ROLE_MEMBER,
    Expense,
    Payment,
    RawTable,
    TripMeta,
    User,
)
from utils import cell_text, cell_value, coerce_scalar, parse_number, safe_float

_LOGGER = logging.getLogger(__name__)


def parse_users(table: RawTable) -> List[User]:
    """Users sheet: name, password, role. First row is a header."""
    users = []
    for row in table.rows[1:]:
        name = cell_text(row, 0)
        if not name:
            continue
        role = ROLE_ADMIN if cell_text(row, 2).lower() == ROLE_ADMIN else ROLE_MEMBER
        users.append(User(name=name, password=cell_text(row, 1), role=role))
    return users


def parse_payments(table: RawTable) -> List[Payment]:
    """Payments sheet: name, amount paid. No header; every row is kept, duplicates and blank names too."""
    payments = []
    for row in table.rows:
        name = cell_text(row, 0)
        paid = max(0.0, _amount(cell_value(row, 1)))
        payments.append(Payment(name=name, paid=paid))
    return payments


def parse_trip_meta(table: RawTable) -> TripMeta:
    """
    Trip sheet: two columns, key and value.

    The formatted value is preferred (it carries currency and date
    formatting) and numeric-looking values become floats. Known keys land
    in typed fields, anything else goes to extras.
    """
    meta = TripMeta()
    for row in table.rows:
        key = cell_text(row, 0)
        if not key:
            continue
        value = coerce_scalar(cell_value(row, 1, prefer_formatted=True))

        if key == "trip_name":
            # kept as displayed, so "2025" stays "2025"
            meta.trip_name = cell_text(row, 1, prefer_formatted=True) or DEFAULT_TRIP_NAME
        elif key == "total_cost":
            meta.total_cost = _money(key, value)
        elif key == "per_head":
            meta.per_head = _money(key, value)
        elif key == "start_date":
            # a raw gviz Date(...) literal is unambiguous, the display string may not be
            raw = cell_value(row, 1)
            if isinstance(raw, str) and raw.startswith("Date("):
                value = raw
            meta.start_date = str(value) or DEFAULT_START_DATE
        elif key == "days":
            meta.days = parse_number(value)
        else:
            meta.extras[key] = value
    return meta


def _amount(value) -> float:
    # "₹1,500" and "500 INR" both read as numbers; junk gives 0
    n = parse_number(value)
    return n if n is not None else safe_float(value)


def _money(key: str, value) -> float:
    n = _amount(value)
    if n == 0 and value not in ("", 0.0):
        _LOGGER.warning("Trip value %r is not numeric (%r); using 0", key, value)
    return max(0.0, n)


def parse_expenses(table: RawTable) -> List[Expense]:
    """
    Expenses sheet: category, cost, date, notes. No header.
    Rows without a category or with a non-numeric or non-positive cost are dropped.
    """
    expenses = []
    for row in table.rows:
        category = cell_text(row, 0)
        cost = _amount(cell_value(row, 1))
        if not category or cost <= 0:
            continue
        expenses.append(Expense(
            category=category,
            cost=cost,
            date=cell_text(row, 2, prefer_formatted=True),
            notes=cell_text(row, 3) or DEFAULT_NOTES,
        ))
    return expenses
