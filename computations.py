"""
Business logic and computations for Trip Tracker
"""
from __future__ import annotations
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from models import (
    STATUS_PAID,
    STATUS_PARTIAL,
    STATUS_PENDING,
    Countdown,
    Expense,
    MemberStatus,
    Payment,
    User,
)

# gaps smaller than half a paisa count as reconciled
RECONCILE_EPS = 0.005


def status_of(paid: float, per_head: float) -> str:
    """Paid once the per-head cost is covered, Partial if anything was paid, else Pending"""
    if paid >= per_head:
        return STATUS_PAID
    if paid > 0:
        return STATUS_PARTIAL
    return STATUS_PENDING


def amount_due(paid: float, per_head: float) -> float:
    """What is still owed; never negative"""
    return max(0.0, per_head - paid)


def paid_by_name(payments: List[Payment]) -> Dict[str, float]:
    """Sum payment rows per person, in order of first appearance"""
    out: Dict[str, float] = {}
    for p in payments:
        out[p.name] = out.get(p.name, 0.0) + p.paid
    return out


def total_expenses(expenses: List[Expense]) -> float:
    return sum(e.cost for e in expenses)


def per_member_split(total: float, member_count: int) -> float:
    """Equal share of the expense total; an empty group counts as one member"""
    return total / max(1, member_count)


def expense_gap(total_cost: float, spent: float) -> float:
    """Planned trip cost minus the summed expense breakdown"""
    return total_cost - spent


def is_reconciled(total_cost: float, spent: float) -> bool:
    return abs(expense_gap(total_cost, spent)) < RECONCILE_EPS


def time_remaining(start: datetime, now: datetime) -> Countdown:
    """
    Break the time left until start into days/hours/minutes/seconds.
    Once start has been reached the countdown is past and all zero.
    """
    ms = (start - now) // timedelta(milliseconds=1)
    if ms <= 0:
        return Countdown(is_past=True)
    days, ms = divmod(ms, 86_400_000)
    hours, ms = divmod(ms, 3_600_000)
    minutes, ms = divmod(ms, 60_000)
    seconds = ms // 1000
    return Countdown(days=days, hours=hours, minutes=minutes, seconds=seconds, is_past=False)


def member_statuses(
    users: List[User],
    payments: List[Payment],
    per_head: float,
    current_name: Optional[str] = None,
) -> List[MemberStatus]:
    """
    Payment standing for every member.
    Users come first in sheet order, then names that only appear in payments.
    Payments without a name belong to nobody and are not listed.
    The current user is moved to the front; everyone else keeps their order.
    """
    paid = paid_by_name(payments)
    names = list(dict.fromkeys([u.name for u in users] + [n for n in paid if n]))

    out = []
    for name in names:
        amt = paid.get(name, 0.0)
        out.append(MemberStatus(
            name=name,
            paid=amt,
            status=status_of(amt, per_head),
            amount_due=amount_due(amt, per_head),
            is_current_user=(name == current_name),
        ))
    out.sort(key=lambda m: not m.is_current_user)
    return out
