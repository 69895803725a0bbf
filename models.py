"""
Data models for Trip Tracker
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

ROLE_ADMIN = "admin"
ROLE_MEMBER = "member"

STATUS_PAID = "Paid"
STATUS_PARTIAL = "Partial"
STATUS_PENDING = "Pending"

DEFAULT_TRIP_NAME = "Chikmagalur"
DEFAULT_START_DATE = "2025-12-25"
DEFAULT_NOTES = "No notes"

Cell = Optional[Dict[str, Any]]


@dataclass(frozen=True)
class RawTable:
    """Decoded gviz table: rows of cells, each cell carrying 'v' and maybe 'f'"""
    rows: List[List[Cell]]
    labels: List[str] = field(default_factory=list)


@dataclass
class User:
    """Trip member who can log in"""
    name: str
    password: str
    role: str = ROLE_MEMBER

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


@dataclass
class Payment:
    """One payment row; a name may appear several times"""
    name: str
    paid: float


@dataclass
class TripMeta:
    """Trip-level figures from the key/value sheet"""
    trip_name: str = DEFAULT_TRIP_NAME
    total_cost: float = 0.0
    per_head: float = 0.0
    start_date: str = DEFAULT_START_DATE
    days: Optional[float] = None
    extras: Dict[str, Union[float, str]] = field(default_factory=dict)


@dataclass
class Expense:
    """Single spent item from the expense breakdown"""
    category: str
    cost: float  # always > 0 after normalization
    date: str = ""
    notes: str = DEFAULT_NOTES


@dataclass
class MemberStatus:
    """Payment standing of one member against the per-head cost"""
    name: str
    paid: float
    status: str
    amount_due: float
    is_current_user: bool = False


@dataclass
class Countdown:
    """Time left until the trip starts"""
    days: int = 0
    hours: int = 0
    minutes: int = 0
    seconds: int = 0
    is_past: bool = True


@dataclass
class DashboardSnapshot:
    """Read-only view handed to the UI layer"""
    trip: TripMeta
    user: Optional[User]
    users: List[User]
    expenses: List[Expense]
    members: List[MemberStatus]
    member_count: int
    total_expenses: float
    per_member_split: float
    reconciliation_gap: float
    countdown: Countdown
    my_paid: Optional[float] = None
    my_status: Optional[str] = None
    my_amount_due: Optional[float] = None
