"""
Top-level Trip Tracker state: loads the four sheets, owns the session
and builds snapshots for the UI.
"""
from __future__ import annotations
import logging
from datetime import datetime
from typing import Callable, List, Optional

from computations import (
    amount_due,
    expense_gap,
    is_reconciled,
    member_statuses,
    paid_by_name,
    per_member_split,
    status_of,
    time_remaining,
    total_expenses,
)
from config import SheetConfig
from errors import LoadError
from models import DEFAULT_START_DATE, Countdown, DashboardSnapshot, Expense, Payment, TripMeta, User
from normalizers import parse_expenses, parse_payments, parse_trip_meta, parse_users
from session import MemorySessionStore, SessionStore, authenticate
from sheets import SheetClient
from utils import format_money, parse_start_instant

_LOGGER = logging.getLogger(__name__)

STATE_IDLE = "idle"
STATE_LOADING = "loading"
STATE_LOADED = "loaded"
STATE_FAILED = "failed"


class TripDashboard:
    """Application state shared by every view"""

    def __init__(
        self,
        config: SheetConfig,
        client: Optional[SheetClient] = None,
        store: Optional[SessionStore] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.config = config
        self.client = client or SheetClient(config)
        self.store = store or MemorySessionStore()
        self.clock = clock

        self.state = STATE_IDLE
        self.missing_tables: List[str] = []
        self.users: List[User] = []
        self.payments: List[Payment] = []
        self.trip = TripMeta()
        self.expenses: List[Expense] = []
        self.user: Optional[User] = None
        self._closed = False
        self._start: Optional[datetime] = None

    @property
    def loaded(self) -> bool:
        return self.state == STATE_LOADED

    # ---------- Loading ----------
    def load(self) -> bool:
        """
        Fetch and normalize all four sheets.
        Returns False, with missing_tables filled in, if any sheet is unavailable
        or cannot be read; nothing from a partial load is kept.
        """
        cfg = self.config
        self.state = STATE_LOADING
        try:
            tables = self.client.fetch_all(cfg.sheet_names)
        except Exception:
            _LOGGER.exception("Unexpected error while fetching sheets")
            tables = {}
        if self._closed:
            _LOGGER.info("Dashboard closed during load; discarding results")
            self.state = STATE_IDLE
            return False

        missing = [name for name in cfg.sheet_names if tables.get(name) is None]
        if missing:
            return self._fail(missing)

        try:
            users = parse_users(tables[cfg.users_sheet])
            payments = parse_payments(tables[cfg.payments_sheet])
            trip = parse_trip_meta(tables[cfg.trip_sheet])
            expenses = parse_expenses(tables[cfg.expenses_sheet])
        except Exception:
            _LOGGER.exception("Unexpected error while reading sheet data")
            return self._fail(cfg.sheet_names)

        self.users, self.payments, self.trip, self.expenses = users, payments, trip, expenses
        self._start = self._parse_start(trip.start_date)
        self.missing_tables = []
        self.state = STATE_LOADED

        spent = total_expenses(self.expenses)
        if self.expenses and not is_reconciled(self.trip.total_cost, spent):
            _LOGGER.warning(
                "Expense breakdown %s does not match planned total %s",
                format_money(spent), format_money(self.trip.total_cost),
            )
        _LOGGER.info(
            "Loaded %d users, %d payments, %d expenses",
            len(self.users), len(self.payments), len(self.expenses),
        )
        return True

    def _fail(self, missing: List[str]) -> bool:
        self.missing_tables = list(missing)
        self.state = STATE_FAILED
        _LOGGER.error("One or more sheets failed to load: %s", ", ".join(self.missing_tables))
        return False

    def close(self) -> None:
        """Stop in-flight fetches; later load results are dropped"""
        self._closed = True
        self.client.close()

    # ---------- Session ----------
    def restore_session(self) -> Optional[User]:
        self.user = self.store.restore()
        return self.user

    def login(self, name: str, password: str) -> User:
        """Raises AuthError when the credentials match no user"""
        user = authenticate(name, password, self.users)
        self.user = user
        self.store.save(user)
        return user

    def logout(self) -> None:
        self.user = None
        self.store.clear()

    # ---------- Snapshot ----------
    @staticmethod
    def _parse_start(value: str) -> datetime:
        start = parse_start_instant(value)
        if start is None:
            _LOGGER.warning("Unreadable start_date %r; using %s", value, DEFAULT_START_DATE)
            start = parse_start_instant(DEFAULT_START_DATE)
        return start

    def start_instant(self) -> datetime:
        """Trip start, parsed once per load"""
        if self._start is None:
            self._start = self._parse_start(self.trip.start_date)
        return self._start

    def countdown(self, now: Optional[datetime] = None) -> Optional[Countdown]:
        """Time left until the trip starts; None while no load has completed"""
        if not self.loaded:
            return None
        return time_remaining(self.start_instant(), now or self.clock())

    def snapshot(self, now: Optional[datetime] = None) -> DashboardSnapshot:
        """Derived view of the loaded data; raises LoadError before a successful load"""
        if not self.loaded:
            raise LoadError(self.missing_tables)

        now = now or self.clock()
        per_head = self.trip.per_head
        spent = total_expenses(self.expenses)
        member_count = len(self.users)
        current = self.user.name if self.user else None

        snap = DashboardSnapshot(
            trip=self.trip,
            user=self.user,
            users=list(self.users),
            expenses=list(self.expenses),
            members=member_statuses(self.users, self.payments, per_head, current),
            member_count=member_count,
            total_expenses=spent,
            per_member_split=per_member_split(spent, member_count),
            reconciliation_gap=expense_gap(self.trip.total_cost, spent),
            countdown=time_remaining(self.start_instant(), now),
        )
        if self.user:
            paid = paid_by_name(self.payments).get(self.user.name, 0.0)
            snap.my_paid = paid
            snap.my_status = status_of(paid, per_head)
            snap.my_amount_due = amount_due(paid, per_head)
        return snap
