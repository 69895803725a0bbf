from __future__ import annotations
import json
from typing import List

import pytest
import requests

from config import SheetConfig
from models import RawTable

GVIZ_PREFIX = "/*O_o*/\ngoogle.visualization.Query.setResponse("
GVIZ_SUFFIX = ");"


def cells(*values) -> dict:
    """One gviz row; tuples are (v, f) pairs, None is a missing cell"""
    out = []
    for v in values:
        if v is None:
            out.append(None)
        elif isinstance(v, tuple):
            out.append({"v": v[0], "f": v[1]})
        else:
            out.append({"v": v})
    return {"c": out}


def table_payload(rows: List[dict]) -> dict:
    return {
        "version": "0.6",
        "reqId": "0",
        "status": "ok",
        "sig": "1",
        "table": {"cols": [{"id": "A", "label": "", "type": "string"}], "rows": rows},
    }


def wrap(payload: dict) -> str:
    return GVIZ_PREFIX + json.dumps(payload) + GVIZ_SUFFIX


def raw_table(*rows) -> RawTable:
    return RawTable(rows=[r["c"] for r in rows])


class FakeResponse:
    def __init__(self, status_code: int = 200, text: str = ""):
        self.status_code = status_code
        self.text = text

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class FakeSession:
    """
    Stand-in for requests.Session. routes maps sheet name to a list of
    outcomes consumed one per call: a FakeResponse, a str body (200) or an
    exception instance to raise.
    """

    def __init__(self, routes: dict):
        self.routes = {k: list(v) for k, v in routes.items()}
        self.calls = []
        self.closed = False

    def get(self, url, params=None, timeout=None):
        sheet = params["sheet"]
        self.calls.append((url, dict(params), timeout))
        outcomes = self.routes.get(sheet) or [FakeResponse(404, "not found")]
        outcome = outcomes.pop(0) if len(outcomes) > 1 else outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        if isinstance(outcome, str):
            return FakeResponse(200, outcome)
        return outcome

    def close(self):
        self.closed = True


@pytest.fixture
def sheet_config() -> SheetConfig:
    return SheetConfig(sheet_id="doc123", timeout=5.0)


@pytest.fixture
def sleeps():
    return []


USERS_ROWS = [
    cells("name", "password", "role"),
    cells("Alice", "pw1", "member"),
    cells("Bob", "pw2", "admin"),
]
PAYMENTS_ROWS = [
    cells("Alice", 1000),
    cells("Bob", 0),
]
TRIP_ROWS = [
    cells("trip_name", "Coorg"),
    cells("total_cost", (2000, "₹2,000.00")),
    cells("per_head", (1000, "₹1,000.00")),
    cells("start_date", ("Date(2030,0,15)", "1/15/2030")),
]
EXPENSE_ROWS = [
    cells("Food", 500, "2030-01-15", "Lunch"),
    cells("", 100),
    cells("Fuel", -20),
    cells("Stay", 1500, ("Date(2030,0,15)", "1/15/2030")),
]


@pytest.fixture
def good_routes():
    return {
        "Users": [wrap(table_payload(USERS_ROWS))],
        "Payments": [wrap(table_payload(PAYMENTS_ROWS))],
        "Trip": [wrap(table_payload(TRIP_ROWS))],
        "Expenses": [wrap(table_payload(EXPENSE_ROWS))],
    }


@pytest.fixture
def make_client(sheet_config, sleeps):
    from sheets import SheetClient

    def _make(routes, config=None):
        return SheetClient(config or sheet_config, session=FakeSession(routes), sleep=sleeps.append)

    return _make


@pytest.fixture
def connection_error():
    return requests.ConnectionError("connection refused")
