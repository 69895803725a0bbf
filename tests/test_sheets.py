from __future__ import annotations
import json
import threading
import time

import pytest

from conftest import FakeResponse, cells, table_payload, wrap
from errors import DecodeError
from sheets import SheetClient, decode_response


def test_decode_matches_inner_json():
    payload = table_payload([cells("Alice", "pw1", "member"), cells("Bob", None, ("x", "X"))])
    table = decode_response(wrap(payload))
    assert table.rows == [r["c"] for r in payload["table"]["rows"]]


def test_decode_does_not_depend_on_prefix_length():
    payload = table_payload([cells("Food", 500)])
    text = "/*O_o*/\ngoogle.visualization.Query.setResponse_v2(" + json.dumps(payload) + ");\n"
    assert decode_response(text).rows == [[{"v": "Food"}, {"v": 500}]]


def test_decode_keeps_column_labels():
    payload = table_payload([])
    payload["table"]["cols"] = [{"id": "A", "label": "name"}, {"id": "B", "label": "paid"}]
    assert decode_response(wrap(payload)).labels == ["name", "paid"]


def test_decode_empty_table():
    assert decode_response(wrap(table_payload([]))).rows == []


def test_decode_row_without_cells():
    payload = table_payload([{"c": None}, cells("a")])
    assert decode_response(wrap(payload)).rows == [[], [{"v": "a"}]]


@pytest.mark.parametrize("text", [
    "",
    "<!DOCTYPE html><html>Sign in</html>",
    "/*O_o*/\ngoogle.visualization.Query.setResponse({\"table\": );",
    wrap({"status": "ok"}),
    wrap({"status": "ok", "table": {"rows": "nope"}}),
])
def test_decode_failures(text):
    with pytest.raises(DecodeError):
        decode_response(text)


def test_decode_error_status_reports_message():
    payload = {"status": "error", "errors": [{"reason": "invalid_query", "message": "Invalid sheet"}]}
    with pytest.raises(DecodeError, match="Invalid sheet"):
        decode_response(wrap(payload))


def test_fetch_success_first_attempt(make_client, sleeps):
    client = make_client({"Users": [wrap(table_payload([cells("a")]))]})
    table = client.fetch("Users")

    assert table.rows == [[{"v": "a"}]]
    assert sleeps == []
    url, params, timeout = client.session.calls[0]
    assert url == "https://docs.google.com/spreadsheets/d/doc123/gviz/tq"
    assert params == {"tqx": "out:json", "sheet": "Users"}
    assert timeout == 5.0


def test_fetch_retries_bad_status_then_succeeds(make_client, sleeps):
    client = make_client({"Users": [FakeResponse(503), FakeResponse(500), wrap(table_payload([]))]})
    table = client.fetch("Users")

    assert table is not None
    assert len(client.session.calls) == 3
    assert sleeps == [1.0, 2.0]


def test_fetch_gives_up_after_three_attempts(make_client, sleeps, connection_error):
    client = make_client({"Users": [connection_error]})

    assert client.fetch("Users") is None
    assert len(client.session.calls) == 3
    assert sleeps == [1.0, 2.0]


def test_fetch_does_not_retry_decode_failures(make_client, sleeps):
    client = make_client({"Users": ["<html>not a sheet</html>"]})

    assert client.fetch("Users") is None
    assert len(client.session.calls) == 1
    assert sleeps == []


def test_fetch_after_cancel_makes_no_request(make_client):
    client = make_client({"Users": [wrap(table_payload([]))]})
    client.cancel()

    assert client.fetch("Users") is None
    assert client.session.calls == []


def test_cancel_during_backoff_stops_retries(make_client, sheet_config, connection_error):
    from conftest import FakeSession

    session = FakeSession({"Users": [connection_error]})
    client = SheetClient(sheet_config, session=session, sleep=lambda _: client.cancel())

    assert client.fetch("Users") is None
    assert len(session.calls) == 1


def test_default_wait_wakes_up_on_cancel(sheet_config):
    from conftest import FakeSession

    client = SheetClient(sheet_config, session=FakeSession({}))
    client.cancel()
    started = time.monotonic()
    client._wait(30)
    assert time.monotonic() - started < 5


def test_fetch_all_returns_every_sheet(make_client, good_routes):
    client = make_client(good_routes)
    tables = client.fetch_all(["Users", "Payments", "Trip", "Expenses"])

    assert list(tables) == ["Users", "Payments", "Trip", "Expenses"]
    assert all(t is not None for t in tables.values())


def test_fetch_all_marks_failed_sheet_as_none(make_client, good_routes):
    good_routes["Trip"] = [FakeResponse(500)]
    client = make_client(good_routes)
    tables = client.fetch_all(["Users", "Payments", "Trip", "Expenses"])

    assert tables["Trip"] is None
    assert tables["Users"] is not None


def test_fetch_all_empty(make_client):
    assert make_client({}).fetch_all([]) == {}


def test_close_closes_session(make_client):
    client = make_client({})
    client.close()
    assert client.session.closed
    assert client.cancelled


def test_decode_error_status_with_errors_object():
    text = wrap({"status": "error", "errors": {"message": "x"}})
    with pytest.raises(DecodeError, match="x"):
        decode_response(text)


@pytest.mark.parametrize("errors", [None, [], "boom", [42]])
def test_decode_error_status_with_unusual_errors(errors):
    with pytest.raises(DecodeError, match="unknown error"):
        decode_response(wrap({"status": "error", "errors": errors}))


@pytest.mark.parametrize("cols", [5, "A", None, {"label": "name"}])
def test_decode_tolerates_odd_cols(cols):
    payload = table_payload([cells("Alice", 1000)])
    payload["table"]["cols"] = cols
    table = decode_response(wrap(payload))
    assert table.labels == []
    assert table.rows == [[{"v": "Alice"}, {"v": 1000}]]


def test_fetch_all_runs_requests_concurrently(sheet_config, sleeps, good_routes):
    # every request waits until all four are in flight at once
    barrier = threading.Barrier(4, timeout=5)
    bodies = {name: outcomes[0] for name, outcomes in good_routes.items()}

    class BarrierSession:
        def get(self, url, params=None, timeout=None):
            barrier.wait()
            return FakeResponse(200, bodies[params["sheet"]])

        def close(self):
            pass

    client = SheetClient(sheet_config, session=BarrierSession(), sleep=sleeps.append)
    tables = client.fetch_all(["Users", "Payments", "Trip", "Expenses"])

    assert not barrier.broken
    assert all(tables[name] is not None for name in bodies)
    assert sleeps == []
