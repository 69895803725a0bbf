"""
Google Sheets gviz access: response decoding and fetching with retry
"""
from __future__ import annotations
import json
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, Iterable, Optional

import requests

from config import SheetConfig
from errors import DecodeError, FetchError
from models import RawTable

_LOGGER = logging.getLogger(__name__)


def decode_response(text: str) -> RawTable:
    """
    Decode a gviz response into a RawTable.

    The service wraps JSON as ``/*O_o*/\\ngoogle.visualization.Query.setResponse({...});``.
    The body is located by content, from the first '{' to the last '}',
    so a different wrapper length cannot corrupt it.
    """
    if not text:
        raise DecodeError("empty response")
    start = text.find("{")
    end = text.rfind("}")
    if start < 0 or end < start:
        raise DecodeError("no JSON object in response")

    try:
        payload = json.loads(text[start:end + 1])
    except ValueError as ex:
        raise DecodeError(f"invalid JSON in response: {ex}") from ex

    if not isinstance(payload, dict):
        raise DecodeError("response JSON is not an object")
    if payload.get("status") == "error":
        errors = payload.get("errors")
        first = errors[0] if isinstance(errors, list) and errors else errors
        if not isinstance(first, dict):
            first = {}
        reason = first.get("detailed_message") or first.get("message") or "unknown error"
        raise DecodeError(f"sheet service returned an error: {reason}")

    table = payload.get("table")
    if not isinstance(table, dict) or not isinstance(table.get("rows"), list):
        raise DecodeError("response has no table rows")

    rows = []
    for r in table["rows"]:
        cells = r.get("c") if isinstance(r, dict) else None
        rows.append(list(cells) if isinstance(cells, list) else [])

    labels = []
    cols = table.get("cols")
    for col in cols if isinstance(cols, list) else []:
        labels.append(str(col.get("label", "")) if isinstance(col, dict) else "")

    return RawTable(rows=rows, labels=labels)


class SheetClient:
    """
    Fetches named sheets of one spreadsheet.

    Each fetch has its own retry budget; fetch_all runs them concurrently.
    cancel() stops pending retries so nothing outlives the caller.
    """

    def __init__(
        self,
        config: SheetConfig,
        session: Optional[requests.Session] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        self.config = config
        self.session = session or requests.Session()
        self._cancelled = threading.Event()
        self._sleep = sleep or self._wait

    @property
    def url(self) -> str:
        return f"{self.config.base_url}/{self.config.sheet_id}/gviz/tq"

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        """Abort pending retries; in-flight fetches return None"""
        self._cancelled.set()

    def close(self) -> None:
        self.cancel()
        self.session.close()

    def _wait(self, seconds: float) -> None:
        # wakes up early on cancel()
        self._cancelled.wait(seconds)

    def fetch_text(self, sheet: str) -> str:
        """
        GET the raw gviz body of one sheet.
        Network errors and non-2xx statuses are retried with exponential backoff.
        Raises FetchError once the attempts are used up.
        """
        delay = self.config.initial_backoff
        last_error = "no attempt made"
        params = {"tqx": "out:json", "sheet": sheet}

        for attempt in range(1, self.config.max_attempts + 1):
            if self.cancelled:
                raise FetchError(f"fetch of sheet {sheet!r} cancelled")
            try:
                resp = self.session.get(self.url, params=params, timeout=self.config.timeout)
                if resp.ok:
                    return resp.text
                last_error = f"HTTP {resp.status_code}"
            except requests.RequestException as ex:
                last_error = str(ex) or ex.__class__.__name__

            if attempt < self.config.max_attempts:
                _LOGGER.warning(
                    "Sheet %r attempt %d/%d failed (%s); retrying in %.1fs",
                    sheet, attempt, self.config.max_attempts, last_error, delay,
                )
                self._sleep(delay)
                delay *= 2

        raise FetchError(f"sheet {sheet!r} unavailable after {self.config.max_attempts} attempts: {last_error}")

    def fetch(self, sheet: str) -> Optional[RawTable]:
        """Fetch and decode one sheet; None means the sheet is unavailable"""
        try:
            return decode_response(self.fetch_text(sheet))
        except (FetchError, DecodeError) as ex:
            _LOGGER.error("Sheet fetch failed: %s: %s", sheet, ex)
            return None

    def fetch_all(self, sheets: Iterable[str]) -> Dict[str, Optional[RawTable]]:
        """Fetch several sheets concurrently and wait for every one to settle"""
        names = list(dict.fromkeys(sheets))
        if not names:
            return {}
        with ThreadPoolExecutor(max_workers=len(names), thread_name_prefix="sheet") as pool:
            futures = {name: pool.submit(self.fetch, name) for name in names}
            return {name: fut.result() for name, fut in futures.items()}
