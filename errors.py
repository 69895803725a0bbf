"""
Exceptions raised across Trip Tracker
"""
from __future__ import annotations
from typing import Iterable


class TripTrackerError(Exception):
    """Base class for all Trip Tracker errors"""


class ConfigError(TripTrackerError):
    """Required configuration is missing or invalid"""


class FetchError(TripTrackerError):
    """A sheet could not be retrieved within the retry budget"""


class DecodeError(TripTrackerError):
    """A gviz response body could not be turned into a table"""


class LoadError(TripTrackerError):
    """One or more of the four sheets is unavailable"""

    def __init__(self, missing: Iterable[str]):
        self.missing = list(missing)
        if self.missing:
            msg = "Trip data unavailable: " + ", ".join(self.missing)
        else:
            msg = "Trip data has not been loaded"
        super().__init__(msg)


class AuthError(TripTrackerError):
    """Submitted credentials did not match any user"""

    def __init__(self, msg: str = "Invalid name or password"):
        super().__init__(msg)
