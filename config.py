"""
Configuration loading and session (de)serialisation for Trip Tracker
"""
from __future__ import annotations
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from errors import ConfigError
from models import ROLE_ADMIN, ROLE_MEMBER, User

GVIZ_BASE_URL = "https://docs.google.com/spreadsheets/d"


@dataclass(frozen=True)
class SheetConfig:
    """Where the four trip sheets live and how hard to try fetching them"""
    sheet_id: str
    users_sheet: str = "Users"
    payments_sheet: str = "Payments"
    trip_sheet: str = "Trip"
    expenses_sheet: str = "Expenses"
    base_url: str = GVIZ_BASE_URL
    timeout: float = 10.0  # seconds, per request
    max_attempts: int = 3
    initial_backoff: float = 1.0  # seconds, doubled after each failed attempt

    @property
    def sheet_names(self) -> list:
        return [self.users_sheet, self.payments_sheet, self.trip_sheet, self.expenses_sheet]


def load_config(env: Optional[Mapping[str, str]] = None) -> SheetConfig:
    """
    Build SheetConfig from environment variables (a .env file is honoured).
    Pass env to read from a plain mapping instead of os.environ.
    """
    if env is None:
        load_dotenv()
        env = os.environ

    sheet_id = (env.get("SHEET_ID") or "").strip()
    if not sheet_id:
        raise ConfigError("SHEET_ID is not set")

    try:
        timeout = float(env.get("SHEETS_TIMEOUT") or 10.0)
    except ValueError:
        raise ConfigError("SHEETS_TIMEOUT must be a number of seconds")

    return SheetConfig(
        sheet_id=sheet_id,
        users_sheet=env.get("USERS_SHEET") or "Users",
        payments_sheet=env.get("PAYMENTS_SHEET") or "Payments",
        trip_sheet=env.get("TRIP_SHEET") or "Trip",
        expenses_sheet=env.get("EXPENSES_SHEET") or "Expenses",
        timeout=timeout,
    )


def user_to_dict(user: User) -> dict:
    """Convert User object to dictionary for JSON serialization"""
    return {"name": user.name, "password": user.password, "role": user.role}


def dict_to_user(d: dict) -> User:
    """Convert dictionary from JSON to User object"""
    role = ROLE_ADMIN if d.get("role") == ROLE_ADMIN else ROLE_MEMBER
    return User(
        name=str(d.get("name", "")),
        password=str(d.get("password", "")),
        role=role,
    )
